from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx


class OpenAIError(Exception):
    """Base error for completion client failures."""

    def __init__(self, message: str, *, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status


@dataclass(frozen=True)
class UpstreamResponse:
    """Status and decoded body of a failed upstream response."""

    status: int
    data: Any = None


class OpenAIUpstreamError(OpenAIError):
    """Raised when the provider fails or returns an unexpected response.

    When the provider answered, `response` carries its status and decoded JSON body
    (`{"error": {"message": ...}}` for OpenAI-compatible APIs).
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        response: UpstreamResponse | None = None,
    ):
        super().__init__(message, status=status)
        self.response = response


@dataclass(frozen=True)
class OpenAIConfig:
    api_key: str
    base_url: str
    model: str
    timeout_seconds: float


class OpenAIClient:
    """
    Minimal chat-completions client.

    Design notes:
    - No logging in this module (messages are user content).
    - One POST per call, no retries.
    - Returns the decoded response body; reply extraction is left to the caller.
    """

    def __init__(
        self,
        *,
        config: OpenAIConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._config = config
        self._transport = transport

    @property
    def model(self) -> str:
        return self._config.model

    async def create_chat_completion(
        self, *, messages: list[dict[str, str]]
    ) -> dict[str, Any]:
        url = f"{self._config.base_url.rstrip('/')}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
        }
        payload: dict[str, Any] = {
            "model": self._config.model,
            "messages": messages,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds, transport=self._transport
            ) as client:
                resp = await client.post(url, headers=headers, json=payload)
        except httpx.TimeoutException as exc:
            raise OpenAIUpstreamError("LLM request timed out", status=504) from exc
        except httpx.HTTPError as exc:
            raise OpenAIUpstreamError("LLM request failed", status=502) from exc

        if resp.status_code != 200:
            try:
                body = resp.json()
            except ValueError:
                body = None
            raise OpenAIUpstreamError(
                "LLM service returned an error",
                response=UpstreamResponse(status=resp.status_code, data=body),
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise OpenAIUpstreamError("LLM response was not valid JSON", status=502) from exc

        if not isinstance(data, dict):
            raise OpenAIUpstreamError("LLM response JSON must be an object", status=502)

        return data
