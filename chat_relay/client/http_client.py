from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx

from chat_relay.chat.errors import normalize_error
from chat_relay.chat.outcomes import RelayFailure, RelayOutcome, RelaySuccess
from chat_relay.chat.proxy import NO_MESSAGE_CONTENT
from chat_relay.chat.schemas import Turn
from chat_relay.core.settings import get_settings


def _error_text(resp: httpx.Response) -> str:
    try:
        body: Any = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, str) and error.strip():
            return error
    return resp.reason_phrase or f"HTTP {resp.status_code}"


class HttpRelayClient:
    """POST conversation snapshots to the relay endpoint; one request per call."""

    def __init__(
        self,
        *,
        url: str,
        timeout_seconds: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._url = url
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    @classmethod
    def from_settings(cls) -> HttpRelayClient:
        settings = get_settings()
        return cls(
            url=settings.relay_url,
            timeout_seconds=float(settings.relay_timeout_seconds),
        )

    async def relay(self, conversation: Sequence[Turn]) -> RelayOutcome:
        payload = {"messages": [turn.to_message() for turn in conversation]}
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_seconds, transport=self._transport
            ) as client:
                resp = await client.post(self._url, json=payload)
        except httpx.HTTPError as exc:
            return normalize_error(exc)

        if not resp.is_success:
            return RelayFailure(message=_error_text(resp), status=resp.status_code)

        try:
            body: Any = resp.json()
        except ValueError:
            body = None
        message = body.get("message") if isinstance(body, dict) else None
        if not isinstance(message, str) or not message:
            return RelayFailure(message=NO_MESSAGE_CONTENT, status=500)
        return RelaySuccess(content=message)
