from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol

from chat_relay.chat.errors import normalize_error
from chat_relay.chat.outcomes import RelayFailure, RelayOutcome, RelaySuccess
from chat_relay.chat.schemas import Turn

logger = logging.getLogger("chat_relay.relay")

MESSAGES_REQUIRED = "Messages are required"
NO_MESSAGE_CONTENT = "No message content received"


class ChatCompletionClient(Protocol):
    async def create_chat_completion(
        self, *, messages: list[dict[str, str]]
    ) -> dict[str, Any]: ...


def _first_choice_content(completion: Any) -> str | None:
    """Return `choices[0].message.content`, or None when any level is absent."""

    if not isinstance(completion, dict):
        return None
    choices = completion.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if isinstance(content, str) and content:
        return content
    return None


class CompletionProxy:
    """
    Relay one conversation snapshot to the completion provider.

    The proxy is stateless: it never sees client-side state, only the snapshot it is
    given, and it makes at most one upstream call per `relay` (no retries).
    """

    def __init__(self, *, client: ChatCompletionClient, request_id: str | None = None):
        self._client = client
        self._request_id = request_id

    async def relay(self, conversation: Sequence[Turn] | None) -> RelayOutcome:
        if not conversation:
            return RelayFailure(message=MESSAGES_REQUIRED, status=400)

        messages = [turn.to_message() for turn in conversation]
        try:
            completion = await self._client.create_chat_completion(messages=messages)
        except Exception as exc:  # noqa: BLE001 - every upstream failure becomes an outcome
            failure = normalize_error(exc)
            # Stack trace for diagnosis; message text is user content and stays out.
            logger.warning(
                "Upstream completion call failed",
                exc_info=True,
                extra={
                    "request_id": self._request_id,
                    "turn_count": len(messages),
                    "relay_status": failure.status,
                },
            )
            return failure

        content = _first_choice_content(completion)
        if content is None:
            return RelayFailure(message=NO_MESSAGE_CONTENT, status=500)
        return RelaySuccess(content=content)
