from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Sequence
from typing import Protocol

from chat_relay.chat.errors import normalize_error
from chat_relay.chat.outcomes import RelayFailure, RelayOutcome, RelaySuccess
from chat_relay.chat.schemas import Turn
from chat_relay.client.store import MessageStore

logger = logging.getLogger("chat_relay.client")


class RelayTransport(Protocol):
    async def relay(self, conversation: Sequence[Turn]) -> RelayOutcome: ...


class SendState(enum.Enum):
    IDLE = "idle"
    SENDING = "sending"


StateListener = Callable[[SendState], None]


def apology_for(failure: RelayFailure) -> str:
    """User-facing assistant text for a failed send."""

    detail = failure.message.strip().rstrip(".")
    return (
        f"An error occurred while communicating with the AI: {detail}. "
        "Please try again later."
    )


class SendController:
    """
    Drive one conversation: Idle -> Sending -> Idle.

    At most one relay is in flight. A `submit` while sending, with blank input, or
    without an authenticated user is ignored. Every accepted submit appends the user
    turn and then exactly one assistant turn, either the reply or an apology.
    """

    def __init__(
        self,
        *,
        store: MessageStore,
        transport: RelayTransport,
        is_authenticated: Callable[[], bool],
    ):
        self._store = store
        self._transport = transport
        self._is_authenticated = is_authenticated
        self._state = SendState.IDLE
        self._listeners: list[StateListener] = []

    @property
    def store(self) -> MessageStore:
        return self._store

    @property
    def state(self) -> SendState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._state is SendState.SENDING

    def can_send(self, text: str) -> bool:
        """Whether the send control should be enabled for the current input."""

        return (
            self._state is SendState.IDLE
            and bool(text.strip())
            and self._is_authenticated()
        )

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def submit(self, text: str) -> bool:
        """Send `text` as the next user turn. Returns False when the input was ignored."""

        # Checked and committed before the first await: no second submit can slip in.
        if not self.can_send(text):
            return False

        self._store.append(Turn(role="user", content=text))
        snapshot = self._store.snapshot()
        self._set_state(SendState.SENDING)

        try:
            outcome = await self._relay(snapshot)
            if isinstance(outcome, RelaySuccess):
                self._store.append(Turn(role="assistant", content=outcome.content))
            else:
                logger.info(
                    "Send failed",
                    extra={
                        "turn_count": len(snapshot),
                        "outcome": "failure",
                        "relay_status": outcome.status,
                    },
                )
                self._store.append(Turn(role="assistant", content=apology_for(outcome)))
        finally:
            self._set_state(SendState.IDLE)
        return True

    async def _relay(self, snapshot: tuple[Turn, ...]) -> RelayOutcome:
        try:
            return await self._transport.relay(snapshot)
        except Exception as exc:  # noqa: BLE001 - a send must always settle with a turn
            logger.exception("Relay transport raised", extra={"turn_count": len(snapshot)})
            return normalize_error(exc)

    def _set_state(self, state: SendState) -> None:
        if state is self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:  # noqa: BLE001 - a broken renderer must not wedge the state
                logger.exception("Send state listener failed")
