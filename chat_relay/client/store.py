from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

from chat_relay.chat.schemas import Turn
from chat_relay.domain.exceptions import ConversationValidationError

logger = logging.getLogger("chat_relay.client")

TurnListener = Callable[[Turn], None]


class MessageStore:
    """
    Append-only, in-memory conversation log.

    There is no update or delete: a bad exchange is corrected by appending another
    turn, so the provider always receives the prior history verbatim.
    """

    def __init__(self) -> None:
        self._turns: list[Turn] = []
        self._listeners: list[TurnListener] = []

    def append(self, turn: Turn) -> None:
        if turn.role == "user" and not turn.content.strip():
            raise ConversationValidationError("User turns must have non-empty content")

        self._turns.append(turn)
        for listener in list(self._listeners):
            try:
                listener(turn)
            except Exception:  # noqa: BLE001 - a broken renderer must not break the log
                logger.exception(
                    "Message store listener failed",
                    extra={"turn_count": len(self._turns)},
                )

    def snapshot(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    def subscribe(self, listener: TurnListener) -> Callable[[], None]:
        """Call `listener` with every appended turn; returns an unsubscribe callable."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def last(self) -> Turn | None:
        return self._turns[-1] if self._turns else None

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(self.snapshot())

    def __getitem__(self, index: int | slice) -> Turn | tuple[Turn, ...]:
        # Slices come from the snapshot so callers never hold the live list.
        return self.snapshot()[index]
