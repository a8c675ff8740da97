from __future__ import annotations


class ConversationValidationError(Exception):
    """Raised when a turn would break a conversation rule (e.g. blank user turn)."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
