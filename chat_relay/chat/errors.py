"""Fold upstream error values into a single `RelayFailure`.

Errors reach the relay in several shapes: exceptions raised by our own client,
provider envelopes nested under `response.data.error`, flat `{message, status}`
objects, or plain strings. Each value is read through a generic key/value view
(mapping keys first, attributes otherwise) and the extractors below are tried in
order; the first one that yields a value wins.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from chat_relay.chat.outcomes import RelayFailure

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred"
DEFAULT_ERROR_STATUS = 500

_MISSING = object()


def _field(value: Any, key: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(key, _MISSING)
    return getattr(value, key, _MISSING)


def _path(value: Any, *keys: str) -> Any:
    for key in keys:
        if value is None or value is _MISSING:
            return _MISSING
        value = _field(value, key)
    return value


def _as_message(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _as_status(value: Any) -> int | None:
    # bool is an int subclass; `status: True` is not a status code.
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _nested_envelope_message(error: Any) -> str | None:
    return _as_message(_path(error, "response", "data", "error", "message"))


def _top_level_message(error: Any) -> str | None:
    return _as_message(_field(error, "message"))


def _exception_text(error: Any) -> str | None:
    if isinstance(error, BaseException):
        return _as_message(str(error))
    return None


MESSAGE_EXTRACTORS: tuple[Callable[[Any], str | None], ...] = (
    _nested_envelope_message,
    _top_level_message,
    _exception_text,
)

STATUS_EXTRACTORS: tuple[Callable[[Any], int | None], ...] = (
    lambda error: _as_status(_path(error, "response", "status")),
    lambda error: _as_status(_field(error, "status")),
)


def normalize_error(error: Any) -> RelayFailure:
    """Return the `RelayFailure` for an arbitrary caught error value."""

    message = next(
        (m for m in (extract(error) for extract in MESSAGE_EXTRACTORS) if m is not None),
        UNKNOWN_ERROR_MESSAGE,
    )
    status = next(
        (s for s in (extract(error) for extract in STATUS_EXTRACTORS) if s is not None),
        DEFAULT_ERROR_STATUS,
    )
    return RelayFailure(message=message, status=status)
