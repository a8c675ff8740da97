from __future__ import annotations

import json
import logging

from chat_relay.core.logging import JsonFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="chat_relay.relay",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Conversation relayed",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_tolerates_missing_extra_fields() -> None:
    payload = json.loads(JsonFormatter().format(_record()))

    assert payload["message"] == "Conversation relayed"
    assert payload["logger"] == "chat_relay.relay"
    assert payload["request_id"] is None
    assert "turn_count" not in payload


def test_formatter_includes_relay_metadata() -> None:
    payload = json.loads(
        JsonFormatter().format(
            _record(request_id="req_1", turn_count=3, outcome="failure", relay_status=429)
        )
    )

    assert payload["request_id"] == "req_1"
    assert payload["turn_count"] == 3
    assert payload["outcome"] == "failure"
    assert payload["relay_status"] == 429
