"""Integration tests: POST /api/chat."""

from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from chat_relay.core.llm.deps import get_openai_client
from chat_relay.core.llm.openai_client import OpenAIUpstreamError, UpstreamResponse
from chat_relay.main import create_app
from tests.chat._fakes import FakeCompletionClient, completion


def _client_with(upstream: FakeCompletionClient) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_openai_client] = lambda: upstream
    return TestClient(app)


@pytest.fixture
def upstream() -> FakeCompletionClient:
    return FakeCompletionClient(response=completion("Hi there"))


@pytest.fixture
def chat_client(upstream: FakeCompletionClient):
    with _client_with(upstream) as c:
        yield c


def test_chat_success_returns_message(
    chat_client: TestClient, upstream: FakeCompletionClient
) -> None:
    res = chat_client.post("/api/chat", json={"messages": [{"role": "user", "content": "Hello"}]})

    assert res.status_code == 200, res.text
    assert res.json() == {"message": "Hi there"}
    assert "X-Request-ID" in res.headers
    assert upstream.calls == [[{"role": "user", "content": "Hello"}]]


@pytest.mark.parametrize("body", [{"messages": []}, {}])
def test_chat_without_messages_returns_400(
    chat_client: TestClient, upstream: FakeCompletionClient, body: dict
) -> None:
    res = chat_client.post("/api/chat", json=body)

    assert res.status_code == 400
    assert res.json() == {"error": "Messages are required"}
    assert upstream.calls == []


def test_chat_invalid_role_returns_400(
    chat_client: TestClient, upstream: FakeCompletionClient
) -> None:
    res = chat_client.post("/api/chat", json={"messages": [{"role": "wizard", "content": "x"}]})

    assert res.status_code == 400
    assert res.json() == {"error": "Invalid request body"}
    assert upstream.calls == []


def test_chat_malformed_json_returns_400(chat_client: TestClient) -> None:
    res = chat_client.post(
        "/api/chat", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert res.status_code == 400
    assert res.json() == {"error": "Invalid request body"}


def test_chat_rejects_get(chat_client: TestClient) -> None:
    assert chat_client.get("/api/chat").status_code == 405


def test_chat_upstream_error_mirrors_status() -> None:
    upstream = FakeCompletionClient(
        error=OpenAIUpstreamError(
            "LLM service returned an error",
            response=UpstreamResponse(
                status=429, data={"error": {"message": "Rate limit exceeded"}}
            ),
        )
    )
    with _client_with(upstream) as c:
        res = c.post("/api/chat", json={"messages": [{"role": "user", "content": "Hello"}]})

    assert res.status_code == 429
    assert res.json() == {"error": "Rate limit exceeded"}


def test_chat_missing_content_returns_500() -> None:
    upstream = FakeCompletionClient(response={"choices": [{"message": {}}]})
    with _client_with(upstream) as c:
        res = c.post("/api/chat", json={"messages": [{"role": "user", "content": "Hello"}]})

    assert res.status_code == 500
    assert res.json() == {"error": "No message content received"}


def test_chat_non_error_status_is_served_as_500() -> None:
    upstream = FakeCompletionClient(error=OpenAIUpstreamError("odd", status=200))
    with _client_with(upstream) as c:
        res = c.post("/api/chat", json={"messages": [{"role": "user", "content": "Hello"}]})

    assert res.status_code == 500
    assert res.json() == {"error": "odd"}


def test_chat_without_api_key_returns_502(client: TestClient) -> None:
    res = client.post("/api/chat", json={"messages": [{"role": "user", "content": "Hello"}]})

    assert res.status_code == 502
    assert res.json() == {"error": "LLM service unavailable"}


def test_relay_outcomes_are_counted(chat_client: TestClient) -> None:
    chat_client.post("/api/chat", json={"messages": [{"role": "user", "content": "Hello"}]})

    res = chat_client.get("/metrics")

    assert res.status_code == 200
    assert 'relay_outcomes_total{outcome="success",status_code="200"}' in res.text


def _access_records(caplog: pytest.LogCaptureFixture) -> list[logging.LogRecord]:
    return [r for r in caplog.records if r.name == "chat_relay.http"]


def test_access_log_carries_relay_outcome(
    chat_client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO)

    res = chat_client.post(
        "/api/chat",
        json={
            "messages": [
                {"role": "user", "content": "Hello"},
                {"role": "assistant", "content": "Hi"},
                {"role": "user", "content": "secret question"},
            ]
        },
        headers={"X-Request-ID": "req_chat_1"},
    )

    assert res.status_code == 200
    records = _access_records(caplog)
    assert len(records) == 1
    record = records[0]
    assert record.__dict__["request_id"] == "req_chat_1"
    assert record.__dict__["request_path"] == "/api/chat"
    assert record.__dict__["outcome"] == "success"
    assert record.__dict__["relay_status"] == 200
    assert record.__dict__["turn_count"] == 3
    # The route and proxy write no per-request records of their own.
    assert [r for r in caplog.records if r.name == "chat_relay.relay"] == []
    assert all("secret" not in r.getMessage() for r in caplog.records)


def test_access_log_carries_relay_failure_status(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="chat_relay.http")
    upstream = FakeCompletionClient(response={"choices": [None]})
    with _client_with(upstream) as c:
        res = c.post("/api/chat", json={"messages": [{"role": "user", "content": "Hello"}]})

    assert res.status_code == 500
    record = _access_records(caplog)[0]
    assert record.__dict__["outcome"] == "failure"
    assert record.__dict__["relay_status"] == 500
    assert record.__dict__["status_code"] == 500


def test_unexpected_error_returns_json_500(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="chat_relay.http")

    def _broken_client():
        raise RuntimeError("dependency exploded")

    app = create_app()
    app.dependency_overrides[get_openai_client] = _broken_client
    with TestClient(app, raise_server_exceptions=False) as c:
        res = c.post("/api/chat", json={"messages": [{"role": "user", "content": "Hello"}]})

    assert res.status_code == 500
    assert res.json() == {"error": "Internal server error"}
    errors = [r for r in _access_records(caplog) if r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert errors[0].exc_info
