from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch):
    # Never reach a real provider from tests, whatever the developer's shell exports.
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("OPENAI_BASE_URL", "https://llm.test/v1")
    monkeypatch.setenv("OPENAI_MODEL", "test-model")
    # Settings are cached via @lru_cache; clear so each test sees its own environment.
    from chat_relay.core.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from chat_relay.main import create_app

    app = create_app()
    with TestClient(app) as c:
        yield c
