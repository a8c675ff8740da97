from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Upstream completion provider (OpenAI-compatible chat completions API)
    # Conversation text is never logged; keep the key out of logs as well.
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "openai_api_key"),
        description="API key for the completion provider (required for POST /api/chat).",
    )
    openai_model: str = Field(
        default="deepseek/deepseek-r1:free",
        validation_alias=AliasChoices("OPENAI_MODEL", "openai_model"),
        description="Fixed model identifier sent with every relayed conversation.",
    )
    openai_base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        validation_alias=AliasChoices("OPENAI_BASE_URL", "openai_base_url"),
        description="Base URL of the chat completions API (override for proxies/emulators).",
    )
    openai_timeout_seconds: float = Field(
        default=60.0,
        ge=1.0,
        validation_alias=AliasChoices("OPENAI_TIMEOUT_SECONDS", "openai_timeout_seconds"),
        description="Transport timeout for upstream completion requests (seconds).",
    )

    # Client side (terminal client / SendController transport)
    relay_url: str = Field(
        default="http://127.0.0.1:8000/api/chat",
        validation_alias=AliasChoices("RELAY_URL", "relay_url"),
        description="Relay endpoint the client posts conversations to.",
    )
    relay_timeout_seconds: float = Field(
        default=90.0,
        ge=1.0,
        validation_alias=AliasChoices("RELAY_TIMEOUT_SECONDS", "relay_timeout_seconds"),
        description="Transport timeout for client -> relay requests (seconds).",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
