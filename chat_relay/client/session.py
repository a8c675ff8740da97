from __future__ import annotations


class TokenSession:
    """Client-side sign-in state: authenticated while a token is held."""

    def __init__(self, token: str | None = None):
        self._token = token or None

    def is_authenticated(self) -> bool:
        return self._token is not None

    def sign_out(self) -> None:
        self._token = None
