"""Per-request access log for the relay API.

Each request produces exactly one record on `chat_relay.http`. It carries method,
route template, status, duration and correlation id. For relayed conversations it
also carries the normalized outcome that the chat route leaves on `request.state`.
Bodies, query strings and headers are never read, since they carry conversation
text or credentials.
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

logger = logging.getLogger("chat_relay.http")

REQUEST_ID_HEADER = "X-Request-ID"
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,127}$")

# request.state attributes copied into the access record when a route sets them.
_RELAY_STATE_FIELDS = ("outcome", "relay_status", "turn_count")


def current_request_id(request: Request) -> str | None:
    """Correlation id assigned by the middleware (or the raw header outside it)."""

    return getattr(request.state, "request_id", None) or request.headers.get(REQUEST_ID_HEADER)


def _accepted_request_id(candidate: str | None) -> str:
    # Only a narrow charset is propagated; anything else is replaced (log injection).
    if candidate and _SAFE_REQUEST_ID.fullmatch(candidate):
        return candidate
    return uuid.uuid4().hex


def _route_label(request: Request) -> str:
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path if isinstance(path, str) and path else "unmatched"


class HttpLoggingMiddleware(BaseHTTPMiddleware):
    """Assign X-Request-ID and write one metadata-only record per request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = _accepted_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:  # noqa: BLE001 - logged with stack trace, then re-raised
            self._log(request, status_code=500, started=started, failed=True)
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        self._log(request, status_code=response.status_code, started=started)
        return response

    @staticmethod
    def _log(request: Request, *, status_code: int, started: float, failed: bool = False) -> None:
        extra: dict[str, Any] = {
            "request_id": request.state.request_id,
            "http_method": request.method,
            "request_path": _route_label(request),
            "status_code": status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
        }
        for field in _RELAY_STATE_FIELDS:
            value = getattr(request.state, field, None)
            if value is not None:
                extra[field] = value

        if failed:
            logger.error("Unhandled exception while processing request", exc_info=True, extra=extra)
        else:
            logger.info("Request completed", extra=extra)
