from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from chat_relay.core.middleware.http_logging import current_request_id

logger = logging.getLogger("chat_relay.validation")


def register_exception_handlers(app: FastAPI) -> None:
    """Register application exception handlers.

    Error bodies use the relay's `{"error": "..."}` shape instead of FastAPI's
    default `{"detail": ...}` or Starlette's plain-text 500.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        # IMPORTANT: do not log request bodies or validation inputs (conversation text).
        logger.info(
            "Request validation failed",
            extra={
                "request_id": current_request_id(request),
                "http_method": request.method,
                "request_path": request.url.path,  # no query string
                "status_code": 400,
                "error": "request_validation",
            },
        )
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        # The access log middleware already recorded the stack trace for this request.
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
