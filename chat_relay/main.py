from __future__ import annotations

from fastapi import FastAPI

from chat_relay.api.exception_handlers import register_exception_handlers
from chat_relay.api.schemas import HealthOut
from chat_relay.chat.router import router as chat_router
from chat_relay.core.logging import setup_logging
from chat_relay.core.metrics import PrometheusMetricsMiddleware, metrics_router
from chat_relay.core.middleware.http_logging import HttpLoggingMiddleware

setup_logging()


def create_app() -> FastAPI:
    app = FastAPI(
        title="LLM Chat Relay",
        description=(
            "Single-request relay between a chat client and an LLM completion provider.\n\n"
            "Design principles:\n"
            "- The client owns the conversation; every request carries the full history.\n"
            "- One upstream call per request, no retries, no streaming.\n"
            "- Upstream failures are normalized to `{\"error\": ...}` with a matching status.\n"
            "- Logging and metrics carry metadata only, never conversation text."
        ),
        openapi_tags=[
            {
                "name": "health",
                "description": (
                    "Basic uptime and readiness checks for load balancers and monitoring."
                ),
            },
            {
                "name": "chat",
                "description": "Relay a conversation to the completion provider.",
            },
            {
                "name": "monitoring",
                "description": "Prometheus-compatible metrics endpoint.",
            },
        ],
    )

    app.add_middleware(PrometheusMetricsMiddleware)
    app.add_middleware(HttpLoggingMiddleware)

    register_exception_handlers(app)

    @app.get(
        "/health",
        response_model=HealthOut,
        tags=["health"],
        summary="Health check",
        description=(
            "Lightweight endpoint to verify the API process is running.\n\n"
            "This endpoint does not contact the completion provider."
        ),
    )
    async def health() -> HealthOut:
        return HealthOut(status="ok")

    app.include_router(metrics_router)
    app.include_router(chat_router)
    return app


app = create_app()
