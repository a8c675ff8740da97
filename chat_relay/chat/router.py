from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from chat_relay.chat.outcomes import RelaySuccess
from chat_relay.chat.proxy import CompletionProxy
from chat_relay.chat.schemas import ChatErrorOut, ChatOut, ChatRequest
from chat_relay.core.llm.deps import get_openai_client
from chat_relay.core.metrics import record_relay_outcome
from chat_relay.core.middleware.http_logging import current_request_id

router = APIRouter(prefix="/api", tags=["chat"])


def _http_status_for(failure_status: int) -> int:
    # A failure must never be served as 2xx/3xx.
    if 400 <= failure_status <= 599:
        return failure_status
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _record_outcome(request: Request, *, success: bool, status_code: int, turns: int) -> None:
    """Expose the outcome to the access log (via request.state) and to metrics."""

    request.state.outcome = "success" if success else "failure"
    request.state.relay_status = status_code
    request.state.turn_count = turns
    record_relay_outcome(success=success, status_code=status_code)


@router.post(
    "/chat",
    response_model=ChatOut,
    responses={
        400: {"model": ChatErrorOut, "description": "Empty conversation or invalid body."},
        500: {"model": ChatErrorOut, "description": "No reply content or unexpected error."},
        502: {"model": ChatErrorOut, "description": "Completion provider unavailable."},
    },
    summary="Relay a conversation",
    description=(
        "Forward the full conversation to the completion provider once and return the "
        "assistant reply.\n\n"
        "Failures are normalized to `{\"error\": ...}` with a non-2xx status mirroring the "
        "upstream failure (defaults to 500)."
    ),
)
async def post_chat(
    payload: ChatRequest,
    request: Request,
    openai_client=Depends(get_openai_client),
):
    turns = len(payload.messages or ())

    if openai_client is None:
        _record_outcome(
            request, success=False, status_code=status.HTTP_502_BAD_GATEWAY, turns=turns
        )
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"error": "LLM service unavailable"},
        )

    proxy = CompletionProxy(client=openai_client, request_id=current_request_id(request))
    outcome = await proxy.relay(payload.messages)

    if isinstance(outcome, RelaySuccess):
        _record_outcome(request, success=True, status_code=status.HTTP_200_OK, turns=turns)
        return ChatOut(message=outcome.content)

    status_code = _http_status_for(outcome.status)
    _record_outcome(request, success=False, status_code=status_code, turns=turns)
    return JSONResponse(status_code=status_code, content={"error": outcome.message})
