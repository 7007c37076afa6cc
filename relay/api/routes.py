"""FastAPI endpoints for the relay.

POST /chat - process one conversation turn through the agent
GET /health - component health check
"""

import time
from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

from relay.agent.agent import RelayError
from relay.api.schemas import ErrorResponse, TurnMetadata, TurnRequest, TurnResponse

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/chat", response_model=TurnResponse, responses={500: {"model": ErrorResponse}})
def chat(request: TurnRequest, req: Request):
    """Process a turn: persist -> history -> model -> tools -> model -> persist -> respond."""
    start = time.monotonic()
    conversation_id = request.conversation_id

    logger.info("chat.request", conversation_id=conversation_id,
                msg_len=len(request.new_message), platform=request.platform)

    agent = req.app.state.agent
    try:
        result = agent.handle_turn(conversation_id, request.new_message, user_phone=request.user_phone)
    except RelayError as e:
        logger.error("chat.failed", conversation_id=conversation_id, error=str(e))
        return _error_response(f"Internal agent error: {e}")
    except Exception as e:
        logger.exception("chat.unexpected_error", conversation_id=conversation_id)
        return _error_response(f"Internal agent error: {e}")

    latency_ms = int((time.monotonic() - start) * 1000)
    logger.info("chat.response", conversation_id=conversation_id, latency_ms=latency_ms,
                tool_calls=result.tool_calls_executed)

    return TurnResponse(
        conversation_id=conversation_id,
        response=result.text,
        metadata=TurnMetadata(
            messages_in_history=result.messages_in_history,
            tool_calls_executed=result.tool_calls_executed,
            timestamp=datetime.now(timezone.utc).isoformat(),
            platform=request.platform or "unknown",
            user_phone=request.user_phone,
        ),
    )


@router.get("/health")
def health(req: Request):
    """Check health of all backend components."""
    components = {}

    agent = req.app.state.agent
    components["llm"] = "ok" if agent.llm.is_healthy() else "error"
    components["automation"] = "ok" if agent.dispatcher.automation.is_configured() else "error"

    try:
        from relay.core.database import get_session
        with get_session() as session:
            session.connection()
        components["database"] = "ok"
    except Exception:
        components["database"] = "error"

    errors = [k for k, v in components.items() if v == "error"]
    if not errors:
        status = "healthy"
    elif len(errors) == len(components):
        status = "unhealthy"
    else:
        status = "degraded"

    return {"status": status, "components": components}


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content=ErrorResponse(error=message).model_dump())
