"""FastAPI application entry point.

Startup sequence: init DB → init LLM → init automation client → create agent.
"""

from contextlib import asynccontextmanager

import structlog
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import PlainTextResponse

from relay.agent.agent import create_agent
from relay.api.routes import router
from relay.core.automation import AutomationClient
from relay.core.database import init_db
from relay.core.llm_adapter import LLMAdapter

load_dotenv()

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("startup.begin")

    init_db()
    logger.info("startup.db_initialized")

    llm_adapter = LLMAdapter()
    logger.info("startup.llm_initialized", healthy=llm_adapter.is_healthy())
    if not llm_adapter.is_healthy():
        logger.warning("startup.llm_unconfigured", hint="Set CEREBRAS_API_KEY or GROQ_API_KEY in .env")

    automation = AutomationClient()
    logger.info("startup.automation_initialized", configured=automation.is_configured())

    app.state.agent = create_agent(llm_adapter, automation)

    logger.info("startup.complete")
    yield
    automation.close()
    logger.info("shutdown.complete")


app = FastAPI(
    title="Perso Relay",
    description="WhatsApp conversational relay between an LLM and n8n automations",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed turns are a 400, not FastAPI's default 422."""
    logger.warning("chat.invalid_request", errors=len(exc.errors()))
    return PlainTextResponse(
        'Fields "conversation_id" and "new_message" are required.',
        status_code=400,
    )


app.include_router(router)
