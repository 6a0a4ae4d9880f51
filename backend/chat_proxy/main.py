"""
Claude Chat Proxy - Main FastAPI Application
"""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles

from .config import settings
from .api import chat_router, session_router
from .core.logging_config import setup_logging
from .core.session_manager import SessionManager
from .core.session_sweeper import run_session_sweeper
from .llm.factory import create_llm_provider
from .middleware import RequestLoggingMiddleware

# Logger will be initialized after setup_logging() is called
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the session store and LLM client on startup, release them on shutdown."""
    setup_logging(settings)

    app.state.session_manager = SessionManager(
        session_timeout_seconds=settings.session_timeout_seconds
    )
    app.state.llm_provider = create_llm_provider(settings)
    if not settings.anthropic_api_key:
        logger.warning("ANTHROPIC_API_KEY is not set; chat requests will be rejected upstream")

    sweeper = asyncio.create_task(
        run_session_sweeper(app.state.session_manager, settings.session_cleanup_interval_seconds)
    )

    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Model: {settings.llm_model}, max_tokens: {settings.llm_max_tokens}")
    logger.info(f"Session timeout: {settings.session_timeout_seconds}s")
    logger.info(f"Log level: {settings.log_level.upper()}")
    yield
    # Shutdown
    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper
    await app.state.llm_provider.aclose()
    logger.info(f"Shutting down {settings.app_name}")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Session-aware chat proxy for the Anthropic Messages API",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.log_api_requests:
    app.add_middleware(RequestLoggingMiddleware)

app.include_router(chat_router)
app.include_router(session_router)


@app.get("/", include_in_schema=False)
async def root():
    """Send browsers to the chat page."""
    return RedirectResponse(url="/index.html")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


# Mounted last so API routes take precedence over static files.
app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "chat_proxy.main:app",
        host="0.0.0.0",
        port=8080,
        reload=settings.debug
    )
