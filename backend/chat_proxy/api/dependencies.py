"""
Shared route dependencies and the error body helper.

The session manager and LLM provider are built in the application lifespan
and stored on app.state; routes reach them only through these dependencies.
"""

from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from ..core.session_manager import SessionManager
from ..llm.base import LLMProvider
from ..models.chat import ErrorResponse


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_llm_provider(request: Request) -> LLMProvider:
    return request.app.state.llm_provider


def error_response(status_code: int, message: str, session_id: Optional[str] = None) -> JSONResponse:
    """Build a JSON error reply shaped as {"error": ..., "sessionId"?: ...}."""
    body = ErrorResponse(error=message, sessionId=session_id)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )
