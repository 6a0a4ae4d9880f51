"""
Session API endpoints - Clear conversations and report store statistics.
"""

from fastapi import APIRouter, Depends, status

from .dependencies import error_response, get_session_manager
from ..core.session_manager import SessionManager
from ..models.chat import ErrorResponse, SessionClearedResponse, SessionStatsResponse

router = APIRouter(prefix="/session", tags=["session"])


@router.get("/stats", response_model=SessionStatsResponse)
async def get_session_stats(sessions: SessionManager = Depends(get_session_manager)):
    """Number of live sessions and the messages they hold."""
    stats = sessions.stats()
    return SessionStatsResponse(
        totalSessions=stats.total_sessions,
        totalMessages=stats.total_messages,
    )


@router.delete(
    "/{session_id}",
    response_model=SessionClearedResponse,
    responses={404: {"model": ErrorResponse}},
)
async def clear_session(
    session_id: str,
    sessions: SessionManager = Depends(get_session_manager),
):
    """
    Clear a session's message history.

    The session itself survives with the same id, so the client can keep
    chatting on it from an empty context.
    """
    if not sessions.clear(session_id):
        return error_response(status.HTTP_404_NOT_FOUND, "Session not found")
    return SessionClearedResponse(message="Session cleared", sessionId=session_id)
