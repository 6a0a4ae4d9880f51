"""
Chat API endpoint - Relays a user message to Claude within a session.
"""

import logging

from fastapi import APIRouter, Depends, status

from .dependencies import error_response, get_llm_provider, get_session_manager
from ..core.session_manager import SessionManager, SessionNotFoundError
from ..llm.base import LLMProvider, ResultKind
from ..llm.formatting import enhance_message
from ..models.chat import ChatRequest, ChatResponse, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

ERROR_STATUS = {
    ResultKind.UPSTREAM_ERROR: status.HTTP_502_BAD_GATEWAY,
    ResultKind.TRANSPORT_ERROR: status.HTTP_502_BAD_GATEWAY,
    ResultKind.TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
}

# Transport details stay in the logs; callers only learn the upstream was unreachable.
PUBLIC_ERROR_MESSAGES = {
    ResultKind.TRANSPORT_ERROR: "Claude API unavailable",
    ResultKind.TIMEOUT: "Claude API request timed out",
}


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)
async def send_message(
    request: ChatRequest,
    sessions: SessionManager = Depends(get_session_manager),
    llm_provider: LLMProvider = Depends(get_llm_provider),
):
    """
    Send a chat message and get Claude's reply.

    The turn (user message, then assistant reply) is stored only when the
    upstream call succeeds. Requests on the same session are handled one
    turn at a time.

    Args:
        request: Message, optional session id, format and model overrides

    Returns:
        ChatResponse with the reply, session id and new message count
    """
    if not request.message.strip():
        return error_response(status.HTTP_400_BAD_REQUEST, "Message cannot be empty")

    try:
        session_id, accepted = sessions.get_or_create(request.session_id)

        async with sessions.turn_lock(session_id):
            session = sessions.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)

            result = await llm_provider.send(
                session.messages,
                enhance_message(request.message, request.format),
                model=request.model,
                temperature=request.temperature,
            )

            if not result.ok:
                logger.warning(
                    f"Chat turn not stored, upstream call failed: {result.kind.value}",
                    extra={"extra_fields": {
                        "session_id": session_id,
                        "result_kind": result.kind.value,
                        "upstream_status": result.status_code,
                        "error": result.text,
                    }}
                )
                message = PUBLIC_ERROR_MESSAGES.get(result.kind) or result.text_or_error()
                return error_response(ERROR_STATUS[result.kind], message, session_id)

            message_count = sessions.append_turn(
                session_id, request.message, result.text,
                user_timestamp=accepted.last_accessed_at,
            )

    except SessionNotFoundError as e:
        logger.warning(f"Session disappeared during chat turn: {e.session_id}")
        return error_response(status.HTTP_404_NOT_FOUND, "Session not found")
    except Exception as e:
        logger.error(f"Failed to process chat request: {e}", exc_info=True)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to process request")

    return ChatResponse(response=result.text, sessionId=session_id, messageCount=message_count)
