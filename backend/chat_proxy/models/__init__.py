"""Models module."""

from .session import MessageRole, Message, Session, SessionRecord, SessionStats
from .chat import (
    ResponseFormat, ChatRequest, ChatResponse, SessionClearedResponse,
    SessionStatsResponse, ErrorResponse,
)

__all__ = [
    'MessageRole', 'Message', 'Session', 'SessionRecord', 'SessionStats',
    'ResponseFormat', 'ChatRequest', 'ChatResponse', 'SessionClearedResponse',
    'SessionStatsResponse', 'ErrorResponse',
]
