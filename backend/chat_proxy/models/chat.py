"""
Chat API Models - Request and response bodies for the HTTP surface.

Field names are camelCase on the wire (sessionId, messageCount) to match the
browser client.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ResponseFormat(str, Enum):
    """Output format the assistant is asked to use."""
    PLAIN_TEXT = "PLAIN_TEXT"
    JSON = "JSON"
    XML = "XML"


class ChatRequest(BaseModel):
    """Body of POST /chat."""
    model_config = ConfigDict(populate_by_name=True)

    message: str
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    format: ResponseFormat = ResponseFormat.PLAIN_TEXT
    model: Optional[str] = None  # Claude model id override
    temperature: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class ChatResponse(BaseModel):
    """Successful reply from POST /chat."""
    model_config = ConfigDict(populate_by_name=True)

    response: str
    session_id: str = Field(alias="sessionId")
    message_count: Optional[int] = Field(default=None, alias="messageCount")


class SessionClearedResponse(BaseModel):
    """Reply from DELETE /session/{id}."""
    model_config = ConfigDict(populate_by_name=True)

    message: str
    session_id: str = Field(alias="sessionId")


class SessionStatsResponse(BaseModel):
    """Reply from GET /session/stats."""
    model_config = ConfigDict(populate_by_name=True)

    total_sessions: int = Field(alias="totalSessions")
    total_messages: int = Field(alias="totalMessages")


class ErrorResponse(BaseModel):
    """Error body used by every route."""
    error: str
    session_id: Optional[str] = Field(default=None, alias="sessionId")
