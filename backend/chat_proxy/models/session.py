"""
Session Models - Chat turns and conversation snapshots held by the session store.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple


class MessageRole(str, Enum):
    """Author of a chat message."""
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """A single chat message. Immutable once created."""
    role: MessageRole
    content: str
    timestamp: int  # epoch seconds

    def to_api(self) -> Dict[str, str]:
        """Render in the {role, content} shape the Messages API expects."""
        return {"role": self.role.value, "content": self.content}


@dataclass
class SessionRecord:
    """
    Mutable session state. Lives only inside SessionManager and is only
    touched while the manager's lock is held.
    """
    id: str
    created_at: int
    last_accessed_at: int
    messages: List[Message] = field(default_factory=list)

    def touch(self, now: int) -> None:
        self.last_accessed_at = max(now, self.created_at)

    def snapshot(self) -> "Session":
        return Session(
            id=self.id,
            messages=tuple(self.messages),
            created_at=self.created_at,
            last_accessed_at=self.last_accessed_at,
        )


@dataclass(frozen=True)
class Session:
    """Point-in-time copy of a session handed out to callers."""
    id: str
    messages: Tuple[Message, ...]
    created_at: int
    last_accessed_at: int

    @property
    def message_count(self) -> int:
        return len(self.messages)


@dataclass(frozen=True)
class SessionStats:
    """Aggregate counts across all live sessions."""
    total_sessions: int
    total_messages: int
