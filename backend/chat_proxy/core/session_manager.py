"""
Session Manager - In-memory, time-bounded store of chat histories.

Every structural change (insert, remove, clear) and every append happens under
a single re-entrant lock, so the store can be shared by the event loop and by
worker threads alike. Callers never hold a reference to the live record; they
receive frozen Session snapshots.
"""

import asyncio
import logging
import threading
import time
import uuid
from typing import Callable, Dict, Optional, Tuple

from ..models.session import Message, MessageRole, Session, SessionRecord, SessionStats

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TIMEOUT_SECONDS = 3600


class SessionNotFoundError(KeyError):
    """Raised when an operation targets a session that no longer exists."""

    def __init__(self, session_id: str):
        super().__init__(session_id)
        self.session_id = session_id

    def __str__(self) -> str:
        return f"Session not found: {self.session_id}"


class SessionManager:
    """
    Thread-safe mapping from session id to conversation history.

    Args:
        session_timeout_seconds: Idle time after which cleanup_expired() drops a session
        clock: Returns the current time in epoch seconds; injectable for tests
    """

    def __init__(
        self,
        session_timeout_seconds: int = DEFAULT_SESSION_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.session_timeout_seconds = session_timeout_seconds
        self._clock = clock
        self._sessions: Dict[str, SessionRecord] = {}
        self._turn_locks: Dict[str, asyncio.Lock] = {}
        self._lock = threading.RLock()

    def _now(self) -> int:
        return int(self._clock())

    def _new_id(self) -> str:
        session_id = str(uuid.uuid4())
        while session_id in self._sessions:
            session_id = str(uuid.uuid4())
        return session_id

    def get_or_create(self, session_id: Optional[str] = None) -> Tuple[str, Session]:
        """
        Return the session for session_id, creating a new one if needed.

        A known id refreshes last_accessed_at. An absent or unknown id always
        yields a brand new session with a server-generated id; client-chosen
        ids are never adopted.

        Returns:
            (resolved session id, snapshot of the session)
        """
        with self._lock:
            now = self._now()
            record = self._sessions.get(session_id) if session_id else None
            if record is not None:
                record.touch(now)
                logger.info(
                    f"Retrieved existing session: {record.id} ({len(record.messages)} messages)"
                )
                return record.id, record.snapshot()

            record = SessionRecord(id=self._new_id(), created_at=now, last_accessed_at=now)
            self._sessions[record.id] = record
            if session_id:
                logger.info(f"Unknown session {session_id}, created new session: {record.id}")
            else:
                logger.info(f"Created new session: {record.id}")
            return record.id, record.snapshot()

    def get(self, session_id: str) -> Optional[Session]:
        """Look up a session without refreshing its access time."""
        with self._lock:
            record = self._sessions.get(session_id)
            return record.snapshot() if record is not None else None

    def append_turn(
        self,
        session_id: str,
        user_text: str,
        assistant_text: str,
        user_timestamp: Optional[int] = None,
    ) -> int:
        """
        Append one user message and its assistant reply, in that order.

        The assistant reply is stamped with the current time. The user message
        takes user_timestamp (when the request was accepted) if given, but is
        never stamped earlier than the message before it, so timestamps stay
        non-decreasing along the history.

        Args:
            session_id: Target session
            user_text: What the user sent
            assistant_text: The reply to store after it
            user_timestamp: Epoch seconds at which the user message arrived

        Returns:
            The session's message count after the append

        Raises:
            SessionNotFoundError: If the session was deleted or expired meanwhile
        """
        with self._lock:
            record = self._sessions.get(session_id)
            if record is None:
                raise SessionNotFoundError(session_id)
            now = self._now()
            user_at = now if user_timestamp is None else min(int(user_timestamp), now)
            if record.messages:
                user_at = max(user_at, record.messages[-1].timestamp)
            record.messages.append(Message(MessageRole.USER, user_text, user_at))
            record.messages.append(Message(MessageRole.ASSISTANT, assistant_text, now))
            record.touch(now)
            return len(record.messages)

    def clear(self, session_id: str) -> bool:
        """Wipe a session's history, keeping its id and created_at."""
        with self._lock:
            record = self._sessions.get(session_id)
            if record is None:
                logger.warning(f"Attempted to clear non-existent session: {session_id}")
                return False
            record.messages.clear()
            record.touch(self._now())
            logger.info(f"Cleared session: {session_id}")
            return True

    def delete(self, session_id: str) -> bool:
        """Remove a session entirely."""
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                logger.warning(f"Attempted to delete non-existent session: {session_id}")
                return False
            self._turn_locks.pop(session_id, None)
            logger.info(f"Deleted session: {session_id}")
            return True

    def expire_older_than(self, timeout_seconds: int) -> int:
        """
        Remove every session idle for strictly longer than timeout_seconds.

        Returns:
            Number of sessions removed
        """
        with self._lock:
            now = self._now()
            expired = [
                session_id for session_id, record in self._sessions.items()
                if now - record.last_accessed_at > timeout_seconds
            ]
            for session_id in expired:
                del self._sessions[session_id]
                self._turn_locks.pop(session_id, None)
                logger.info(f"Removed expired session: {session_id}")

        if expired:
            logger.info(
                f"Cleaned up {len(expired)} expired sessions",
                extra={"extra_fields": {
                    "expired_sessions": len(expired),
                    "timeout_seconds": timeout_seconds,
                }}
            )
        return len(expired)

    def cleanup_expired(self) -> int:
        """Expire sessions using the configured timeout."""
        return self.expire_older_than(self.session_timeout_seconds)

    def stats(self) -> SessionStats:
        """Snapshot of session and message totals."""
        with self._lock:
            return SessionStats(
                total_sessions=len(self._sessions),
                total_messages=sum(len(record.messages) for record in self._sessions.values()),
            )

    def turn_lock(self, session_id: str) -> asyncio.Lock:
        """
        Per-session lock that sequences whole chat turns.

        Holding it from history read to append keeps concurrent requests on
        one session from interleaving their user/assistant pairs.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        with self._lock:
            if session_id not in self._sessions:
                raise SessionNotFoundError(session_id)
            lock = self._turn_locks.get(session_id)
            if lock is None:
                lock = asyncio.Lock()
                self._turn_locks[session_id] = lock
            return lock

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions
