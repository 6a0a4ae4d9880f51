"""Core module - session store and logging setup."""

from .session_manager import SessionManager, SessionNotFoundError
from .session_sweeper import run_session_sweeper

__all__ = ['SessionManager', 'SessionNotFoundError', 'run_session_sweeper']
