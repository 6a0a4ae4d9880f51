"""
Background expiry of idle sessions.
"""

import asyncio
import logging

from .session_manager import SessionManager

logger = logging.getLogger(__name__)


async def run_session_sweeper(manager: SessionManager, interval_seconds: float) -> None:
    """
    Call manager.cleanup_expired() every interval_seconds until cancelled.

    A failing sweep is logged and the loop carries on with the next tick.
    """
    logger.info(
        f"Session sweeper started: interval={interval_seconds}s, "
        f"timeout={manager.session_timeout_seconds}s"
    )
    try:
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                manager.cleanup_expired()
            except Exception as e:
                logger.error(f"Session sweep failed: {e}", exc_info=True)
    except asyncio.CancelledError:
        logger.info("Session sweeper stopped")
        raise
