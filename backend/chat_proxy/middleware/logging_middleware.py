"""
Pure ASGI middleware that logs each HTTP request with its outcome.

Request and response bodies are captured as they stream past, filtered for
credentials, truncated and attached to a single completion log line whose
level follows the status code (INFO < 400 <= WARNING < 500 <= ERROR).
"""

import json
import logging
import time
import uuid
from typing import Iterable, List, Optional

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..core.logging_config import filter_sensitive_data, truncate_large_data

logger = logging.getLogger(__name__)

MAX_BODY_LOG_LENGTH = 5000


def _sanitize_body(chunks: List[bytes]) -> Optional[str]:
    """Join body chunks and return a filtered, truncated text form."""
    raw = b"".join(chunks)
    if not raw:
        return None
    text = raw.decode("utf-8", errors="ignore")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return truncate_large_data(text, max_length=MAX_BODY_LOG_LENGTH)
    return truncate_large_data(
        json.dumps(filter_sensitive_data(payload), ensure_ascii=False),
        max_length=MAX_BODY_LOG_LENGTH,
    )


def _extract_error_reason(response_text: Optional[str]) -> Optional[str]:
    """Pick the error/detail field out of an error body when there is one."""
    if not response_text:
        return None
    try:
        payload = json.loads(response_text)
    except json.JSONDecodeError:
        return truncate_large_data(response_text, max_length=500)
    if isinstance(payload, dict):
        for key in ("error", "detail", "message"):
            if payload.get(key):
                return truncate_large_data(str(payload[key]), max_length=500)
    return truncate_large_data(json.dumps(payload, ensure_ascii=False), max_length=500)


class RequestLoggingMiddleware:
    """Log method, path, status, duration and bodies of every HTTP request."""

    def __init__(self, app: ASGIApp, exclude_paths: Optional[Iterable[str]] = None):
        """
        Args:
            app: The ASGI application
            exclude_paths: Paths passed through without logging (static and health by default)
        """
        self.app = app
        self.exclude_paths = set(exclude_paths) if exclude_paths is not None else {
            "/health", "/", "/index.html", "/favicon.ico",
        }

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope.get("path", "") in self.exclude_paths:
            await self.app(scope, receive, send)
            return

        start_time = time.time()
        request_id = uuid.uuid4().hex[:12]
        method = scope.get("method", "UNKNOWN")
        path = scope.get("path", "")
        client = scope.get("client")

        request_chunks: List[bytes] = []
        response_chunks: List[bytes] = []
        status_code = 0

        async def logging_receive() -> Message:
            message = await receive()
            if message["type"] == "http.request":
                request_chunks.append(message.get("body", b""))
            return message

        async def logging_send(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            elif message["type"] == "http.response.body":
                response_chunks.append(message.get("body", b""))
            await send(message)

        logger.debug(
            f"Request started: {method} {path}",
            extra={"extra_fields": {
                "request_id": request_id,
                "method": method,
                "path": path,
                "client": client[0] if client else None,
            }}
        )

        try:
            await self.app(scope, logging_receive, logging_send)
        except Exception as e:
            logger.error(
                f"Request failed: {method} {path} - {e}",
                exc_info=True,
                extra={"extra_fields": {
                    "request_id": request_id,
                    "method": method,
                    "path": path,
                    "duration_ms": round((time.time() - start_time) * 1000, 2),
                }}
            )
            raise

        duration_ms = round((time.time() - start_time) * 1000, 2)
        request_body = _sanitize_body(request_chunks)
        response_body = _sanitize_body(response_chunks)
        error_reason = _extract_error_reason(response_body) if status_code >= 400 else None

        if status_code < 400:
            log_level = logging.INFO
        elif status_code < 500:
            log_level = logging.WARNING
        else:
            log_level = logging.ERROR

        completion_message = f"Request completed: {method} {path} - {status_code} ({duration_ms:.2f}ms)"
        if error_reason:
            completion_message += f" | error_reason={error_reason}"

        logger.log(
            log_level,
            completion_message,
            extra={"extra_fields": {
                "request_id": request_id,
                "method": method,
                "path": path,
                "status_code": status_code,
                "duration_ms": duration_ms,
                "request_body": request_body,
                "response_body": response_body,
                "error_reason": error_reason,
            }}
        )
