"""
Request logging for the bot's HTTP surface.

Pure ASGI rather than BaseHTTPMiddleware, so webhook background tasks are
not tied to the middleware's response cycle.
"""

import json
import logging
import time
from typing import Iterable, Optional

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..core.logging_config import filter_sensitive_data, truncate_large_data

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE_PATHS = ("/", "/health")
MAX_LOGGED_BODY = 2000


def _sanitize_body(data: bytes) -> str:
    """Decode a request body for the debug log with credentials masked."""
    text = data.decode("utf-8", errors="ignore")
    try:
        text = json.dumps(filter_sensitive_data(json.loads(text)), ensure_ascii=False)
    except ValueError:
        pass
    return truncate_large_data(text, max_length=MAX_LOGGED_BODY)


def _update_id(body: bytes) -> Optional[int]:
    """Pull update_id out of a Telegram webhook payload, if there is one."""
    try:
        payload = json.loads(body)
    except ValueError:
        return None
    return payload.get("update_id") if isinstance(payload, dict) else None


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware:
    """Logs one line per request: method, path, status, duration and update_id."""

    def __init__(self, app: ASGIApp, exclude_paths: Iterable[str] = DEFAULT_EXCLUDE_PATHS):
        self.app = app
        self.exclude_paths = frozenset(exclude_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope.get("path", "") in self.exclude_paths:
            await self.app(scope, receive, send)
            return

        started = time.perf_counter()
        method = scope.get("method", "UNKNOWN")
        path = scope.get("path", "")
        body = bytearray()
        status_code = 0

        async def receive_wrapper() -> Message:
            message = await receive()
            if message["type"] == "http.request":
                body.extend(message.get("body", b""))
            return message

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            await send(message)

        fields = {"method": method, "path": path}
        try:
            await self.app(scope, receive_wrapper, send_wrapper)
        except Exception as e:
            fields["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            logger.error(f"Request failed: {method} {path} - {e}", exc_info=True,
                         extra={"extra_fields": fields})
            raise

        fields["status_code"] = status_code
        fields["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
        if body:
            fields["update_id"] = _update_id(bytes(body))
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(f"Request body: {_sanitize_body(bytes(body))}")

        logger.log(
            _level_for(status_code),
            f"{method} {path} - {status_code} ({fields['duration_ms']:.2f}ms)",
            extra={"extra_fields": fields},
        )
