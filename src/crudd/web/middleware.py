"""Access logging middleware.

Pure ASGI so streamed command pages pass through untouched; the log line
is written once the response has finished.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from fastapi import status
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


@dataclass
class AccessLogMiddleware:
    app: ASGIApp

    def __post_init__(self) -> None:
        # Replaced by this middleware
        uvicorn_access_logger = logging.getLogger("uvicorn.access")
        uvicorn_access_logger.disabled = True
        uvicorn_access_logger.propagate = False

    @staticmethod
    def _get_client_ip(scope: Scope) -> str:
        """Client address, preferring X-Forwarded-For when a proxy set it."""
        headers = dict(scope.get("headers", []))
        forwarded_for = headers.get(b"x-forwarded-for")
        if forwarded_for:
            return forwarded_for.decode().split(",")[0].strip()

        client = scope.get("client")
        if client:
            return f"{client[0]}:{client[1]}"
        return "unknown"

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "%s %s %s %d %.1fms",
                scope.get("method", "GET"),
                scope.get("path", "/"),
                self._get_client_ip(scope),
                status_code,
                duration_ms,
            )
