"""Access log middleware: one line per request with status, duration and request id.

Raw ASGI; the line is written when the response finishes (or fails), so
long download streams are logged with their full duration.
"""

import logging
import time
from typing import Callable

logger = logging.getLogger("cloudshare.access")


def AccessLogMiddleware(app: Callable) -> Callable:
    """Log method, path, status, duration ms and request id. Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return

        started = time.perf_counter()
        status = 500

        async def send_wrapper(message: dict) -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = message["status"]
            await send(message)

        try:
            await app(scope, receive, send_wrapper)
        finally:
            logger.info(
                "%s %s %d %.1fms request_id=%s",
                scope.get("method", ""),
                scope.get("path", ""),
                status,
                (time.perf_counter() - started) * 1000,
                scope.get("state", {}).get("request_id", "-"),
            )

    return asgi_app
