"""Request body size limit middleware.

Rejects requests whose body exceeds max_upload_size with 413. A declared
Content-Length is checked up front; otherwise bytes are counted as the app
reads them, so large uploads are never held in memory here.
Uses raw ASGI (no BaseHTTPMiddleware).
"""

from typing import Any, Callable

from starlette.exceptions import HTTPException

from cloudshare.middleware._asgi import get_header, send_json


class PayloadTooLargeError(HTTPException):
    """Raised from receive() once a streamed body passes the limit."""

    def __init__(self, max_bytes: int) -> None:
        super().__init__(
            status_code=413,
            detail=f"Request body must be at most {max_bytes} bytes",
        )


def _payload(max_bytes: int, actual: int | None = None) -> dict[str, Any]:
    details: dict[str, Any] = {"max_bytes": max_bytes}
    if actual is not None:
        details["content_length"] = actual
    return {
        "error": "PAYLOAD_TOO_LARGE",
        "message": f"Request body must be at most {max_bytes} bytes",
        "details": details,
    }


def RequestSizeLimitMiddleware(app: Callable, max_bytes: int) -> Callable:
    """Reject requests whose body exceeds max_bytes (Content-Length or streamed). Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return

        content_length_str = get_header(scope, "content-length")
        if content_length_str:
            try:
                length = int(content_length_str)
            except ValueError:
                length = None
            if length is not None and length > max_bytes:
                await send_json(send, 413, _payload(max_bytes, length))
                return

        received = 0
        response_started = False

        async def counting_receive() -> dict:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > max_bytes:
                    raise PayloadTooLargeError(max_bytes)
            return message

        async def send_wrapper(message: dict) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await app(scope, counting_receive, send_wrapper)
        except PayloadTooLargeError:
            if not response_started:
                await send_json(send, 413, _payload(max_bytes, received))

    return asgi_app
