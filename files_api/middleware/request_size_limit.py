"""Request body size limit middleware.

Rejects requests whose body exceeds max_bytes with 413. A declared
Content-Length is checked before the app runs; otherwise (chunked bodies)
bytes are counted as the app reads them, without buffering.
Uses raw ASGI (no BaseHTTPMiddleware).
"""

import logging
from typing import Callable

from files_api.middleware._asgi import get_header, send_json_error

logger = logging.getLogger(__name__)


async def _send_413(send: Callable, max_bytes: int, actual: int) -> None:
    await send_json_error(
        send,
        413,
        "PAYLOAD_TOO_LARGE",
        f"Request body must be at most {max_bytes} bytes",
        {"max_bytes": max_bytes, "content_length": actual},
    )


def RequestSizeLimitMiddleware(app: Callable, max_bytes: int) -> Callable:
    """Reject requests whose body exceeds max_bytes (Content-Length or chunked). Raw ASGI.

    On a chunked overflow the 413 is sent at once and the app sees a client
    disconnect; whatever it sends afterwards is dropped.
    """

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return

        declared = get_header(scope, "content-length")
        if declared:
            try:
                length = int(declared)
            except ValueError:
                length = -1
            if length > max_bytes:
                await _send_413(send, max_bytes, length)
                return

        received = 0
        response_started = False
        rejected = False

        async def counting_receive() -> dict:
            nonlocal received, rejected
            if rejected:
                return {"type": "http.disconnect"}
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > max_bytes:
                    rejected = True
                    logger.warning(
                        "Request body over limit: %s %s (%d > %d bytes)",
                        scope.get("method", ""),
                        scope.get("path", ""),
                        received,
                        max_bytes,
                    )
                    if not response_started:
                        await _send_413(send, max_bytes, received)
                    return {"type": "http.disconnect"}
            return message

        async def tracking_send(message: dict) -> None:
            nonlocal response_started
            if rejected:
                return
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        await app(scope, counting_receive, tracking_send)

    return asgi_app
