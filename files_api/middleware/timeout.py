"""Request timeout middleware.

Bounds the time until the response starts (asyncio.timeout). A streamed
download is not cut off once its headers are out.
Uses raw ASGI (no BaseHTTPMiddleware).
"""

import asyncio
import logging
from typing import Callable

from files_api.middleware._asgi import send_json_error

logger = logging.getLogger(__name__)


def TimeoutMiddleware(app: Callable, timeout_seconds: float) -> Callable:
    """Send 504 if the app has not started a response within timeout_seconds. Raw ASGI.

    The deadline is lifted when http.response.start is sent, so a long body
    (Content-Length already promised) is never truncated by this middleware.
    """

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        deadline = asyncio.timeout(float(timeout_seconds))

        async def tracking_send(message: dict) -> None:
            if message["type"] == "http.response.start":
                deadline.reschedule(None)
            await send(message)

        try:
            async with deadline:
                await app(scope, receive, tracking_send)
        except TimeoutError:
            if not deadline.expired():
                raise
            logger.warning(
                "Request timed out after %s seconds: %s %s",
                timeout_seconds,
                scope.get("method", ""),
                scope.get("path", ""),
            )
            await send_json_error(
                send,
                504,
                "GATEWAY_TIMEOUT",
                f"Request timed out after {timeout_seconds} seconds",
                {"timeout_seconds": timeout_seconds},
            )

    return asgi_app
