"""Request ID middleware.

Forwards a client X-Request-ID when it is safe to log, otherwise mints one.
The id is echoed on the response, stored on request.state for audit
records, and bound to the logging context for the duration of the request.
Raw ASGI so streamed downloads are not buffered.
"""

import re
import uuid
from typing import Callable

from files_api.middleware._asgi import get_header
from files_api.shared.telemetry.logging import request_id_var

REQUEST_ID_MAX_LENGTH = 64
_SAFE_REQUEST_ID = re.compile(r"[A-Za-z0-9_-]{1,%d}" % REQUEST_ID_MAX_LENGTH)


def sanitize_request_id(raw: str | None) -> str:
    """Client value if it is 1-64 of [A-Za-z0-9_-] after trimming; a new UUID otherwise."""
    candidate = (raw or "").strip()
    if _SAFE_REQUEST_ID.fullmatch(candidate):
        return candidate
    return str(uuid.uuid4())


def RequestIDMiddleware(app: Callable, header_name: str = "X-Request-ID") -> Callable:
    """Bind a request id to scope state, the log context and the response headers."""
    response_header = header_name.lower().encode()

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        request_id = sanitize_request_id(get_header(scope, header_name))
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_id(message: dict) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = [
                    *message.get("headers", []),
                    (response_header, request_id.encode()),
                ]
            await send(message)

        token = request_id_var.set(request_id)
        try:
            await app(scope, receive, send_with_id)
        finally:
            request_id_var.reset(token)

    return asgi_app
