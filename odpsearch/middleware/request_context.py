"""Request context middleware.

Tags every HTTP response with a request id and its processing time using the
pure ASGI pattern.
"""

import logging
import time
from uuid import uuid4

logger = logging.getLogger(__name__)


class RequestContextMiddleware:
    """
    Add tracing headers to all responses.

    Uses pure ASGI middleware pattern instead of BaseHTTPMiddleware
    to avoid Content-Length mismatch issues with streaming responses.

    Headers added:
        - X-Request-Id: Unique request identifier (an incoming one is kept)
        - X-Response-Time-Ms: Time until the response started
        - X-Content-Type-Options: nosniff
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        incoming = dict(scope.get("headers", [])).get(b"x-request-id")
        request_id = incoming.decode("latin-1") if incoming else str(uuid4())
        start_time = time.perf_counter()

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                elapsed_ms = (time.perf_counter() - start_time) * 1000
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode("latin-1")))
                headers.append((b"x-response-time-ms", f"{elapsed_ms:.1f}".encode()))
                headers.append((b"x-content-type-options", b"nosniff"))
                message = {**message, "headers": headers}

                logger.debug(
                    f"{scope.get('method', '')} {scope.get('path', '')} -> "
                    f"{message.get('status')} in {elapsed_ms:.1f}ms [{request_id}]"
                )
            await send(message)

        await self.app(scope, receive, send_with_headers)
