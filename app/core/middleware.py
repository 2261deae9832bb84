"""HTTP middleware for request correlation and body size enforcement.

The request id middleware:
- Accepts incoming X-Request-ID header or generates a UUID
- Stores request_id in contextvars for access throughout the request lifecycle
- Injects request_id and the request duration into response headers
- Clears context after request completion to prevent context leaks

The body limit middleware wraps the ASGI ``receive`` channel, counts body
bytes and abandons the request once the cap is exceeded or the client goes
away. Abandoned requests never get an application response.

Usage:
    app.middleware("http")(request_id_middleware)
    app.add_middleware(BodyLimitMiddleware, max_bytes=...)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.core.body_limit import RequestAborted, declared_length
from app.core.config import settings
from app.core.logging import clear_request_id, hash_identifier, set_request_id

logger = logging.getLogger(__name__)


async def request_id_middleware(request: Request, call_next) -> Response:
    """Attach a correlation id and timing headers to every response.

    If the client provides an X-Request-ID header (configurable via
    LOG_REQUEST_ID_HEADER), that value is used. Otherwise, a new UUID is
    generated.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The response with request_id and duration headers added.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "request.completed",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response


class BodyLimitMiddleware:
    """Pure ASGI middleware enforcing a hard cap on request bodies.

    Exceeding the cap (by Content-Length or by counted bytes) or a client
    disconnect mid-body stops the pipeline before a response is started, and
    the server is left to drop the connection.
    """

    def __init__(self, app: ASGIApp, max_bytes: int) -> None:
        if max_bytes < 1:
            raise ValueError("max_bytes must be >= 1")
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        source = scope.get("client")
        source_hash = hash_identifier(source[0] if source else None)

        headers = {k.decode("latin-1").lower(): v.decode("latin-1") for k, v in scope.get("headers", [])}
        length = declared_length(headers)
        if length is not None and length > self.max_bytes:
            logger.warning(
                "body_limit.aborted",
                extra={"reason": "declared_too_large", "declared_bytes": length, "source_hash": source_hash},
            )
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    raise RequestAborted("body_too_large")
            return message

        try:
            await self.app(scope, limited_receive, send)
        except RequestAborted as exc:
            logger.warning(
                "body_limit.aborted",
                extra={
                    "reason": exc.reason,
                    "received_bytes": received,
                    "source_hash": source_hash,
                },
            )
