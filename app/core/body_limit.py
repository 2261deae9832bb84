"""Bounded request body buffering.

Bodies are read chunk by chunk and the request is abandoned as soon as the
configured cap is exceeded, so an oversized upload never sits in memory.
Abandoned requests get no application response at all (see
``BodyLimitMiddleware``).
"""
from __future__ import annotations

import logging

from fastapi import Request
from starlette.requests import ClientDisconnect

from app.core.config import settings

logger = logging.getLogger(__name__)


class RequestAborted(Exception):
    """The in-flight request must be dropped without sending a response."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


def declared_length(headers) -> int | None:
    """Return the Content-Length header as an int, or None if absent/invalid."""
    raw = headers.get("content-length")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


async def read_body_limited(request: Request, max_bytes: int | None = None) -> bytes:
    """Buffer the request body, enforcing the size cap.

    Args:
        request: Incoming request.
        max_bytes: Cap in bytes; defaults to settings.app.max_body_bytes.

    Returns:
        The complete body.

    Raises:
        RequestAborted: If the body exceeds the cap or the client disconnects
            before the body is complete.
    """
    limit = max_bytes if max_bytes is not None else settings.app.max_body_bytes

    length = declared_length(request.headers)
    if length is not None and length > limit:
        logger.warning(
            "body_limit.rejected_by_header",
            extra={"declared_bytes": length, "max_bytes": limit},
        )
        raise RequestAborted("body_too_large")

    size = 0
    chunks: list[bytes] = []
    try:
        async for chunk in request.stream():
            size += len(chunk)
            if size > limit:
                logger.warning(
                    "body_limit.rejected_by_chunked_read",
                    extra={"size": size, "max_bytes": limit},
                )
                raise RequestAborted("body_too_large")
            chunks.append(chunk)
    except ClientDisconnect as exc:
        raise RequestAborted("client_disconnected") from exc

    return b"".join(chunks)
