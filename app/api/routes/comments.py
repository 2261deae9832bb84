from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.core.body_limit import read_body_limited
from app.core.dependencies import get_comment_service
from app.core.exception_handlers import envelope
from app.services.comment_service import CommentService
from app.services.validation import decode_form

router = APIRouter(tags=["Comments"])


def client_address(request: Request) -> str:
    """Return the peer address of the request, or "unknown" when the server has none."""

    return request.client.host if request.client else "unknown"


@router.post("/addcomment")
async def add_comment(
    request: Request,
    service: Annotated[CommentService, Depends(get_comment_service)],
) -> JSONResponse:
    """Add a comment on behalf of a GitHub-authenticated user.

    Form fields: ``token`` (GitHub access token), ``articleId`` and
    ``content``. The body is buffered up to the configured cap before any
    validation runs.

    Returns:
        JSONResponse: 200 envelope with "Comment added".

    Raises:
        AppError: Mapped to 400/401/429/500 by the global handlers.
    """
    body = await read_body_limited(request)
    data = decode_form(body)
    await service.submit(
        data,
        source_address=client_address(request),
        user_agent=request.headers.get("user-agent"),
    )
    return envelope(200, "Comment added")
