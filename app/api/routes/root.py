from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.core.exception_handlers import envelope

router = APIRouter(tags=["Root"])

ROOT_MESSAGE = "There is nothing here!! Go away! ⁄(⁄ ⁄•⁄ω⁄•⁄ ⁄)⁄"


@router.api_route("/", methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
def root() -> JSONResponse:
    """Informational endpoint answering every method with the same message."""

    return envelope(200, ROOT_MESSAGE)
