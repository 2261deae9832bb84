"""FastAPI dependencies wiring collaborators into the services.

Collaborators are created lazily on first use and cached for the life of the
process. Tests replace them through ``app.dependency_overrides``.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends

from app.adapters.credentials.base import AbstractCredentialVerifier
from app.adapters.credentials.factory import create_credential_verifier
from app.adapters.rate_limit.base import AbstractAttemptCounter, AbstractCooldownLimiter
from app.adapters.storage.base import AbstractArticleStore
from app.adapters.storage.factory import create_article_store
from app.adapters.storage.sqlalchemy_store import SQLAlchemyArticleStore
from app.core.config import settings
from app.core.rate_limit import get_attempt_counter, get_comment_limiter
from app.services.article_service import ArticleService
from app.services.comment_service import CommentService
from app.services.comment_writer import CommentWriter

logger = logging.getLogger(__name__)

_store: AbstractArticleStore | None = None
_verifier: AbstractCredentialVerifier | None = None
_writer: CommentWriter | None = None


async def get_article_store() -> AbstractArticleStore:
    global _store
    if _store is None:
        _store = create_article_store()
    return _store


async def get_credential_verifier() -> AbstractCredentialVerifier:
    global _verifier
    if _verifier is None:
        _verifier = create_credential_verifier()
    return _verifier


async def get_comment_writer(
    store: Annotated[AbstractArticleStore, Depends(get_article_store)],
) -> CommentWriter:
    """Return the shared comment writer, rebuilt if the store was replaced."""
    global _writer
    if _writer is None or _writer.store is not store:
        _writer = CommentWriter(store)
    return _writer


async def get_comment_service(
    verifier: Annotated[AbstractCredentialVerifier, Depends(get_credential_verifier)],
    limiter: Annotated[AbstractCooldownLimiter, Depends(get_comment_limiter)],
    writer: Annotated[CommentWriter, Depends(get_comment_writer)],
) -> CommentService:
    return CommentService(verifier=verifier, limiter=limiter, writer=writer)


async def get_article_service(
    store: Annotated[AbstractArticleStore, Depends(get_article_store)],
    attempts: Annotated[AbstractAttemptCounter, Depends(get_attempt_counter)],
) -> ArticleService:
    return ArticleService(store=store, attempts=attempts)


async def startup_dependencies() -> None:
    """Build the store up front so misconfiguration fails at startup, not per request."""
    store = await get_article_store()
    if settings.db.create_schema and isinstance(store, SQLAlchemyArticleStore):
        await store.create_schema()
        logger.info("storage.schema_ready")


async def shutdown_dependencies() -> None:
    """Drain compensations, then release HTTP and database resources."""
    global _store, _verifier, _writer

    if _writer is not None:
        pending = _writer.pending_compensations
        await _writer.wait_for_compensations()
        logger.info(
            "shutdown.compensations_drained",
            extra={"drained": pending, "compensation_failures": _writer.compensation_failures},
        )
    if _verifier is not None:
        await _verifier.aclose()
    if _store is not None:
        await _store.close()

    _store = None
    _verifier = None
    _writer = None
