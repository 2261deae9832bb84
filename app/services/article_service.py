"""Article reads and password-gated article creation."""

from __future__ import annotations

import logging

from app.adapters.rate_limit.base import AbstractAttemptCounter
from app.adapters.storage.base import AbstractArticleStore
from app.core.auth import verify_article_password
from app.core.errors import ForbiddenAppError, NotFoundAppError, RateLimitAppError
from app.core.logging import hash_identifier
from app.schemas.articles import ArticleDetail, ArticleRecord
from app.services.validation import FormData, validate_article_creation

logger = logging.getLogger(__name__)


class ArticleService:
    """Reads articles and creates new ones for holders of the shared password.

    Attributes:
        store: Article/comment store.
        attempts: Failed password attempt counter, keyed by client address.
    """

    def __init__(self, store: AbstractArticleStore, attempts: AbstractAttemptCounter) -> None:
        self.store = store
        self.attempts = attempts

    async def list_articles(self) -> list[ArticleRecord]:
        return await self.store.list_articles()

    async def get_article_detail(self, article_id: int) -> ArticleDetail:
        """Return one article with its comments, newest first.

        Raises:
            NotFoundAppError: If the article does not exist.
        """
        article = await self.store.get_article(article_id)
        if article is None:
            raise NotFoundAppError(
                code="article_not_found",
                message="Article not found.",
                details={"article_id": article_id},
            )
        comments = await self.store.list_comments(article_id)
        return ArticleDetail(**article.model_dump(), comments=comments)

    async def create_article(self, data: FormData, *, source_address: str) -> int:
        """Validate the form, check the password and create the article.

        Args:
            data: Decoded form fields.
            source_address: Client network address (brute-force throttling key).

        Returns:
            int: Id of the new article.

        Raises:
            ValidationAppError: Malformed or incomplete fields.
            RateLimitAppError: Too many recent wrong passwords from this address.
            ForbiddenAppError: Wrong password.
            StorageAppError: The article could not be stored.
        """
        submission = validate_article_creation(data)
        source_hash = hash_identifier(source_address)

        if not self.attempts.check(source_address):
            logger.warning("rate_limit.password_attempts_blocked", extra={"source_hash": source_hash})
            raise RateLimitAppError(
                code="too_many_password_attempts",
                message="Too many incorrect password attempts.",
            )

        if not verify_article_password(submission.password):
            self.attempts.record_failure(source_address)
            logger.warning("auth.article_password_rejected", extra={"source_hash": source_hash})
            raise ForbiddenAppError(code="password_incorrect", message="Password incorrect.")

        article_id = await self.store.create_article(
            submission.title,
            submission.description,
            submission.link,
            submission.category,
        )
        logger.info("article.created", extra={"article_id": article_id, "category": submission.category})
        return article_id
