"""Comment submission pipeline.

validate -> verify GitHub token -> per-account cooldown -> write saga.
Every failure is raised as an AppError and turned into a response by the
global exception handlers.
"""

from __future__ import annotations

import logging

from app.adapters.credentials.base import AbstractCredentialVerifier, InvalidToken
from app.adapters.rate_limit.base import AbstractCooldownLimiter
from app.core.config import settings
from app.core.errors import AuthenticationAppError, NotFoundAppError, RateLimitAppError, storage_error
from app.core.logging import hash_identifier
from app.schemas.requests import CommentDraft
from app.services.comment_writer import ArticleMissing, CommentPersisted, CommentWriter
from app.services.validation import FormData, validate_comment_submission

logger = logging.getLogger(__name__)

UNKNOWN_OS = "Unknown"


def describe_client(user_agent: str | None, max_chars: int | None = None) -> tuple[str, str]:
    """Return the (client, os) descriptors stored with a comment.

    The raw User-Agent is kept, bounded in length; no parsing is attempted.
    """
    limit = max_chars if max_chars is not None else settings.app.max_client_chars
    client = (user_agent or "").strip()[:limit] or "Other"
    return client, UNKNOWN_OS


class CommentService:
    """Accepts comments from GitHub-authenticated users."""

    def __init__(
        self,
        verifier: AbstractCredentialVerifier,
        limiter: AbstractCooldownLimiter,
        writer: CommentWriter,
    ) -> None:
        self.verifier = verifier
        self.limiter = limiter
        self.writer = writer

    async def submit(self, data: FormData, *, source_address: str, user_agent: str | None) -> None:
        """Run the full submission pipeline for one request.

        Args:
            data: Decoded form fields (token, articleId, content).
            source_address: Client network address.
            user_agent: Raw User-Agent header.

        Raises:
            ValidationAppError: Malformed fields.
            AuthenticationAppError: Token rejected or unverifiable.
            RateLimitAppError: Account commented within the cooldown.
            NotFoundAppError: Article does not exist.
            StorageAppError: Count update or insert failed.
        """
        submission = validate_comment_submission(data)

        outcome = await self.verifier.verify(submission.token)
        if isinstance(outcome, InvalidToken):
            logger.warning(
                "credentials.rejected",
                extra={"reason": outcome.reason, "source_hash": hash_identifier(source_address)},
            )
            raise AuthenticationAppError(code="invalid_token", message="Invalid GitHub login token.")

        if not self.limiter.authorize(outcome.identity_id):
            logger.warning(
                "rate_limit.cooldown_denied",
                extra={"identity_hash": hash_identifier(outcome.identity_id)},
            )
            raise RateLimitAppError(code="comment_too_frequent", message="You commented too frequently.")

        client, os_name = describe_client(user_agent)
        draft = CommentDraft(
            article_id=submission.article_id,
            username=outcome.display_name,
            client=client,
            os=os_name,
            content=submission.content,
            identity_id=outcome.identity_id,
            source_address=source_address,
        )

        result = await self.writer.write(draft)
        if isinstance(result, CommentPersisted):
            logger.info(
                "comment.accepted",
                extra={
                    "article_id": submission.article_id,
                    "identity_hash": hash_identifier(outcome.identity_id),
                    "content_length": len(submission.content),
                },
            )
            return
        if isinstance(result, ArticleMissing):
            raise NotFoundAppError(
                code="article_not_found",
                message="Article not found.",
                details={"article_id": submission.article_id},
            )
        raise storage_error(type(result).__name__)
