"""Comment write saga: bump the article's comment count, then insert the comment.

The two store calls are independent transactions. If the insert fails after
the count was bumped, a compensating decrement is scheduled in the background
and the caller is told the write failed; the client must resubmit. The
compensation is best effort: its failure is logged and counted, never retried.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Union

from app.adapters.storage.base import AbstractArticleStore
from app.schemas.requests import CommentDraft

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommentPersisted:
    article_id: int


@dataclass(frozen=True)
class ArticleMissing:
    article_id: int


@dataclass(frozen=True)
class CountUpdateFailed:
    article_id: int


@dataclass(frozen=True)
class CommentInsertFailed:
    """The insert failed; ``compensation`` is the scheduled decrement task."""

    article_id: int
    compensation: asyncio.Task


CommentWriteOutcome = Union[CommentPersisted, ArticleMissing, CountUpdateFailed, CommentInsertFailed]


class CommentWriter:
    """Runs the comment write saga against an article store.

    Attributes:
        store: Article/comment store.
        compensation_failures: Number of compensating decrements that failed.
    """

    def __init__(self, store: AbstractArticleStore) -> None:
        self.store = store
        self.compensation_failures = 0
        self._pending: set[asyncio.Task] = set()

    async def write(self, draft: CommentDraft) -> CommentWriteOutcome:
        """Persist one comment.

        Args:
            draft: Validated comment with verified author identity.

        Returns:
            CommentWriteOutcome: Which step succeeded or failed.
        """
        article_id = draft.article_id

        try:
            updated = await self.store.adjust_comment_count(article_id, 1)
        except Exception as exc:
            logger.warning(
                "comment_writer.count_update_failed",
                extra={"article_id": article_id, "error_type": type(exc).__name__},
            )
            return CountUpdateFailed(article_id)

        if updated == 0:
            return ArticleMissing(article_id)

        try:
            await self.store.insert_comment(
                article_id,
                draft.username,
                draft.client,
                draft.os,
                draft.content,
                draft.identity_id,
                draft.source_address,
            )
        except asyncio.CancelledError:
            # The increment already committed; undo it even if the request is gone.
            self._schedule_compensation(article_id)
            raise
        except Exception as exc:
            logger.warning(
                "comment_writer.insert_failed",
                extra={"article_id": article_id, "error_type": type(exc).__name__},
            )
            return CommentInsertFailed(article_id, self._schedule_compensation(article_id))

        return CommentPersisted(article_id)

    def _schedule_compensation(self, article_id: int) -> asyncio.Task:
        task = asyncio.create_task(
            self._compensate(article_id),
            name=f"comment-count-compensation-{article_id}",
        )
        # Strong reference until the task is done.
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _compensate(self, article_id: int) -> None:
        try:
            await self.store.adjust_comment_count(article_id, -1)
        except Exception as exc:
            self.compensation_failures += 1
            logger.error(
                "comment_writer.compensation_failed",
                extra={
                    "article_id": article_id,
                    "error_type": type(exc).__name__,
                    "compensation_failures": self.compensation_failures,
                },
            )
            return
        logger.info("comment_writer.compensated", extra={"article_id": article_id})

    @property
    def pending_compensations(self) -> int:
        return len(self._pending)

    async def wait_for_compensations(self) -> None:
        """Wait until every scheduled compensation has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
