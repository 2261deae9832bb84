"""Tests for the comment write saga and its compensation."""

import asyncio

import pytest

from app.adapters.storage.in_memory import InMemoryArticleStore
from app.core.errors import storage_error
from app.schemas.requests import CommentDraft
from app.services.comment_writer import (
    ArticleMissing,
    CommentInsertFailed,
    CommentPersisted,
    CommentWriter,
    CountUpdateFailed,
)


def _draft(article_id: int) -> CommentDraft:
    return CommentDraft(
        article_id=article_id,
        username="octocat",
        client="pytest",
        os="Unknown",
        content="hello",
        identity_id="1001",
        source_address="203.0.113.7",
    )


class FailingInsertStore(InMemoryArticleStore):
    async def insert_comment(self, *args, **kwargs):
        raise storage_error("insert_comment")


class FailingCountStore(InMemoryArticleStore):
    async def adjust_comment_count(self, article_id, delta):
        raise storage_error("adjust_comment_count")


class FailingCompensationStore(FailingInsertStore):
    async def adjust_comment_count(self, article_id, delta):
        if delta < 0:
            raise storage_error("adjust_comment_count")
        return await super().adjust_comment_count(article_id, delta)


async def _article(store: InMemoryArticleStore) -> int:
    return await store.create_article("t", "d", "/l.md", "c")


@pytest.mark.asyncio
async def test_persists_comment_and_bumps_count() -> None:
    store = InMemoryArticleStore()
    article_id = await _article(store)
    writer = CommentWriter(store)

    outcome = await writer.write(_draft(article_id))

    assert outcome == CommentPersisted(article_id)
    assert (await store.get_article(article_id)).commentcount == 1
    comments = await store.list_comments(article_id)
    assert [c.username for c in comments] == ["octocat"]
    assert store.source_addresses(article_id) == ["203.0.113.7"]


@pytest.mark.asyncio
async def test_missing_article_stops_before_insert() -> None:
    store = InMemoryArticleStore()
    writer = CommentWriter(store)

    outcome = await writer.write(_draft(404))

    assert outcome == ArticleMissing(404)
    assert writer.pending_compensations == 0


@pytest.mark.asyncio
async def test_count_failure_stops_saga() -> None:
    store = FailingCountStore()
    article_id = await _article(store)
    writer = CommentWriter(store)

    outcome = await writer.write(_draft(article_id))

    assert outcome == CountUpdateFailed(article_id)
    assert await store.list_comments(article_id) == []
    assert writer.pending_compensations == 0


@pytest.mark.asyncio
async def test_insert_failure_schedules_compensation() -> None:
    store = FailingInsertStore()
    article_id = await _article(store)
    writer = CommentWriter(store)

    outcome = await writer.write(_draft(article_id))

    assert isinstance(outcome, CommentInsertFailed)
    assert outcome.article_id == article_id
    # Returned before the compensation ran.
    assert (await store.get_article(article_id)).commentcount == 1

    await writer.wait_for_compensations()

    assert outcome.compensation.done()
    assert (await store.get_article(article_id)).commentcount == 0
    assert writer.pending_compensations == 0
    assert writer.compensation_failures == 0


@pytest.mark.asyncio
async def test_compensation_failure_is_counted_not_raised(caplog) -> None:
    store = FailingCompensationStore()
    article_id = await _article(store)
    writer = CommentWriter(store)

    outcome = await writer.write(_draft(article_id))
    await writer.wait_for_compensations()

    assert isinstance(outcome, CommentInsertFailed)
    assert outcome.compensation.exception() is None
    assert writer.compensation_failures == 1
    assert (await store.get_article(article_id)).commentcount == 1
    assert any(r.getMessage() == "comment_writer.compensation_failed" for r in caplog.records)


class TimeoutInsertStore(InMemoryArticleStore):
    async def insert_comment(self, *args, **kwargs):
        raise asyncio.TimeoutError()


class CancelledInsertStore(InMemoryArticleStore):
    async def insert_comment(self, *args, **kwargs):
        raise asyncio.CancelledError()


class BrokenCountStore(InMemoryArticleStore):
    async def adjust_comment_count(self, article_id, delta):
        raise RuntimeError("driver exploded")


@pytest.mark.asyncio
async def test_any_insert_error_is_compensated() -> None:
    store = TimeoutInsertStore()
    article_id = await _article(store)
    writer = CommentWriter(store)

    outcome = await writer.write(_draft(article_id))
    await writer.wait_for_compensations()

    assert isinstance(outcome, CommentInsertFailed)
    assert (await store.get_article(article_id)).commentcount == 0
    assert await store.list_comments(article_id) == []


@pytest.mark.asyncio
async def test_cancelled_insert_is_compensated_and_propagates() -> None:
    store = CancelledInsertStore()
    article_id = await _article(store)
    writer = CommentWriter(store)

    with pytest.raises(asyncio.CancelledError):
        await writer.write(_draft(article_id))
    await writer.wait_for_compensations()

    assert (await store.get_article(article_id)).commentcount == 0


@pytest.mark.asyncio
async def test_unexpected_count_error_is_reported_as_count_failure() -> None:
    store = BrokenCountStore()
    article_id = await _article(store)
    writer = CommentWriter(store)

    outcome = await writer.write(_draft(article_id))

    assert outcome == CountUpdateFailed(article_id)
    assert await store.list_comments(article_id) == []
    assert writer.pending_compensations == 0
