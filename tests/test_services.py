"""Service-level tests for comment submission and article creation."""

import asyncio
from unittest.mock import Mock

import pytest

from app.adapters.rate_limit.in_memory import InMemoryAttemptCounter, InMemoryCooldownLimiter
from app.adapters.storage.in_memory import InMemoryArticleStore
from app.core.errors import (
    AuthenticationAppError,
    ForbiddenAppError,
    NotFoundAppError,
    RateLimitAppError,
    StorageAppError,
    ValidationAppError,
    storage_error,
)
from app.services.article_service import ArticleService
from app.services.comment_service import CommentService, describe_client
from app.services.comment_writer import CommentWriter

from tests.support import ARTICLE_PASSWORD, GOOD_TOKEN, FakeVerifier


class CountFailingStore(InMemoryArticleStore):
    async def adjust_comment_count(self, article_id, delta):
        raise storage_error("adjust_comment_count")


def _comment_service(store=None, clock=None):
    store = store or InMemoryArticleStore()
    verifier = FakeVerifier()
    limiter = InMemoryCooldownLimiter(cooldown_seconds=20, clock=clock or Mock(return_value=1000.0))
    service = CommentService(verifier=verifier, limiter=limiter, writer=CommentWriter(store))
    return service, store, verifier, limiter


class TestDescribeClient:
    def test_keeps_user_agent(self) -> None:
        assert describe_client("curl/8.0") == ("curl/8.0", "Unknown")

    def test_missing_user_agent(self) -> None:
        assert describe_client(None) == ("Other", "Unknown")
        assert describe_client("   ") == ("Other", "Unknown")

    def test_truncates_long_user_agent(self) -> None:
        client, _ = describe_client("x" * 500, max_chars=255)

        assert len(client) == 255


class TestCommentService:
    @pytest.mark.asyncio
    async def test_accepts_valid_comment(self) -> None:
        service, store, verifier, limiter = _comment_service()
        article_id = await store.create_article("t", "d", "/l.md", "c")

        await service.submit(
            {"token": GOOD_TOKEN, "articleId": str(article_id), "content": "hi"},
            source_address="198.51.100.4",
            user_agent="pytest",
        )

        comments = await store.list_comments(article_id)
        assert [(c.username, c.client, c.os) for c in comments] == [("octocat", "pytest", "Unknown")]
        assert limiter.last_accepted("1001") == 1000.0

    @pytest.mark.asyncio
    async def test_validation_runs_before_verification(self) -> None:
        service, _, verifier, limiter = _comment_service()

        with pytest.raises(ValidationAppError):
            await service.submit(
                {"token": GOOD_TOKEN, "articleId": "1", "content": ""},
                source_address="198.51.100.4",
                user_agent=None,
            )

        assert verifier.calls == []
        assert len(limiter) == 0

    @pytest.mark.asyncio
    async def test_rejected_token_does_not_consume_cooldown(self) -> None:
        service, _, _, limiter = _comment_service()

        with pytest.raises(AuthenticationAppError) as exc_info:
            await service.submit(
                {"token": "nope", "articleId": "1", "content": "hi"},
                source_address="198.51.100.4",
                user_agent=None,
            )

        assert exc_info.value.message == "Invalid GitHub login token."
        assert len(limiter) == 0

    @pytest.mark.asyncio
    async def test_cooldown(self) -> None:
        clock = Mock(return_value=1000.0)
        service, store, _, _ = _comment_service(clock=clock)
        article_id = await store.create_article("t", "d", "/l.md", "c")
        form = {"token": GOOD_TOKEN, "articleId": str(article_id), "content": "hi"}

        await service.submit(form, source_address="a", user_agent=None)
        with pytest.raises(RateLimitAppError):
            await service.submit(form, source_address="a", user_agent=None)

        clock.return_value = 1020.0
        await service.submit(form, source_address="a", user_agent=None)
        assert (await store.get_article(article_id)).commentcount == 2

    @pytest.mark.asyncio
    async def test_missing_article(self) -> None:
        service, _, _, _ = _comment_service()

        with pytest.raises(NotFoundAppError) as exc_info:
            await service.submit(
                {"token": GOOD_TOKEN, "articleId": "77", "content": "hi"},
                source_address="a",
                user_agent=None,
            )

        assert exc_info.value.message == "Article not found."

    @pytest.mark.asyncio
    async def test_storage_failure(self) -> None:
        store = CountFailingStore()
        article_id = await store.create_article("t", "d", "/l.md", "c")
        service, _, _, _ = _comment_service(store=store)

        with pytest.raises(StorageAppError) as exc_info:
            await service.submit(
                {"token": GOOD_TOKEN, "articleId": str(article_id), "content": "hi"},
                source_address="a",
                user_agent=None,
            )

        assert exc_info.value.message == "Failed to access database."


class TestArticleService:
    def _service(self, clock=None):
        store = InMemoryArticleStore()
        attempts = InMemoryAttemptCounter(threshold=3, block_seconds=30, clock=clock or Mock(return_value=1000.0))
        return ArticleService(store=store, attempts=attempts), store, attempts

    def _form(self, password: str = ARTICLE_PASSWORD) -> dict:
        return {"password": password, "title": "T", "description": "D", "link": "/t.md", "category": "C"}

    @pytest.mark.asyncio
    async def test_create_and_read_back(self) -> None:
        service, _, _ = self._service()

        article_id = await service.create_article(self._form(), source_address="a")
        detail = await service.get_article_detail(article_id)

        assert detail.title == "T"
        assert detail.comments == []
        assert [a.id for a in await service.list_articles()] == [article_id]

    @pytest.mark.asyncio
    async def test_missing_article_detail(self) -> None:
        service, _, _ = self._service()

        with pytest.raises(NotFoundAppError):
            await service.get_article_detail(5)

    @pytest.mark.asyncio
    async def test_wrong_password_is_recorded(self) -> None:
        service, store, attempts = self._service()

        with pytest.raises(ForbiddenAppError):
            await service.create_article(self._form("bad"), source_address="a")

        assert attempts.failures("a") == 1
        assert await store.list_articles() == []

    @pytest.mark.asyncio
    async def test_blocked_address_is_refused_before_password_check(self) -> None:
        service, _, attempts = self._service()
        for _ in range(3):
            attempts.record_failure("a")

        with pytest.raises(RateLimitAppError) as exc_info:
            await service.create_article(self._form(), source_address="a")

        assert exc_info.value.message == "Too many incorrect password attempts."
        assert attempts.failures("a") == 3

    @pytest.mark.asyncio
    async def test_validation_failures_are_not_counted(self) -> None:
        service, _, attempts = self._service()
        form = self._form("bad")
        form["title"] = ""

        with pytest.raises(ValidationAppError):
            await service.create_article(form, source_address="a")

        assert attempts.failures("a") == 0


class TimeoutInsertStore(InMemoryArticleStore):
    async def insert_comment(self, *args, **kwargs):
        raise asyncio.TimeoutError()


@pytest.mark.asyncio
async def test_insert_timeout_is_a_storage_failure_and_count_is_restored() -> None:
    store = TimeoutInsertStore()
    article_id = await store.create_article("t", "d", "/l.md", "c")
    service, _, _, _ = _comment_service(store=store)

    with pytest.raises(StorageAppError) as exc_info:
        await service.submit(
            {"token": GOOD_TOKEN, "articleId": str(article_id), "content": "hi"},
            source_address="a",
            user_agent=None,
        )
    await service.writer.wait_for_compensations()

    assert exc_info.value.message == "Failed to access database."
    assert (await store.get_article(article_id)).commentcount == 0
