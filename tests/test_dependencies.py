"""Tests for collaborator wiring and the startup/shutdown hooks."""

import pytest

from app.adapters.storage.in_memory import InMemoryArticleStore
from app.core import dependencies
from app.core.rate_limit import get_attempt_counter, get_comment_limiter, reset_rate_limiters


@pytest.mark.asyncio
async def test_startup_builds_configured_store_and_shutdown_releases_it() -> None:
    await dependencies.startup_dependencies()
    store = await dependencies.get_article_store()

    assert isinstance(store, InMemoryArticleStore)
    assert await dependencies.get_article_store() is store

    writer = await dependencies.get_comment_writer(store)
    assert writer.store is store
    assert await dependencies.get_comment_writer(store) is writer

    await dependencies.shutdown_dependencies()

    assert dependencies._store is None
    assert dependencies._writer is None


@pytest.mark.asyncio
async def test_writer_follows_replaced_store() -> None:
    first = InMemoryArticleStore()
    second = InMemoryArticleStore()

    writer = await dependencies.get_comment_writer(first)
    replaced = await dependencies.get_comment_writer(second)

    assert replaced is not writer
    assert replaced.store is second
    await dependencies.shutdown_dependencies()


def test_limiters_are_shared_until_reset() -> None:
    reset_rate_limiters()

    limiter = get_comment_limiter()
    counter = get_attempt_counter()

    assert get_comment_limiter() is limiter
    assert get_attempt_counter() is counter
    assert limiter.cooldown_seconds == 20
    assert counter.threshold == 3

    reset_rate_limiters()
    assert get_comment_limiter() is not limiter
