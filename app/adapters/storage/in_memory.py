"""In-process article/comment store.

Notes:
- Data lives only as long as the process; meant for development and tests.
- Operations never await, so each one is atomic on the event loop.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from app.adapters.storage.base import AbstractArticleStore
from app.core.errors import storage_error
from app.schemas.articles import ArticleRecord, CommentRecord


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _StoredComment:
    id: int
    article_id: int
    username: str
    client: str
    os: str
    content: str
    githubid: str
    fromip: str
    time: datetime


@dataclass
class _StoredArticle:
    id: int
    title: str
    description: str
    link: str
    category: str
    time: datetime
    commentcount: int = 0
    comments: list[_StoredComment] = field(default_factory=list)


class InMemoryArticleStore(AbstractArticleStore):
    """Article store backed by plain dictionaries."""

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._articles: dict[int, _StoredArticle] = {}
        self._next_article_id = 1
        self._next_comment_id = 1

    async def insert_comment(
        self,
        article_id: int,
        username: str,
        client: str,
        os: str,
        content: str,
        identity_id: str,
        source_address: str,
    ) -> None:
        article = self._articles.get(article_id)
        if article is None:
            # Mirrors the foreign key violation of the SQL backend.
            raise storage_error("insert_comment")
        article.comments.append(
            _StoredComment(
                id=self._next_comment_id,
                article_id=article_id,
                username=username,
                client=client,
                os=os,
                content=content,
                githubid=identity_id,
                fromip=source_address,
                time=self._clock(),
            )
        )
        self._next_comment_id += 1

    async def adjust_comment_count(self, article_id: int, delta: int) -> int:
        article = self._articles.get(article_id)
        if article is None:
            return 0
        article.commentcount = max(0, article.commentcount + delta)
        return 1

    async def list_articles(self) -> list[ArticleRecord]:
        articles = sorted(self._articles.values(), key=lambda a: (a.time, a.id), reverse=True)
        return [ArticleRecord.model_validate(a) for a in articles]

    async def get_article(self, article_id: int) -> ArticleRecord | None:
        article = self._articles.get(article_id)
        return ArticleRecord.model_validate(article) if article is not None else None

    async def list_comments(self, article_id: int) -> list[CommentRecord]:
        article = self._articles.get(article_id)
        if article is None:
            return []
        comments = sorted(article.comments, key=lambda c: (c.time, c.id), reverse=True)
        return [CommentRecord.model_validate(c) for c in comments]

    async def create_article(self, title: str, description: str, link: str, category: str) -> int:
        article_id = self._next_article_id
        self._articles[article_id] = _StoredArticle(
            id=article_id,
            title=title,
            description=description,
            link=link,
            category=category,
            time=self._clock(),
        )
        self._next_article_id += 1
        return article_id

    def source_addresses(self, article_id: int) -> list[str]:
        """Return the stored source addresses of an article's comments, oldest first."""
        article = self._articles.get(article_id)
        return [c.fromip for c in article.comments] if article is not None else []
