"""Article/comment store interface.

Routes and services depend on this abstraction only. Every operation raises
``StorageAppError`` when the backend fails; the message is generic and the
cause is logged by the backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from app.schemas.articles import ArticleRecord, CommentRecord


class AbstractArticleStore(ABC):
    """Interface for article/comment persistence backends."""

    @abstractmethod
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
        """Insert one comment record."""
        raise NotImplementedError

    @abstractmethod
    async def adjust_comment_count(self, article_id: int, delta: int) -> int:
        """Add ``delta`` to an article's comment count, never going below zero.

        Returns:
            int: Number of articles updated (0 when the article does not exist).
        """
        raise NotImplementedError

    @abstractmethod
    async def list_articles(self) -> list[ArticleRecord]:
        """Return all articles, newest first."""
        raise NotImplementedError

    @abstractmethod
    async def get_article(self, article_id: int) -> ArticleRecord | None:
        """Return one article, or None when it does not exist."""
        raise NotImplementedError

    @abstractmethod
    async def list_comments(self, article_id: int) -> list[CommentRecord]:
        """Return the comments of one article, newest first."""
        raise NotImplementedError

    @abstractmethod
    async def create_article(self, title: str, description: str, link: str, category: str) -> int:
        """Create an article and return its id."""
        raise NotImplementedError

    async def close(self) -> None:
        """Release backend resources (connection pools, ...)."""
        return None
