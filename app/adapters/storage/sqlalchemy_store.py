"""PostgreSQL article/comment store on SQLAlchemy's asyncio extension."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.adapters.storage.base import AbstractArticleStore
from app.core.errors import storage_error
from app.models.orm import ArticleORM, Base, CommentORM
from app.schemas.articles import ArticleRecord, CommentRecord

logger = logging.getLogger(__name__)


class SQLAlchemyArticleStore(AbstractArticleStore):
    """Article store backed by the ``articles`` and ``comments`` tables.

    Each operation runs in its own session and transaction; the comment write
    saga coordinates consistency across operations, not the database.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory = async_sessionmaker(
            bind=engine,
            autoflush=False,
            expire_on_commit=False,
            class_=AsyncSession,
        )

    @classmethod
    def from_url(cls, url: str, *, echo: bool = False, pool_pre_ping: bool = True) -> "SQLAlchemyArticleStore":
        """Build a store with its own async engine."""
        engine = create_async_engine(
            url,
            echo=echo,
            pool_pre_ping=pool_pre_ping,
            pool_recycle=3600,
        )
        return cls(engine)

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session, commit on success and map database errors."""
        try:
            async with self._session_factory() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise
        except (SQLAlchemyError, OSError) as exc:
            # Connection failures surface as OSError from the driver.
            logger.error(
                "storage.operation_failed",
                extra={"operation": operation, "error_type": type(exc).__name__},
                exc_info=True,
            )
            raise storage_error(operation) from exc

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
        stmt = insert(CommentORM).values(
            articleid=article_id,
            username=username,
            client=client,
            os=os,
            content=content,
            githubid=identity_id,
            fromip=source_address,
        )
        async with self._session("insert_comment") as session:
            await session.execute(stmt)

    async def adjust_comment_count(self, article_id: int, delta: int) -> int:
        stmt = (
            update(ArticleORM)
            .where(ArticleORM.id == article_id)
            .values(commentcount=func.greatest(ArticleORM.commentcount + delta, 0))
        )
        async with self._session("adjust_comment_count") as session:
            result = await session.execute(stmt)
            return result.rowcount

    async def list_articles(self) -> list[ArticleRecord]:
        stmt = select(ArticleORM).order_by(ArticleORM.time.desc(), ArticleORM.id.desc())
        async with self._session("list_articles") as session:
            rows = (await session.scalars(stmt)).all()
            return [ArticleRecord.model_validate(row) for row in rows]

    async def get_article(self, article_id: int) -> ArticleRecord | None:
        async with self._session("get_article") as session:
            row = await session.get(ArticleORM, article_id)
            return ArticleRecord.model_validate(row) if row is not None else None

    async def list_comments(self, article_id: int) -> list[CommentRecord]:
        stmt = (
            select(CommentORM)
            .where(CommentORM.articleid == article_id)
            .order_by(CommentORM.time.desc(), CommentORM.id.desc())
        )
        async with self._session("list_comments") as session:
            rows = (await session.scalars(stmt)).all()
            return [CommentRecord.model_validate(row) for row in rows]

    async def create_article(self, title: str, description: str, link: str, category: str) -> int:
        stmt = (
            insert(ArticleORM)
            .values(title=title, description=description, link=link, category=category)
            .returning(ArticleORM.id)
        )
        async with self._session("create_article") as session:
            result = await session.execute(stmt)
            return result.scalar_one()

    async def create_schema(self) -> None:
        """Create the tables if they do not exist (development convenience)."""
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as exc:
            raise storage_error("create_schema") from exc

    async def close(self) -> None:
        await self._engine.dispose()
