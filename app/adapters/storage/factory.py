"""Factory pattern for creating article store instances."""

from app.adapters.storage.base import AbstractArticleStore
from app.adapters.storage.in_memory import InMemoryArticleStore
from app.adapters.storage.sqlalchemy_store import SQLAlchemyArticleStore
from app.core.config import settings
from app.core.errors import ValidationAppError


def create_article_store() -> AbstractArticleStore:
    """Instantiate the article store selected by ``DB_BACKEND``.

    Returns:
        AbstractArticleStore: Configured store instance.

    Raises:
        ValidationAppError: If the backend is unknown or misconfigured.
    """
    backend = settings.db.backend.lower()

    if backend == "sqlalchemy":
        if not settings.db.url:
            raise ValidationAppError(
                code="db_missing_url",
                message="The sqlalchemy backend requires DATABASE_URL (or DB_URL)",
            )
        return SQLAlchemyArticleStore.from_url(
            settings.db.url,
            echo=settings.db.echo,
            pool_pre_ping=settings.db.pool_pre_ping,
        )

    if backend == "memory":
        return InMemoryArticleStore()

    raise ValidationAppError(
        code="db_unknown_backend",
        message=f"Unknown storage backend: '{backend}'. Supported backends: sqlalchemy, memory",
    )
