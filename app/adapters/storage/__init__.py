"""Storage adapter layer - abstracts over article/comment backends."""

from app.adapters.storage.base import AbstractArticleStore
from app.adapters.storage.factory import create_article_store
from app.adapters.storage.in_memory import InMemoryArticleStore
from app.adapters.storage.sqlalchemy_store import SQLAlchemyArticleStore

__all__ = [
    "AbstractArticleStore",
    "InMemoryArticleStore",
    "SQLAlchemyArticleStore",
    "create_article_store",
]
