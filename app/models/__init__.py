"""
SQLAlchemy ORM models for the article/comment store.
"""

from .orm import ArticleORM, Base, CommentORM

__all__ = ["ArticleORM", "Base", "CommentORM"]
