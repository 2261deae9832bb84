"""
SQLAlchemy ORM models for the 'articles' and 'comments' tables.
"""

from datetime import datetime

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, String, Text, TIMESTAMP
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    pass


class ArticleORM(Base):
    """
    An article that can be commented on.

    Attributes:
        id (int): Primary key, auto-incrementing.
        commentcount (int): Number of comments; adjusted only by the comment writer.
        title (str): Article title.
        description (str): Short description.
        link (str): Link to the article markdown file.
        category (str): Article category.
        time (datetime): Creation time (defaults to NOW()).
    """
    __tablename__ = "articles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    commentcount: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    link: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    time: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("idx_articles_time", "time"),
    )

    def __repr__(self) -> str:
        return f"<ArticleORM(id={self.id}, title='{self.title}', commentcount={self.commentcount})>"


class CommentORM(Base):
    """
    A comment left on an article by a GitHub user.

    Attributes:
        id (int): Primary key, auto-incrementing.
        articleid (int): Owning article.
        username (str): GitHub login of the author.
        client (str): Client descriptor.
        os (str): OS descriptor.
        content (str): Sanitized comment text.
        githubid (str): GitHub account id of the author.
        fromip (str): Source address (IPv4, IPv6 or mixed). Never returned by the API.
        time (datetime): Creation time (defaults to NOW()).
    """
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    articleid: Mapped[int] = mapped_column(Integer, ForeignKey("articles.id"), nullable=False)
    username: Mapped[str] = mapped_column(Text, nullable=False)
    client: Mapped[str] = mapped_column(Text, nullable=False)
    os: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    githubid: Mapped[str] = mapped_column(String(64), nullable=False)
    fromip: Mapped[str] = mapped_column(String(64), nullable=False)
    time: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("idx_comments_article_time", "articleid", "time"),
    )

    def __repr__(self) -> str:
        return f"<CommentORM(id={self.id}, articleid={self.articleid}, username='{self.username}')>"
