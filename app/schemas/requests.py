"""Typed payloads produced by request validation."""

from __future__ import annotations

from pydantic import BaseModel, Field


class CommentSubmission(BaseModel):
    """A validated /addcomment form."""

    token: str = Field(..., min_length=1, description="GitHub login token.")
    article_id: int = Field(..., description="Target article id.")
    content: str = Field(..., min_length=1, description="Trimmed and sanitized comment text.")


class ArticleSubmission(BaseModel):
    """A validated /addarticle form (all text fields trimmed and non-empty)."""

    password: str
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    link: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)


class CommentDraft(BaseModel):
    """Everything the comment writer needs to persist one comment."""

    article_id: int
    username: str
    client: str
    os: str
    content: str
    identity_id: str
    source_address: str
