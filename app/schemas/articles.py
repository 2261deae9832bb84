"""Pydantic schemas for articles, comments and the response envelope."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field


class ArticleRecord(BaseModel):
    """An article as listed by /getcontents."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Article id.")
    commentcount: int = Field(0, ge=0, description="Number of persisted comments.")
    title: str = Field(..., description="Article title.")
    description: str = Field(..., description="Short description shown in listings.")
    link: str = Field(..., description="Link to the article markdown file.")
    category: str = Field(..., description="Article category.")
    time: datetime = Field(..., description="Creation time.")


class CommentRecord(BaseModel):
    """A comment as returned by /getarticleinfo (the source address is never exposed)."""

    model_config = ConfigDict(from_attributes=True)

    username: str = Field(..., description="GitHub login of the author.")
    client: str = Field(..., description="Client descriptor recorded at submission.")
    os: str = Field(..., description="OS descriptor recorded at submission.")
    content: str = Field(..., description="Sanitized comment text.")
    githubid: str = Field(..., description="GitHub account id of the author.")
    time: datetime = Field(..., description="Creation time.")


class ArticleDetail(ArticleRecord):
    """An article together with its comments, newest first."""

    comments: List[CommentRecord] = Field(default_factory=list)


class ArticleCreated(BaseModel):
    """Result of /addarticle."""

    id: int


class Envelope(BaseModel):
    """Every response body: the HTTP status repeated plus a message payload."""

    status: int
    message: Any
