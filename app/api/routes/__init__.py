from __future__ import annotations

from app.api.routes.articles import router as articles_router
from app.api.routes.comments import router as comments_router
from app.api.routes.root import router as root_router

__all__ = ["articles_router", "comments_router", "root_router"]
