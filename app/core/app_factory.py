from __future__ import annotations

"""Application factory for FastAPI app.

Centralizes app construction (metadata, lifespan, middleware, handlers,
routers) so tests can build isolated instances.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import articles_router, comments_router, root_router
from app.core.config import settings
from app.core.dependencies import shutdown_dependencies, startup_dependencies
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import BodyLimitMiddleware, request_id_middleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup_dependencies()
    try:
        yield
    finally:
        await shutdown_dependencies()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Thunderstorm Comments API",
        description=(
            "Blog backend: lists articles, returns an article with its comments, "
            "accepts comments from GitHub-authenticated users and creates "
            "articles behind a shared password. Every response is a JSON "
            "envelope {status, message}."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Middleware (the last one added is the outermost)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.app.cors_origin],
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", settings.log.request_id_header],
        expose_headers=[settings.log.request_id_header, "X-Request-Duration-ms"],
    )
    app.middleware("http")(request_id_middleware)
    app.add_middleware(BodyLimitMiddleware, max_bytes=settings.app.max_body_bytes)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(root_router)
    app.include_router(comments_router)
    app.include_router(articles_router)

    return app
