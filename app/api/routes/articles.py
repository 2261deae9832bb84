from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.api.routes.comments import client_address
from app.core.body_limit import read_body_limited
from app.core.dependencies import get_article_service
from app.core.exception_handlers import envelope
from app.schemas.articles import ArticleCreated
from app.services.article_service import ArticleService
from app.services.validation import FormValue, decode_form, validate_article_lookup

router = APIRouter(tags=["Articles"])


def _query_fields(request: Request) -> dict[str, FormValue]:
    fields: dict[str, list[str]] = {}
    for key, value in request.query_params.multi_items():
        fields.setdefault(key, []).append(value)
    return {key: values[0] if len(values) == 1 else values for key, values in fields.items()}


@router.get("/getcontents")
async def get_contents(
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> JSONResponse:
    """List every article, newest first."""

    articles = await service.list_articles()
    return envelope(200, [article.model_dump(mode="json") for article in articles])


@router.get("/getarticleinfo")
async def get_article_info(
    request: Request,
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> JSONResponse:
    """Return one article and its comments.

    Query parameters:
        articleId: Numeric article id (``articleid`` is accepted too).

    Returns:
        JSONResponse: 200 envelope with the article fields and a ``comments``
        list, newest first. Unknown ids yield 400 "Article not found.".
    """
    article_id = validate_article_lookup(_query_fields(request))
    detail = await service.get_article_detail(article_id)
    return envelope(200, detail.model_dump(mode="json"))


@router.post("/addarticle")
async def add_article(
    request: Request,
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> JSONResponse:
    """Create an article; requires the shared article password.

    Form fields: ``password``, ``title``, ``description``, ``link`` and
    ``category``. Repeated wrong passwords from one address are throttled.
    """
    body = await read_body_limited(request)
    data = decode_form(body)
    article_id = await service.create_article(data, source_address=client_address(request))
    return envelope(200, ArticleCreated(id=article_id).model_dump())
