import pydantic
from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from article_api.config import settings
from article_api.database import get_session_factory
from article_api.exceptions import DATE_RANGE_MESSAGE, ValidationError
from article_api.providers import ArticleDraftProvider, build_provider
from article_api.repositories import ArticleRepository
from article_api.schemas import ArticleListQuery
from article_api.services import ArticleService


def _field_errors(exc: pydantic.ValidationError, location: str) -> list[dict]:
    return [
        {
            "location": location,
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]


def parse_list_query(
    page: str | None = Query(None, description="Page number (1-based); values below 1 become 1."),
    page_size: str | None = Query(
        None,
        alias="pageSize",
        description=f"Items per page, clamped to {settings.MAX_PAGE_SIZE}.",
    ),
    sort_direction: str | None = Query(
        None,
        alias="sortDirection",
        description="'asc' or 'desc' (case-insensitive), by creation time.",
    ),
    created_from: str | None = Query(None, alias="from", description="Inclusive lower bound on createdAt."),
    created_to: str | None = Query(None, alias="to", description="Inclusive upper bound on createdAt."),
) -> ArticleListQuery:
    """
    Reusable FastAPI dependency that turns raw listing query parameters into
    a strictly typed ``ArticleListQuery``.

    Raw values are accepted as strings and validated here rather than by
    FastAPI so that clamping/defaulting and the cross-field date check live
    in one place.  Any violation raises ``ValidationError`` (HTTP 400) with
    one entry per offending field.
    """
    raw = {
        "page": page,
        "pageSize": page_size,
        "sortDirection": sort_direction,
        "from": created_from,
        "to": created_to,
    }
    try:
        query = ArticleListQuery.model_validate({k: v for k, v in raw.items() if v is not None})
    except pydantic.ValidationError as exc:
        raise ValidationError("Validation Error", _field_errors(exc, "query")) from exc

    if (
        query.created_from is not None
        and query.created_to is not None
        and query.created_from > query.created_to
    ):
        raise ValidationError(
            DATE_RANGE_MESSAGE,
            [{"location": "query", "field": "from", "message": DATE_RANGE_MESSAGE, "type": "date_range"}],
        )
    return query


def parse_date_range_query(query: ArticleListQuery = Depends(parse_list_query)) -> ArticleListQuery:
    """``parse_list_query`` plus the requirement that both bounds are present."""
    missing = [
        {"location": "query", "field": name, "message": "Field required", "type": "missing"}
        for name, value in (("from", query.created_from), ("to", query.created_to))
        if value is None
    ]
    if missing:
        raise ValidationError("Both from and to query parameters are required", missing)
    return query


def get_article_repository(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> ArticleRepository:
    return ArticleRepository(session_factory)


def get_article_provider() -> ArticleDraftProvider:
    return build_provider(settings)


def get_article_service(
    repository: ArticleRepository = Depends(get_article_repository),
    provider: ArticleDraftProvider = Depends(get_article_provider),
) -> ArticleService:
    return ArticleService(repository, provider)
