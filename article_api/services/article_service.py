"""
Article service — business logic for the Article aggregate.

Design notes
------------
- The service owns the rules (existence, date-range ordering, non-empty
  patches) and turns store outcomes such as ``None`` / ``False`` into domain
  exceptions.  It never builds SQL.
- Listing and detail reads go through the cache-aside pattern (Redis →
  fallback to the store).  Cache keys encode every dimension that affects
  the result; every write purges the listing keys and, where an id is
  known, the detail key.  A read caches its result only if no write
  invalidated the cache while it was querying the store.
- Drafts from the provider are persisted through ``create_article`` so
  generated and hand-written articles follow the same path.
"""
import logging
from datetime import datetime

from article_api.cache import cache, detail_key, list_key
from article_api.config import settings
from article_api.exceptions import (
    ArticleNotFoundError,
    DependencyMissingError,
    InvalidDateRangeError,
    ProviderError,
    ValidationError,
)
from article_api.providers.base import ArticleDraftProvider
from article_api.repositories.article_repository import ArticleRepository
from article_api.schemas import (
    ArticleCreate,
    ArticleResponse,
    ArticleUpdate,
    GenerateArticleRequest,
    PaginatedArticles,
    PaginationMeta,
    SortDirection,
)

logger = logging.getLogger(__name__)


def _ensure_valid_date_range(created_from: datetime, created_to: datetime) -> None:
    if created_from > created_to:
        raise InvalidDateRangeError(created_from, created_to)


class ArticleService:
    """Orchestrates the article store, the draft provider and the read cache."""

    def __init__(self, repository: ArticleRepository, provider: ArticleDraftProvider):
        if repository is None:
            raise DependencyMissingError("repository")
        if provider is None:
            raise DependencyMissingError("provider")
        self._repository = repository
        self._provider = provider

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def _list_page(
        self,
        page: int,
        page_size: int,
        sort_direction: SortDirection,
        created_from: datetime | None,
        created_to: datetime | None,
    ) -> PaginatedArticles:
        cache_key = list_key(page, page_size, sort_direction, created_from, created_to)
        cached = await cache.get(cache_key)
        if cached:
            return PaginatedArticles.model_validate(cached)

        generation = await cache.generation()
        offset = (page - 1) * page_size
        items, total = await self._repository.list_page(
            limit=page_size,
            offset=offset,
            sort_direction=sort_direction,
            created_from=created_from,
            created_to=created_to,
        )
        result = PaginatedArticles(
            data=items,
            pagination=PaginationMeta.build(page, page_size, total),
        )
        await cache.set(
            cache_key,
            result.model_dump(mode="json"),
            ttl=settings.CACHE_TTL_LIST,
            generation=generation,
        )
        return result

    async def list_articles(
        self,
        page: int = 1,
        page_size: int = 10,
        sort_direction: SortDirection = "desc",
        *,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
    ) -> PaginatedArticles:
        """
        Return one page of articles ordered by creation time.

        Optional bounds narrow the listing to ``created_at`` within them,
        inclusive.  An empty table yields zero items and zero total pages.
        """
        if created_from is not None and created_to is not None:
            _ensure_valid_date_range(created_from, created_to)
        return await self._list_page(page, page_size, sort_direction, created_from, created_to)

    async def list_articles_by_date_range(
        self,
        created_from: datetime,
        created_to: datetime,
        page: int = 1,
        page_size: int = 10,
        sort_direction: SortDirection = "desc",
    ) -> PaginatedArticles:
        """
        Like ``list_articles`` but restricted to ``[created_from, created_to]``.

        Raises InvalidDateRangeError before touching the store when the
        range is inverted.
        """
        _ensure_valid_date_range(created_from, created_to)
        return await self._list_page(page, page_size, sort_direction, created_from, created_to)

    async def get_article(self, article_id: int) -> ArticleResponse:
        cached = await cache.get(detail_key(article_id))
        if cached:
            return ArticleResponse.model_validate(cached)

        generation = await cache.generation()
        article = await self._repository.get_by_id(article_id)
        if article is None:
            raise ArticleNotFoundError(article_id)

        await cache.set(
            detail_key(article_id),
            article.model_dump(mode="json"),
            ttl=settings.CACHE_TTL_DETAIL,
            generation=generation,
        )
        return article

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_article(self, data: ArticleCreate) -> ArticleResponse:
        article = await self._repository.create(data)
        await cache.invalidate_articles()
        logger.info("Created article id=%d", article.id)
        return article

    async def update_article(self, article_id: int, changes: ArticleUpdate) -> ArticleResponse:
        """
        Apply only the supplied fields of *changes*.

        Raises ValidationError for an empty patch (the store is not called)
        and ArticleNotFoundError when no row has *article_id*.
        """
        if not changes.model_fields_set:
            raise ValidationError("At least one field must be provided to update an article")

        article = await self._repository.update(article_id, changes)
        if article is None:
            raise ArticleNotFoundError(article_id)

        await cache.invalidate_articles(article_id)
        logger.info(
            "Updated article id=%d fields=%s", article_id, sorted(changes.model_fields_set)
        )
        return article

    async def delete_article(self, article_id: int) -> None:
        deleted = await self._repository.delete(article_id)
        if not deleted:
            raise ArticleNotFoundError(article_id)

        await cache.invalidate_articles(article_id)
        logger.info("Deleted article id=%d", article_id)

    async def generate_article(self, params: GenerateArticleRequest) -> ArticleResponse:
        """
        Ask the provider for a draft and persist it like any other article.

        Provider failures propagate unchanged; an empty draft is rejected
        instead of being stored.
        """
        draft = await self._provider.generate_article(params)
        if not draft.title or not draft.content:
            raise ProviderError(self._provider.provider_name, "returned an empty draft")

        logger.info(
            "Generated draft via %s (model=%s)", self._provider.provider_name, params.model
        )
        return await self.create_article(
            ArticleCreate(title=draft.title, content=draft.content, photo_url=draft.photo_url)
        )
