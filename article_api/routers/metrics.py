from fastapi import APIRouter, Depends

from article_api.cache import cache
from article_api.dependencies import get_article_repository
from article_api.repositories import ArticleRepository
from article_api.schemas import MetricsResponse

router = APIRouter(prefix="/metrics", tags=["metrics"])


@router.get("", response_model=MetricsResponse)
async def get_metrics(repository: ArticleRepository = Depends(get_article_repository)):
    return MetricsResponse(
        total_articles=await repository.count(),
        cache_info=cache.stats,
    )
