from fastapi import APIRouter, Depends, Path, Response, status

from article_api.dependencies import get_article_service, parse_date_range_query, parse_list_query
from article_api.schemas import (
    MAX_ARTICLE_ID,
    ArticleCreate,
    ArticleListQuery,
    ArticleResponse,
    ArticleUpdate,
    GenerateArticleRequest,
    PaginatedArticles,
)
from article_api.services import ArticleService

router = APIRouter(prefix="/articles", tags=["articles"])


@router.get("", response_model=PaginatedArticles)
async def list_articles(
    query: ArticleListQuery = Depends(parse_list_query),
    service: ArticleService = Depends(get_article_service),
):
    return await service.list_articles(
        query.page,
        query.page_size,
        query.sort_direction,
        created_from=query.created_from,
        created_to=query.created_to,
    )


# Declared before "/{article_id}" so "search" is not parsed as an id.
@router.get("/search", response_model=PaginatedArticles)
async def search_articles_by_date(
    query: ArticleListQuery = Depends(parse_date_range_query),
    service: ArticleService = Depends(get_article_service),
):
    return await service.list_articles_by_date_range(
        query.created_from,
        query.created_to,
        query.page,
        query.page_size,
        query.sort_direction,
    )


@router.get("/{article_id}", response_model=ArticleResponse)
async def get_article(
    article_id: int = Path(..., gt=0, le=MAX_ARTICLE_ID, description="Positive article id."),
    service: ArticleService = Depends(get_article_service),
):
    return await service.get_article(article_id)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ArticleResponse)
async def create_article(data: ArticleCreate, service: ArticleService = Depends(get_article_service)):
    return await service.create_article(data)


@router.post("/generate", status_code=status.HTTP_201_CREATED, response_model=ArticleResponse)
async def generate_article(
    params: GenerateArticleRequest,
    service: ArticleService = Depends(get_article_service),
):
    return await service.generate_article(params)


@router.patch("/{article_id}", response_model=ArticleResponse)
async def update_article(
    data: ArticleUpdate,
    article_id: int = Path(..., gt=0, le=MAX_ARTICLE_ID, description="Positive article id."),
    service: ArticleService = Depends(get_article_service),
):
    return await service.update_article(article_id, data)


@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_article(
    article_id: int = Path(..., gt=0, le=MAX_ARTICLE_ID, description="Positive article id."),
    service: ArticleService = Depends(get_article_service),
):
    await service.delete_article(article_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
