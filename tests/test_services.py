"""
Direct service-layer tests — exercises business logic without HTTP overhead.

Most tests run the service against the real store on the test database.
``RecordingRepository`` stands in for the store where a test must prove a
rule is enforced before any statement is issued.
"""
from datetime import datetime, timezone

import pytest

from article_api.exceptions import (
    ArticleNotFoundError,
    DependencyMissingError,
    InvalidDateRangeError,
    ProviderError,
    ValidationError,
)
from article_api.providers import GeneratedArticle, TemplateArticleProvider
from article_api.providers.base import ArticleDraftProvider
from article_api.repositories import ArticleRepository
from article_api.schemas import ArticleCreate, ArticleUpdate, GenerateArticleRequest
from article_api.services import ArticleService


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class RecordingRepository:
    """Records every call; any call at all fails the tests that use it."""

    def __init__(self):
        self.calls: list[str] = []

    def __getattr__(self, name):
        async def _record(*args, **kwargs):
            self.calls.append(name)
            return None
        return _record


class StaticProvider(ArticleDraftProvider):

    def __init__(self, draft: GeneratedArticle):
        self.draft = draft

    @property
    def provider_name(self) -> str:
        return "static"

    async def generate_article(self, params):
        return self.draft


def _generate_request(**overrides) -> GenerateArticleRequest:
    body = {"model": "m", "messages": [{"role": "user", "content": "observability"}]}
    body.update(overrides)
    return GenerateArticleRequest.model_validate(body)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def test_service_requires_repository():
    with pytest.raises(DependencyMissingError) as exc_info:
        ArticleService(None, TemplateArticleProvider())
    assert exc_info.value.message == "Missing ArticleService dependency: repository"
    assert exc_info.value.status_code == 500


def test_service_requires_provider(repository: ArticleRepository):
    with pytest.raises(DependencyMissingError) as exc_info:
        ArticleService(repository, None)
    assert exc_info.value.dependency_name == "provider"


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_articles_empty(service: ArticleService):
    result = await service.list_articles()
    assert result.data == []
    assert result.pagination.total_items == 0
    assert result.pagination.total_pages == 0
    assert result.pagination.has_next_page is False
    assert result.pagination.has_previous_page is False


@pytest.mark.asyncio
async def test_list_articles_sort_order(service: ArticleService, insert_article):
    await insert_article("older", utc(2024, 1, 1))
    await insert_article("newer", utc(2024, 6, 1))

    desc = await service.list_articles(sort_direction="desc")
    assert [a.title for a in desc.data] == ["newer", "older"]

    asc = await service.list_articles(sort_direction="asc")
    assert [a.title for a in asc.data] == ["older", "newer"]


@pytest.mark.asyncio
async def test_list_articles_by_date_range(service: ArticleService, insert_article):
    await insert_article("before", utc(2024, 1, 1))
    await insert_article("inside", utc(2024, 2, 10))
    await insert_article("after", utc(2024, 3, 1))

    result = await service.list_articles_by_date_range(utc(2024, 2, 1), utc(2024, 2, 29))
    assert [a.title for a in result.data] == ["inside"]
    assert result.pagination.total_items == 1


@pytest.mark.asyncio
async def test_inverted_range_never_reaches_store():
    repo = RecordingRepository()
    service = ArticleService(repo, TemplateArticleProvider())

    with pytest.raises(InvalidDateRangeError):
        await service.list_articles_by_date_range(utc(2024, 2, 1), utc(2024, 1, 1))
    with pytest.raises(InvalidDateRangeError):
        await service.list_articles(created_from=utc(2024, 2, 1), created_to=utc(2024, 1, 1))

    assert repo.calls == []


@pytest.mark.asyncio
async def test_get_article_not_found(service: ArticleService):
    with pytest.raises(ArticleNotFoundError) as exc_info:
        await service.get_article(42)
    assert exc_info.value.message == "Article 42 was not found"
    assert exc_info.value.status_code == 404


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_and_get_via_service(service: ArticleService):
    created = await service.create_article(ArticleCreate(title="Svc", content="Body"))
    assert created.id == 1
    assert created.created_at == created.updated_at
    assert created.created_at.tzinfo is not None

    fetched = await service.get_article(created.id)
    assert fetched == created


@pytest.mark.asyncio
async def test_update_article_via_service(service: ArticleService, insert_article):
    article_id = await insert_article(
        "Before", utc(2023, 1, 1), content="Body", photo_url="https://example.com/x.png"
    )
    created = await service.get_article(article_id)

    updated = await service.update_article(created.id, ArticleUpdate(content="New body"))
    assert updated.title == "Before"
    assert updated.content == "New body"
    assert updated.photo_url == "https://example.com/x.png"
    assert updated.created_at == created.created_at
    assert updated.updated_at > created.updated_at


@pytest.mark.asyncio
async def test_update_nonexistent_article_service(service: ArticleService):
    with pytest.raises(ArticleNotFoundError):
        await service.update_article(999, ArticleUpdate(title="x"))


@pytest.mark.asyncio
async def test_empty_patch_never_reaches_store():
    repo = RecordingRepository()
    service = ArticleService(repo, TemplateArticleProvider())

    # model_construct skips validation, as a caller bypassing the HTTP layer would.
    with pytest.raises(ValidationError) as exc_info:
        await service.update_article(1, ArticleUpdate.model_construct())
    assert exc_info.value.message == "At least one field must be provided to update an article"
    assert repo.calls == []


@pytest.mark.asyncio
async def test_delete_article_via_service(service: ArticleService):
    created = await service.create_article(ArticleCreate(title="Gone", content="Body"))
    await service.delete_article(created.id)

    with pytest.raises(ArticleNotFoundError):
        await service.get_article(created.id)
    # Deleting again keeps failing the same way.
    with pytest.raises(ArticleNotFoundError):
        await service.delete_article(created.id)
    with pytest.raises(ArticleNotFoundError):
        await service.delete_article(created.id)


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_generate_article_persists_draft(service: ArticleService):
    article = await service.generate_article(_generate_request(keywords=["tracing"]))
    assert article.id == 1
    assert article.title == "Observability (informative overview)"
    assert "tracing" in article.content

    listing = await service.list_articles()
    assert [a.id for a in listing.data] == [article.id]


@pytest.mark.asyncio
async def test_generate_article_keeps_provider_photo(repository: ArticleRepository):
    provider = StaticProvider(GeneratedArticle("T", "C", photo_url="https://example.com/g.png"))
    service = ArticleService(repository, provider)

    article = await service.generate_article(_generate_request())
    assert article.photo_url == "https://example.com/g.png"


@pytest.mark.asyncio
@pytest.mark.parametrize("draft", [GeneratedArticle("", "content"), GeneratedArticle("title", "")])
async def test_generate_rejects_empty_draft(repository: ArticleRepository, draft: GeneratedArticle):
    service = ArticleService(repository, StaticProvider(draft))

    with pytest.raises(ProviderError) as exc_info:
        await service.generate_article(_generate_request())
    assert exc_info.value.status_code == 502
    assert exc_info.value.message == "[static] returned an empty draft"
    assert await repository.count() == 0


@pytest.mark.asyncio
async def test_generate_without_topic_is_a_client_error(repository: ArticleRepository):
    service = ArticleService(repository, TemplateArticleProvider())
    request = _generate_request(messages=[{"role": "system", "content": "no user prompt"}])

    with pytest.raises(ValidationError):
        await service.generate_article(request)
    assert await repository.count() == 0
