"""
Test infrastructure for the Article API.

Strategy
--------
- SQLite via aiosqlite replaces PostgreSQL so the suite needs no running
  database.  The database is a temporary *file* rather than ``:memory:``:
  listings issue their page and count queries concurrently on two pooled
  connections, and an in-memory database is private to one connection.
- The ``get_session_factory`` dependency is overridden so every request
  uses the test engine, and the draft provider is replaced by the local
  template provider so no test reaches the network.
- All tables are created fresh before each test and dropped after; the
  engine is disposed so no pooled connection outlives its event loop.
- The Redis cache is disabled by setting ``cache._redis = None``; the
  CacheManager treats that as a permanent miss.
"""
import os
import tempfile
from datetime import datetime

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from article_api.cache import cache
from article_api.database import Base, get_session_factory
from article_api.dependencies import get_article_provider
from article_api.main import app
from article_api.middleware import install_query_counter
from article_api.models import articles_table
from article_api.providers import TemplateArticleProvider
from article_api.repositories import ArticleRepository
from article_api.services import ArticleService

# ---------------------------------------------------------------------------
# Test database engine: file-backed SQLite with aiosqlite
# ---------------------------------------------------------------------------

_TEST_DB_DIR = tempfile.mkdtemp(prefix="article-api-tests-")
TEST_DATABASE_URL = f"sqlite+aiosqlite:///{os.path.join(_TEST_DB_DIR, 'articles.db')}"

engine_test = create_async_engine(TEST_DATABASE_URL)

# Register the per-request SQL query counter on the test engine.
install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ---------------------------------------------------------------------------
# Dependency overrides
# ---------------------------------------------------------------------------

app.dependency_overrides[get_session_factory] = lambda: async_session_test
app.dependency_overrides[get_article_provider] = lambda: TemplateArticleProvider()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine_test.dispose()


@pytest.fixture(autouse=True)
def disable_cache():
    cache._redis = None
    yield


@pytest.fixture
def repository() -> ArticleRepository:
    return ArticleRepository(async_session_test)


@pytest.fixture
def service(repository: ArticleRepository) -> ArticleService:
    return ArticleService(repository, TemplateArticleProvider())


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    """Yield an httpx.AsyncClient wired to the FastAPI app via ASGITransport."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def insert_article():
    """
    Return a coroutine that inserts a row with an explicit ``created_at``,
    bypassing the store so tests can control timestamps.
    """
    async def _insert(title: str, created_at: datetime, content: str = "Body", photo_url=None) -> int:
        async with async_session_test() as session:
            async with session.begin():
                result = await session.execute(
                    insert(articles_table)
                    .values(
                        title=title,
                        content=content,
                        photo_url=photo_url,
                        created_at=created_at,
                        updated_at=created_at,
                    )
                    .returning(articles_table.c.id)
                )
                return result.scalar_one()

    return _insert
