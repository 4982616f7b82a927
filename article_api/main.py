import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from article_api.cache import cache
from article_api.config import settings
from article_api.error_handlers import register_exception_handlers
from article_api.middleware import TimingMiddleware
from article_api.routers import articles, metrics

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    try:
        await cache.connect()
    except Exception as exc:
        logger.warning("Cache unavailable, continuing without it: %s", exc)
    logger.info("Article API started (env=%s, ai_provider=%s)", settings.APP_ENV, settings.AI_PROVIDER)
    yield
    # Shutdown
    await cache.disconnect()


app = FastAPI(
    title="Article API",
    description="CRUD, paginated listing and AI-drafted creation of articles",
    version=VERSION,
    lifespan=lifespan,
)

# Middleware
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Routers
app.include_router(articles.router)
app.include_router(metrics.router)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": VERSION}
