import json
import logging
from datetime import datetime

import redis.asyncio as redis

from article_api.config import settings

logger = logging.getLogger(__name__)


def list_key(
    page: int,
    page_size: int,
    sort_direction: str,
    created_from: datetime | None = None,
    created_to: datetime | None = None,
) -> str:
    """Cache key for one listing page; encodes every dimension of the result."""
    lower = created_from.isoformat() if created_from else "-"
    upper = created_to.isoformat() if created_to else "-"
    return f"articles:list:{page}:{page_size}:{sort_direction}:{lower}:{upper}"


def detail_key(article_id: int) -> str:
    return f"articles:detail:{article_id}"


# Bumped by every invalidation; matches neither the list nor the detail pattern.
GENERATION_KEY = "articles:generation"


class CacheManager:
    """
    Cache-aside manager backed by Redis.

    Every public method is a no-op when Redis is unavailable: reads return
    None and writes are skipped, so the service falls back to the store.
    Redis errors are logged at DEBUG and never reach callers.

    Reads that fill the cache pass the generation they observed before
    querying the store.  ``set`` drops the value when an invalidation ran in
    the meantime, so a row fetched before a write is never cached after it.
    """

    def __init__(self) -> None:
        self._redis: redis.Redis | None = None
        self._hits: int = 0
        self._misses: int = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the connection pool.  Called once at application startup."""
        self._redis = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            await self._redis.ping()
            logger.info("Redis connected: %s", settings.REDIS_URL)
        except Exception as exc:  # pragma: no cover
            logger.warning("Redis ping failed, cache disabled: %s", exc)
            await self._redis.aclose()
            self._redis = None

    async def disconnect(self) -> None:
        """Close the connection pool.  Called once at application shutdown."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    # ------------------------------------------------------------------
    # Core cache operations
    # ------------------------------------------------------------------

    async def get(self, key: str) -> dict | list | None:
        """Return the cached value for *key*, or None on a miss / error."""
        if not self._redis:
            self._misses += 1
            return None
        try:
            data = await self._redis.get(key)
            if data is not None:
                self._hits += 1
                return json.loads(data)
            self._misses += 1
            return None
        except Exception as exc:
            logger.debug("Cache GET error for key=%r: %s", key, exc)
            self._misses += 1
            return None

    async def generation(self) -> int | None:
        """Current invalidation generation, or None when Redis is unavailable."""
        if not self._redis:
            return None
        try:
            return int(await self._redis.get(GENERATION_KEY) or 0)
        except Exception as exc:
            logger.debug("Cache GENERATION error: %s", exc)
            return None

    async def set(
        self,
        key: str,
        value: dict | list,
        ttl: int | None = None,
        generation: int | None = None,
    ) -> None:
        """
        Persist *value* under *key* with an optional TTL (seconds).

        With *generation*, the write is skipped if an invalidation happened
        since that generation was read, and undone if one lands between the
        check and the write.
        """
        if not self._redis:
            return
        try:
            if generation is not None and await self.generation() != generation:
                return
            await self._redis.set(key, json.dumps(value, default=str), ex=ttl)
            if generation is not None and await self.generation() != generation:
                await self._redis.delete(key)
        except Exception as exc:
            logger.debug("Cache SET error for key=%r: %s", key, exc)

    async def delete_pattern(self, pattern: str) -> None:
        """Delete all keys matching *pattern* using SCAN (avoids blocking KEYS)."""
        if not self._redis:
            return
        try:
            keys: list[str] = []
            async for key in self._redis.scan_iter(match=pattern):
                keys.append(key)
            if keys:
                await self._redis.delete(*keys)
                logger.debug("Cache invalidated %d key(s) matching %r", len(keys), pattern)
        except Exception as exc:
            logger.debug("Cache DELETE_PATTERN error for pattern=%r: %s", pattern, exc)

    # ------------------------------------------------------------------
    # Domain-level invalidation
    # ------------------------------------------------------------------

    async def invalidate_articles(self, article_id: int | None = None) -> None:
        """
        Purge every cached listing page and, when *article_id* is given,
        that article's detail entry.  Called after every write.
        """
        if self._redis:
            try:
                await self._redis.incr(GENERATION_KEY)
            except Exception as exc:
                logger.debug("Cache INCR error: %s", exc)
        await self.delete_pattern("articles:list:*")
        if article_id is not None:
            await self.delete_pattern(detail_key(article_id))

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    @property
    def stats(self) -> dict:
        """Snapshot of hit/miss counters for the metrics endpoint."""
        total = self._hits + self._misses
        return {
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
            "connected": self._redis is not None,
        }


# Module-level singleton shared across all request handlers.
cache = CacheManager()
