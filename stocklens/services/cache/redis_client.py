"""
Redis cache client for provider responses.

Finnhub's free tier is rate limited, so quotes, stock details and search
results are cached for a short TTL. Falls back to an in-process dict when
Redis is unavailable.
"""

import json
import logging
import time
from typing import Optional, Dict, Any, Tuple

import redis.asyncio as redis

from stocklens.core.config import settings

logger = logging.getLogger(__name__)

# Upper bound on in-memory fallback entries (search keys come from user input)
MEMORY_CACHE_MAX_ENTRIES = 1000

# Global Redis connection pool
_redis_pool: Optional[redis.Redis] = None


async def init_redis() -> Optional[redis.Redis]:
    """
    Initialize Redis connection pool.
    Called on application startup.
    """
    global _redis_pool

    if _redis_pool is not None:
        return _redis_pool

    if not settings.cache_enabled:
        logger.info("Response cache disabled")
        return None

    try:
        _redis_pool = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        # Test connection
        await _redis_pool.ping()
        logger.info(f"Redis connected: {settings.redis_url}")
        return _redis_pool
    except Exception as e:
        logger.warning(f"Redis connection failed: {e}. Using in-memory fallback.")
        _redis_pool = None
        return None


async def close_redis() -> None:
    """Close Redis connection pool."""
    global _redis_pool
    if _redis_pool:
        await _redis_pool.close()
        _redis_pool = None
        logger.info("Redis connection closed")


class ResponseCache:
    """
    JSON response cache with TTL.

    Keys:
    - quote:{symbol} → StockQuote JSON
    - detail:{symbol} → StockDetail JSON
    - search:{query} → list of StockSearchResult JSON
    """

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        enabled: Optional[bool] = None,
        max_memory_entries: int = MEMORY_CACHE_MAX_ENTRIES,
    ):
        self._redis = redis_client
        self._enabled = settings.cache_enabled if enabled is None else enabled
        # In-memory fallback: key → (expires_at, value)
        self._memory_cache: Dict[str, Tuple[float, str]] = {}
        self._max_memory_entries = max_memory_entries

    @property
    def redis(self) -> Optional[redis.Redis]:
        return self._redis or _redis_pool

    def _memory_get(self, key: str) -> Optional[str]:
        """Fallback to memory cache."""
        entry = self._memory_cache.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= time.monotonic():
            del self._memory_cache[key]
            return None
        return value

    def _memory_set(self, key: str, value: str, ex: int):
        """Fallback to memory cache. Expired entries are swept once it is full."""
        now = time.monotonic()
        if len(self._memory_cache) >= self._max_memory_entries:
            for stale in [k for k, (expires_at, _) in self._memory_cache.items() if expires_at <= now]:
                del self._memory_cache[stale]

        self._memory_cache.pop(key, None)
        # Still full: evict the oldest writes
        while len(self._memory_cache) >= self._max_memory_entries:
            del self._memory_cache[next(iter(self._memory_cache))]

        self._memory_cache[key] = (now + ex, value)

    async def get_json(self, key: str) -> Optional[Any]:
        """Get a cached JSON value, or None on miss."""
        if not self._enabled:
            return None

        if self.redis:
            try:
                value = await self.redis.get(key)
                return json.loads(value) if value else None
            except Exception as e:
                logger.debug(f"Redis get failed for {key}: {e}")

        value = self._memory_get(key)
        return json.loads(value) if value else None

    async def set_json(self, key: str, data: Any, ttl: int) -> bool:
        """Store a JSON-serializable value for `ttl` seconds."""
        if not self._enabled:
            return False

        value = json.dumps(data)

        if self.redis:
            try:
                await self.redis.set(key, value, ex=ttl)
                return True
            except Exception as e:
                logger.debug(f"Redis set failed for {key}: {e}")

        self._memory_set(key, value, ttl)
        return True


# Singleton instance
_response_cache: Optional[ResponseCache] = None


def get_response_cache() -> ResponseCache:
    """Get the response cache singleton."""
    global _response_cache
    if _response_cache is None:
        _response_cache = ResponseCache()
    return _response_cache
