"""
Cache module for StockLens.

Provides Redis caching for provider responses.
"""

from stocklens.services.cache.redis_client import (
    ResponseCache,
    get_response_cache,
    init_redis,
    close_redis,
)

__all__ = [
    "ResponseCache",
    "get_response_cache",
    "init_redis",
    "close_redis",
]
