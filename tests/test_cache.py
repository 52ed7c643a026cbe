"""
Response cache tests (in-memory fallback, no Redis).
"""

from types import SimpleNamespace

from stocklens.services.cache import redis_client
from stocklens.services.cache import ResponseCache


async def test_roundtrip_json():
    cache = ResponseCache(enabled=True)

    assert await cache.set_json("quote:AAPL", {"symbol": "AAPL", "price": 190.5}, ttl=60) is True
    assert await cache.get_json("quote:AAPL") == {"symbol": "AAPL", "price": 190.5}
    assert await cache.get_json("quote:MSFT") is None


async def test_entries_expire(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(redis_client, "time", SimpleNamespace(monotonic=lambda: now[0]))
    cache = ResponseCache(enabled=True)

    await cache.set_json("detail:AAPL", {"ok": True}, ttl=300)
    now[0] += 299
    assert await cache.get_json("detail:AAPL") == {"ok": True}

    now[0] += 2
    assert await cache.get_json("detail:AAPL") is None


async def test_disabled_cache_stores_nothing():
    cache = ResponseCache(enabled=False)

    assert await cache.set_json("search:apple", [1, 2], ttl=60) is False
    assert await cache.get_json("search:apple") is None


async def test_init_redis_skipped_when_disabled():
    # CACHE_ENABLED=false in the test environment
    assert await redis_client.init_redis() is None


async def test_memory_fallback_is_bounded():
    cache = ResponseCache(enabled=True, max_memory_entries=3)

    for i in range(10):
        await cache.set_json(f"search:query-{i}", [i], ttl=3600)

    assert len(cache._memory_cache) == 3
    # Oldest writes were evicted first
    assert await cache.get_json("search:query-0") is None
    assert await cache.get_json("search:query-9") == [9]


async def test_expired_entries_are_swept_before_evicting(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(redis_client, "time", SimpleNamespace(monotonic=lambda: now[0]))
    cache = ResponseCache(enabled=True, max_memory_entries=3)

    await cache.set_json("quote:AAPL", {"p": 1}, ttl=3600)
    await cache.set_json("search:a", [1], ttl=60)
    await cache.set_json("search:b", [2], ttl=60)
    now[0] += 61

    await cache.set_json("search:c", [3], ttl=60)

    assert set(cache._memory_cache) == {"quote:AAPL", "search:c"}
    assert await cache.get_json("quote:AAPL") == {"p": 1}


async def test_rewriting_a_key_does_not_evict_others():
    cache = ResponseCache(enabled=True, max_memory_entries=2)

    await cache.set_json("quote:AAPL", 1, ttl=60)
    await cache.set_json("quote:MSFT", 2, ttl=60)
    await cache.set_json("quote:AAPL", 3, ttl=60)

    assert await cache.get_json("quote:AAPL") == 3
    assert await cache.get_json("quote:MSFT") == 2
