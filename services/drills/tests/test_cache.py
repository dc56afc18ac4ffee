"""Tests for the TTL caches backing the drill list."""

import json

import pytest

from packages.common.cache import MemoryTTLCache, RedisTTLCache, build_cache
from packages.common.config import Settings


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class FakeRedis:
    """Just enough of redis.asyncio.Redis for RedisTTLCache."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key):
        return self.data.get(key)

    async def setex(self, key, ttl, value):
        self.data[key] = value
        self.ttls[key] = ttl

    async def delete(self, *keys):
        for k in keys:
            self.data.pop(k, None)

    async def scan_iter(self, match):
        prefix = match.rstrip("*")
        for k in list(self.data):
            if k.startswith(prefix):
                yield k


@pytest.mark.asyncio
async def test_memory_entry_expires_after_ttl() -> None:
    clock = FakeClock()
    cache = MemoryTTLCache(ttl_sec=60, clock=clock)
    await cache.set("drills:list", {"drills": []})
    clock.now += 59
    assert await cache.get("drills:list") == {"drills": []}
    clock.now += 1
    assert await cache.get("drills:list") is None
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_memory_set_sweeps_expired_entries() -> None:
    clock = FakeClock()
    cache = MemoryTTLCache(ttl_sec=10, clock=clock)
    await cache.set("a", 1)
    await cache.set("b", 2)
    clock.now += 11
    await cache.set("c", 3)
    assert len(cache) == 1


@pytest.mark.asyncio
async def test_memory_evicts_oldest_when_full() -> None:
    cache = MemoryTTLCache(ttl_sec=60, max_entries=2, clock=FakeClock())
    await cache.set("a", 1)
    await cache.set("b", 2)
    await cache.set("c", 3)
    assert await cache.get("a") is None
    assert (await cache.get("b"), await cache.get("c")) == (2, 3)


@pytest.mark.asyncio
async def test_memory_invalidate_and_clear() -> None:
    cache = MemoryTTLCache(ttl_sec=60, clock=FakeClock())
    await cache.set("a", 1)
    await cache.set("b", 2)
    await cache.invalidate("a")
    assert await cache.get("a") is None
    await cache.clear()
    assert await cache.get("b") is None


@pytest.mark.asyncio
async def test_memory_zero_ttl_disables_caching() -> None:
    cache = MemoryTTLCache(ttl_sec=0)
    await cache.set("a", 1)
    assert await cache.get("a") is None


@pytest.mark.asyncio
async def test_redis_roundtrip_uses_prefix_and_ttl() -> None:
    r = FakeRedis()
    cache = RedisTTLCache(r, prefix="drills", ttl_sec=60, jitter_sec=0)
    await cache.set("drills:list?difficulty=&tag=", {"drills": [{"id": "x"}]})
    assert r.ttls == {"drills:drills:list?difficulty=&tag=": 60}
    assert await cache.get("drills:list?difficulty=&tag=") == {"drills": [{"id": "x"}]}


@pytest.mark.asyncio
async def test_redis_corrupt_payload_is_a_miss() -> None:
    r = FakeRedis()
    cache = RedisTTLCache(r, prefix="p")
    r.data["p:k"] = "{not json"
    assert await cache.get("k") is None
    assert "p:k" not in r.data


@pytest.mark.asyncio
async def test_redis_clear_only_touches_prefix() -> None:
    r = FakeRedis()
    r.data["other:k"] = json.dumps(1)
    cache = RedisTTLCache(r, prefix="p")
    await cache.set("a", 1)
    await cache.set("b", 2)
    await cache.clear()
    assert list(r.data) == ["other:k"]


def test_build_cache_defaults_to_memory() -> None:
    s = Settings(ENV="test", DATABASE_DSN="sqlite+aiosqlite://", JWT_VERIFY_KEY="k", DRILLS_CACHE_TTL=5)
    cache = build_cache(s)
    assert isinstance(cache, MemoryTTLCache)
    assert cache.ttl_sec == 5


def test_build_cache_uses_async_redis_client() -> None:
    s = Settings(ENV="test", DATABASE_DSN="sqlite+aiosqlite://", JWT_VERIFY_KEY="k", CACHE_URL="redis://localhost:6379/0")
    cache = build_cache(s)
    assert isinstance(cache, RedisTTLCache)
    assert cache._prefix == "interview-drills"
