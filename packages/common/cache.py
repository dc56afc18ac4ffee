"""TTL caches for short-lived, JSON-serializable response payloads.

Two interchangeable backends implement the async `TTLCache` contract:

- `MemoryTTLCache`: an in-process map with per-entry expiry and bounded size.
- `RedisTTLCache`: JSON values stored with `SETEX` through `redis.asyncio` so
  several instances share one cache; a little jitter is added to each TTL to
  spread expirations.

Callers receive the cache by injection (`build_cache`) and key entries by a
request signature such as ``drills:list?difficulty=easy``.
"""

from __future__ import annotations

import json
import random
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional, Protocol

import redis.asyncio as aioredis

from .config import Settings

DEFAULT_TTL_SEC = 60
JITTER_SEC = 5


class TTLCache(Protocol):
    """Minimal cache contract used by route handlers."""

    async def get(self, key: str) -> Optional[Any]: ...

    async def set(self, key: str, value: Any) -> None: ...

    async def invalidate(self, key: str) -> None: ...

    async def clear(self) -> None: ...


class MemoryTTLCache:
    """Thread-safe in-process TTL map.

    Entries expire `ttl_sec` seconds after they were set. Expired entries are
    dropped when read and swept on every write; once `max_entries` is reached
    the oldest entry is evicted first. Nothing here awaits, so the lock is
    never held across a suspension point.
    """

    def __init__(
        self,
        ttl_sec: float = DEFAULT_TTL_SEC,
        max_entries: int = 256,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_sec = ttl_sec
        self.max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: "OrderedDict[str, tuple[float, Any]]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> Optional[Any]:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if now >= expires_at:
                del self._entries[key]
                return None
            return value

    async def set(self, key: str, value: Any) -> None:
        if self.ttl_sec <= 0:
            return
        now = self._clock()
        with self._lock:
            self._sweep(now)
            self._entries.pop(key, None)
            while len(self._entries) >= self.max_entries:
                self._entries.popitem(last=False)
            self._entries[key] = (now + self.ttl_sec, value)

    async def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    async def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _sweep(self, now: float) -> None:
        expired = [k for k, (exp, _) in self._entries.items() if now >= exp]
        for k in expired:
            del self._entries[k]


class RedisTTLCache:
    """
    Redis-backed TTL cache.
    Keys: {prefix}:{key}
    Stored as JSON with a TTL + jitter to spread invalidations.
    """

    def __init__(
        self,
        client: "aioredis.Redis",
        prefix: str = "cache",
        ttl_sec: int = DEFAULT_TTL_SEC,
        jitter_sec: int = JITTER_SEC,
    ) -> None:
        """Initialize the cache.

        Args:
            client: `redis.asyncio` client created with decode_responses=True.
            prefix: Key namespace/prefix, e.g., "interview-drills".
            ttl_sec: Base TTL in seconds (jitter is added automatically).
            jitter_sec: Upper bound of the random extra TTL.
        """
        self._r = client
        self._prefix = prefix
        self.ttl_sec = ttl_sec
        self.jitter_sec = jitter_sec

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> "RedisTTLCache":
        return cls(aioredis.from_url(url, decode_responses=True), **kwargs)

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        """Return the JSON-decoded value, or None on miss or undecodable payload."""
        val = await self._r.get(self._key(key))
        if val is None:
            return None
        try:
            return json.loads(val)
        except ValueError:
            await self._r.delete(self._key(key))
            return None

    async def set(self, key: str, value: Dict[str, Any] | Any) -> None:
        if self.ttl_sec <= 0:
            return
        payload = json.dumps(value, separators=(",", ":"), default=str)
        expiry = self.ttl_sec + random.randint(0, self.jitter_sec)
        await self._r.setex(self._key(key), expiry, payload)

    async def invalidate(self, key: str) -> None:
        """Invalidate a cached entry."""
        await self._r.delete(self._key(key))

    async def clear(self) -> None:
        keys = [k async for k in self._r.scan_iter(match=f"{self._prefix}:*")]
        if keys:
            await self._r.delete(*keys)


def build_cache(settings: Settings) -> TTLCache:
    """Pick the cache backend from settings (`CACHE_URL` set -> Redis)."""
    if settings.CACHE_URL:
        return RedisTTLCache.from_url(
            settings.CACHE_URL,
            prefix=settings.SERVICE_NAME,
            ttl_sec=settings.DRILLS_CACHE_TTL,
        )
    return MemoryTTLCache(ttl_sec=settings.DRILLS_CACHE_TTL)
