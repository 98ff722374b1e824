"""Simple in-memory TTL cache for upstream collections. No Redis needed.

One entry per named key, populated lazily on first access. Every key shares
the same TTL. Entries are replaced wholesale on refresh, never patched.

Note: Each uvicorn worker has its own cache instance. With --workers 2,
a collection may be fetched twice (once per worker). Within one worker,
concurrent misses on the same key share a single upstream call.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Hashable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class TTLCache(Generic[K, V]):
    def __init__(self, ttl_seconds: float = 300, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._store: dict[K, tuple[float, V]] = {}
        self._locks: dict[K, asyncio.Lock] = {}

    def get(self, key: K) -> V | None:
        """Return the payload for ``key`` if it hasn't expired yet."""
        if key in self._store:
            expires_at, value = self._store[key]
            if self._clock() < expires_at:
                return value
        return None

    def set(self, key: K, value: V) -> None:
        self._store[key] = (self._clock() + self.ttl_seconds, value)

    async def get_or_fetch(self, key: K, fetch_fn: Callable[[], Awaitable[V]]) -> V:
        """Serve ``key`` from memory, or await ``fetch_fn`` once and store the result.

        A failed fetch propagates and leaves any previous entry untouched;
        an expired payload is never served in its place.
        """
        if key in self._store:
            expires_at, value = self._store[key]
            if self._clock() < expires_at:
                logger.debug("cache hit: %s", key)
                return value

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            # Another request may have refreshed the key while we waited.
            if key in self._store:
                expires_at, value = self._store[key]
                if self._clock() < expires_at:
                    return value

            logger.debug("cache miss: %s", key)
            value = await fetch_fn()
            self.set(key, value)
            return value

    def invalidate(self, key: K) -> None:
        self._store.pop(key, None)

    def clear(self) -> None:
        self._store.clear()

    def entries(self) -> dict[K, float]:
        """Seconds until expiry for every stored key (negative once stale)."""
        now = self._clock()
        return {key: round(expires_at - now, 3) for key, (expires_at, _) in self._store.items()}
