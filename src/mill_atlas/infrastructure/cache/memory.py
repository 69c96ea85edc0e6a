# src/mill_atlas/infrastructure/cache/memory.py
"""
In-process TTL cache for the public read layer.

Entries expire after `ttl` seconds (cachetools.TTLCache); any successful
write through the dashboard clears the whole cache so visitors never see a
stale published set for longer than one request.
"""

import asyncio
import time
from typing import Any, Callable

from cachetools import TTLCache

from mill_atlas.interfaces import CacheHandler


class MemoryCacheHandler(CacheHandler):
    def __init__(
        self,
        maxsize: int = 256,
        ttl: int = 300,
        key_prefix: str = "mill-atlas:",
        timer: Callable[[], float] = time.monotonic,
    ):
        self._cache: TTLCache[str, Any] = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)
        self._prefix = key_prefix
        self._lock = asyncio.Lock()
        self._generation = 0

    def _make_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> Any | None:
        async with self._lock:
            return self._cache.get(self._make_key(key))

    @property
    def generation(self) -> int:
        return self._generation

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
        generation: int | None = None,
    ) -> None:
        # TTLCache has a single expiry for every entry; per-key ttl is ignored.
        async with self._lock:
            if generation is not None and generation != self._generation:
                # a clear() ran while the value was being loaded
                return
            self._cache[self._make_key(key)] = value

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._cache.pop(self._make_key(key), None)

    async def clear(self) -> None:
        async with self._lock:
            self._cache.clear()
            self._generation += 1

    def __len__(self) -> int:
        return len(self._cache)
