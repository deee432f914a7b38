"""Lock-guarded wrappers sharing one cache engine between threads or tasks."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from threading import Lock
from typing import Generic, TypeVar

from dyncache.engine import DynamicCacheLocal, LookupResult
from dyncache.metrics import CacheStats

K = TypeVar("K")
V = TypeVar("V")


class DynamicCache(Generic[K, V]):
    """
    Thread-safe ``DynamicCacheLocal`` guarded by a single lock.

    The lock is released while a producer runs, so under contention the producer
    may be called more than once for the same key. The first value stored wins.
    """

    def __init__(self, mem_len: int, *, hasher: Callable[[K], Hashable] | None = None) -> None:
        self._cache: DynamicCacheLocal[K, V] = DynamicCacheLocal(mem_len, hasher=hasher)
        self._lock = Lock()

    @classmethod
    def with_hasher(cls, mem_len: int, hasher: Callable[[K], Hashable]) -> DynamicCache[K, V]:
        return cls(mem_len, hasher=hasher)

    def get(self, key: K) -> LookupResult[V]:
        with self._lock:
            return self._cache.get(key)

    def insert(self, key: K, value: V) -> V:
        with self._lock:
            return self._cache.insert(key, value)

    def get_or_insert(self, key: K, producer: Callable[[], V]) -> V:
        """Fetch ``key`` via the cache, calling ``producer`` unlocked on a miss."""

        with self._lock:
            if self._cache.is_cached(key):
                return self._cache.get(key).value  # type: ignore[return-value]

        value = producer()

        with self._lock:
            result = self._cache.get(key)
            if result.hit:
                return result.value  # type: ignore[return-value]
            return self._cache.insert(key, value)

    def size(self) -> int:
        with self._lock:
            return self._cache.size

    def mem_len(self) -> int:
        with self._lock:
            return self._cache.mem_len

    def set_mem_len(self, new_len: int) -> None:
        with self._lock:
            self._cache.set_mem_len(new_len)

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear_cache()

    def hits_misses(self) -> tuple[int, int]:
        """Return the cache metrics as ``(hits, misses)``."""

        with self._lock:
            return self._cache.hits, self._cache.misses

    def reset_metrics(self) -> None:
        with self._lock:
            self._cache.reset_metrics()

    def stats(self) -> CacheStats:
        with self._lock:
            return self._cache.stats()

    def __repr__(self) -> str:
        with self._lock:
            return f"{type(self).__name__}({self._cache!r})"


class AsyncDynamicCache(Generic[K, V]):
    """Coroutine-friendly cache guarded by an ``asyncio.Lock`` for use within one event loop."""

    def __init__(self, mem_len: int, *, hasher: Callable[[K], Hashable] | None = None) -> None:
        self._cache: DynamicCacheLocal[K, V] = DynamicCacheLocal(mem_len, hasher=hasher)
        self._lock = asyncio.Lock()

    @classmethod
    def with_hasher(
        cls, mem_len: int, hasher: Callable[[K], Hashable]
    ) -> AsyncDynamicCache[K, V]:
        return cls(mem_len, hasher=hasher)

    async def get(self, key: K) -> LookupResult[V]:
        async with self._lock:
            return self._cache.get(key)

    async def insert(self, key: K, value: V) -> V:
        async with self._lock:
            return self._cache.insert(key, value)

    async def get_or_insert(self, key: K, producer: Callable[[], Awaitable[V]]) -> V:
        """Fetch ``key`` via the cache, awaiting ``producer()`` unlocked on a miss."""

        async with self._lock:
            if self._cache.is_cached(key):
                return self._cache.get(key).value  # type: ignore[return-value]

        value = await producer()

        async with self._lock:
            result = self._cache.get(key)
            if result.hit:
                return result.value  # type: ignore[return-value]
            return self._cache.insert(key, value)

    async def size(self) -> int:
        async with self._lock:
            return self._cache.size

    async def mem_len(self) -> int:
        async with self._lock:
            return self._cache.mem_len

    async def set_mem_len(self, new_len: int) -> None:
        async with self._lock:
            self._cache.set_mem_len(new_len)

    async def clear_cache(self) -> None:
        async with self._lock:
            self._cache.clear_cache()

    async def hits_misses(self) -> tuple[int, int]:
        async with self._lock:
            return self._cache.hits, self._cache.misses

    async def reset_metrics(self) -> None:
        async with self._lock:
            self._cache.reset_metrics()

    async def stats(self) -> CacheStats:
        async with self._lock:
            return self._cache.stats()
