"""Single-threaded cache engine that only keeps values requested twice in recent memory."""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Hashable
from dataclasses import dataclass
import logging
from typing import Any, Generic, TypeVar

from dyncache.metrics import CacheStats

K = TypeVar("K")
V = TypeVar("V")

MIN_MEM_LEN = 2
MAX_MEM_LEN = 2**32 - 1

logger = logging.getLogger("dyncache.engine")


class CacheInvariantError(RuntimeError):
    """Raised when the tracking map and the request window disagree."""


@dataclass(slots=True)
class LookupResult(Generic[V]):
    """Result of a single tracked lookup."""

    hit: bool
    value: V | None = None


@dataclass(slots=True)
class TrackedKey(Generic[V]):
    counter: int = 0
    value: V | None = None
    cached: bool = False


def clamp_mem_len(mem_len: int) -> int:
    """Clamp a requested window length into the supported range."""

    effective = min(max(int(mem_len), MIN_MEM_LEN), MAX_MEM_LEN)
    if effective != mem_len:
        logger.warning("mem_len_clamped requested=%s effective=%s", mem_len, effective)
    return effective


def _identity(key: Any) -> Any:
    return key


class DynamicCacheLocal(Generic[K, V]):
    """
    Cache holding only items requested more than once in recent memory.

    Single-use items are never stored. Once a key is requested a second time its
    value is cached until every request for it has aged out of the window of the
    last ``mem_len`` requests. Not safe for concurrent use; see ``DynamicCache``.
    """

    def __init__(self, mem_len: int, *, hasher: Callable[[K], Hashable] | None = None) -> None:
        self._mem_len = clamp_mem_len(mem_len)
        self._hasher: Callable[[K], Hashable] = hasher or _identity
        self._map: dict[Hashable, TrackedKey[V]] = {}
        self._window: deque[tuple[Hashable, int]] = deque()
        self._size = 0
        self._hits = 0
        self._misses = 0

    @classmethod
    def with_hasher(
        cls, mem_len: int, hasher: Callable[[K], Hashable]
    ) -> DynamicCacheLocal[K, V]:
        """Create a cache that tracks keys by ``hasher(key)`` instead of the key itself."""

        return cls(mem_len, hasher=hasher)

    def _evict_back(self) -> None:
        tracked_key, snapshot = self._window.pop()
        entry = self._map.get(tracked_key)
        if entry is None:
            raise CacheInvariantError(
                f"request window references untracked key {tracked_key!r}"
            )
        if entry.counter == snapshot:
            # Most recent request for this key is the one aging out.
            if entry.cached:
                self._size -= 1
            del self._map[tracked_key]

    def get(self, key: K) -> LookupResult[V]:
        """Record a request for ``key`` and return the cached value if there is one."""

        tracked_key = self._hasher(key)
        entry = self._map.get(tracked_key)
        if entry is None:
            self._map[tracked_key] = TrackedKey()
            counter = 0
            result: LookupResult[V] = LookupResult(hit=False)
        else:
            entry.counter += 1
            counter = entry.counter
            if entry.cached:
                result = LookupResult(hit=True, value=entry.value)
            else:
                result = LookupResult(hit=False)

        if len(self._window) >= self._mem_len:
            self._evict_back()
        self._window.appendleft((tracked_key, counter))

        if result.hit:
            self._hits += 1
        else:
            self._misses += 1
        return result

    def insert(self, key: K, value: V) -> V:
        """
        Offer a freshly produced value after a missed ``get`` for the same key.

        First-time keys get the value back without it being stored. Keys seen
        before are promoted and keep the value; an already stored value is
        returned unchanged.
        """

        entry = self._map.get(self._hasher(key))
        if entry is None:
            raise CacheInvariantError(f"insert called for untracked key {key!r}")
        if entry.counter == 0:
            return value
        if entry.cached:
            return entry.value  # type: ignore[return-value]
        entry.value = value
        entry.cached = True
        self._size += 1
        return value

    def is_cached(self, key: K) -> bool:
        """Return True when ``key`` currently holds a value. Does not count as a request."""

        entry = self._map.get(self._hasher(key))
        return entry is not None and entry.cached

    def get_or_insert(self, key: K, producer: Callable[[], V]) -> V:
        """Fetch ``key`` via the cache, calling ``producer`` only on a miss."""

        if self.is_cached(key):
            return self.get(key).value  # type: ignore[return-value]
        # Nothing is recorded until the producer returns successfully.
        value = producer()
        result = self.get(key)
        if result.hit:
            return result.value  # type: ignore[return-value]
        return self.insert(key, value)

    @property
    def size(self) -> int:
        """Number of values currently stored."""

        return self._size

    @property
    def mem_len(self) -> int:
        """Length of the recent request memory."""

        return self._mem_len

    def set_mem_len(self, new_len: int) -> None:
        """Change the request memory length, evicting immediately when it shrinks."""

        new_len = clamp_mem_len(new_len)
        size_before = self._size
        tracked_before = len(self._map)
        while len(self._window) > new_len:
            self._evict_back()
        self._mem_len = new_len
        if tracked_before != len(self._map):
            logger.debug(
                "mem_len_shrunk mem_len=%s dropped_keys=%s dropped_values=%s",
                new_len,
                tracked_before - len(self._map),
                size_before - self._size,
            )

    def clear_cache(self) -> None:
        """Clear out all stored values and all request memory."""

        logger.debug("cache_cleared tracked=%s size=%s", len(self._map), self._size)
        self._size = 0
        self._map.clear()
        self._window.clear()

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    def reset_metrics(self) -> None:
        self._hits = 0
        self._misses = 0

    @property
    def tracked_count(self) -> int:
        """Number of keys remembered by the window, cached or not."""

        return len(self._map)

    @property
    def window_len(self) -> int:
        return len(self._window)

    def stats(self) -> CacheStats:
        return CacheStats(
            hits=self._hits,
            misses=self._misses,
            size=self._size,
            tracked=len(self._map),
            window=len(self._window),
            mem_len=self._mem_len,
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(map={len(self._map)} entries, "
            f"window={len(self._window)} long, mem_len={self._mem_len}, size={self._size})"
        )
