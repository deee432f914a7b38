"""Build a cache instance for the configured concurrency backend."""

from __future__ import annotations

from collections.abc import Callable, Hashable
import logging
from typing import Any, Union

from dyncache.config import Settings, get_settings
from dyncache.engine import DynamicCacheLocal
from dyncache.facade import AsyncDynamicCache, DynamicCache

AnyCache = Union[DynamicCacheLocal[Any, Any], DynamicCache[Any, Any], AsyncDynamicCache[Any, Any]]


def create_cache(
    *,
    backend: str,
    mem_len: int,
    hasher: Callable[[Any], Hashable] | None = None,
    logger: logging.Logger | None = None,
) -> AnyCache:
    """Create a cache for ``backend``: ``local``, ``locked``, ``async`` or ``auto``."""

    normalized_backend = backend.strip().lower()
    if normalized_backend == "local":
        return DynamicCacheLocal(mem_len, hasher=hasher)

    if normalized_backend == "locked":
        return DynamicCache(mem_len, hasher=hasher)

    if normalized_backend == "async":
        return AsyncDynamicCache(mem_len, hasher=hasher)

    if normalized_backend == "auto":
        if logger:
            logger.warning("cache_backend_auto_fallback backend=locked")
        return DynamicCache(mem_len, hasher=hasher)

    raise ValueError(f"Unsupported DYNCACHE_BACKEND value: {backend}")


def create_cache_from_settings(
    settings: Settings | None = None,
    *,
    hasher: Callable[[Any], Hashable] | None = None,
) -> AnyCache:
    """Create a cache from ``Settings``, defaulting to the process-wide settings."""

    settings = settings or get_settings()
    return create_cache(
        backend=settings.backend,
        mem_len=settings.mem_len,
        hasher=hasher,
        logger=logging.getLogger("dyncache.factory"),
    )
