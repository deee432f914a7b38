from __future__ import annotations

import asyncio

from dyncache.facade import AsyncDynamicCache


async def test_async_cache_promotes_on_second_request() -> None:
    cache: AsyncDynamicCache[str, str] = AsyncDynamicCache(8)
    calls: list[str] = []

    async def _producer() -> str:
        calls.append("called")
        return "value"

    for _ in range(3):
        assert await cache.get_or_insert("k", _producer) == "value"

    assert len(calls) == 2
    assert await cache.size() == 1
    assert await cache.hits_misses() == (1, 2)

    await cache.reset_metrics()
    assert await cache.hits_misses() == (0, 0)
    await cache.clear_cache()
    assert await cache.size() == 0


async def test_async_producers_are_not_deduplicated() -> None:
    cache: AsyncDynamicCache[str, str] = AsyncDynamicCache(8)
    await cache.get_or_insert("shared", _constant("warm"))
    calls: list[int] = []

    async def _producer() -> str:
        calls.append(len(calls))
        await asyncio.sleep(0)
        return f"value-{len(calls)}"

    first, second = await asyncio.gather(
        cache.get_or_insert("shared", _producer),
        cache.get_or_insert("shared", _producer),
    )

    assert len(calls) == 2
    assert first == second
    assert await cache.size() == 1


async def test_async_resize_and_manual_operations() -> None:
    cache: AsyncDynamicCache[str, str] = AsyncDynamicCache.with_hasher(10, str.lower)

    for key in ("A", "a", "B", "b", "C"):
        result = await cache.get(key)
        if not result.hit:
            await cache.insert(key, key.lower())
    assert (await cache.stats()).size == 2

    await cache.set_mem_len(1)
    assert await cache.mem_len() == 2
    assert await cache.size() == 1


async def test_async_producer_exception_propagates() -> None:
    cache: AsyncDynamicCache[str, str] = AsyncDynamicCache(4)

    async def _boom() -> str:
        raise ValueError("bad value")

    try:
        await cache.get_or_insert("k", _boom)
    except ValueError as exc:
        assert str(exc) == "bad value"
    else:
        assert False, "Expected producer exception to propagate"

    assert await cache.hits_misses() == (0, 0)


def _constant(value: str):
    async def _producer() -> str:
        return value

    return _producer
