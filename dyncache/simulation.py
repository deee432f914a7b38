"""Synthetic request workloads for measuring cache size and hit rate."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from itertools import islice
import random
from typing import Union

from dyncache.engine import DynamicCacheLocal
from dyncache.facade import DynamicCache

WARMUP_SEQUENCE = (0, 0, 0, 0, 1, 1, 0, 1, 0, 1, 2, 0, 1, 2, 0, 1, 2, 0, 1, 2, 0, 1, 2, 0, 1, 2)
MAIN_KEY_WEIGHTS = (16, 8, 4, 2, 1)
KEY_SPACE = 1 << 16

SyncCache = Union[DynamicCacheLocal[int, str], DynamicCache[int, str]]


class WorkloadMismatchError(AssertionError):
    """Raised when the cache hands back a value different from the produced one."""


@dataclass(frozen=True, slots=True)
class WorkloadReport:
    name: str
    requests: int
    misses: int
    size: int

    @property
    def hit_rate(self) -> float:
        if self.requests == 0:
            return 0.0
        return (self.requests - self.misses) / self.requests

    def describe(self) -> str:
        return (
            f"{self.name}: cache size {self.size:3}, "
            f"hit rate = {100.0 * self.hit_rate:4.1f}%"
        )


def run_workload(cache: SyncCache, keys: Iterable[int], *, name: str) -> WorkloadReport:
    """Drive ``get``/``insert`` over ``keys`` using ``str(key)`` as the value."""

    return run_counted_workload(cache, ((key, True) for key in keys), name=name)


def run_counted_workload(
    cache: SyncCache,
    requests: Iterable[tuple[int, bool]],
    *,
    name: str,
) -> WorkloadReport:
    """
    Drive the cache over ``(key, counted)`` pairs.

    Every pair is requested, but only pairs flagged as counted contribute to the
    reported request and miss totals.
    """

    total = 0
    misses = 0
    for key, counted in requests:
        expected = str(key)
        result = cache.get(key)
        if result.hit:
            value = result.value
        else:
            value = cache.insert(key, expected)
            if counted:
                misses += 1
        if value != expected:
            raise WorkloadMismatchError(f"key={key} expected={expected!r} got={value!r}")
        if counted:
            total += 1

    size = cache.size() if isinstance(cache, DynamicCache) else cache.size
    return WorkloadReport(name=name, requests=total, misses=misses, size=size)


def uniform_keys(rng: random.Random, upper: int) -> Iterator[int]:
    while True:
        yield rng.randrange(upper)


def mixed_requests(rng: random.Random) -> Iterator[tuple[int, bool]]:
    """Half weighted draws from a few main keys, half uniform 16-bit noise."""

    population = range(len(MAIN_KEY_WEIGHTS))
    while True:
        if rng.random() < 0.5:
            yield rng.choices(population, weights=MAIN_KEY_WEIGHTS)[0], True
        else:
            yield rng.randrange(KEY_SPACE), False


def standard_workloads(
    *,
    mem_len: int = 128,
    sample_size: int = 4096,
    seed: int | None = None,
    cache: SyncCache | None = None,
) -> list[WorkloadReport]:
    """Run the warm-up, shrinking-range, full-range and mixed workloads on one cache."""

    rng = random.Random(seed)
    if cache is None:
        cache = DynamicCacheLocal(mem_len)
    reports = [run_workload(cache, WARMUP_SEQUENCE, name="warm-up sequence")]

    for exponent in range(9, 2, -1):
        upper = 1 << exponent
        reports.append(
            run_workload(
                cache,
                islice(uniform_keys(rng, upper), sample_size),
                name=f"range (0..{upper:3})",
            )
        )

    reports.append(
        run_workload(cache, islice(uniform_keys(rng, KEY_SPACE), sample_size), name="full 16-bit range")
    )
    reports.append(
        run_counted_workload(
            cache,
            islice(mixed_requests(rng), sample_size),
            name="16-bit noise with weighted main keys",
        )
    )
    return reports
