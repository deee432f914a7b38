from __future__ import annotations

from dyncache.engine import DynamicCacheLocal
from dyncache.facade import DynamicCache
from dyncache.simulation import (
    WARMUP_SEQUENCE,
    WorkloadMismatchError,
    run_counted_workload,
    run_workload,
    standard_workloads,
)


def test_warmup_sequence_report() -> None:
    cache: DynamicCacheLocal[int, str] = DynamicCacheLocal(128)
    report = run_workload(cache, WARMUP_SEQUENCE, name="warm-up")

    assert report.requests == len(WARMUP_SEQUENCE)
    assert report.misses == 6
    assert report.size == 3
    assert report.describe() == "warm-up: cache size   3, hit rate = 76.9%"


def test_run_workload_accepts_locked_cache() -> None:
    cache: DynamicCache[int, str] = DynamicCache(8)
    report = run_workload(cache, [1, 1, 1, 2], name="locked")

    assert (report.requests, report.misses, report.size) == (4, 3, 1)
    assert cache.hits_misses() == (1, 3)


def test_uncounted_requests_still_reach_the_cache() -> None:
    cache: DynamicCacheLocal[int, str] = DynamicCacheLocal(8)
    report = run_counted_workload(
        cache,
        [(5, False), (5, False), (5, True), (6, True)],
        name="counted",
    )

    assert report.requests == 2
    assert report.misses == 1
    assert report.hit_rate == 0.5
    assert cache.hits + cache.misses == 4


def test_mismatched_values_are_reported() -> None:
    cache: DynamicCacheLocal[int, str] = DynamicCacheLocal.with_hasher(8, lambda _key: 0)

    try:
        run_workload(cache, [0, 0, 1], name="colliding")
    except WorkloadMismatchError as exc:
        assert "key=1" in str(exc)
        return
    assert False, "Expected WorkloadMismatchError for colliding keys"


def test_standard_workloads_shape_and_hit_rates() -> None:
    reports = standard_workloads(mem_len=128, sample_size=512, seed=7)

    assert [report.name for report in reports] == [
        "warm-up sequence",
        "range (0..512)",
        "range (0..256)",
        "range (0..128)",
        "range (0.. 64)",
        "range (0.. 32)",
        "range (0.. 16)",
        "range (0..  8)",
        "full 16-bit range",
        "16-bit noise with weighted main keys",
    ]
    assert all(report.requests == 512 for report in reports[1:-1])

    small_range = reports[7]
    full_range = reports[8]
    mixed = reports[9]
    assert small_range.hit_rate > 0.9
    assert full_range.hit_rate < 0.1
    assert full_range.size < 20
    assert 0 < mixed.requests < 512
    assert mixed.hit_rate > 0.8


def test_standard_workloads_are_reproducible_with_seed() -> None:
    first = standard_workloads(mem_len=32, sample_size=256, seed=3)
    second = standard_workloads(mem_len=32, sample_size=256, seed=3)

    assert first == second
