"""Point-in-time cache metrics snapshots."""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True, slots=True)
class CacheStats:
    """Counters and occupancy captured from a cache at one moment."""

    hits: int
    misses: int
    size: int
    tracked: int
    window: int
    mem_len: int

    @property
    def requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Fraction of requests served from the cache, 0.0 when nothing was requested."""

        if self.requests == 0:
            return 0.0
        return self.hits / self.requests

    def as_dict(self) -> dict[str, int | float]:
        data: dict[str, int | float] = asdict(self)
        data["hit_rate"] = self.hit_rate
        return data
