"""A histogram that counts samples into fixed, cumulative buckets."""

from __future__ import annotations

from typing import Iterable


class BucketedHistogram:
    """Counts samples into pre-defined buckets.

    Each bucket counts the samples less than or equal to its bound, so counts are
    cumulative across buckets, as in Prometheus histograms.
    """

    __slots__ = ("_bounds", "_buckets", "_count", "_sum")

    def __init__(self, bounds: Iterable[float]) -> None:
        bounds = [float(bound) for bound in bounds]
        if not bounds:
            raise ValueError("a histogram needs at least one bucket bound")
        self._bounds = bounds
        self._buckets = [0] * len(bounds)
        self._count = 0
        self._sum = 0.0

    @property
    def sum(self) -> float:
        """The sum of all samples."""
        return self._sum

    @property
    def count(self) -> int:
        """The number of samples."""
        return self._count

    def buckets(self) -> list[tuple[float, int]]:
        """Pairs of (bucket bound, count of samples at or below that bound)."""
        return list(zip(self._bounds, self._buckets))

    def record(self, sample: float) -> None:
        """Records a single sample."""
        self._sum += sample
        self._count += 1
        for idx, bound in enumerate(self._bounds):
            if sample <= bound:
                self._buckets[idx] += 1

    def record_many(self, samples: Iterable[float]) -> None:
        """Records several samples at once."""
        local = [0] * len(self._buckets)
        total = 0.0
        count = 0
        for sample in samples:
            total += sample
            count += 1
            for idx, bound in enumerate(self._bounds):
                if sample <= bound:
                    local[idx] += 1
                    break

        running = 0
        for idx, hits in enumerate(local):
            running += hits
            self._buckets[idx] += running
        self._sum += total
        self._count += count

    def __repr__(self) -> str:
        return (
            f"BucketedHistogram(count={self._count}, sum={self._sum}, "
            f"buckets={self.buckets()!r})"
        )