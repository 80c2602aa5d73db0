"""Metric kinds and masks over them."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import ClassVar


class MetricKind(enum.Enum):
    """The kind of a metric."""

    COUNTER = 0
    GAUGE = 1
    HISTOGRAM = 2

    def __lt__(self, other):
        if not isinstance(other, MetricKind):
            return NotImplemented
        return self.value < other.value

    def __le__(self, other):
        if not isinstance(other, MetricKind):
            return NotImplemented
        return self.value <= other.value

    def __gt__(self, other):
        if not isinstance(other, MetricKind):
            return NotImplemented
        return self.value > other.value

    def __ge__(self, other):
        if not isinstance(other, MetricKind):
            return NotImplemented
        return self.value >= other.value


@dataclass(frozen=True, order=True)
class MetricKindMask:
    """A set of metric kinds, combinable with `|`."""

    bits: int = 0

    NONE: ClassVar["MetricKindMask"]
    COUNTER: ClassVar["MetricKindMask"]
    GAUGE: ClassVar["MetricKindMask"]
    HISTOGRAM: ClassVar["MetricKindMask"]
    ALL: ClassVar["MetricKindMask"]

    def __post_init__(self) -> None:
        if not isinstance(self.bits, int) or not 0 <= self.bits <= 7:
            raise ValueError(f"invalid metric kind mask bits: {self.bits!r}")

    def matches(self, kind: MetricKind) -> bool:
        """Whether this mask contains `kind`."""
        return bool(self.bits & _KIND_BITS[kind])

    def __or__(self, other: "MetricKindMask") -> "MetricKindMask":
        if not isinstance(other, MetricKindMask):
            return NotImplemented
        return MetricKindMask(self.bits | other.bits)


MetricKindMask.NONE = MetricKindMask(0)
MetricKindMask.COUNTER = MetricKindMask(1)
MetricKindMask.GAUGE = MetricKindMask(2)
MetricKindMask.HISTOGRAM = MetricKindMask(4)
MetricKindMask.ALL = MetricKindMask(7)

_KIND_BITS = {
    MetricKind.COUNTER: MetricKindMask.COUNTER.bits,
    MetricKind.GAUGE: MetricKindMask.GAUGE.bits,
    MetricKind.HISTOGRAM: MetricKindMask.HISTOGRAM.bits,
}