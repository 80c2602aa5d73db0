"""Keys that pair a metric key with its kind."""

from __future__ import annotations

from dataclasses import dataclass

from metricutil.core import Key
from metricutil.kind import MetricKind


@dataclass(frozen=True, order=True)
class CompositeKey:
    """A metric key together with the kind of metric it names."""

    kind: MetricKind
    key: Key

    def into_parts(self) -> tuple[MetricKind, Key]:
        """Returns the kind and key as a pair."""
        return self.kind, self.key