"""A recorder that keeps metrics in process so they can be inspected."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional, Union

from metricutil.core import (
    Counter,
    Gauge,
    Histogram,
    Key,
    Metadata,
    Recorder,
    Unit,
    set_global_recorder,
)
from metricutil.key import CompositeKey
from metricutil.kind import MetricKind
from metricutil.registry import Registry


@dataclass(frozen=True)
class DebugValue:
    """A point-in-time raw value of a metric.

    Counters hold an int, gauges a float and histograms a tuple of samples.
    """

    kind: MetricKind
    value: Union[int, float, tuple[float, ...]]


SnapshotEntry = tuple[CompositeKey, Optional[Unit], Optional[str], DebugValue]


class Snapshot:
    """A point-in-time snapshot of every metric in a `DebuggingRecorder`."""

    def __init__(self, entries: list[SnapshotEntry]) -> None:
        self._entries = entries

    def into_hashmap(
        self,
    ) -> dict[CompositeKey, tuple[Optional[Unit], Optional[str], DebugValue]]:
        """The snapshot as a mapping from composite key to (unit, description, value)."""
        return {ck: (unit, desc, value) for ck, unit, desc, value in self._entries}

    def into_vec(self) -> list[SnapshotEntry]:
        """The snapshot as a list of (key, unit, description, value) tuples."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class _Inner:
    def __init__(self) -> None:
        self.registry: Registry = Registry.atomic()
        self.seen_lock = threading.Lock()
        self.seen: dict[CompositeKey, None] = {}
        self.metadata_lock = threading.Lock()
        self.metadata: dict[tuple[MetricKind, str], tuple[Optional[Unit], str]] = {}


class Snapshotter:
    """Takes snapshots of a `DebuggingRecorder`."""

    def __init__(self, inner: _Inner) -> None:
        self._inner = inner

    def snapshot(self) -> Snapshot:
        """Takes a snapshot; histogram samples are drained as they are read."""
        registry = self._inner.registry
        counters = registry.get_counter_handles()
        gauges = registry.get_gauge_handles()
        histograms = registry.get_histogram_handles()

        with self._inner.seen_lock:
            seen = list(self._inner.seen)
        with self._inner.metadata_lock:
            metadata = dict(self._inner.metadata)

        entries: list[SnapshotEntry] = []
        for ck in seen:
            value: Optional[DebugValue] = None
            if ck.kind is MetricKind.COUNTER:
                handle = counters.get(ck.key)
                if handle is not None:
                    value = DebugValue(MetricKind.COUNTER, handle.load())
            elif ck.kind is MetricKind.GAUGE:
                handle = gauges.get(ck.key)
                if handle is not None:
                    value = DebugValue(MetricKind.GAUGE, handle.load())
            else:
                handle = histograms.get(ck.key)
                if handle is not None:
                    samples: list[float] = []
                    handle.clear_with(samples.extend)
                    value = DebugValue(MetricKind.HISTOGRAM, tuple(samples))

            described = metadata.get((ck.kind, ck.key.name))
            unit, desc = described if described is not None else (None, None)

            # A metric that was only described, never registered, has no value.
            if value is not None:
                entries.append((ck, unit, desc, value))

        return Snapshot(entries)


class DebuggingRecorder(Recorder):
    """A simple recorder for debugging and tests whose values can be snapshotted."""

    def __init__(self) -> None:
        self._inner = _Inner()

    def snapshotter(self) -> Snapshotter:
        """A snapshotter attached to this recorder."""
        return Snapshotter(self._inner)

    def install(self) -> None:
        """Installs this recorder globally; raises SetRecorderError if one is installed."""
        set_global_recorder(self)

    def _describe(
        self, kind: MetricKind, key_name: str, unit: Optional[Unit], description: str
    ) -> None:
        with self._inner.metadata_lock:
            current_unit, _ = self._inner.metadata.get((kind, key_name), (None, description))
            if unit is not None:
                current_unit = unit
            self._inner.metadata[(kind, key_name)] = (current_unit, description)

    def _track(self, kind: MetricKind, key: Key) -> None:
        with self._inner.seen_lock:
            self._inner.seen.setdefault(CompositeKey(kind, key), None)

    def describe_counter(self, key_name, unit, description):
        self._describe(MetricKind.COUNTER, key_name, unit, description)

    def describe_gauge(self, key_name, unit, description):
        self._describe(MetricKind.GAUGE, key_name, unit, description)

    def describe_histogram(self, key_name, unit, description):
        self._describe(MetricKind.HISTOGRAM, key_name, unit, description)

    def register_counter(self, key: Key, metadata: Metadata) -> Counter:
        self._track(MetricKind.COUNTER, key)
        return self._inner.registry.get_or_create_counter(key, Counter)

    def register_gauge(self, key: Key, metadata: Metadata) -> Gauge:
        self._track(MetricKind.GAUGE, key)
        return self._inner.registry.get_or_create_gauge(key, Gauge)

    def register_histogram(self, key: Key, metadata: Metadata) -> Histogram:
        self._track(MetricKind.HISTOGRAM, key)
        return self._inner.registry.get_or_create_histogram(key, Histogram)