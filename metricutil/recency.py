"""Generation tracking for metrics and removal of metrics that have gone idle."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Generic, Hashable, Optional, TypeVar, Union

from metricutil.kind import MetricKind, MetricKindMask
from metricutil.registry import AtomicStorage, Registry, Storage

T = TypeVar("T")
V = TypeVar("V")
K = TypeVar("K", bound=Hashable)


@dataclass(frozen=True, order=True)
class Generation:
    """An opaque, monotonically increasing modification count of a metric.

    Generations are only meant to be compared with each other.
    """

    value: int = 0


class Generational(Generic[T]):
    """Wraps a metric handle and counts every modification made through it.

    Comparing generations between two observations tells whether the metric was
    touched in between, even if its value ended up the same.
    """

    __slots__ = ("_inner", "_lock", "_gen")

    def __init__(self, inner: T) -> None:
        self._inner = inner
        self._lock = threading.Lock()
        self._gen = 0

    def get_inner(self) -> T:
        """The wrapped handle."""
        return self._inner

    def get_generation(self) -> Generation:
        """The current generation."""
        with self._lock:
            return Generation(self._gen)

    def with_increment(self, f: Callable[[T], V]) -> V:
        """Calls `f` with the wrapped handle, then advances the generation."""
        result = f(self._inner)
        with self._lock:
            self._gen += 1
        return result

    def increment(self, value) -> None:
        """Increments the wrapped counter or gauge."""
        self.with_increment(lambda handle: handle.increment(value))

    def decrement(self, value: float) -> None:
        """Decrements the wrapped gauge."""
        self.with_increment(lambda handle: handle.decrement(value))

    def absolute(self, value: int) -> None:
        """Sets the wrapped counter to an absolute value."""
        self.with_increment(lambda handle: handle.absolute(value))

    def set(self, value: float) -> None:
        """Sets the wrapped gauge."""
        self.with_increment(lambda handle: handle.set(value))

    def record(self, value: float) -> None:
        """Records a sample into the wrapped histogram."""
        self.with_increment(lambda handle: handle.record(value))

    def __repr__(self) -> str:
        return f"Generational({self._inner!r}, gen={self._gen})"


class GenerationalStorage(Storage):
    """Storage that wraps every handle created by another storage in `Generational`."""

    def __init__(self, storage: Storage) -> None:
        self._inner = storage

    @classmethod
    def atomic(cls) -> "GenerationalStorage":
        """Generational storage on top of atomic storage."""
        return cls(AtomicStorage())

    def counter(self, key) -> Generational:
        return Generational(self._inner.counter(key))

    def gauge(self, key) -> Generational:
        return Generational(self._inner.gauge(key))

    def histogram(self, key) -> Generational:
        return Generational(self._inner.histogram(key))


def _seconds(timeout: Union[float, timedelta, None]) -> Optional[float]:
    if timeout is None:
        return None
    if isinstance(timeout, timedelta):
        return timeout.total_seconds()
    return float(timeout)


class Recency(Generic[K]):
    """Tracks when metrics were last updated and deletes those that went idle.

    With no `idle_timeout`, nothing is ever deleted.  Only metric kinds contained in
    `mask` are subject to recency checks.  `clock` returns the current time in
    seconds and defaults to a monotonic clock.
    """

    def __init__(
        self,
        mask: MetricKindMask,
        idle_timeout: Union[float, timedelta, None] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._mask = mask
        self._idle_timeout = _seconds(idle_timeout)
        self._clock = clock if clock is not None else time.monotonic
        self._lock = threading.Lock()
        self._entries: dict[K, tuple[Generation, float]] = {}

    def should_store_counter(self, key: K, gen: Generation, registry: Registry) -> bool:
        """Whether the counter should be kept; deletes it from `registry` if idle."""
        return self._should_store(key, gen, MetricKind.COUNTER, registry.delete_counter)

    def should_store_gauge(self, key: K, gen: Generation, registry: Registry) -> bool:
        """Whether the gauge should be kept; deletes it from `registry` if idle."""
        return self._should_store(key, gen, MetricKind.GAUGE, registry.delete_gauge)

    def should_store_histogram(self, key: K, gen: Generation, registry: Registry) -> bool:
        """Whether the histogram should be kept; deletes it from `registry` if idle."""
        return self._should_store(key, gen, MetricKind.HISTOGRAM, registry.delete_histogram)

    def _should_store(
        self,
        key: K,
        gen: Generation,
        kind: MetricKind,
        delete: Callable[[K], bool],
    ) -> bool:
        idle_timeout = self._idle_timeout
        if idle_timeout is None or not self._mask.matches(kind):
            return True

        with self._lock:
            now = self._clock()
            entry = self._entries.get(key)
            if entry is None:
                self._entries[key] = (gen, now)
                return True

            last_gen, last_update = entry
            if last_gen != gen:
                self._entries[key] = (gen, now)
                return True

            if now - last_update > idle_timeout and delete(key):
                del self._entries[key]
                return False

        return True