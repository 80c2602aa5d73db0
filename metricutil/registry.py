"""Sharded, thread-safe storage of metric handles keyed by metric key."""

from __future__ import annotations

import os
import threading
from abc import ABC, abstractmethod
from typing import Callable, Generic, Hashable, Iterator, TypeVar

from metricutil.bucket import AtomicBucket

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")
R = TypeVar("R")

_U64_MASK = (1 << 64) - 1


class AtomicCounter:
    """A thread-safe unsigned 64-bit counter."""

    __slots__ = ("_lock", "_value")

    def __init__(self, value: int = 0) -> None:
        self._lock = threading.Lock()
        self._value = value & _U64_MASK

    def increment(self, value: int) -> None:
        """Adds `value`, wrapping around at 2**64."""
        with self._lock:
            self._value = (self._value + value) & _U64_MASK

    def absolute(self, value: int) -> None:
        """Raises the counter to `value` if it is currently lower."""
        with self._lock:
            if value > self._value:
                self._value = value & _U64_MASK

    def load(self) -> int:
        """The current value."""
        with self._lock:
            return self._value

    def __repr__(self) -> str:
        return f"AtomicCounter({self.load()})"


class AtomicGauge:
    """A thread-safe floating-point gauge."""

    __slots__ = ("_lock", "_value")

    def __init__(self, value: float = 0.0) -> None:
        self._lock = threading.Lock()
        self._value = float(value)

    def increment(self, value: float) -> None:
        """Adds `value` to the gauge."""
        with self._lock:
            self._value += value

    def decrement(self, value: float) -> None:
        """Subtracts `value` from the gauge."""
        with self._lock:
            self._value -= value

    def set(self, value: float) -> None:
        """Replaces the gauge's value."""
        with self._lock:
            self._value = float(value)

    def load(self) -> float:
        """The current value."""
        with self._lock:
            return self._value

    def __repr__(self) -> str:
        return f"AtomicGauge({self.load()})"


class Storage(ABC, Generic[K]):
    """Creates the handles that hold the values of new metrics."""

    @abstractmethod
    def counter(self, key: K): ...

    @abstractmethod
    def gauge(self, key: K): ...

    @abstractmethod
    def histogram(self, key: K): ...


class AtomicStorage(Storage):
    """Storage backed by atomic counters, gauges and buckets."""

    def counter(self, key) -> AtomicCounter:
        return AtomicCounter()

    def gauge(self, key) -> AtomicGauge:
        return AtomicGauge()

    def histogram(self, key) -> AtomicBucket[float]:
        return AtomicBucket()


class _Shard(Generic[K, V]):
    __slots__ = ("lock", "entries")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.entries: dict[K, V] = {}


class _ShardSet(Generic[K, V]):
    """A fixed number of independently locked maps, selected by key hash."""

    def __init__(self, count: int) -> None:
        self._shards: list[_Shard[K, V]] = [_Shard() for _ in range(count)]
        self._mask = count - 1

    def _shard(self, key: K) -> _Shard[K, V]:
        return self._shards[hash(key) & self._mask]

    def get_or_create(self, key: K, factory: Callable[[K], V]) -> V:
        shard = self._shard(key)
        with shard.lock:
            handle = shard.entries.get(key)
            if handle is None:
                handle = factory(key)
                shard.entries[key] = handle
            return handle

    def delete(self, key: K) -> bool:
        shard = self._shard(key)
        with shard.lock:
            return shard.entries.pop(key, None) is not None

    def clear(self) -> None:
        for shard in self._shards:
            with shard.lock:
                shard.entries.clear()

    def items(self) -> Iterator[tuple[K, V]]:
        for shard in self._shards:
            with shard.lock:
                snapshot = list(shard.entries.items())
            yield from snapshot


def _shard_count() -> int:
    cpus = max(1, os.cpu_count() or 1)
    return 1 << (cpus - 1).bit_length()


class Registry(Generic[K]):
    """A central listing of counters, gauges and histograms, keyed by metric key.

    Handles are created by the given storage the first time a key is seen.
    """

    def __init__(self, storage: Storage) -> None:
        count = _shard_count()
        self._storage = storage
        self._counters: _ShardSet = _ShardSet(count)
        self._gauges: _ShardSet = _ShardSet(count)
        self._histograms: _ShardSet = _ShardSet(count)

    @classmethod
    def atomic(cls) -> "Registry":
        """A registry using atomic storage."""
        return cls(AtomicStorage())

    @property
    def storage(self) -> Storage:
        """The storage creating this registry's handles."""
        return self._storage

    def clear(self) -> None:
        """Removes every metric, one shard at a time."""
        self._counters.clear()
        self._gauges.clear()
        self._histograms.clear()

    def get_or_create_counter(self, key: K, op: Callable[[object], R]) -> R:
        """Calls `op` with the counter for `key`, creating it first if needed."""
        return op(self._counters.get_or_create(key, self._storage.counter))

    def get_or_create_gauge(self, key: K, op: Callable[[object], R]) -> R:
        """Calls `op` with the gauge for `key`, creating it first if needed."""
        return op(self._gauges.get_or_create(key, self._storage.gauge))

    def get_or_create_histogram(self, key: K, op: Callable[[object], R]) -> R:
        """Calls `op` with the histogram for `key`, creating it first if needed."""
        return op(self._histograms.get_or_create(key, self._storage.histogram))

    def delete_counter(self, key: K) -> bool:
        """Removes the counter for `key`; returns whether it existed."""
        return self._counters.delete(key)

    def delete_gauge(self, key: K) -> bool:
        """Removes the gauge for `key`; returns whether it existed."""
        return self._gauges.delete(key)

    def delete_histogram(self, key: K) -> bool:
        """Removes the histogram for `key`; returns whether it existed."""
        return self._histograms.delete(key)

    def visit_counters(self, collect: Callable[[K, object], object]) -> None:
        """Calls `collect(key, counter)` for every counter, shard by shard."""
        for key, handle in self._counters.items():
            collect(key, handle)

    def visit_gauges(self, collect: Callable[[K, object], object]) -> None:
        """Calls `collect(key, gauge)` for every gauge, shard by shard."""
        for key, handle in self._gauges.items():
            collect(key, handle)

    def visit_histograms(self, collect: Callable[[K, object], object]) -> None:
        """Calls `collect(key, histogram)` for every histogram, shard by shard."""
        for key, handle in self._histograms.items():
            collect(key, handle)

    def get_counter_handles(self) -> dict:
        """A point-in-time mapping of every counter by key."""
        return dict(self._counters.items())

    def get_gauge_handles(self) -> dict:
        """A point-in-time mapping of every gauge by key."""
        return dict(self._gauges.items())

    def get_histogram_handles(self) -> dict:
        """A point-in-time mapping of every histogram by key."""
        return dict(self._histograms.items())