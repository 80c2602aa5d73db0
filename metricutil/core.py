"""Core metric types: keys, metric handles, the recorder interface and the global recorder."""

from __future__ import annotations

import enum
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Protocol


class Unit(enum.Enum):
    """Units a metric can be described with."""

    COUNT = "count"
    PERCENT = "percent"
    SECONDS = "seconds"
    MILLISECONDS = "milliseconds"
    MICROSECONDS = "microseconds"
    NANOSECONDS = "nanoseconds"
    TEBIBYTES = "tebibytes"
    GIBIBYTES = "gibibytes"
    MEBIBYTES = "mebibytes"
    KIBIBYTES = "kibibytes"
    BYTES = "bytes"
    TERABITS_PER_SECOND = "terabits_per_second"
    GIGABITS_PER_SECOND = "gigabits_per_second"
    MEGABITS_PER_SECOND = "megabits_per_second"
    KILOBITS_PER_SECOND = "kilobits_per_second"
    BITS_PER_SECOND = "bits_per_second"
    COUNT_PER_SECOND = "count_per_second"


@dataclass(frozen=True, order=True)
class Label:
    """A key/value pair attached to a metric key."""

    key: str
    value: str


def _to_label(item: Any) -> Label:
    if isinstance(item, Label):
        return item
    key, value = item
    return Label(str(key), str(value))


@dataclass(frozen=True, order=True)
class Key:
    """A metric name together with its labels."""

    name: str
    labels: tuple[Label, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", tuple(_to_label(item) for item in self.labels))

    @classmethod
    def from_name(cls, name: str) -> "Key":
        """Creates a key with no labels."""
        return cls(name)

    @classmethod
    def from_parts(cls, name: str, labels: Iterable[Any]) -> "Key":
        """Creates a key from a name and labels given as `Label`s or pairs."""
        return cls(name, tuple(labels))


@dataclass(frozen=True)
class Metadata:
    """Where a metric was registered from."""

    target: str
    level: str = "INFO"
    module_path: Optional[str] = None


class _CounterFn(Protocol):
    def increment(self, value: int) -> None: ...

    def absolute(self, value: int) -> None: ...


class _GaugeFn(Protocol):
    def increment(self, value: float) -> None: ...

    def decrement(self, value: float) -> None: ...

    def set(self, value: float) -> None: ...


class _HistogramFn(Protocol):
    def record(self, value: float) -> None: ...


class Counter:
    """A counter handle; operations go to the wrapped implementation, if any."""

    __slots__ = ("_handle",)

    def __init__(self, handle: Optional[_CounterFn] = None) -> None:
        self._handle = handle

    @classmethod
    def noop(cls) -> "Counter":
        """A counter that discards every operation."""
        return cls()

    def increment(self, value: int) -> None:
        if self._handle is not None:
            self._handle.increment(value)

    def absolute(self, value: int) -> None:
        if self._handle is not None:
            self._handle.absolute(value)


class Gauge:
    """A gauge handle; operations go to the wrapped implementation, if any."""

    __slots__ = ("_handle",)

    def __init__(self, handle: Optional[_GaugeFn] = None) -> None:
        self._handle = handle

    @classmethod
    def noop(cls) -> "Gauge":
        """A gauge that discards every operation."""
        return cls()

    def increment(self, value: float) -> None:
        if self._handle is not None:
            self._handle.increment(value)

    def decrement(self, value: float) -> None:
        if self._handle is not None:
            self._handle.decrement(value)

    def set(self, value: float) -> None:
        if self._handle is not None:
            self._handle.set(value)


class Histogram:
    """A histogram handle; samples go to the wrapped implementation, if any."""

    __slots__ = ("_handle",)

    def __init__(self, handle: Optional[_HistogramFn] = None) -> None:
        self._handle = handle

    @classmethod
    def noop(cls) -> "Histogram":
        """A histogram that discards every sample."""
        return cls()

    def record(self, value: float) -> None:
        if self._handle is not None:
            self._handle.record(value)


class Recorder(ABC):
    """Receives metric descriptions and registrations."""

    @abstractmethod
    def describe_counter(self, key_name: str, unit: Optional[Unit], description: str) -> None: ...

    @abstractmethod
    def describe_gauge(self, key_name: str, unit: Optional[Unit], description: str) -> None: ...

    @abstractmethod
    def describe_histogram(self, key_name: str, unit: Optional[Unit], description: str) -> None: ...

    @abstractmethod
    def register_counter(self, key: Key, metadata: Metadata) -> Counter: ...

    @abstractmethod
    def register_gauge(self, key: Key, metadata: Metadata) -> Gauge: ...

    @abstractmethod
    def register_histogram(self, key: Key, metadata: Metadata) -> Histogram: ...


class NoopRecorder(Recorder):
    """A recorder that ignores everything."""

    def describe_counter(self, key_name, unit, description):
        return None

    def describe_gauge(self, key_name, unit, description):
        return None

    def describe_histogram(self, key_name, unit, description):
        return None

    def register_counter(self, key, metadata):
        return Counter.noop()

    def register_gauge(self, key, metadata):
        return Gauge.noop()

    def register_histogram(self, key, metadata):
        return Histogram.noop()


class SetRecorderError(Exception):
    """Raised when a global recorder is already installed; carries the rejected recorder."""

    def __init__(self, recorder: Any) -> None:
        super().__init__(
            "attempted to set a recorder after the metrics system was already initialized"
        )
        self.recorder = recorder


_global_lock = threading.Lock()
_global: Optional[Recorder] = None
_noop = NoopRecorder()


def set_global_recorder(recorder: Recorder) -> None:
    """Installs `recorder` globally; raises SetRecorderError if one is already installed."""
    global _global
    with _global_lock:
        if _global is not None:
            raise SetRecorderError(recorder)
        _global = recorder


def global_recorder() -> Recorder:
    """Returns the installed global recorder, or a no-op recorder if none is installed."""
    with _global_lock:
        return _global if _global is not None else _noop