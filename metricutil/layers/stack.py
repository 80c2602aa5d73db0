"""Composable recorder layers and a stack that applies them in order."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from metricutil.core import Recorder, set_global_recorder


class Layer(ABC):
    """Wraps an object, usually a recorder, in another one."""

    @abstractmethod
    def layer(self, inner: Any) -> Any:
        """Returns `inner` wrapped by this layer."""


class Stack(Recorder):
    """Composes layers around a recorder, innermost first.

    Each pushed layer wraps everything pushed before it.  The stack itself is a
    recorder that forwards every call to the outermost layer.
    """

    def __init__(self, inner: Any) -> None:
        self._inner = inner

    @property
    def inner(self) -> Any:
        """The outermost wrapped object."""
        return self._inner

    def push(self, layer: Layer) -> "Stack":
        """Returns a new stack with `layer` wrapped around this one's contents."""
        return Stack(layer.layer(self._inner))

    def install(self) -> None:
        """Installs this stack globally; raises SetRecorderError if one is installed."""
        set_global_recorder(self)

    def describe_counter(self, key_name, unit, description):
        self._inner.describe_counter(key_name, unit, description)

    def describe_gauge(self, key_name, unit, description):
        self._inner.describe_gauge(key_name, unit, description)

    def describe_histogram(self, key_name, unit, description):
        self._inner.describe_histogram(key_name, unit, description)

    def register_counter(self, key, metadata):
        return self._inner.register_counter(key, metadata)

    def register_gauge(self, key, metadata):
        return self._inner.register_gauge(key, metadata)

    def register_histogram(self, key, metadata):
        return self._inner.register_histogram(key, metadata)