"""A layer that prefixes every metric name."""

from __future__ import annotations

from typing import Any

from metricutil.core import Key, Recorder
from metricutil.layers.stack import Layer


class Prefix(Recorder):
    """Prefixes every metric name as ``<prefix>.<name>`` before forwarding it."""

    def __init__(self, prefix: str, inner: Any) -> None:
        self._prefix = str(prefix)
        self._inner = inner

    @property
    def prefix(self) -> str:
        """The prefix applied to names."""
        return self._prefix

    def prefix_key(self, key: Key) -> Key:
        """Returns `key` with its name prefixed and its labels kept."""
        return Key.from_parts(f"{self._prefix}.{key.name}", key.labels)

    def prefix_key_name(self, key_name: str) -> str:
        """Returns `key_name` prefixed."""
        return f"{self._prefix}.{key_name}"

    def describe_counter(self, key_name, unit, description):
        self._inner.describe_counter(self.prefix_key_name(key_name), unit, description)

    def describe_gauge(self, key_name, unit, description):
        self._inner.describe_gauge(self.prefix_key_name(key_name), unit, description)

    def describe_histogram(self, key_name, unit, description):
        self._inner.describe_histogram(self.prefix_key_name(key_name), unit, description)

    def register_counter(self, key, metadata):
        return self._inner.register_counter(self.prefix_key(key), metadata)

    def register_gauge(self, key, metadata):
        return self._inner.register_gauge(self.prefix_key(key), metadata)

    def register_histogram(self, key, metadata):
        return self._inner.register_histogram(self.prefix_key(key), metadata)


class PrefixLayer(Layer):
    """A layer that wraps a recorder in `Prefix`."""

    def __init__(self, prefix: str) -> None:
        self._prefix = str(prefix)

    def layer(self, inner: Any) -> Prefix:
        return Prefix(self._prefix, inner)