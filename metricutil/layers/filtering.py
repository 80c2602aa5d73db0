"""A layer that discards metrics whose names contain any of a set of patterns."""

from __future__ import annotations

import string
from typing import Any, Iterable

from metricutil.core import Counter, Gauge, Histogram, Recorder
from metricutil.layers.stack import Layer

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def _ascii_fold(text: str) -> str:
    return text.translate(_ASCII_LOWER)


class Filter(Recorder):
    """Drops every metric whose name contains one of the patterns as a substring.

    Filtered descriptions are ignored and filtered registrations return no-op handles.
    """

    def __init__(self, inner: Any, patterns: Iterable[str], case_insensitive: bool = False) -> None:
        self._inner = inner
        self._case_insensitive = case_insensitive
        fold = _ascii_fold if case_insensitive else str
        self._patterns = tuple(fold(pattern) for pattern in patterns)

    def _should_filter(self, name: str) -> bool:
        if self._case_insensitive:
            name = _ascii_fold(name)
        return any(pattern in name for pattern in self._patterns)

    def describe_counter(self, key_name, unit, description):
        if not self._should_filter(key_name):
            self._inner.describe_counter(key_name, unit, description)

    def describe_gauge(self, key_name, unit, description):
        if not self._should_filter(key_name):
            self._inner.describe_gauge(key_name, unit, description)

    def describe_histogram(self, key_name, unit, description):
        if not self._should_filter(key_name):
            self._inner.describe_histogram(key_name, unit, description)

    def register_counter(self, key, metadata):
        if self._should_filter(key.name):
            return Counter.noop()
        return self._inner.register_counter(key, metadata)

    def register_gauge(self, key, metadata):
        if self._should_filter(key.name):
            return Gauge.noop()
        return self._inner.register_gauge(key, metadata)

    def register_histogram(self, key, metadata):
        if self._should_filter(key.name):
            return Histogram.noop()
        return self._inner.register_histogram(key, metadata)


class FilterLayer(Layer):
    """Wraps recorders in a `Filter` for the configured substring patterns.

    Case folding, when enabled, applies to ASCII letters only.  The `use_dfa`
    setting is kept for configuration compatibility and does not change results.
    """

    def __init__(self) -> None:
        self._patterns: list[str] = []
        self._case_insensitive = False
        self._use_dfa = False

    @classmethod
    def from_patterns(cls, patterns: Iterable[str]) -> "FilterLayer":
        """Creates a layer from existing patterns, case sensitive, with `use_dfa` on."""
        layer = cls()
        layer._patterns = [str(pattern) for pattern in patterns]
        layer._use_dfa = True
        return layer

    @property
    def patterns(self) -> tuple[str, ...]:
        """The configured patterns."""
        return tuple(self._patterns)

    @property
    def is_case_insensitive(self) -> bool:
        """Whether matching ignores ASCII case."""
        return self._case_insensitive

    @property
    def uses_dfa(self) -> bool:
        """Whether the DFA option is set."""
        return self._use_dfa

    def add_pattern(self, pattern: str) -> "FilterLayer":
        """Adds a pattern to match."""
        self._patterns.append(str(pattern))
        return self

    def case_insensitive(self, case_insensitive: bool) -> "FilterLayer":
        """Sets whether matching ignores ASCII case (default: case sensitive)."""
        self._case_insensitive = bool(case_insensitive)
        return self

    def use_dfa(self, dfa: bool) -> "FilterLayer":
        """Sets the DFA option."""
        self._use_dfa = bool(dfa)
        return self

    def layer(self, inner: Any) -> Filter:
        return Filter(inner, self._patterns, self._case_insensitive)