from __future__ import annotations

import pytest

from metricutil import core
from metricutil.core import (
    Counter,
    Gauge,
    Histogram,
    Key,
    Metadata,
    Recorder,
    SetRecorderError,
    Unit,
    global_recorder,
)
from metricutil.layers.prefix import PrefixLayer
from metricutil.layers.stack import Layer, Stack

METADATA = Metadata("tests", "INFO", "tests")


class RecordingRecorder(Recorder):
    def __init__(self):
        self.calls = []

    def describe_counter(self, key_name, unit, description):
        self.calls.append(("describe_counter", key_name, unit, description))

    def describe_gauge(self, key_name, unit, description):
        self.calls.append(("describe_gauge", key_name, unit, description))

    def describe_histogram(self, key_name, unit, description):
        self.calls.append(("describe_histogram", key_name, unit, description))

    def register_counter(self, key, metadata):
        self.calls.append(("register_counter", key))
        return Counter.noop()

    def register_gauge(self, key, metadata):
        self.calls.append(("register_gauge", key))
        return Gauge.noop()

    def register_histogram(self, key, metadata):
        self.calls.append(("register_histogram", key))
        return Histogram.noop()


class StairwayDeny(Recorder):
    def __init__(self, inner):
        self.inner = inner

    @staticmethod
    def _invalid(name):
        return "stairway" in name or "heaven" in name

    def describe_counter(self, key_name, unit, description):
        if not self._invalid(key_name):
            self.inner.describe_counter(key_name, unit, description)

    def describe_gauge(self, key_name, unit, description):
        if not self._invalid(key_name):
            self.inner.describe_gauge(key_name, unit, description)

    def describe_histogram(self, key_name, unit, description):
        if not self._invalid(key_name):
            self.inner.describe_histogram(key_name, unit, description)

    def register_counter(self, key, metadata):
        if self._invalid(key.name):
            return Counter.noop()
        return self.inner.register_counter(key, metadata)

    def register_gauge(self, key, metadata):
        if self._invalid(key.name):
            return Gauge.noop()
        return self.inner.register_gauge(key, metadata)

    def register_histogram(self, key, metadata):
        if self._invalid(key.name):
            return Histogram.noop()
        return self.inner.register_histogram(key, metadata)


class StairwayDenyLayer(Layer):
    def layer(self, inner):
        return StairwayDeny(inner)


@pytest.fixture
def no_global(monkeypatch):
    monkeypatch.setattr(core, "_global", None)


def test_stack_forwards_all_operations():
    base = RecordingRecorder()
    stack = Stack(base)
    stack.describe_counter("c", Unit.COUNT, "cd")
    stack.describe_gauge("g", Unit.BYTES, "gd")
    stack.describe_histogram("h", Unit.NANOSECONDS, "hd")
    stack.register_counter(Key.from_name("c"), METADATA)
    stack.register_gauge(Key.from_name("g"), METADATA)
    stack.register_histogram(Key.from_name("h"), METADATA)
    assert base.calls == [
        ("describe_counter", "c", Unit.COUNT, "cd"),
        ("describe_gauge", "g", Unit.BYTES, "gd"),
        ("describe_histogram", "h", Unit.NANOSECONDS, "hd"),
        ("register_counter", Key.from_name("c")),
        ("register_gauge", Key.from_name("g")),
        ("register_histogram", Key.from_name("h")),
    ]


def test_push_wraps_existing_contents():
    base = RecordingRecorder()
    stack = Stack(base).push(StairwayDenyLayer())
    assert isinstance(stack.inner, StairwayDeny)
    assert stack.inner.inner is base


def test_layer_filters_through_stack():
    base = RecordingRecorder()
    stack = Stack(base).push(StairwayDenyLayer())
    stack.register_counter(Key.from_name("stairway_to"), METADATA)
    stack.register_counter(Key.from_name("allowed"), METADATA)
    assert base.calls == [("register_counter", Key.from_name("allowed"))]


def test_layers_chain_in_push_order():
    base = RecordingRecorder()
    stack = Stack(base).push(PrefixLayer("app_name")).push(StairwayDenyLayer())
    stack.register_gauge(Key.from_name("heaven"), METADATA)
    stack.register_gauge(Key.from_name("foo"), METADATA)
    assert base.calls == [("register_gauge", Key.from_name("app_name.foo"))]


def test_install_sets_global_recorder(no_global):
    stack = Stack(RecordingRecorder())
    stack.install()
    assert global_recorder() is stack


def test_second_install_raises(no_global):
    Stack(RecordingRecorder()).install()
    second = Stack(RecordingRecorder())
    with pytest.raises(SetRecorderError) as info:
        second.install()
    assert info.value.recorder is second