from __future__ import annotations

from metricutil.core import Counter, Gauge, Histogram, Key, Metadata, Recorder, Unit
from metricutil.layers.prefix import Prefix, PrefixLayer

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


def apply_to_recorder(operation, recorder):
    name, *args = operation
    if name.startswith("describe_"):
        getattr(recorder, name)(*args)
    else:
        getattr(recorder, name)(args[0], METADATA)


def test_basic_functionality():
    inputs = [
        ("describe_counter", "counter_key", Unit.COUNT, "counter desc"),
        ("describe_gauge", "gauge_key", Unit.BYTES, "gauge desc"),
        ("describe_histogram", "histogram_key", Unit.NANOSECONDS, "histogram desc"),
        ("register_counter", Key.from_name("counter_key")),
        ("register_gauge", Key.from_name("gauge_key")),
        ("register_histogram", Key.from_name("histogram_key")),
    ]
    expectations = [
        ("describe_counter", "testing.counter_key", Unit.COUNT, "counter desc"),
        ("describe_gauge", "testing.gauge_key", Unit.BYTES, "gauge desc"),
        ("describe_histogram", "testing.histogram_key", Unit.NANOSECONDS, "histogram desc"),
        ("register_counter", Key.from_name("testing.counter_key")),
        ("register_gauge", Key.from_name("testing.gauge_key")),
        ("register_histogram", Key.from_name("testing.histogram_key")),
    ]

    recorder = RecordingRecorder()
    prefix = PrefixLayer("testing").layer(recorder)
    for operation in inputs:
        apply_to_recorder(operation, prefix)

    assert recorder.calls == expectations


def test_key_vs_key_name():
    prefix = Prefix("foobar", None)
    key_name = "my_key"
    key = Key.from_name(key_name)

    prefixed_key = prefix.prefix_key(key)
    prefixed_key_name = prefix.prefix_key_name(key_name)

    assert prefixed_key.name == prefixed_key_name
    assert prefixed_key_name == "foobar.my_key"


def test_prefix_key_keeps_labels():
    prefix = Prefix("svc", None)
    key = Key.from_parts("requests", [("method", "GET"), ("code", "200")])
    prefixed = prefix.prefix_key(key)
    assert prefixed.name == "svc.requests"
    assert prefixed.labels == key.labels


def test_layer_exposes_prefix():
    prefixed = PrefixLayer("testing").layer(RecordingRecorder())
    assert prefixed.prefix == "testing"