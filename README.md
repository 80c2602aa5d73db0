# metricutil

Helper types for building, storing and composing metrics recorders. It has no
dependencies outside the standard library.

## Modules

- `metricutil.core` defines the basic types. These are `Key` (a name plus a tuple
  of `Label`s), `Unit`, `Metadata`, and the `Counter`, `Gauge` and `Histogram`
  handles. Each handle forwards to an implementation, or does nothing when made
  with `noop()`. The module also holds the abstract `Recorder` interface and
  `NoopRecorder`. A single global recorder slot is managed by
  `set_global_recorder`, which raises `SetRecorderError` if a recorder is already
  installed, and by `global_recorder`, which returns a no-op recorder if none is
  installed.
- `metricutil.kind` holds `MetricKind` and `MetricKindMask`. Masks combine with
  `|`, and `matches(kind)` tests whether a mask contains a kind. The predefined
  masks are `NONE`, `COUNTER`, `GAUGE`, `HISTOGRAM` and `ALL`.
- `metricutil.key` holds `CompositeKey`, which pairs a `MetricKind` with a `Key`.
  Its `into_parts()` method returns the two parts.
- `metricutil.bucket` holds `AtomicBucket`, an unbounded, thread-safe,
  append-only store. It is built from blocks of `BLOCK_SIZE` (64) values.
  - `data()` returns the values newest block first; each block keeps its write
    order.
  - `data_with(f)` visits the same blocks one at a time.
  - `clear()` and `clear_with(f)` detach every block. `clear_with(f)` also calls
    `f` on each detached block.
  - `record()` is the same as `push()`, so a bucket can act as a histogram.
- `metricutil.registry` holds the metric store and its value types.
  - `AtomicCounter` and `AtomicGauge` are thread-safe metric values.
  - `Storage` is the interface that creates handles, and `AtomicStorage` is its
    default implementation.
  - `Registry` is a sharded map from keys to handles. It has
    `get_or_create_counter/gauge/histogram(key, op)`, `delete_*`, `visit_*`,
    `get_*_handles` (point-in-time dicts) and `clear`. Use `Registry.atomic()`
    for atomic storage.
- `metricutil.recency` tracks and expires idle metrics.
  - `Generational` wraps a handle and counts every change made through it.
    `get_generation()` returns the count.
  - `GenerationalStorage` wraps the handles that another storage creates.
  - `Recency(mask, idle_timeout=None, clock=None)` deletes a metric from a
    registry when its generation has not changed for longer than `idle_timeout`
    seconds. The timeout can also be a `timedelta`. The methods are
    `should_store_counter/gauge/histogram`.
- `metricutil.histogram` holds `BucketedHistogram`, a cumulative histogram with
  fixed bounds.
  - Each bucket counts the samples less than or equal to its bound.
  - It has `record`, `record_many`, `buckets()`, `count` and `sum`.
  - Empty bounds raise `ValueError`.
- `metricutil.quantile` holds `Quantile`, which clamps a value to [0, 1] and
  labels it `min`, `max` or `pNN` (for example `p99` and `p999`). It also holds
  `parse_quantiles`.
- `metricutil.debugging` holds `DebuggingRecorder`, an in-process recorder for
  tests and debugging. Its `snapshotter().snapshot()` returns a `Snapshot` of
  `(CompositeKey, unit, description, DebugValue)` entries, available through
  `into_vec()` or `into_hashmap()`. Taking a snapshot drains the recorded
  histogram samples.
- `metricutil.recoverable` holds `RecoverableRecorder`. It installs a wrapper
  that holds only a weak reference to the recorder, and returns a
  `RecoveryHandle`.
  - `RecoveryHandle.into_inner()` waits for in-flight calls, then returns the
    original recorder. After that, the installed wrapper ignores every call.
  - If installation fails, `SetRecorderError` is raised carrying the original
    recorder.
- `metricutil.layers` contains recorder layers.
  - `layers.stack` holds `Layer` and `Stack`. `Stack(recorder).push(layer)`
    wraps the stack's contents in a layer. `install()` sets the stack as the
    global recorder.
  - `layers.prefix` holds `PrefixLayer` and `Prefix`, which rename every metric
    to `<prefix>.<name>`.
  - `layers.filtering` holds `FilterLayer` and `Filter`.
    - A metric is dropped when its name contains any pattern as a substring.
    - A dropped description is ignored, and a dropped registration returns a
      no-op handle.
    - Case-insensitive matching is available for ASCII letters.
    - `use_dfa` is kept as a setting but does not change results.
  - `layers.router` holds `RouterBuilder` and `Router`.
    - Each metric is sent to the recorder whose route pattern is the longest
      prefix of its name and whose mask covers its kind. Otherwise it goes to
      the default recorder.
    - `add_route` accepts only a single-kind mask or `ALL`. Any other mask
      raises `ValueError`.

## Example

```python
from metricutil.core import Key, Metadata
from metricutil.debugging import DebuggingRecorder
from metricutil.layers.prefix import PrefixLayer
from metricutil.layers.stack import Stack

recorder = DebuggingRecorder()
snapshotter = recorder.snapshotter()

stack = Stack(recorder).push(PrefixLayer("app"))
stack.register_counter(Key("requests"), Metadata("example")).increment(3)

for composite_key, unit, description, value in snapshotter.snapshot().into_vec():
    print(composite_key.key.name, value.value)   # app.requests 3
```

## What it does not do

- There is no layer that sends every metric to several recorders at once.
- There is no quantile sketch or summary type.
- There is no exporter: nothing here renders metrics in a wire format or serves
  them over the network.
- There is no command-line tool.

## Running the tests

```
pip install -e ".[test]"
pytest
```