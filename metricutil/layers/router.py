"""Routes metrics to different recorders by name prefix and metric kind."""

from __future__ import annotations

from typing import Optional

from metricutil.core import Recorder
from metricutil.kind import MetricKind, MetricKindMask

_SINGLE_KIND_MASKS = {
    MetricKindMask.COUNTER: (MetricKind.COUNTER,),
    MetricKindMask.GAUGE: (MetricKind.GAUGE,),
    MetricKindMask.HISTOGRAM: (MetricKind.HISTOGRAM,),
    MetricKindMask.ALL: (MetricKind.COUNTER, MetricKind.GAUGE, MetricKind.HISTOGRAM),
}


def _longest_prefix(routes: dict[str, Recorder], name: str) -> Optional[Recorder]:
    for end in range(len(name), -1, -1):
        target = routes.get(name[:end])
        if target is not None:
            return target
    return None


class Router(Recorder):
    """Sends each metric to the recorder of its longest matching route, or the default."""

    def __init__(
        self,
        default: Recorder,
        global_mask: MetricKindMask,
        routes: dict[MetricKind, dict[str, Recorder]],
    ) -> None:
        self._default = default
        self._global_mask = global_mask
        self._routes = routes

    def _route(self, kind: MetricKind, name: str) -> Recorder:
        # The global mask says which kinds have any route at all.
        if not self._global_mask.matches(kind):
            return self._default
        target = _longest_prefix(self._routes[kind], name)
        return target if target is not None else self._default

    def describe_counter(self, key_name, unit, description):
        self._route(MetricKind.COUNTER, key_name).describe_counter(key_name, unit, description)

    def describe_gauge(self, key_name, unit, description):
        self._route(MetricKind.GAUGE, key_name).describe_gauge(key_name, unit, description)

    def describe_histogram(self, key_name, unit, description):
        self._route(MetricKind.HISTOGRAM, key_name).describe_histogram(
            key_name, unit, description
        )

    def register_counter(self, key, metadata):
        return self._route(MetricKind.COUNTER, key.name).register_counter(key, metadata)

    def register_gauge(self, key, metadata):
        return self._route(MetricKind.GAUGE, key.name).register_gauge(key, metadata)

    def register_histogram(self, key, metadata):
        return self._route(MetricKind.HISTOGRAM, key.name).register_histogram(key, metadata)


class RouterBuilder:
    """Configures a `Router`.

    A route is a name prefix plus a kind mask: pattern ``foo`` matches ``foo`` and
    ``foo.sub`` but not ``x.foo``.  The default recorder handles anything unrouted.
    """

    def __init__(self, recorder: Recorder) -> None:
        self._default = recorder
        self._global_mask = MetricKindMask.NONE
        self._routes: dict[MetricKind, dict[str, Recorder]] = {kind: {} for kind in MetricKind}

    @classmethod
    def from_recorder(cls, recorder: Recorder) -> "RouterBuilder":
        """Creates a builder whose default route is `recorder`."""
        return cls(recorder)

    def add_route(self, mask: MetricKindMask, pattern: str, recorder: Recorder) -> "RouterBuilder":
        """Adds a route, replacing any existing route with the same pattern and kind.

        `mask` must be a single kind or ALL; anything else raises ValueError.
        """
        kinds = _SINGLE_KIND_MASKS.get(mask)
        if kinds is None:
            raise ValueError("cannot add route for unknown or empty metric kind mask")
        self._global_mask = self._global_mask | mask
        for kind in kinds:
            self._routes[kind][str(pattern)] = recorder
        return self

    def build(self) -> Router:
        """Builds the configured router."""
        routes = {kind: dict(table) for kind, table in self._routes.items()}
        return Router(self._default, self._global_mask, routes)