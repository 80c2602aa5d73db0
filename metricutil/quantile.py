"""Quantiles with percentile-style display labels."""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Iterable


def _display(number: float) -> str:
    """Formats a float in plain decimal notation, without a trailing ``.0``."""
    if number.is_integer():
        return str(int(number))
    text = repr(number)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    return text


class Quantile:
    """A quantile value in [0, 1] with a label such as ``p99``.

    ``0.0`` is labelled ``min`` and ``1.0`` is labelled ``max``; values outside the
    range are clamped.
    """

    __slots__ = ("_value", "_label")

    def __init__(self, quantile: float) -> None:
        quantile = float(quantile)
        if math.isnan(quantile):
            clamped = 0.0
        else:
            clamped = min(max(quantile, 0.0), 1.0)
        if clamped == 0.0:
            clamped = 0.0

        raw = _display(clamped)
        if raw == "0":
            label = "min"
        elif raw == "1":
            label = "max"
        else:
            label = ("p" + _display(clamped * 100.0)).replace(".", "")

        self._value = clamped
        self._label = label

    @property
    def value(self) -> float:
        """The clamped quantile."""
        return self._value

    @property
    def label(self) -> str:
        """The display label."""
        return self._label

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Quantile):
            return NotImplemented
        return self._value == other._value and self._label == other._label

    def __hash__(self) -> int:
        return hash((self._value, self._label))

    def __repr__(self) -> str:
        return f"Quantile({self._value!r}, {self._label!r})"


def parse_quantiles(quantiles: Iterable[float]) -> list[Quantile]:
    """Turns floating-point values into quantiles."""
    return [Quantile(q) for q in quantiles]