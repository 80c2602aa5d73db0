import pytest

from metricutil.kind import MetricKind, MetricKindMask


def test_matching():
    cmask = MetricKindMask.COUNTER
    gmask = MetricKindMask.GAUGE
    hmask = MetricKindMask.HISTOGRAM
    nmask = MetricKindMask.NONE
    amask = MetricKindMask.ALL

    assert cmask.matches(MetricKind.COUNTER)
    assert not cmask.matches(MetricKind.GAUGE)
    assert not cmask.matches(MetricKind.HISTOGRAM)

    assert not gmask.matches(MetricKind.COUNTER)
    assert gmask.matches(MetricKind.GAUGE)
    assert not gmask.matches(MetricKind.HISTOGRAM)

    assert not hmask.matches(MetricKind.COUNTER)
    assert not hmask.matches(MetricKind.GAUGE)
    assert hmask.matches(MetricKind.HISTOGRAM)

    assert amask.matches(MetricKind.COUNTER)
    assert amask.matches(MetricKind.GAUGE)
    assert amask.matches(MetricKind.HISTOGRAM)

    assert not nmask.matches(MetricKind.COUNTER)
    assert not nmask.matches(MetricKind.GAUGE)
    assert not nmask.matches(MetricKind.HISTOGRAM)


def test_or_combines_masks():
    combined = MetricKindMask.COUNTER.__or__(MetricKindMask.HISTOGRAM)
    assert combined == MetricKindMask(5)
    assert not MetricKindMask.COUNTER.__or__(MetricKindMask.HISTOGRAM).matches(MetricKind.GAUGE)
    assert MetricKindMask.COUNTER.__or__(MetricKindMask.HISTOGRAM).matches(MetricKind.COUNTER)
    assert MetricKindMask.COUNTER.__or__(MetricKindMask.HISTOGRAM).matches(MetricKind.HISTOGRAM)


def test_or_of_all_kinds_is_all():
    combined = MetricKindMask.COUNTER.__or__(MetricKindMask.GAUGE).__or__(
        MetricKindMask.HISTOGRAM
    )
    assert combined == MetricKindMask(7)
    assert combined == MetricKindMask.ALL
    assert MetricKindMask.NONE.__or__(MetricKindMask.GAUGE) == MetricKindMask(2)


def test_or_with_other_type_raises():
    mask = MetricKindMask(1)
    assert mask == MetricKindMask.COUNTER
    with pytest.raises(TypeError):
        mask | 1


def test_invalid_bits_raise():
    with pytest.raises(ValueError):
        MetricKindMask(8)


def test_kind_ordering():
    ordered = [
        kind
        for kind in sorted([MetricKind.HISTOGRAM, MetricKind.COUNTER, MetricKind.GAUGE])
        if MetricKindMask.ALL.matches(kind)
    ]
    assert ordered == [
        MetricKind.COUNTER,
        MetricKind.GAUGE,
        MetricKind.HISTOGRAM,
    ]