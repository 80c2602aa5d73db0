import pytest

from metricutil.histogram import BucketedHistogram


def test_empty_bounds_rejected():
    with pytest.raises(ValueError):
        BucketedHistogram([])


def test_histogram():
    bounds = [10.0, 25.0, 100.0]
    values = [3.0, 2.0, 6.0, 12.0, 56.0, 82.0, 202.0, 100.0, 29.0]

    histogram = BucketedHistogram(bounds)
    histogram.record_many(values)
    histogram.record(89.0)

    result = histogram.buckets()
    assert len(result) == 3
    assert [count for _, count in result] == [3, 4, 9]
    assert [bound for bound, _ in result] == bounds
    assert histogram.count == len(values) + 1
    assert histogram.sum == 581.0


def test_record_and_record_many_agree():
    bounds = [1.0, 5.0, 10.0]
    samples = [0.5, 1.0, 4.0, 5.0, 7.0, 11.0, -2.0]

    one_by_one = BucketedHistogram(bounds)
    for sample in samples:
        one_by_one.record(sample)

    batched = BucketedHistogram(bounds)
    batched.record_many(samples)

    assert one_by_one.buckets() == batched.buckets()
    assert one_by_one.count == batched.count
    assert one_by_one.sum == batched.sum


def test_single_bucket():
    histogram = BucketedHistogram([1.0])
    histogram.record_many([0.5, 2.0])
    histogram.record(1.0)
    assert histogram.buckets() == [(1.0, 2)]
    assert histogram.count == 3
    assert histogram.sum == 3.5


def test_buckets_are_cumulative():
    histogram = BucketedHistogram([1.0, 2.0, 3.0, 4.0])
    histogram.record_many([0.0, 1.5, 2.5, 3.5, 4.5])
    counts = [count for _, count in histogram.buckets()]
    assert counts == [1, 2, 3, 4]
    assert counts == sorted(counts)


def test_empty_record_many_changes_nothing():
    histogram = BucketedHistogram([1.0, 2.0])
    histogram.record_many([])
    assert histogram.buckets() == [(1.0, 0), (2.0, 0)]
    assert histogram.count == 0
    assert histogram.sum == 0.0