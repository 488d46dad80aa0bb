"""
Unit tests for drift distances.
"""

import numpy as np
import pytest

from conftest import numeric_feature, snapshot, string_feature
from src.anomaly.drift import (
    JENSEN_SHANNON,
    L_INFINITY,
    jensen_shannon_divergence,
    l_infinity_distance,
    measure_drift,
    rebin,
)
from src.stats.schema import HistogramBucket, ValueFrequency
from src.stats.view import StatisticsView


def _values(**counts):
    return [ValueFrequency(value=v, frequency=c) for v, c in counts.items()]


def _feature(statistics, path):
    return StatisticsView(statistics).get_feature((path,))


def test_l_infinity_identical_histograms():
    assert l_infinity_distance(_values(a=3, b=1), _values(a=6, b=2)) == pytest.approx(0.0)


def test_l_infinity_disjoint_histograms():
    assert l_infinity_distance(_values(a=1), _values(b=1)) == pytest.approx(1.0)


def test_l_infinity_largest_share_difference():
    assert l_infinity_distance(_values(a=3, b=1), _values(a=1, b=1)) == pytest.approx(0.25)


def test_l_infinity_empty():
    assert l_infinity_distance([], []) == 0.0


def test_rebin_spreads_uniformly():
    edges = np.linspace(0.0, 10.0, 3)
    counts = rebin([HistogramBucket(low_value=0.0, high_value=10.0, sample_count=10)], edges)

    assert counts.tolist() == pytest.approx([5.0, 5.0])


def test_rebin_point_masses_stay_in_range():
    edges = np.linspace(0.0, 10.0, 3)
    buckets = [
        HistogramBucket(low_value=5.0, high_value=5.0, sample_count=2),
        HistogramBucket(low_value=10.0, high_value=10.0, sample_count=3),
    ]

    assert rebin(buckets, edges).tolist() == pytest.approx([0.0, 5.0])


def test_jensen_shannon_identical():
    buckets = [
        HistogramBucket(low_value=0.0, high_value=5.0, sample_count=4),
        HistogramBucket(low_value=5.0, high_value=10.0, sample_count=6),
    ]

    assert jensen_shannon_divergence(buckets, buckets) == pytest.approx(0.0, abs=1e-12)


def test_jensen_shannon_disjoint_is_one():
    current = [HistogramBucket(low_value=0.0, high_value=1.0, sample_count=10)]
    baseline = [HistogramBucket(low_value=9.0, high_value=10.0, sample_count=10)]

    assert jensen_shannon_divergence(current, baseline, bins=10) == pytest.approx(1.0)


def test_jensen_shannon_degenerate_inputs():
    bucket = HistogramBucket(low_value=3.0, high_value=3.0, sample_count=1)

    assert jensen_shannon_divergence([], [bucket]) == 0.0
    assert jensen_shannon_divergence([bucket], [bucket]) == 0.0


def test_measure_drift_string_feature():
    current = _feature(snapshot(string_feature("color", {"red": 90, "blue": 10})), "color")
    baseline = _feature(snapshot(string_feature("color", {"red": 50, "blue": 50})), "color")

    measurement = measure_drift(current, baseline, "previous")

    assert measurement.metric == L_INFINITY
    assert measurement.baseline == "previous"
    assert measurement.distance == pytest.approx(0.4)


def test_measure_drift_numeric_feature():
    histogram = [HistogramBucket(low_value=0.0, high_value=10.0, sample_count=10)]
    current = _feature(snapshot(numeric_feature("age", 0, 10, 10, histogram=histogram)), "age")
    baseline = _feature(snapshot(numeric_feature("age", 0, 10, 10, histogram=histogram)), "age")

    measurement = measure_drift(current, baseline, "serving")

    assert measurement.metric == JENSEN_SHANNON
    assert measurement.distance == pytest.approx(0.0, abs=1e-12)


def test_measure_drift_without_histograms():
    current = _feature(snapshot(numeric_feature("age", 0, 10, 10)), "age")

    assert measure_drift(current, current, "previous") is None
