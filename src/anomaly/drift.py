"""
Distribution distances between a feature and its baseline counterparts.

Implements explainable metrics:
- L-infinity distance over normalized value histograms (string features)
- Jensen-Shannon divergence over re-bucketed numeric histograms

Both are bounded to [0, 1], so a single per-feature threshold applies to
either.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence

import numpy as np

from src.stats.schema import HistogramBucket, ValueFrequency
from src.stats.view import FeatureView

L_INFINITY = "L-infinity distance"
JENSEN_SHANNON = "Jensen-Shannon divergence"


@dataclass(frozen=True)
class DriftMeasurement:
    """Distance between a feature and one baseline."""

    metric: str
    distance: float
    baseline: str


def _normalize(counts: np.ndarray) -> np.ndarray:
    total = counts.sum()
    if total <= 0:
        return np.zeros_like(counts, dtype=float)
    return counts / total


def l_infinity_distance(
    current: Sequence[ValueFrequency], baseline: Sequence[ValueFrequency]
) -> float:
    """
    Largest absolute difference in value share between two histograms.

    Values absent from one side count as zero there.
    """
    current_freq: Dict[str, float] = {vf.value: vf.frequency for vf in current}
    baseline_freq: Dict[str, float] = {vf.value: vf.frequency for vf in baseline}
    values = list(dict.fromkeys([*current_freq, *baseline_freq]))
    if not values:
        return 0.0

    p = _normalize(np.array([current_freq.get(v, 0.0) for v in values], dtype=float))
    q = _normalize(np.array([baseline_freq.get(v, 0.0) for v in values], dtype=float))
    return float(np.max(np.abs(p - q)))


def rebin(buckets: Sequence[HistogramBucket], edges: np.ndarray) -> np.ndarray:
    """
    Spread bucket counts over new edges, assuming uniform density per bucket.

    Point-mass buckets (low == high) land in the bin containing the point.
    """
    counts = np.zeros(len(edges) - 1, dtype=float)
    for bucket in buckets:
        if bucket.sample_count == 0:
            continue
        if bucket.high_value == bucket.low_value:
            idx = int(np.searchsorted(edges, bucket.low_value, side="right")) - 1
            counts[min(max(idx, 0), len(counts) - 1)] += bucket.sample_count
            continue
        overlap = np.minimum(edges[1:], bucket.high_value) - np.maximum(edges[:-1], bucket.low_value)
        overlap = np.clip(overlap, 0.0, None)
        counts += bucket.sample_count * overlap / (bucket.high_value - bucket.low_value)
    return counts


def _kl_divergence(p: np.ndarray, m: np.ndarray) -> float:
    mask = p > 0
    return float(np.sum(p[mask] * np.log2(p[mask] / m[mask])))


def jensen_shannon_divergence(
    current: Sequence[HistogramBucket],
    baseline: Sequence[HistogramBucket],
    bins: int = 10,
) -> float:
    """
    Jensen-Shannon divergence (base 2) between two numeric histograms.

    Both histograms are re-bucketed onto ``bins`` equal-width bins spanning
    their combined range before comparison.
    """
    if not current or not baseline:
        return 0.0

    low = min(b.low_value for b in (*current, *baseline))
    high = max(b.high_value for b in (*current, *baseline))
    if high <= low:
        return 0.0

    edges = np.linspace(low, high, bins + 1)
    p = _normalize(rebin(current, edges))
    q = _normalize(rebin(baseline, edges))
    if not p.any() or not q.any():
        return 0.0

    m = 0.5 * (p + q)
    divergence = 0.5 * _kl_divergence(p, m) + 0.5 * _kl_divergence(q, m)
    return min(max(divergence, 0.0), 1.0)


def measure_drift(
    feature: FeatureView, baseline: FeatureView, label: str, bins: int = 10
) -> Optional[DriftMeasurement]:
    """
    Compare a feature with its counterpart in one baseline.

    Returns None when the two sides carry no comparable distribution.
    """
    if feature.has_value_histogram and baseline.has_value_histogram:
        distance = l_infinity_distance(feature.value_frequencies(), baseline.value_frequencies())
        return DriftMeasurement(metric=L_INFINITY, distance=distance, baseline=label)

    current_histogram = feature.numeric_histogram()
    baseline_histogram = baseline.numeric_histogram()
    if current_histogram and baseline_histogram:
        distance = jensen_shannon_divergence(current_histogram, baseline_histogram, bins=bins)
        return DriftMeasurement(metric=JENSEN_SHANNON, distance=distance, baseline=label)

    return None
