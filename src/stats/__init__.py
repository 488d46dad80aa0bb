"""
Stats module: Dataset statistics snapshots and the views built over them.

Snapshots arrive pre-aggregated. Pipeline:

    DatasetStatistics (training / previous / serving)
        ↓
    StatisticsView (weighting, environment, baseline links)
        ↓
    Schema inference (src/schema) or anomaly detection (src/anomaly)
"""

from src.stats.baselines import (
    PREVIOUS,
    SERVING,
    Baseline,
    Both,
    NoBaseline,
    PreviousOnly,
    ServingOnly,
    make_baseline,
)
from src.stats.schema import (
    DatasetStatistics,
    FeatureStatistics,
    FeatureType,
    HistogramBucket,
    NumericStats,
    StringStats,
    ValueFrequency,
)
from src.stats.view import FeatureView, StatisticsView, weighted_statistics_exist

__all__ = [
    # Schema
    "DatasetStatistics",
    "FeatureStatistics",
    "FeatureType",
    "HistogramBucket",
    "NumericStats",
    "StringStats",
    "ValueFrequency",

    # Baselines
    "Baseline",
    "NoBaseline",
    "PreviousOnly",
    "ServingOnly",
    "Both",
    "make_baseline",
    "PREVIOUS",
    "SERVING",

    # Views
    "StatisticsView",
    "FeatureView",
    "weighted_statistics_exist",
]
