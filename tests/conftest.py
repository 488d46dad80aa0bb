"""
Pytest configuration and shared fixtures.

Provides inference configuration and sample statistics snapshots for unit and
integration tests.
"""

import pytest
from typing import Dict, List

from src.core.config import AnomalyConfig, InferenceConfig
from src.stats.schema import (
    DatasetStatistics,
    FeatureStatistics,
    FeatureType,
    HistogramBucket,
    NumericStats,
    StringStats,
    ValueFrequency,
)


def string_feature(
    path: str,
    counts: Dict[str, float],
    num_missing: int = 0,
    feature_type: FeatureType = FeatureType.STRING,
    unique: int = None,
) -> FeatureStatistics:
    """Build a single-valued string feature from a value -> count mapping."""
    present = int(sum(counts.values()))
    return FeatureStatistics(
        path=path,
        type=feature_type,
        num_missing=num_missing,
        num_non_missing=present,
        min_num_values=1,
        max_num_values=1,
        avg_num_values=1.0,
        string_stats=StringStats(
            unique=unique if unique is not None else len(counts),
            values=[ValueFrequency(value=v, frequency=c) for v, c in counts.items()],
        ),
    )


def numeric_feature(
    path: str,
    low: float,
    high: float,
    present: int,
    num_missing: int = 0,
    feature_type: FeatureType = FeatureType.INT,
    histogram: List[HistogramBucket] = None,
) -> FeatureStatistics:
    """Build a single-valued numeric feature with an observed range."""
    return FeatureStatistics(
        path=path,
        type=feature_type,
        num_missing=num_missing,
        num_non_missing=present,
        min_num_values=1,
        max_num_values=1,
        avg_num_values=1.0,
        numeric_stats=NumericStats(
            min=low,
            max=high,
            mean=(low + high) / 2,
            histogram=histogram or [],
        ),
    )


def snapshot(*features: FeatureStatistics, num_examples: int = 100, **kwargs) -> DatasetStatistics:
    return DatasetStatistics(num_examples=num_examples, features=list(features), **kwargs)


@pytest.fixture
def inference_config() -> InferenceConfig:
    """
    Fixture providing the default inference knobs.

    Explicit values keep tests independent of SENTINEL_* environment settings.
    """
    return InferenceConfig(enum_threshold=400, new_features_are_warnings=False)


@pytest.fixture
def anomaly_config() -> AnomalyConfig:
    return AnomalyConfig(max_sample_values=10, default_drift_threshold=1.0, drift_histogram_bins=10)


@pytest.fixture
def training_statistics() -> DatasetStatistics:
    """
    Fixture providing a realistic training snapshot.

    Returns:
        DatasetStatistics with:
            - color: 3 string values, always present
            - age: INT in [0, 120], always present
            - country: 4 string values, missing in 10 of 100 examples
    """
    return snapshot(
        string_feature("color", {"red": 50, "green": 30, "blue": 20}),
        numeric_feature("age", 0, 120, present=100),
        string_feature("country", {"US": 40, "DE": 25, "FR": 15, "JP": 10}, num_missing=10),
        num_examples=100,
        name="training",
    )


@pytest.fixture
def empty_statistics() -> DatasetStatistics:
    return DatasetStatistics(num_examples=0, features=[], name="empty")


def pytest_configure(config):
    """
    Pytest hook for custom configuration.

    Registers custom markers used throughout tests.
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running (deferred CI)"
    )
