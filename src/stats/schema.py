"""
Canonical statistics schema for dataset snapshots.

A snapshot is one observation point (a training run, a serving run, a prior
run) summarised per feature. Statistics arrive pre-aggregated; nothing in this
package computes them from raw data.

Design rationale:
- One FeatureStatistics per path, in the order the producer emitted them
- Weighted counts are optional and only used when the whole snapshot has them
- String features carry a distinct-value histogram, numeric features a range
  and an optional bucketed histogram
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.core.paths import FeaturePath, to_path


class FeatureType(str, Enum):
    """Observed value type of a feature."""

    INT = "INT"
    FLOAT = "FLOAT"
    STRING = "STRING"
    BYTES = "BYTES"
    STRUCT = "STRUCT"

    @property
    def is_numeric(self) -> bool:
        return self in (FeatureType.INT, FeatureType.FLOAT)

    @property
    def is_string_like(self) -> bool:
        return self in (FeatureType.STRING, FeatureType.BYTES)

    @property
    def kind(self) -> str:
        """Coarse family used to decide whether two types can be reconciled."""
        if self.is_numeric:
            return "numeric"
        if self.is_string_like:
            return "string"
        return "struct"


class ValueFrequency(BaseModel):
    """One entry of a distinct-value histogram."""

    model_config = ConfigDict(frozen=True)

    value: str
    frequency: float = Field(..., ge=0.0)


class HistogramBucket(BaseModel):
    """
    Numeric histogram bucket covering [low_value, high_value].

    Notes:
        - Buckets with low_value == high_value hold a single point mass
    """

    model_config = ConfigDict(frozen=True)

    low_value: float
    high_value: float
    sample_count: float = Field(..., ge=0.0)

    @field_validator("high_value")
    @classmethod
    def _ordered_bounds(cls, v: float, info) -> float:
        low = info.data.get("low_value")
        if low is not None and v < low:
            raise ValueError("high_value must be >= low_value")
        return v


class NumericStats(BaseModel):
    """Range and moments of a numeric feature."""

    model_config = ConfigDict(frozen=True)

    min: float
    max: float
    mean: Optional[float] = None
    std_dev: Optional[float] = Field(default=None, ge=0.0)
    num_zeros: int = Field(default=0, ge=0)
    histogram: List[HistogramBucket] = Field(
        default_factory=list,
        description="Bucketed value distribution (may be empty)"
    )


class StringStats(BaseModel):
    """
    Distinct-value statistics of a string or bytes feature.

    Attributes:
        unique: True number of distinct values (may exceed len(values) when
            the producer truncated the histogram)
        avg_length: Average value length in characters
        values: Distinct values with unweighted frequencies, first-seen order
        weighted_values: Same histogram with weighted frequencies (optional)
    """

    model_config = ConfigDict(frozen=True)

    unique: Optional[int] = Field(default=None, ge=0)
    avg_length: Optional[float] = Field(default=None, ge=0.0)
    values: List[ValueFrequency] = Field(default_factory=list)
    weighted_values: Optional[List[ValueFrequency]] = None


class FeatureStatistics(BaseModel):
    """
    Aggregated observation of a single feature in one snapshot.

    Attributes:
        path: Feature path (dotted string or list of steps on input)
        type: Observed value type
        num_missing / num_non_missing: Examples without / with the feature
        weighted_num_missing / weighted_num_non_missing: Weighted counterparts
        min_num_values / max_num_values / avg_num_values: Values per example
        numeric_stats: Present for INT / FLOAT features
        string_stats: Present for STRING / BYTES features
    """

    model_config = ConfigDict(frozen=True)

    path: FeaturePath
    type: FeatureType

    num_missing: int = Field(default=0, ge=0)
    num_non_missing: int = Field(default=0, ge=0)
    weighted_num_missing: Optional[float] = Field(default=None, ge=0.0)
    weighted_num_non_missing: Optional[float] = Field(default=None, ge=0.0)

    min_num_values: Optional[int] = Field(default=None, ge=0)
    max_num_values: Optional[int] = Field(default=None, ge=0)
    avg_num_values: Optional[float] = Field(default=None, ge=0.0)

    numeric_stats: Optional[NumericStats] = None
    string_stats: Optional[StringStats] = None

    @field_validator("path", mode="before")
    @classmethod
    def _coerce_path(cls, v):
        return to_path(v)

    @property
    def has_weighted_counts(self) -> bool:
        return (
            self.weighted_num_missing is not None
            and self.weighted_num_non_missing is not None
        )


class DatasetStatistics(BaseModel):
    """
    Statistics snapshot for one dataset observation point.

    Notes:
        - Duplicate paths are accepted here and rejected when a
          StatisticsView is built over the snapshot
        - weighted_num_examples is None when the producer had no weights
    """

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    num_examples: int = Field(default=0, ge=0)
    weighted_num_examples: Optional[float] = Field(default=None, ge=0.0)
    features: List[FeatureStatistics] = Field(default_factory=list)
