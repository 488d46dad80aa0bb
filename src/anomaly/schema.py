"""
Schema definitions for anomaly reports.

All anomaly outputs are deterministic and explainable. Each anomaly names the
feature path, every condition that fired for it, and a bounded sample of the
observed values that broke the expectation.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.core.paths import FeaturePath, to_path
from src.schema.definition import SchemaDefinition


class AnomalySeverity(str, Enum):
    """Severity levels for anomalies (error outranks warning)."""

    WARNING = "warning"
    ERROR = "error"


class ReasonType(str, Enum):
    """Conditions that can make a feature anomalous."""

    NEW_FEATURE = "NEW_FEATURE"
    FEATURE_MISSING = "FEATURE_MISSING"
    FEATURE_OCCASIONALLY_MISSING = "FEATURE_OCCASIONALLY_MISSING"
    UNEXPECTED_STRING_VALUES = "UNEXPECTED_STRING_VALUES"
    OUT_OF_RANGE_VALUES = "OUT_OF_RANGE_VALUES"
    DISTRIBUTION_DRIFT = "DISTRIBUTION_DRIFT"
    TYPE_MISMATCH = "TYPE_MISMATCH"
    VALUE_COUNT_MISMATCH = "VALUE_COUNT_MISMATCH"


class AnomalyReason(BaseModel):
    """
    One triggered condition.

    Fields:
    - type: condition code
    - severity: severity of this condition alone
    - short_description: human-readable label (e.g. "feature missing")
    - description: detail with observed and expected values
    """

    model_config = ConfigDict(frozen=True)

    type: ReasonType
    severity: AnomalySeverity
    short_description: str
    description: str


class Anomaly(BaseModel):
    """
    Merged anomaly for a single feature path.

    Fields:
    - path: feature path
    - severity: highest severity among reasons
    - reasons: triggered conditions, one per reason type
    - short_description: single reason label, or "Multiple errors"
    - description: concatenated reason descriptions
    - samples: capped sample of offending observed values
    - expected: summary of what the schema expected, when applicable
    """

    model_config = ConfigDict(frozen=True)

    path: FeaturePath
    severity: AnomalySeverity
    reasons: Tuple[AnomalyReason, ...] = Field(..., min_length=1)
    short_description: str
    description: str
    samples: Tuple[str, ...] = ()
    expected: Optional[str] = None

    @field_validator("path", mode="before")
    @classmethod
    def _coerce_path(cls, v):
        return to_path(v)

    @property
    def reason_codes(self) -> FrozenSet[ReasonType]:
        return frozenset(r.type for r in self.reasons)


class AnomaliesReport(BaseModel):
    """
    Result of validating statistics against a schema.

    Fields:
    - anomalies: dotted feature path -> Anomaly
    - data_missing: True when the statistics had no examples
    - baseline: the schema validated against, set when data is missing
    """

    model_config = ConfigDict(frozen=True)

    anomalies: Dict[str, Anomaly] = Field(default_factory=dict)
    data_missing: bool = False
    baseline: Optional[SchemaDefinition] = None

    def get(self, path: Union[FeaturePath, str]) -> Optional[Anomaly]:
        target = to_path(path)
        for anomaly in self.anomalies.values():
            if anomaly.path == target:
                return anomaly
        return None

    @property
    def paths(self) -> List[FeaturePath]:
        return [a.path for a in self.anomalies.values()]

    @property
    def has_errors(self) -> bool:
        return any(a.severity == AnomalySeverity.ERROR for a in self.anomalies.values())

    def __len__(self) -> int:
        return len(self.anomalies)
