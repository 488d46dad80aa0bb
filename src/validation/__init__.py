"""
Validation module: Facade over schema inference and anomaly detection.
"""

from .payloads import (
    dump_anomalies,
    dump_schema,
    parse_anomalies,
    parse_optional_statistics,
    parse_schema,
    parse_statistics,
)
from .validator import (
    FeatureStatisticsValidator,
    infer_schema,
    infer_schema_json,
    update_schema,
    update_schema_json,
    validate_feature_statistics,
    validate_feature_statistics_json,
)

__all__ = [
    "FeatureStatisticsValidator",
    "infer_schema",
    "infer_schema_json",
    "update_schema",
    "update_schema_json",
    "validate_feature_statistics",
    "validate_feature_statistics_json",
    "parse_statistics",
    "parse_optional_statistics",
    "parse_schema",
    "parse_anomalies",
    "dump_schema",
    "dump_anomalies",
]
