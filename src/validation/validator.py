"""
Validation facade.

Wires snapshots into statistics views and drives schema inference and
anomaly detection:

- infer_schema: fresh schema from one snapshot
- update_schema: widen an existing schema from one snapshot
- validate_feature_statistics: diff a schema against a snapshot, optionally
  anchored to previous and serving snapshots

Weighting is decided once from the primary snapshot and shared by every
baseline view, so all distances compare like with like. The ``*_json``
variants accept and return JSON payloads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from src.anomaly.engine import AnomalyDetector
from src.anomaly.schema import AnomaliesReport
from src.core.config import DEFAULT_ENUM_THRESHOLD, InferenceConfig, config
from src.core.exceptions import ConfigurationError
from src.core.logging_config import setup_logging
from src.core.paths import FeaturePath
from src.schema.definition import SchemaDefinition
from src.stats.schema import DatasetStatistics
from src.stats.view import StatisticsView, weighted_statistics_exist

from .payloads import (
    Payload,
    dump_anomalies,
    dump_schema,
    parse_optional_statistics,
    parse_schema,
    parse_statistics,
)

logger = logging.getLogger(__name__)

PathsArg = Optional[Iterable[Union[FeaturePath, str]]]


def infer_schema(
    statistics: DatasetStatistics,
    max_string_domain_size: int = DEFAULT_ENUM_THRESHOLD,
) -> SchemaDefinition:
    """
    Infer a schema from scratch.

    Args:
        statistics: Snapshot to learn from
        max_string_domain_size: Enum threshold for string features

    Raises:
        ConfigurationError: If max_string_domain_size is negative
    """
    if max_string_domain_size < 0:
        raise ConfigurationError(
            f"max_string_domain_size must be >= 0, got {max_string_domain_size}"
        )
    inference_config = InferenceConfig(enum_threshold=max_string_domain_size)
    return update_schema(SchemaDefinition.empty(), statistics, inference_config=inference_config)


def update_schema(
    schema: SchemaDefinition,
    statistics: DatasetStatistics,
    inference_config: Optional[InferenceConfig] = None,
    paths_to_consider: PathsArg = None,
    environment: Optional[str] = None,
) -> SchemaDefinition:
    """Return ``schema`` widened to accept ``statistics``."""
    by_weight = weighted_statistics_exist(statistics)
    view = StatisticsView(statistics, by_weight=by_weight, environment=environment)
    logger.info(
        "Updating schema with %d features from %d observed features (by_weight=%s)",
        len(schema),
        len(view),
        by_weight,
    )
    return schema.update(view, config=inference_config, paths=paths_to_consider)


def validate_feature_statistics(
    statistics: DatasetStatistics,
    schema: SchemaDefinition,
    environment: Optional[str] = None,
    previous_statistics: Optional[DatasetStatistics] = None,
    serving_statistics: Optional[DatasetStatistics] = None,
    features_needed: PathsArg = None,
    inference_config: Optional[InferenceConfig] = None,
) -> AnomaliesReport:
    """
    Validate a snapshot against a schema.

    Args:
        statistics: Snapshot to validate
        schema: Expected schema
        environment: Active environment tag
        previous_statistics: Prior run used for drift detection
        serving_statistics: Serving run used for skew detection
        features_needed: Restrict validation to these paths
        inference_config: Supplies new_features_are_warnings

    Returns:
        AnomaliesReport (data_missing when the snapshot has no examples)
    """
    by_weight = weighted_statistics_exist(statistics)
    logger.info(
        "Validating %d observed features (by_weight=%s, environment=%s, previous=%s, serving=%s)",
        len(statistics.features),
        by_weight,
        environment,
        previous_statistics is not None,
        serving_statistics is not None,
    )
    previous = (
        StatisticsView(previous_statistics, by_weight=by_weight, environment=environment)
        if previous_statistics is not None
        else None
    )
    serving = (
        StatisticsView(serving_statistics, by_weight=by_weight, environment=environment)
        if serving_statistics is not None
        else None
    )
    view = StatisticsView.linked(
        statistics,
        by_weight=by_weight,
        environment=environment,
        previous=previous,
        serving=serving,
    )

    detector = AnomalyDetector(schema)
    detector.find_changes(view, features_needed=features_needed, inference_config=inference_config)
    return detector.get_schema_diff()


def infer_schema_json(
    statistics_payload: Payload,
    max_string_domain_size: int = DEFAULT_ENUM_THRESHOLD,
) -> str:
    statistics = parse_statistics(statistics_payload)
    return dump_schema(infer_schema(statistics, max_string_domain_size))


def update_schema_json(
    schema_payload: Payload,
    statistics_payload: Payload,
    environment: str = "",
) -> str:
    schema = parse_schema(schema_payload)
    statistics = parse_statistics(statistics_payload)
    return dump_schema(update_schema(schema, statistics, environment=environment or None))


def validate_feature_statistics_json(
    statistics_payload: Payload,
    schema_payload: Payload,
    environment: str = "",
    previous_statistics_payload: Optional[Payload] = None,
    serving_statistics_payload: Optional[Payload] = None,
) -> str:
    """
    JSON variant of validate_feature_statistics.

    Empty strings stand for an absent environment or baseline snapshot.

    Raises:
        InputParseError: If any payload is malformed
    """
    schema = parse_schema(schema_payload)
    statistics = parse_statistics(statistics_payload)
    previous = parse_optional_statistics(previous_statistics_payload)
    serving = parse_optional_statistics(serving_statistics_payload)

    report = validate_feature_statistics(
        statistics,
        schema,
        environment=environment or None,
        previous_statistics=previous,
        serving_statistics=serving,
    )
    return dump_anomalies(report)


@dataclass
class FeatureStatisticsValidator:
    """
    Validator service with an injected inference configuration.

    - Configures package logging on creation when configure_logging is set.
    - Delegates to the module-level functions.
    """

    inference_config: InferenceConfig = field(default_factory=lambda: config.inference)
    configure_logging: bool = False

    def __post_init__(self) -> None:
        if self.configure_logging:
            setup_logging()

    def infer_schema(self, statistics: DatasetStatistics) -> SchemaDefinition:
        return update_schema(
            SchemaDefinition.empty(), statistics, inference_config=self.inference_config
        )

    def update_schema(
        self,
        schema: SchemaDefinition,
        statistics: DatasetStatistics,
        paths_to_consider: PathsArg = None,
        environment: Optional[str] = None,
    ) -> SchemaDefinition:
        return update_schema(
            schema,
            statistics,
            inference_config=self.inference_config,
            paths_to_consider=paths_to_consider,
            environment=environment,
        )

    def validate_feature_statistics(
        self,
        statistics: DatasetStatistics,
        schema: SchemaDefinition,
        environment: Optional[str] = None,
        previous_statistics: Optional[DatasetStatistics] = None,
        serving_statistics: Optional[DatasetStatistics] = None,
        features_needed: PathsArg = None,
    ) -> AnomaliesReport:
        return validate_feature_statistics(
            statistics,
            schema,
            environment=environment,
            previous_statistics=previous_statistics,
            serving_statistics=serving_statistics,
            features_needed=features_needed,
            inference_config=self.inference_config,
        )
