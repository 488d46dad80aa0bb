"""
Schema anomaly detection engine.

Compares a schema with a statistics view, runs every detector for each
relevant path, and merges the findings into an AnomaliesReport.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Union

from src.core.config import AnomalyConfig, InferenceConfig, config
from src.core.exceptions import AnomalyDetectionError, InvalidInputError
from src.core.paths import FeaturePath, format_path, to_path
from src.schema.definition import SchemaDefinition
from src.stats.view import StatisticsView

from .detectors import (
    DomainDetector,
    DriftDetector,
    Finding,
    NewFeatureDetector,
    PresenceDetector,
    TypeDetector,
    ValueCountDetector,
)
from .schema import AnomaliesReport, Anomaly
from .scoring import merge_findings

logger = logging.getLogger(__name__)


@dataclass
class AnomalyDetector:
    """
    Single-use diff engine between a schema and one statistics view.

    Notes:
    - The schema is never modified.
    - find_changes may run once; get_schema_diff reads its result.
    - A view with zero examples short-circuits to a data_missing report.
    """

    schema: SchemaDefinition
    anomaly_config: AnomalyConfig = field(default_factory=lambda: config.anomaly)

    def __post_init__(self) -> None:
        self._report: Optional[AnomaliesReport] = None
        self._started = False
        self._presence_detector = PresenceDetector()
        self._type_detector = TypeDetector()
        self._domain_detector = DomainDetector(max_samples=self.anomaly_config.max_sample_values)
        self._value_count_detector = ValueCountDetector()
        self._drift_detector = DriftDetector(
            default_threshold=self.anomaly_config.default_drift_threshold,
            bins=self.anomaly_config.drift_histogram_bins,
        )

    def find_changes(
        self,
        view: StatisticsView,
        features_needed: Optional[Iterable[Union[FeaturePath, str]]] = None,
        inference_config: Optional[InferenceConfig] = None,
    ) -> None:
        """
        Diff the schema against a statistics view.

        Args:
            view: Statistics to validate
            features_needed: Restrict validation to these paths
            inference_config: Supplies new_features_are_warnings

        Raises:
            AnomalyDetectionError: If called more than once
            InvalidInputError: If features_needed holds an invalid path
        """
        if self._started:
            raise AnomalyDetectionError("AnomalyDetector is single-use; create one per validation")
        needed = self._needed_paths(features_needed)
        self._started = True
        inference_config = inference_config or config.inference

        if view.examples_count() == 0:
            logger.info("Statistics have no examples; reporting data as missing")
            self._report = AnomaliesReport(data_missing=True, baseline=self.schema)
            return

        new_feature_detector = NewFeatureDetector(
            new_features_are_warnings=inference_config.new_features_are_warnings
        )

        anomalies: Dict[str, Anomaly] = {}
        for path in self._candidate_paths(view, needed):
            findings = self._check_path(path, view, new_feature_detector)
            if findings:
                anomalies[format_path(path)] = merge_findings(
                    path, findings, self.anomaly_config.max_sample_values
                )

        logger.info(
            "Validated %d schema features against %d observed features: %d anomalies",
            len(self.schema),
            len(view),
            len(anomalies),
        )
        self._report = AnomaliesReport(anomalies=anomalies)

    def get_schema_diff(self) -> AnomaliesReport:
        if self._report is None:
            raise AnomalyDetectionError("get_schema_diff called before find_changes completed")
        return self._report

    def _needed_paths(
        self, features_needed: Optional[Iterable[Union[FeaturePath, str]]]
    ) -> Optional[Set[FeaturePath]]:
        if features_needed is None:
            return None
        try:
            return {to_path(p) for p in features_needed}
        except ValueError as exc:
            raise InvalidInputError(str(exc)) from exc

    def _candidate_paths(
        self, view: StatisticsView, needed: Optional[Set[FeaturePath]]
    ) -> List[FeaturePath]:
        paths = list(self.schema.paths())
        paths.extend(p for p in view.paths() if p not in self.schema)
        if needed is None:
            return paths
        return [p for p in paths if p in needed]

    def _check_path(
        self,
        path: FeaturePath,
        view: StatisticsView,
        new_feature_detector: NewFeatureDetector,
    ) -> List[Finding]:
        spec = self.schema.get(path)
        feature = view.get_feature(path)

        if spec is None:
            return [new_feature_detector.check(feature)] if feature is not None else []

        if spec.deprecated or not self.schema.applies_to(spec, view.environment):
            return []

        findings: List[Optional[Finding]] = [self._presence_detector.check(spec, feature)]
        if feature is not None and feature.num_present() > 0:
            type_finding = self._type_detector.check(spec, feature)
            findings.append(type_finding)
            if type_finding is None:
                findings.append(self._domain_detector.check(spec, feature))
            findings.append(self._value_count_detector.check(spec, feature))
            findings.append(self._drift_detector.check(spec, feature))

        return [f for f in findings if f is not None]
