"""
Anomaly module: Schema-versus-statistics validation.

Implements per-condition detectors, drift distances, severity merging, and
the anomaly report.
"""

from .detectors import (
	DomainDetector,
	DriftDetector,
	Finding,
	NewFeatureDetector,
	PresenceDetector,
	TypeDetector,
	ValueCountDetector,
	types_compatible,
)
from .drift import DriftMeasurement, jensen_shannon_divergence, l_infinity_distance, measure_drift
from .engine import AnomalyDetector
from .schema import Anomaly, AnomaliesReport, AnomalyReason, AnomalySeverity, ReasonType
from .scoring import merge_findings, overall_severity

__all__ = [
	"AnomalyDetector",
	"AnomaliesReport",
	"Anomaly",
	"AnomalyReason",
	"AnomalySeverity",
	"ReasonType",
	"Finding",
	"NewFeatureDetector",
	"PresenceDetector",
	"TypeDetector",
	"DomainDetector",
	"ValueCountDetector",
	"DriftDetector",
	"DriftMeasurement",
	"l_infinity_distance",
	"jensen_shannon_divergence",
	"measure_drift",
	"types_compatible",
	"merge_findings",
	"overall_severity",
]
