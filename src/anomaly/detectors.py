"""
Detectors for schema violations.

Each detector checks one condition for one feature and returns a Finding or
None. Detectors never raise for data problems; a violation is a result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from src.core.paths import format_path
from src.schema.definition import EnumeratedDomain, FeatureSpec, NumericRangeDomain
from src.stats.schema import FeatureType
from src.stats.view import FeatureView

from .drift import DriftMeasurement, measure_drift
from .schema import AnomalyReason, AnomalySeverity, ReasonType


@dataclass(frozen=True)
class Finding:
    """One triggered condition plus the evidence behind it."""

    reason: AnomalyReason
    samples: Tuple[str, ...] = ()
    expected: Optional[str] = None


def _error(reason_type: ReasonType, short: str, description: str) -> AnomalyReason:
    return AnomalyReason(
        type=reason_type,
        severity=AnomalySeverity.ERROR,
        short_description=short,
        description=description,
    )


def _format_number(value: float) -> str:
    return f"{value:g}"


def types_compatible(expected: FeatureType, observed: FeatureType) -> bool:
    """
    INT values satisfy a FLOAT spec and STRING/BYTES are interchangeable.
    FLOAT values do not satisfy an INT spec.
    """
    if expected == observed:
        return True
    if expected == FeatureType.FLOAT and observed == FeatureType.INT:
        return True
    return expected.is_string_like and observed.is_string_like


@dataclass
class NewFeatureDetector:
    """Flags features present in the statistics but unknown to the schema."""

    new_features_are_warnings: bool = False

    def check(self, feature: FeatureView) -> Finding:
        severity = AnomalySeverity.WARNING if self.new_features_are_warnings else AnomalySeverity.ERROR
        reason = AnomalyReason(
            type=ReasonType.NEW_FEATURE,
            severity=severity,
            short_description="new feature",
            description=f"New feature {format_path(feature.path)} is not in the schema.",
        )
        return Finding(reason=reason)


@dataclass
class PresenceDetector:
    """Flags required features that are absent or only sometimes present."""

    def check(self, spec: FeatureSpec, feature: Optional[FeatureView]) -> Optional[Finding]:
        if not spec.is_required:
            return None

        name = format_path(spec.path)
        if feature is None or feature.num_present() == 0:
            return Finding(
                reason=_error(
                    ReasonType.FEATURE_MISSING,
                    "feature missing",
                    f"Required feature {name} is missing from the data.",
                ),
                expected="present in every example",
            )

        if feature.num_missing() > 0:
            return Finding(
                reason=_error(
                    ReasonType.FEATURE_OCCASIONALLY_MISSING,
                    "feature occasionally missing",
                    f"Required feature {name} is present in only "
                    f"{feature.fraction_present():.2%} of examples.",
                ),
                expected="present in every example",
            )
        return None


@dataclass
class TypeDetector:
    """Flags observed value types that the spec does not accept."""

    def check(self, spec: FeatureSpec, feature: FeatureView) -> Optional[Finding]:
        if types_compatible(spec.type, feature.type):
            return None
        return Finding(
            reason=_error(
                ReasonType.TYPE_MISMATCH,
                "unexpected data type",
                f"Expected {spec.type.value} values but observed {feature.type.value}.",
            ),
            samples=(feature.type.value,),
            expected=spec.type.value,
        )


@dataclass
class DomainDetector:
    """
    Flags values outside an enumerated set or a numeric range.

    Samples of offending values are capped at max_samples.
    """

    max_samples: int = 10

    def check(self, spec: FeatureSpec, feature: FeatureView) -> Optional[Finding]:
        if isinstance(spec.domain, EnumeratedDomain):
            return self._check_enumeration(spec.domain, feature)
        if isinstance(spec.domain, NumericRangeDomain):
            return self._check_range(spec.domain, feature)
        return None

    def _check_enumeration(self, domain: EnumeratedDomain, feature: FeatureView) -> Optional[Finding]:
        unexpected = [v for v in feature.values_by_frequency() if not domain.contains(v)]
        if not unexpected:
            return None

        shown = unexpected[: self.max_samples]
        return Finding(
            reason=_error(
                ReasonType.UNEXPECTED_STRING_VALUES,
                "unexpected string values",
                f"Found {len(unexpected)} value(s) outside the domain, e.g. {', '.join(shown)}.",
            ),
            samples=tuple(shown),
            expected=domain.describe(),
        )

    def _check_range(self, domain: NumericRangeDomain, feature: FeatureView) -> Optional[Finding]:
        observed = feature.numeric_range()
        if observed is None:
            return None

        low, high = observed
        offending: List[float] = []
        if domain.below(low):
            offending.append(low)
        if domain.above(high):
            offending.append(high)
        if not offending:
            return None

        return Finding(
            reason=_error(
                ReasonType.OUT_OF_RANGE_VALUES,
                "out-of-range values observed",
                f"Observed range [{_format_number(low)}, {_format_number(high)}] "
                f"falls outside {domain.describe()}.",
            ),
            samples=tuple(_format_number(v) for v in offending[: self.max_samples]),
            expected=domain.describe(),
        )


@dataclass
class ValueCountDetector:
    """Flags examples carrying fewer or more values than the spec allows."""

    def check(self, spec: FeatureSpec, feature: FeatureView) -> Optional[Finding]:
        value_count = spec.value_count
        if value_count is None:
            return None

        offending: List[int] = []
        if feature.min_num_values is not None and feature.min_num_values < value_count.min:
            offending.append(feature.min_num_values)
        if (
            value_count.max is not None
            and feature.max_num_values is not None
            and feature.max_num_values > value_count.max
        ):
            offending.append(feature.max_num_values)
        if not offending:
            return None

        return Finding(
            reason=_error(
                ReasonType.VALUE_COUNT_MISMATCH,
                "unexpected number of values",
                f"Examples carry between {feature.min_num_values} and {feature.max_num_values} "
                f"values; expected {value_count.describe()}.",
            ),
            samples=tuple(str(v) for v in offending),
            expected=value_count.describe(),
        )


@dataclass
class DriftDetector:
    """
    Flags distribution drift against previous and serving baselines.

    The largest distance across available baselines is compared with the
    feature's drift threshold (or the default when the spec declares none).
    """

    default_threshold: float = 1.0
    bins: int = 10

    def measure(self, feature: FeatureView) -> Optional[DriftMeasurement]:
        worst: Optional[DriftMeasurement] = None
        for label, counterpart in feature.baselines():
            measurement = measure_drift(feature, counterpart, label, bins=self.bins)
            if measurement is None:
                continue
            if worst is None or measurement.distance > worst.distance:
                worst = measurement
        return worst

    def check(self, spec: FeatureSpec, feature: FeatureView) -> Optional[Finding]:
        threshold = spec.drift_threshold if spec.drift_threshold is not None else self.default_threshold
        worst = self.measure(feature)
        if worst is None or worst.distance <= threshold:
            return None

        return Finding(
            reason=_error(
                ReasonType.DISTRIBUTION_DRIFT,
                "high distribution drift",
                f"{worst.metric} vs {worst.baseline} is {worst.distance:.4f}, "
                f"above the threshold {threshold:g}.",
            ),
            expected=f"distance <= {threshold:g}",
        )
