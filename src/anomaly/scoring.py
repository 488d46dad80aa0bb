"""
Severity ordering and merging of per-condition findings.

Every condition that fires for one path collapses into a single Anomaly whose
severity is the highest among its reasons.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from src.core.paths import FeaturePath

from .detectors import Finding
from .schema import Anomaly, AnomalyReason, AnomalySeverity

MULTIPLE_REASONS = "Multiple errors"


def overall_severity(*severities: AnomalySeverity) -> AnomalySeverity:
    """
    Return the highest severity among inputs.
    """

    order = [
        AnomalySeverity.WARNING,
        AnomalySeverity.ERROR,
    ]
    highest_index = max(order.index(s) for s in severities)
    return order[highest_index]


def merge_findings(
    path: FeaturePath, findings: Sequence[Finding], max_samples: int
) -> Anomaly:
    """
    Merge findings for one path into a single Anomaly.

    Reasons are de-duplicated by type (first wins). Samples keep first-seen
    order and are capped at max_samples.
    """
    if not findings:
        raise ValueError("merge_findings requires at least one finding")

    reasons: List[AnomalyReason] = []
    seen_types = set()
    samples: List[str] = []
    expected: List[str] = []

    for finding in findings:
        if finding.reason.type not in seen_types:
            seen_types.add(finding.reason.type)
            reasons.append(finding.reason)
        for sample in finding.samples:
            if sample not in samples and len(samples) < max_samples:
                samples.append(sample)
        if finding.expected:
            expected.append(finding.expected)

    short_description = reasons[0].short_description if len(reasons) == 1 else MULTIPLE_REASONS
    merged_expected: Optional[str] = "; ".join(expected) if expected else None

    return Anomaly(
        path=path,
        severity=overall_severity(*(r.severity for r in reasons)),
        reasons=tuple(reasons),
        short_description=short_description,
        description=" ".join(r.description for r in reasons),
        samples=tuple(samples),
        expected=merged_expected,
    )
