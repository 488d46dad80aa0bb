"""
Schema module: Feature specifications and their inference from statistics.
"""

from .definition import (
    Domain,
    EnumeratedDomain,
    FeatureSpec,
    FreeFormDomain,
    NumericRangeDomain,
    Presence,
    SchemaDefinition,
    UnconstrainedDomain,
    ValueCountRange,
)
from .inference import (
    infer_domain,
    infer_feature_spec,
    infer_presence,
    infer_value_count,
    update_feature_spec,
    update_schema,
    widen_domain,
)

__all__ = [
    "SchemaDefinition",
    "FeatureSpec",
    "Presence",
    "Domain",
    "EnumeratedDomain",
    "NumericRangeDomain",
    "FreeFormDomain",
    "UnconstrainedDomain",
    "ValueCountRange",
    "infer_domain",
    "infer_presence",
    "infer_value_count",
    "infer_feature_spec",
    "update_feature_spec",
    "update_schema",
    "widen_domain",
]
