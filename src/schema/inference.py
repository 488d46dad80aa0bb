"""
Schema inference and evolution from observed statistics.

New features get a spec inferred from their statistics. Existing specs only
widen: enumerations grow (or are promoted to unconstrained once they pass the
enum threshold), numeric ranges stretch, INT widens to FLOAT, and required
features relax to optional when values go missing. Nothing here narrows a
spec or silently changes the kind of values it accepts.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Set, Union

from src.core.config import InferenceConfig, config as default_config
from src.core.exceptions import InvalidInputError
from src.core.paths import FeaturePath, format_path, to_path
from src.stats.schema import FeatureType
from src.stats.view import FeatureView, StatisticsView

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

logger = logging.getLogger(__name__)


def infer_domain(feature: FeatureView, config: InferenceConfig) -> Domain:
    """
    Infer the domain of a feature seen for the first time.

    Rules:
    - String-like with a complete histogram of at most enum_threshold values:
      enumerated, ordered by descending frequency
    - String-like with more values (or a truncated histogram): unconstrained
    - String-like without a histogram, and structs: free-form
    - Numeric: unconstrained (ranges are declared, not guessed)
    """
    if feature.type.is_string_like:
        if not feature.has_value_histogram:
            return FreeFormDomain()
        if feature.distinct_count() > config.enum_threshold:
            return UnconstrainedDomain()
        if not feature.histogram_is_complete():
            logger.info(
                "Feature %s: value histogram is truncated, leaving domain unconstrained",
                format_path(feature.path),
            )
            return UnconstrainedDomain()
        return EnumeratedDomain(values=tuple(feature.values_by_frequency()))
    if feature.type == FeatureType.STRUCT:
        return FreeFormDomain()
    return UnconstrainedDomain()


def infer_presence(feature: FeatureView) -> Presence:
    if feature.num_missing() == 0:
        return Presence.REQUIRED
    return Presence.OPTIONAL


def infer_value_count(feature: FeatureView) -> Optional[ValueCountRange]:
    """Single-valued features get a (1, 1) shape; others stay unconstrained."""
    if feature.min_num_values == 1 and feature.max_num_values == 1:
        return ValueCountRange(min=1, max=1)
    return None


def infer_feature_spec(feature: FeatureView, config: InferenceConfig) -> FeatureSpec:
    return FeatureSpec(
        path=feature.path,
        type=feature.type,
        domain=infer_domain(feature, config),
        presence=infer_presence(feature),
        value_count=infer_value_count(feature),
    )


def _reconcile_type(spec: FeatureSpec, feature: FeatureView) -> FeatureType:
    observed = feature.type
    if observed == spec.type:
        return spec.type

    if observed.kind == spec.type.kind:
        if spec.type == FeatureType.INT and observed == FeatureType.FLOAT:
            return FeatureType.FLOAT
        return spec.type

    if isinstance(spec.domain, NumericRangeDomain):
        raise InvalidInputError(
            f"Feature {format_path(spec.path)}: observed {observed.value} values "
            f"cannot satisfy a {spec.domain.kind} domain declared for {spec.type.value}"
        )

    logger.warning(
        "Feature %s: type changed from %s to %s, adopting observed type",
        format_path(spec.path),
        spec.type.value,
        observed.value,
    )
    return observed


def _widen_enumeration(
    domain: EnumeratedDomain, feature: FeatureView, config: InferenceConfig
) -> Domain:
    if not feature.has_value_histogram:
        return domain

    accepted = set(domain.values)
    observed = feature.values_by_frequency()
    new_values = [v for v in observed if v not in accepted]
    # Values missing from a truncated histogram may be new as well
    unlisted = max(feature.distinct_count() - len(observed), 0)
    if not new_values and not unlisted:
        return domain

    if len(domain.values) + len(new_values) + unlisted > config.enum_threshold:
        logger.info(
            "Feature %s: more than %d distinct values, promoting domain to unconstrained",
            format_path(feature.path),
            config.enum_threshold,
        )
        return UnconstrainedDomain()

    if not new_values:
        return domain
    return EnumeratedDomain(values=domain.values + tuple(new_values))


def _widen_range(domain: NumericRangeDomain, feature: FeatureView) -> Domain:
    observed = feature.numeric_range()
    if observed is None:
        return domain

    low, high = observed
    new_min = domain.min if domain.min is None else min(domain.min, low)
    new_max = domain.max if domain.max is None else max(domain.max, high)
    if new_min == domain.min and new_max == domain.max:
        return domain

    logger.info(
        "Feature %s: widening numeric range %s to cover [%g, %g]",
        format_path(feature.path),
        domain.describe(),
        low,
        high,
    )
    return NumericRangeDomain(min=new_min, max=new_max)


def widen_domain(domain: Domain, feature: FeatureView, config: InferenceConfig) -> Domain:
    if isinstance(domain, EnumeratedDomain):
        return _widen_enumeration(domain, feature, config)
    if isinstance(domain, NumericRangeDomain):
        return _widen_range(domain, feature)
    return domain


def _widen_value_count(
    value_count: Optional[ValueCountRange], feature: FeatureView
) -> Optional[ValueCountRange]:
    if value_count is None:
        return None

    new_min = value_count.min
    if feature.min_num_values is not None:
        new_min = min(new_min, feature.min_num_values)

    new_max = value_count.max
    if new_max is not None and feature.max_num_values is not None:
        new_max = max(new_max, feature.max_num_values)

    if new_min == value_count.min and new_max == value_count.max:
        return value_count
    return ValueCountRange(min=new_min, max=new_max)


def update_feature_spec(
    spec: FeatureSpec, feature: Optional[FeatureView], config: InferenceConfig
) -> FeatureSpec:
    """
    Widen an existing spec to accept what the statistics show.

    A feature absent from the statistics only relaxes presence.
    """
    if feature is None:
        if spec.is_required:
            logger.info("Feature %s: absent from statistics, relaxing to optional", format_path(spec.path))
            return spec.model_copy(update={"presence": Presence.OPTIONAL})
        return spec

    feature_type = _reconcile_type(spec, feature)
    if isinstance(spec.domain, EnumeratedDomain) and not feature_type.is_string_like:
        logger.warning(
            "Feature %s: %s values cannot be enumerated, promoting domain to unconstrained",
            format_path(spec.path),
            feature_type.value,
        )
        domain = UnconstrainedDomain()
    else:
        domain = widen_domain(spec.domain, feature, config)
    value_count = _widen_value_count(spec.value_count, feature)

    presence = spec.presence
    if spec.is_required and feature.num_missing() > 0:
        logger.info("Feature %s: values missing, relaxing to optional", format_path(spec.path))
        presence = Presence.OPTIONAL

    changes = {}
    if feature_type != spec.type:
        changes["type"] = feature_type
    if domain is not spec.domain:
        changes["domain"] = domain
    if value_count is not spec.value_count:
        changes["value_count"] = value_count
    if presence != spec.presence:
        changes["presence"] = presence

    if not changes:
        return spec
    return spec.model_copy(update=changes)


def update_schema(
    schema: SchemaDefinition,
    view: StatisticsView,
    config: Optional[InferenceConfig] = None,
    paths: Optional[Iterable[Union[FeaturePath, str]]] = None,
) -> SchemaDefinition:
    """
    Return a new schema updated from a statistics view.

    Args:
        schema: Schema to evolve (not modified)
        view: Observed statistics
        config: Inference knobs (defaults to global config)
        paths: Only visit these paths; defaults to every path in the view

    Returns:
        Updated SchemaDefinition

    Raises:
        InvalidInputError: If a path in paths is malformed, or observed
            values contradict a numeric range

    Notes:
        - Specs excluded by the view's environment, and deprecated specs,
          are left as they are
        - New features are appended in snapshot order
    """
    config = config or default_config.inference

    if paths is None:
        targets: Set[FeaturePath] = set(view.paths())
    else:
        try:
            targets = {to_path(p) for p in paths}
        except ValueError as exc:
            raise InvalidInputError(str(exc)) from exc

    updated: List[FeatureSpec] = []
    for spec in schema.specs():
        if spec.path not in targets or spec.deprecated:
            updated.append(spec)
            continue
        if not schema.applies_to(spec, view.environment):
            logger.debug(
                "Feature %s: not in environment %s, skipping update",
                format_path(spec.path),
                view.environment,
            )
            updated.append(spec)
            continue
        updated.append(update_feature_spec(spec, view.get_feature(spec.path), config))

    added = 0
    for feature in view.features():
        if feature.path in targets and feature.path not in schema:
            updated.append(infer_feature_spec(feature, config))
            added += 1

    logger.info(
        "Schema update visited %d paths: %d specs kept or widened, %d inferred",
        len(targets),
        len(schema),
        added,
    )
    return schema.with_features(updated)
