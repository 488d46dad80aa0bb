"""
Schema definitions: what each feature is expected to look like.

A SchemaDefinition is an immutable collection of FeatureSpec objects keyed by
path. Evolving a schema never mutates it; ``update`` returns a new value.

Domain is a tagged variant discriminated by ``kind``:
- enumerated: closed set of accepted string values
- numeric_range: inclusive numeric bounds (either side may be open)
- free_form: arbitrary values, never enumerated
- unconstrained: no constraint (terminal state of an enumeration that grew
  past the enum threshold)
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Annotated, Dict, Iterable, Iterator, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator

from src.core.exceptions import SchemaConsistencyError
from src.core.paths import FeaturePath, format_path, to_path
from src.stats.schema import FeatureType

if TYPE_CHECKING:
    from src.core.config import InferenceConfig
    from src.stats.view import StatisticsView


class Presence(str, Enum):
    """Whether every example must carry the feature."""

    REQUIRED = "required"
    OPTIONAL = "optional"


class EnumeratedDomain(BaseModel):
    """Closed set of values, kept in the order they were accepted."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["enumerated"] = "enumerated"
    values: Tuple[str, ...] = ()

    @model_validator(mode="after")
    def _unique_values(self) -> "EnumeratedDomain":
        if len(set(self.values)) != len(self.values):
            raise SchemaConsistencyError(f"Enumerated domain repeats values: {list(self.values)}")
        return self

    def contains(self, value: str) -> bool:
        return value in self.values

    def describe(self) -> str:
        return "one of {" + ", ".join(self.values) + "}"


class NumericRangeDomain(BaseModel):
    """Inclusive bounds; None leaves that side open."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["numeric_range"] = "numeric_range"
    min: Optional[float] = None
    max: Optional[float] = None

    @model_validator(mode="after")
    def _ordered_bounds(self) -> "NumericRangeDomain":
        if self.min is not None and self.max is not None and self.min > self.max:
            raise SchemaConsistencyError(f"Numeric range min {self.min} exceeds max {self.max}")
        return self

    def below(self, value: float) -> bool:
        return self.min is not None and value < self.min

    def above(self, value: float) -> bool:
        return self.max is not None and value > self.max

    def describe(self) -> str:
        low = "-inf" if self.min is None else f"{self.min:g}"
        high = "inf" if self.max is None else f"{self.max:g}"
        return f"[{low}, {high}]"


class FreeFormDomain(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["free_form"] = "free_form"

    def describe(self) -> str:
        return "free-form values"


class UnconstrainedDomain(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["unconstrained"] = "unconstrained"

    def describe(self) -> str:
        return "any value"


Domain = Annotated[
    Union[EnumeratedDomain, NumericRangeDomain, FreeFormDomain, UnconstrainedDomain],
    Field(discriminator="kind"),
]


class ValueCountRange(BaseModel):
    """Accepted number of values per example; max None means unbounded."""

    model_config = ConfigDict(frozen=True)

    min: int = Field(default=0, ge=0)
    max: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _ordered_bounds(self) -> "ValueCountRange":
        if self.max is not None and self.min > self.max:
            raise SchemaConsistencyError(f"Value count min {self.min} exceeds max {self.max}")
        return self

    def describe(self) -> str:
        high = "unbounded" if self.max is None else str(self.max)
        return f"between {self.min} and {high} values"


class FeatureSpec(BaseModel):
    """
    Expectations for a single feature.

    Attributes:
        path: Feature path
        type: Expected value type
        domain: Accepted values (tagged variant)
        presence: required or optional
        value_count: Accepted values per example (optional)
        in_environment: If non-empty, the only environments the spec applies to
        not_in_environment: Environments the spec does not apply to
        drift_threshold: Maximum tolerated distance to baselines (optional)
        deprecated: Deprecated specs are neither updated nor validated
    """

    model_config = ConfigDict(frozen=True)

    path: FeaturePath
    type: FeatureType
    domain: Domain = Field(default_factory=UnconstrainedDomain)
    presence: Presence = Presence.OPTIONAL
    value_count: Optional[ValueCountRange] = None
    in_environment: Tuple[str, ...] = ()
    not_in_environment: Tuple[str, ...] = ()
    drift_threshold: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    deprecated: bool = False

    @field_validator("path", mode="before")
    @classmethod
    def _coerce_path(cls, v):
        return to_path(v)

    @model_validator(mode="after")
    def _consistent(self) -> "FeatureSpec":
        name = format_path(self.path)
        if isinstance(self.domain, NumericRangeDomain) and not self.type.is_numeric:
            raise SchemaConsistencyError(f"Feature {name}: numeric range on {self.type.value} feature")
        if isinstance(self.domain, EnumeratedDomain) and not self.type.is_string_like:
            raise SchemaConsistencyError(f"Feature {name}: enumerated domain on {self.type.value} feature")
        both = set(self.in_environment) & set(self.not_in_environment)
        if both:
            raise SchemaConsistencyError(
                f"Feature {name}: environments both included and excluded: {sorted(both)}"
            )
        return self

    @property
    def is_required(self) -> bool:
        return self.presence == Presence.REQUIRED

    def applies_to(self, environment: Optional[str], default_environments: Iterable[str] = ()) -> bool:
        """
        Check whether the spec is active in an environment.

        No environment means every spec applies. An explicit in_environment
        list wins, then not_in_environment, then the schema-wide defaults.
        """
        if environment is None:
            return True
        if self.in_environment:
            return environment in self.in_environment
        if environment in self.not_in_environment:
            return False
        defaults = tuple(default_environments)
        if defaults:
            return environment in defaults
        return True


class SchemaDefinition(BaseModel):
    """
    Immutable mapping from feature path to FeatureSpec.

    Notes:
        - Paths are unique; a repeated path raises SchemaConsistencyError
        - default_environments applies to specs without in_environment
    """

    model_config = ConfigDict(frozen=True)

    features: Tuple[FeatureSpec, ...] = ()
    default_environments: Tuple[str, ...] = ()

    _index: Dict[FeaturePath, FeatureSpec] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: object) -> None:
        index: Dict[FeaturePath, FeatureSpec] = {}
        for spec in self.features:
            if spec.path in index:
                raise SchemaConsistencyError(f"Duplicate feature path in schema: {format_path(spec.path)}")
            index[spec.path] = spec
        self._index = index

    @classmethod
    def empty(cls) -> "SchemaDefinition":
        return cls()

    def get(self, path: Union[FeaturePath, str]) -> Optional[FeatureSpec]:
        return self._index.get(to_path(path))

    def paths(self) -> List[FeaturePath]:
        return [spec.path for spec in self.features]

    def specs(self) -> Iterator[FeatureSpec]:
        return iter(self.features)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, tuple) and path in self._index

    def __len__(self) -> int:
        return len(self.features)

    def applies_to(self, spec: FeatureSpec, environment: Optional[str]) -> bool:
        return spec.applies_to(environment, self.default_environments)

    def with_features(self, features: Iterable[FeatureSpec]) -> "SchemaDefinition":
        return SchemaDefinition(
            features=tuple(features),
            default_environments=self.default_environments,
        )

    def update(
        self,
        view: "StatisticsView",
        config: Optional["InferenceConfig"] = None,
        paths: Optional[Iterable[Union[FeaturePath, str]]] = None,
    ) -> "SchemaDefinition":
        """
        Infer or widen specs from observed statistics.

        Args:
            view: Statistics to learn from
            config: Inference knobs (defaults to global config)
            paths: Restrict the update to these paths

        Returns:
            A new SchemaDefinition; this one is left untouched

        Raises:
            InvalidInputError: If observed values contradict a typed domain
            SchemaConsistencyError: If the result would be inconsistent
        """
        from .inference import update_schema

        return update_schema(self, view, config=config, paths=paths)
