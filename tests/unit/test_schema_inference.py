"""
Unit tests for schema inference and evolution.

Tests first-time inference, widening of existing specs, environment scoping,
and functional (non-mutating) updates.
"""

import pytest

from conftest import numeric_feature, snapshot, string_feature
from src.core.config import InferenceConfig
from src.core.exceptions import InvalidInputError
from src.schema.definition import (
    EnumeratedDomain,
    FeatureSpec,
    FreeFormDomain,
    NumericRangeDomain,
    Presence,
    SchemaDefinition,
    UnconstrainedDomain,
    ValueCountRange,
)
from src.schema.inference import infer_domain, update_schema
from src.stats.schema import FeatureStatistics, FeatureType
from src.stats.view import StatisticsView


def _infer(statistics, enum_threshold=400, **kwargs) -> SchemaDefinition:
    config = InferenceConfig(enum_threshold=enum_threshold)
    return SchemaDefinition.empty().update(StatisticsView(statistics, **kwargs), config=config)


class TestInferNewFeatures:
    """Test inference of specs for unseen paths."""

    def test_small_string_domain_is_enumerated(self):
        stats = snapshot(string_feature("color", {"red": 50, "green": 30, "blue": 20}))

        schema = _infer(stats)
        color = schema.get("color")

        assert color.type == FeatureType.STRING
        assert color.domain == EnumeratedDomain(values=("red", "green", "blue"))
        assert color.presence == Presence.REQUIRED
        assert color.value_count == ValueCountRange(min=1, max=1)

    def test_enumeration_ordered_by_descending_frequency(self):
        stats = snapshot(string_feature("size", {"s": 5, "m": 20, "l": 20, "xl": 1}))

        assert _infer(stats).get("size").domain.values == ("m", "l", "s", "xl")

    @pytest.mark.parametrize("threshold", [0, 2, 3, 10])
    def test_threshold_decides_enumeration(self, threshold):
        stats = snapshot(
            string_feature("color", {"red": 5, "green": 3, "blue": 2}),
            string_feature("empty", {}),
        )

        schema = _infer(stats, enum_threshold=threshold)

        if threshold >= 3:
            assert set(schema.get("color").domain.values) == {"red", "green", "blue"}
        else:
            assert isinstance(schema.get("color").domain, UnconstrainedDomain)
        assert schema.get("empty").domain == EnumeratedDomain(values=())

    def test_truncated_histogram_is_unconstrained(self):
        stats = snapshot(string_feature("user_id", {"u1": 3, "u2": 2}, unique=50))

        assert isinstance(_infer(stats).get("user_id").domain, UnconstrainedDomain)

    def test_string_without_histogram_is_free_form(self):
        stats = snapshot(FeatureStatistics(path="blob", type=FeatureType.BYTES, num_non_missing=100))

        assert isinstance(_infer(stats).get("blob").domain, FreeFormDomain)

    def test_numeric_is_unconstrained(self, training_statistics):
        age = _infer(training_statistics).get("age")

        assert age.type == FeatureType.INT
        assert isinstance(age.domain, UnconstrainedDomain)

    def test_missing_values_make_feature_optional(self, training_statistics):
        assert _infer(training_statistics).get("country").presence == Presence.OPTIONAL

    def test_multivalued_feature_has_no_value_count(self):
        stats = snapshot(
            FeatureStatistics(path="tags", type=FeatureType.STRUCT, num_non_missing=10, min_num_values=0, max_num_values=4)
        )
        tags = _infer(stats).get("tags")

        assert tags.value_count is None
        assert isinstance(tags.domain, FreeFormDomain)

    def test_infer_domain_directly(self, inference_config):
        stats = snapshot(string_feature("color", {"red": 1}))
        feature = StatisticsView(stats).get_feature(("color",))

        assert infer_domain(feature, inference_config) == EnumeratedDomain(values=("red",))


class TestUpdateExistingFeatures:
    """Test widening of existing specs."""

    def test_enumeration_grows_with_new_values(self):
        first = _infer(snapshot(string_feature("color", {"red": 5, "blue": 3})))
        second = first.update(
            StatisticsView(snapshot(string_feature("color", {"green": 9, "red": 1}))),
            config=InferenceConfig(enum_threshold=10),
        )

        assert second.get("color").domain.values == ("red", "blue", "green")

    def test_enumeration_never_loses_values(self):
        config = InferenceConfig(enum_threshold=10)
        schema = _infer(snapshot(string_feature("color", {"red": 5, "blue": 3})), enum_threshold=10)

        for counts in ({"green": 1}, {"red": 4}, {"violet": 2, "blue": 1}):
            previous_values = set(schema.get("color").domain.values)
            schema = schema.update(StatisticsView(snapshot(string_feature("color", counts))), config=config)
            assert previous_values <= set(schema.get("color").domain.values)

    def test_promotion_to_unconstrained_is_permanent(self):
        config = InferenceConfig(enum_threshold=3)
        schema = _infer(snapshot(string_feature("color", {"red": 5, "blue": 3})), enum_threshold=3)

        schema = schema.update(
            StatisticsView(snapshot(string_feature("color", {"green": 1, "violet": 1}))), config=config
        )
        assert isinstance(schema.get("color").domain, UnconstrainedDomain)

        schema = schema.update(StatisticsView(snapshot(string_feature("color", {"red": 1}))), config=config)
        assert isinstance(schema.get("color").domain, UnconstrainedDomain)

    def test_numeric_range_widens(self):
        schema = SchemaDefinition(
            features=(FeatureSpec(path="age", type=FeatureType.INT, domain=NumericRangeDomain(min=0, max=120)),)
        )

        updated = schema.update(StatisticsView(snapshot(numeric_feature("age", 5, 150, present=100))))

        assert updated.get("age").domain == NumericRangeDomain(min=0, max=150)

    def test_int_widens_to_float(self):
        schema = SchemaDefinition(
            features=(FeatureSpec(path="score", type=FeatureType.INT, domain=NumericRangeDomain(min=0, max=10)),)
        )
        stats = snapshot(numeric_feature("score", 0.5, 9.5, present=100, feature_type=FeatureType.FLOAT))

        assert schema.update(StatisticsView(stats)).get("score").type == FeatureType.FLOAT

    def test_required_relaxes_when_values_go_missing(self):
        schema = _infer(snapshot(string_feature("color", {"red": 5})))
        updated = schema.update(StatisticsView(snapshot(string_feature("color", {"red": 5}, num_missing=3))))

        assert schema.get("color").presence == Presence.REQUIRED
        assert updated.get("color").presence == Presence.OPTIONAL

    def test_optional_never_becomes_required(self, training_statistics):
        schema = _infer(training_statistics)
        complete = snapshot(string_feature("country", {"US": 10}))

        assert schema.update(StatisticsView(complete)).get("country").presence == Presence.OPTIONAL

    def test_value_count_widens(self):
        schema = SchemaDefinition(
            features=(FeatureSpec(path="tags", type=FeatureType.STRUCT, value_count=ValueCountRange(min=1, max=1)),)
        )
        stats = snapshot(
            FeatureStatistics(path="tags", type=FeatureType.STRUCT, num_non_missing=10, min_num_values=0, max_num_values=3)
        )

        assert schema.update(StatisticsView(stats)).get("tags").value_count == ValueCountRange(min=0, max=3)

    def test_string_values_against_numeric_range_rejected(self):
        schema = SchemaDefinition(
            features=(FeatureSpec(path="age", type=FeatureType.INT, domain=NumericRangeDomain(min=0, max=120)),)
        )
        stats = snapshot(string_feature("age", {"unknown": 3}))

        with pytest.raises(InvalidInputError):
            schema.update(StatisticsView(stats))

    def test_numeric_values_promote_enumeration(self, caplog):
        schema = SchemaDefinition(
            features=(FeatureSpec(path="code", type=FeatureType.STRING, domain=EnumeratedDomain(values=("a", "b"))),)
        )
        stats = snapshot(numeric_feature("code", 1, 9, present=100))

        with caplog.at_level("WARNING", logger="src.schema.inference"):
            code = schema.update(StatisticsView(stats)).get("code")

        assert code.type == FeatureType.INT
        assert isinstance(code.domain, UnconstrainedDomain)
        assert "promoting domain to unconstrained" in caplog.text

    def test_oversized_enumeration_kept_without_new_values(self):
        schema = SchemaDefinition(
            features=(FeatureSpec(path="grade", type=FeatureType.STRING, domain=EnumeratedDomain(values=("a", "b", "c"))),)
        )
        stats = snapshot(string_feature("grade", {"a": 4}))

        updated = schema.update(StatisticsView(stats), config=InferenceConfig(enum_threshold=2))

        assert updated.get("grade").domain == EnumeratedDomain(values=("a", "b", "c"))

    def test_oversized_enumeration_promoted_on_new_value(self):
        schema = SchemaDefinition(
            features=(FeatureSpec(path="grade", type=FeatureType.STRING, domain=EnumeratedDomain(values=("a", "b", "c"))),)
        )
        stats = snapshot(string_feature("grade", {"d": 1}))

        updated = schema.update(StatisticsView(stats), config=InferenceConfig(enum_threshold=2))

        assert isinstance(updated.get("grade").domain, UnconstrainedDomain)

    def test_type_change_adopted_for_unconstrained_domain(self):
        schema = SchemaDefinition(features=(FeatureSpec(path="zip", type=FeatureType.INT),))
        stats = snapshot(string_feature("zip", {"02139": 3}))

        assert schema.update(StatisticsView(stats)).get("zip").type == FeatureType.STRING

    def test_unchanged_spec_is_reused(self):
        schema = _infer(snapshot(string_feature("color", {"red": 5})))
        updated = schema.update(StatisticsView(snapshot(string_feature("color", {"red": 2}))))

        assert updated.get("color") is schema.get("color")


class TestUpdateScope:
    """Test path subsets, environments, and immutability."""

    def test_original_schema_untouched(self):
        schema = _infer(snapshot(string_feature("color", {"red": 5})))
        before = schema.model_dump()

        schema.update(StatisticsView(snapshot(string_feature("color", {"blue": 5}), string_feature("new", {"x": 1}))))

        assert schema.model_dump() == before

    def test_paths_subset_limits_update(self, training_statistics):
        schema = update_schema(
            SchemaDefinition.empty(), StatisticsView(training_statistics), paths=["color", ("age",)]
        )

        assert schema.paths() == [("color",), ("age",)]

    def test_invalid_path_in_subset(self, training_statistics):
        with pytest.raises(InvalidInputError):
            SchemaDefinition.empty().update(StatisticsView(training_statistics), paths=["a..b"])

    def test_subset_path_absent_from_statistics_relaxes_presence(self):
        schema = _infer(snapshot(string_feature("color", {"red": 5}), numeric_feature("age", 0, 1, 100)))
        updated = schema.update(StatisticsView(snapshot(numeric_feature("age", 0, 1, 100))), paths=["color"])

        assert updated.get("color").presence == Presence.OPTIONAL
        assert updated.get("age") is schema.get("age")

    def test_spec_outside_environment_untouched(self):
        spec = FeatureSpec(
            path="color",
            type=FeatureType.STRING,
            domain=EnumeratedDomain(values=("red",)),
            in_environment=("TRAINING",),
        )
        schema = SchemaDefinition(features=(spec,))
        stats = snapshot(string_feature("color", {"blue": 5}))

        serving = schema.update(StatisticsView(stats, environment="SERVING"))
        training = schema.update(StatisticsView(stats, environment="TRAINING"))

        assert serving.get("color") is spec
        assert training.get("color").domain.values == ("red", "blue")

    def test_deprecated_spec_untouched(self):
        spec = FeatureSpec(
            path="color",
            type=FeatureType.STRING,
            domain=EnumeratedDomain(values=("red",)),
            deprecated=True,
        )
        schema = SchemaDefinition(features=(spec,))

        updated = schema.update(StatisticsView(snapshot(string_feature("color", {"blue": 5}))))

        assert updated.get("color") is spec

    def test_new_features_appended_in_snapshot_order(self, training_statistics):
        schema = _infer(snapshot(string_feature("country", {"US": 1})))
        updated = schema.update(StatisticsView(training_statistics))

        assert updated.paths() == [("country",), ("color",), ("age",)]
