"""
Read-only query surface over statistics snapshots.

StatisticsView hides whether counts are weighted, indexes features by path and
carries the environment tag and baseline links used by inference and
validation. Views are built per call and never mutated.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional, Tuple

from src.core.exceptions import StatisticsInconsistencyError
from src.core.paths import FeaturePath, format_path

from .baselines import Baseline, NoBaseline, make_baseline
from .schema import (
    DatasetStatistics,
    FeatureStatistics,
    FeatureType,
    HistogramBucket,
    ValueFrequency,
)

logger = logging.getLogger(__name__)


def weighted_statistics_exist(statistics: DatasetStatistics) -> bool:
    """
    Check whether a snapshot carries weighted counts.

    Callers use this to pick the weighting mode before building views, so
    that primary and baseline views agree.
    """
    weighted = statistics.weighted_num_examples
    return weighted is not None and weighted > 0


class FeatureView:
    """
    One feature of a StatisticsView.

    Counts follow the parent's weighting mode. A feature without weighted
    counts falls back to its unweighted counts even in weighted mode.
    """

    def __init__(self, statistics: FeatureStatistics, parent: "StatisticsView") -> None:
        self._statistics = statistics
        self._parent = parent

    def __repr__(self) -> str:
        return f"FeatureView(path={format_path(self.path)!r}, type={self.type.value})"

    @property
    def statistics(self) -> FeatureStatistics:
        return self._statistics

    @property
    def path(self) -> FeaturePath:
        return self._statistics.path

    @property
    def type(self) -> FeatureType:
        return self._statistics.type

    @property
    def environment(self) -> Optional[str]:
        return self._parent.environment

    @property
    def _use_weights(self) -> bool:
        return self._parent.by_weight and self._statistics.has_weighted_counts

    def num_present(self) -> float:
        if self._use_weights:
            return self._statistics.weighted_num_non_missing
        return self._statistics.num_non_missing

    def num_missing(self) -> float:
        if self._use_weights:
            return self._statistics.weighted_num_missing
        return self._statistics.num_missing

    def fraction_present(self) -> float:
        total = self.num_present() + self.num_missing()
        if total == 0:
            return 0.0
        return self.num_present() / total

    @property
    def has_value_histogram(self) -> bool:
        return self._statistics.string_stats is not None

    def value_frequencies(self) -> List[ValueFrequency]:
        """Distinct-value histogram in first-seen order, weighted if applicable."""
        string_stats = self._statistics.string_stats
        if string_stats is None:
            return []
        if self._parent.by_weight and string_stats.weighted_values is not None:
            return list(string_stats.weighted_values)
        return list(string_stats.values)

    def values_by_frequency(self) -> List[str]:
        """
        Distinct values ordered by descending frequency.

        Ties keep first-seen order (sorted() is stable).
        """
        ranked = sorted(self.value_frequencies(), key=lambda vf: -vf.frequency)
        return [vf.value for vf in ranked]

    def distinct_count(self) -> int:
        string_stats = self._statistics.string_stats
        if string_stats is None:
            return 0
        listed = len(string_stats.values)
        if string_stats.unique is None:
            return listed
        return max(string_stats.unique, listed)

    def histogram_is_complete(self) -> bool:
        """True if every distinct value appears in the histogram."""
        string_stats = self._statistics.string_stats
        if string_stats is None:
            return False
        return self.distinct_count() == len(string_stats.values)

    def numeric_range(self) -> Optional[Tuple[float, float]]:
        numeric = self._statistics.numeric_stats
        if numeric is None:
            return None
        return numeric.min, numeric.max

    def numeric_histogram(self) -> List[HistogramBucket]:
        numeric = self._statistics.numeric_stats
        if numeric is None:
            return []
        return list(numeric.histogram)

    @property
    def min_num_values(self) -> Optional[int]:
        return self._statistics.min_num_values

    @property
    def max_num_values(self) -> Optional[int]:
        return self._statistics.max_num_values

    def baselines(self) -> List[Tuple[str, "FeatureView"]]:
        """
        Counterparts of this feature in the linked baseline views.

        Baselines that do not contain the path are left out.
        """
        found: List[Tuple[str, FeatureView]] = []
        for label, view in self._parent.baseline.views():
            counterpart = view.get_feature(self.path)
            if counterpart is not None:
                found.append((label, counterpart))
        return found


class StatisticsView:
    """
    Normalized view over a primary snapshot and its optional baselines.

    Args:
        statistics: Primary snapshot
        by_weight: Use weighted counts where available
        environment: Active environment tag, if any
        baseline: Linked previous / serving views

    Raises:
        StatisticsInconsistencyError: If the snapshot repeats a feature path
    """

    def __init__(
        self,
        statistics: DatasetStatistics,
        by_weight: bool = False,
        environment: Optional[str] = None,
        baseline: Optional[Baseline] = None,
    ) -> None:
        self._statistics = statistics
        self._by_weight = by_weight
        self._environment = environment
        self._baseline = baseline if baseline is not None else NoBaseline()

        self._index: Dict[FeaturePath, FeatureStatistics] = {}
        for feature in statistics.features:
            if feature.path in self._index:
                raise StatisticsInconsistencyError(
                    f"Duplicate feature path in statistics: {format_path(feature.path)}"
                )
            self._index[feature.path] = feature

        logger.debug(
            "Statistics view over %d features (by_weight=%s, environment=%s, baseline=%s)",
            len(self._index),
            by_weight,
            environment,
            type(self._baseline).__name__,
        )

    @classmethod
    def linked(
        cls,
        statistics: DatasetStatistics,
        by_weight: bool = False,
        environment: Optional[str] = None,
        previous: Optional["StatisticsView"] = None,
        serving: Optional["StatisticsView"] = None,
    ) -> "StatisticsView":
        """Build a view from optional previous / serving views."""
        return cls(
            statistics,
            by_weight=by_weight,
            environment=environment,
            baseline=make_baseline(previous=previous, serving=serving),
        )

    @property
    def statistics(self) -> DatasetStatistics:
        return self._statistics

    @property
    def by_weight(self) -> bool:
        return self._by_weight

    @property
    def environment(self) -> Optional[str]:
        return self._environment

    @property
    def baseline(self) -> Baseline:
        return self._baseline

    def examples_count(self) -> float:
        if self._by_weight and self._statistics.weighted_num_examples is not None:
            return self._statistics.weighted_num_examples
        return self._statistics.num_examples

    def paths(self) -> List[FeaturePath]:
        return list(self._index)

    def get_feature(self, path: FeaturePath) -> Optional[FeatureView]:
        statistics = self._index.get(tuple(path))
        if statistics is None:
            return None
        return FeatureView(statistics, self)

    def features(self) -> Iterator[FeatureView]:
        """Yield every feature in snapshot order."""
        for statistics in self._index.values():
            yield FeatureView(statistics, self)

    def __iter__(self) -> Iterator[FeatureView]:
        return self.features()

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, tuple) and path in self._index
