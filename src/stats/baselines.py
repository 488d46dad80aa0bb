"""
Baseline links for a statistics view.

A primary snapshot can be compared against a previous run, a serving run, or
both. The link is an explicit variant rather than a pair of nullable
references, so "no baseline" is a value of its own.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple, Union

if TYPE_CHECKING:
    from .view import StatisticsView

PREVIOUS = "previous"
SERVING = "serving"


@dataclass(frozen=True)
class NoBaseline:
    """The view is not anchored to any other snapshot."""

    def views(self) -> Tuple[Tuple[str, "StatisticsView"], ...]:
        return ()


@dataclass(frozen=True)
class PreviousOnly:
    """Anchored to a prior run of the same dataset."""

    previous: "StatisticsView"

    def views(self) -> Tuple[Tuple[str, "StatisticsView"], ...]:
        return ((PREVIOUS, self.previous),)


@dataclass(frozen=True)
class ServingOnly:
    """Anchored to statistics collected at serving time."""

    serving: "StatisticsView"

    def views(self) -> Tuple[Tuple[str, "StatisticsView"], ...]:
        return ((SERVING, self.serving),)


@dataclass(frozen=True)
class Both:
    """
    Anchored to both a previous run and a serving run.

    Drift is measured against each and the larger distance wins.
    """

    previous: "StatisticsView"
    serving: "StatisticsView"

    def views(self) -> Tuple[Tuple[str, "StatisticsView"], ...]:
        return ((PREVIOUS, self.previous), (SERVING, self.serving))


Baseline = Union[NoBaseline, PreviousOnly, ServingOnly, Both]


def make_baseline(
    previous: Optional["StatisticsView"] = None,
    serving: Optional["StatisticsView"] = None,
) -> Baseline:
    """Pick the variant matching which baseline views are available."""
    if previous is not None and serving is not None:
        return Both(previous=previous, serving=serving)
    if previous is not None:
        return PreviousOnly(previous=previous)
    if serving is not None:
        return ServingOnly(serving=serving)
    return NoBaseline()
