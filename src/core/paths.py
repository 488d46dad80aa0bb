"""
Feature path helpers.

A feature path is an ordered tuple of field names identifying a feature
inside (possibly nested) records. Paths cross serialization boundaries as
dotted strings, e.g. ``("user", "age")`` <-> ``"user.age"``.
"""

from __future__ import annotations

from typing import Iterable, Tuple, Union

FeaturePath = Tuple[str, ...]

PATH_SEPARATOR = "."


def to_path(value: Union[str, Iterable[str]]) -> FeaturePath:
    """
    Coerce a dotted string or a sequence of steps into a FeaturePath.

    Raises:
        ValueError: If the path is empty or contains an empty step.
    """
    if isinstance(value, str):
        steps = tuple(value.split(PATH_SEPARATOR))
    else:
        steps = tuple(value)

    if not steps or any(not isinstance(s, str) or not s for s in steps):
        raise ValueError(f"Invalid feature path: {value!r}")
    return steps


def format_path(path: FeaturePath) -> str:
    return PATH_SEPARATOR.join(path)
