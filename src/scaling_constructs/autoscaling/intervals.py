"""Scaling interval types and normalization.

Users describe step scaling as a list of metric ranges, each mapped to a
capacity change. Ranges may arrive unsorted and may leave one side open; the
neighbouring range supplies the missing boundary. Normalization turns that
list into a sorted, contiguous sequence of half-open ``[lower, upper)``
intervals where only the two outer ends are unbounded.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from numbers import Real
from typing import Sequence, Union

from ..exceptions import (
    AmbiguousOpenBoundaryError,
    InsufficientIntervalsError,
    IntervalGapOrOverlapError,
    InvalidIntervalError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScalingInterval:
    """A range of metric values mapped to a capacity adjustment.

    ``None`` for ``lower`` means minus infinity, for ``upper`` plus infinity.
    """

    lower: float | None = None
    upper: float | None = None
    change: int | None = None


@dataclass(frozen=True)
class Bounded:
    """A finite interval boundary."""

    value: float


class Unbounded:
    """An infinite interval boundary. Use the ``UNBOUNDED`` singleton."""

    _instance: Unbounded | None = None

    def __new__(cls) -> Unbounded:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNBOUNDED"


UNBOUNDED = Unbounded()

Bound = Union[Bounded, Unbounded]


def bound_value(bound: Bound) -> float | None:
    """Return the finite value of a bound, ``None`` when unbounded."""
    if isinstance(bound, Bounded):
        return bound.value
    return None


@dataclass(frozen=True)
class NormalizedInterval:
    """An interval with both boundaries resolved."""

    lower: Bound
    upper: Bound
    change: int

    @property
    def lower_value(self) -> float | None:
        return bound_value(self.lower)

    @property
    def upper_value(self) -> float | None:
        return bound_value(self.upper)

    def to_scaling_interval(self) -> ScalingInterval:
        return ScalingInterval(lower=self.lower_value, upper=self.upper_value, change=self.change)


def normalize_intervals(
    steps: Sequence[ScalingInterval], absolute: bool = False
) -> list[NormalizedInterval]:
    """Sort, complete and validate a list of scaling intervals.

    Args:
        steps: User supplied intervals, in any order
        absolute: Whether changes are exact capacities rather than deltas.
            Changes pass through untouched either way; absolute changes must
            not be negative.

    Returns:
        Contiguous intervals in ascending metric order. The first interval's
        lower bound and the last interval's upper bound are ``UNBOUNDED``
        when the user left them open.

    Raises:
        InsufficientIntervalsError: Fewer than two intervals
        InvalidIntervalError: A malformed interval
        AmbiguousOpenBoundaryError: Several intervals leave the same side open
        IntervalGapOrOverlapError: The completed intervals don't tile the line
    """
    steps = list(steps)
    if len(steps) < 2:
        raise InsufficientIntervalsError(len(steps))

    for step in steps:
        _validate_step(step, absolute)

    for side in ("lower", "upper"):
        open_steps = [s for s in steps if getattr(s, side) is None]
        if len(open_steps) > 1:
            raise AmbiguousOpenBoundaryError(side, open_steps)

    # sorted() is stable; an open-lower step ending at x precedes one starting at x
    ordered = sorted(steps, key=_sort_key)
    filled = _fill_bounds(ordered)
    _check_contiguous(filled)

    logger.debug(
        f"Normalized {len(filled)} intervals ({'absolute' if absolute else 'relative'} changes): "
        f"{[(i.lower_value, i.upper_value, i.change) for i in filled]}"
    )
    return filled


def _validate_step(step: ScalingInterval, absolute: bool) -> None:
    if step.lower is None and step.upper is None:
        raise InvalidIntervalError(
            f"Must supply at least one of 'upper' or 'lower', got: {step}", interval=step
        )

    for name in ("lower", "upper"):
        value = getattr(step, name)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, Real) or math.isnan(value):
            raise InvalidIntervalError(f"'{name}' must be a number, got: {step}", interval=step)
        if math.isinf(value):
            raise InvalidIntervalError(
                f"'{name}' must be finite, leave it out to extend to infinity: {step}",
                interval=step,
            )

    if step.lower is not None and step.upper is not None and step.lower >= step.upper:
        raise InvalidIntervalError(
            f"'lower' must be smaller than 'upper', got: {step}", interval=step
        )

    change = step.change
    if change is None:
        raise InvalidIntervalError(f"Every interval must supply 'change', got: {step}", interval=step)
    if isinstance(change, bool) or not isinstance(change, Real) or not float(change).is_integer():
        raise InvalidIntervalError(f"'change' must be a whole number, got: {step}", interval=step)
    if absolute and change < 0:
        raise InvalidIntervalError(
            f"Exact capacity can't be negative, got: {step}", interval=step
        )


def _sort_key(step: ScalingInterval) -> tuple[float, int]:
    if step.lower is not None:
        return (step.lower, 1)
    return (step.upper, 0)


def _fill_bounds(ordered: list[ScalingInterval]) -> list[NormalizedInterval]:
    last = len(ordered) - 1
    filled = []

    for i, step in enumerate(ordered):
        lower = step.lower
        if lower is None and i > 0:
            lower = ordered[i - 1].upper
        upper = step.upper
        if upper is None and i < last:
            upper = ordered[i + 1].lower

        if (lower is None and i > 0) or (upper is None and i < last):
            # Only a neighbour open towards this interval leaves a hole here
            raise IntervalGapOrOverlapError(
                f"Could not determine the lower and upper bounds for {step}; "
                f"intervals {ordered[max(i - 1, 0)]} and {ordered[min(i + 1, last)]} overlap",
                kind="overlap",
            )

        filled.append(
            NormalizedInterval(
                lower=Bounded(float(lower)) if lower is not None else UNBOUNDED,
                upper=Bounded(float(upper)) if upper is not None else UNBOUNDED,
                change=int(step.change),
            )
        )

    return filled


def _check_contiguous(intervals: list[NormalizedInterval]) -> None:
    for interval in intervals:
        lower, upper = interval.lower_value, interval.upper_value
        if lower is not None and upper is not None and lower >= upper:
            raise IntervalGapOrOverlapError(
                f"Interval [{lower}, {upper}) is empty after completing bounds; "
                f"its neighbours overlap it",
                kind="overlap",
            )

    for current, following in zip(intervals, intervals[1:]):
        upper, lower = current.upper_value, following.lower_value
        if upper < lower:
            raise IntervalGapOrOverlapError(
                f"Gap between intervals: nothing covers [{upper}, {lower})", kind="gap"
            )
        if upper > lower:
            raise IntervalGapOrOverlapError(
                f"Two intervals overlap: [{current.lower_value}, {upper}) and [{lower}, {following.upper_value})",
                kind="overlap",
            )
