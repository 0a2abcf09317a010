"""Alarm threshold derivation for step scaling.

Given normalized intervals, decide where the neutral zone sits, which
interval on each side of it anchors an alarm, and the step adjustment table
each alarm's scaling action carries. Step bounds are relative to the alarm
threshold, the shape CloudWatch-triggered step scaling policies expect.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ..exceptions import ConfigurationError
from .intervals import NormalizedInterval

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NeutralZone:
    """Half-open index range ``[start, end)`` where no scaling happens.

    ``start == end`` means the zone is just the boundary between
    ``intervals[start - 1]`` and ``intervals[start]``.
    """

    start: int
    end: int

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


@dataclass(frozen=True)
class AlarmThresholds:
    """Indices of the intervals whose boundary becomes an alarm threshold."""

    lower_alarm_interval_index: int | None = None
    upper_alarm_interval_index: int | None = None


@dataclass(frozen=True)
class StepAdjustment:
    """A capacity change for a metric range relative to an alarm threshold.

    A ``None`` bound extends the step to infinity on that side.
    """

    adjustment: int
    lower_bound: float | None = None
    upper_bound: float | None = None


def find_neutral_zone(intervals: Sequence[NormalizedInterval]) -> NeutralZone:
    """Locate the range of intervals that triggers no scaling.

    With zero-change intervals present, the zone runs from the first to the
    last of them. Without any, the zone is the boundary after the leading
    run of negative changes, or the middle boundary when every change has
    the same sign (typical for exact capacities).
    """
    count = len(intervals)
    if count < 2:
        raise ConfigurationError(
            f"Need at least 2 normalized intervals, got {count}", config_key="scaling_steps"
        )

    zero_indices = [i for i, interval in enumerate(intervals) if interval.change == 0]
    if zero_indices:
        zone = NeutralZone(zero_indices[0], zero_indices[-1] + 1)
        swallowed = [i for i in range(zone.start, zone.end) if intervals[i].change != 0]
        if swallowed:
            logger.warning(
                f"Intervals {swallowed} lie between zero-change intervals and will never scale"
            )
        return zone

    split = 0
    while split < count and intervals[split].change < 0:
        split += 1
    if split in (0, count):
        split = count // 2

    logger.debug(f"No zero-change interval, splitting alarms at boundary index {split}")
    return NeutralZone(split, split)


def find_alarm_thresholds(intervals: Sequence[NormalizedInterval]) -> AlarmThresholds:
    """Pick the intervals adjacent to the neutral zone as alarm anchors."""
    zone = find_neutral_zone(intervals)

    lower_index = zone.start - 1 if zone.start > 0 else None
    upper_index = zone.end if zone.end < len(intervals) else None

    logger.debug(
        f"Neutral zone [{zone.start}, {zone.end}): lower alarm interval {lower_index}, "
        f"upper alarm interval {upper_index}"
    )
    return AlarmThresholds(
        lower_alarm_interval_index=lower_index,
        upper_alarm_interval_index=upper_index,
    )


def lower_threshold(intervals: Sequence[NormalizedInterval], index: int) -> float:
    """Threshold of the lower alarm: the upper bound of its interval."""
    value = intervals[index].upper_value
    if value is None:
        raise ConfigurationError(
            f"Interval {index} has no upper bound to put a lower alarm on",
            config_key="scaling_steps",
        )
    return value


def upper_threshold(intervals: Sequence[NormalizedInterval], index: int) -> float:
    """Threshold of the upper alarm: the lower bound of its interval."""
    value = intervals[index].lower_value
    if value is None:
        raise ConfigurationError(
            f"Interval {index} has no lower bound to put an upper alarm on",
            config_key="scaling_steps",
        )
    return value


def lower_step_adjustments(
    intervals: Sequence[NormalizedInterval], index: int
) -> list[StepAdjustment]:
    """Build the lower alarm's steps, from its threshold down to minus infinity."""
    threshold = lower_threshold(intervals, index)
    steps = []
    for i in range(index, -1, -1):
        interval = intervals[i]
        steps.append(
            StepAdjustment(
                adjustment=interval.change,
                # The outermost step always extends to -infinity
                lower_bound=interval.lower_value - threshold if i != 0 else None,
                upper_bound=interval.upper_value - threshold,
            )
        )
    return steps


def upper_step_adjustments(
    intervals: Sequence[NormalizedInterval], index: int
) -> list[StepAdjustment]:
    """Build the upper alarm's steps, from its threshold up to plus infinity."""
    threshold = upper_threshold(intervals, index)
    last = len(intervals) - 1
    steps = []
    for i in range(index, last + 1):
        interval = intervals[i]
        steps.append(
            StepAdjustment(
                adjustment=interval.change,
                lower_bound=interval.lower_value - threshold,
                # The outermost step always extends to +infinity
                upper_bound=interval.upper_value - threshold if i != last else None,
            )
        )
    return steps
