"""Step scaling planning.

Computes the complete configuration of a step scaling policy as plain
values: normalized intervals, the metric aggregation, and up to two alarms,
one below and one above the neutral zone, each with its own step table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ..exceptions import ConfigurationError
from .intervals import NormalizedInterval, ScalingInterval, normalize_intervals
from .thresholds import (
    StepAdjustment,
    find_alarm_thresholds,
    lower_step_adjustments,
    lower_threshold,
    upper_step_adjustments,
    upper_threshold,
)
from .types import (
    AdjustmentType,
    AlarmDirection,
    ComparisonOperator,
    MetricAggregationType,
    aggregation_type_from_statistic,
)

logger = logging.getLogger(__name__)

# Recommended by AutoScaling: evaluate scaling alarms every minute
ALARM_PERIOD_SECONDS = 60
ALARM_EVALUATION_PERIODS = 1


@dataclass(frozen=True)
class AlarmPlan:
    """One scaling alarm and the steps its action applies."""

    direction: AlarmDirection
    interval_index: int
    threshold: float
    adjustments: tuple[StepAdjustment, ...]
    evaluation_periods: int = ALARM_EVALUATION_PERIODS
    period_seconds: int = ALARM_PERIOD_SECONDS

    @property
    def comparison_operator(self) -> ComparisonOperator:
        return self.direction.comparison_operator

    @property
    def description(self) -> str:
        return f"{self.direction.value.capitalize()} threshold scaling alarm"


@dataclass(frozen=True)
class StepScalingPlan:
    """Everything a step scaling policy needs, computed up front."""

    adjustment_type: AdjustmentType
    metric_aggregation_type: MetricAggregationType
    intervals: tuple[NormalizedInterval, ...]
    lower: AlarmPlan | None = None
    upper: AlarmPlan | None = None
    cooldown_seconds: int | None = None
    estimated_instance_warmup_seconds: int | None = None
    min_adjustment_magnitude: int | None = None

    @property
    def alarms(self) -> list[AlarmPlan]:
        return [alarm for alarm in (self.lower, self.upper) if alarm is not None]


def plan_step_scaling(
    scaling_steps: Sequence[ScalingInterval],
    *,
    statistic: str | None,
    adjustment_type: AdjustmentType | None = None,
    cooldown_seconds: int | None = None,
    estimated_instance_warmup_seconds: int | None = None,
    min_adjustment_magnitude: int | None = None,
) -> StepScalingPlan:
    """Compute alarms and step tables for a set of scaling intervals.

    Args:
        scaling_steps: Metric ranges mapped to capacity changes
        statistic: Statistic of the metric being scaled on
        adjustment_type: How changes are interpreted, defaults to ChangeInCapacity
        cooldown_seconds: Grace period after a scaling activity
        estimated_instance_warmup_seconds: Time until a new instance reports metrics
        min_adjustment_magnitude: Minimum absolute effect of percentage scaling

    Returns:
        The complete plan

    Raises:
        ConfigurationError: Or one of its subclasses, for any invalid input
    """
    # Fail on the statistic before doing any interval work
    aggregation = aggregation_type_from_statistic(statistic)
    adjustment_type = AdjustmentType(adjustment_type or AdjustmentType.CHANGE_IN_CAPACITY)

    for name, value in (
        ("cooldown_seconds", cooldown_seconds),
        ("estimated_instance_warmup_seconds", estimated_instance_warmup_seconds),
    ):
        if value is not None and value < 0:
            raise ConfigurationError(f"{name} can't be negative, got {value}", config_key=name)

    if min_adjustment_magnitude is not None:
        if adjustment_type is not AdjustmentType.PERCENT_CHANGE_IN_CAPACITY:
            raise ConfigurationError(
                "min_adjustment_magnitude only applies to PercentChangeInCapacity adjustments, "
                f"got {adjustment_type.value}",
                config_key="min_adjustment_magnitude",
            )
        if min_adjustment_magnitude < 1:
            raise ConfigurationError(
                f"min_adjustment_magnitude must be at least 1, got {min_adjustment_magnitude}",
                config_key="min_adjustment_magnitude",
            )

    intervals = normalize_intervals(scaling_steps, adjustment_type.is_absolute)
    thresholds = find_alarm_thresholds(intervals)

    lower = None
    if thresholds.lower_alarm_interval_index is not None:
        index = thresholds.lower_alarm_interval_index
        lower = AlarmPlan(
            direction=AlarmDirection.LOWER,
            interval_index=index,
            threshold=lower_threshold(intervals, index),
            adjustments=tuple(lower_step_adjustments(intervals, index)),
        )

    upper = None
    if thresholds.upper_alarm_interval_index is not None:
        index = thresholds.upper_alarm_interval_index
        upper = AlarmPlan(
            direction=AlarmDirection.UPPER,
            interval_index=index,
            threshold=upper_threshold(intervals, index),
            adjustments=tuple(upper_step_adjustments(intervals, index)),
        )

    if lower is None and upper is None:
        logger.warning("No interval outside the neutral zone changes capacity, the policy will never scale")

    return StepScalingPlan(
        adjustment_type=adjustment_type,
        metric_aggregation_type=aggregation,
        intervals=tuple(intervals),
        lower=lower,
        upper=upper,
        cooldown_seconds=cooldown_seconds,
        estimated_instance_warmup_seconds=estimated_instance_warmup_seconds,
        min_adjustment_magnitude=min_adjustment_magnitude,
    )


