"""Auto scaling constructs.

Step scaling from user supplied metric intervals: interval normalization,
alarm threshold derivation and planning live here and need no CDK runtime.
The constructs that emit the policies are in ``step_scaling_policy`` and
``step_scaling_action``.
"""

from .intervals import (
    UNBOUNDED,
    Bound,
    Bounded,
    NormalizedInterval,
    ScalingInterval,
    Unbounded,
    normalize_intervals,
)
from .planning import AlarmPlan, StepScalingPlan, plan_step_scaling
from .thresholds import (
    AlarmThresholds,
    NeutralZone,
    StepAdjustment,
    find_alarm_thresholds,
    find_neutral_zone,
    lower_step_adjustments,
    upper_step_adjustments,
)
from .types import (
    AdjustmentType,
    AlarmDirection,
    ComparisonOperator,
    MetricAggregationType,
    aggregation_type_from_statistic,
)

__all__ = [
    "AdjustmentType",
    "AlarmDirection",
    "AlarmPlan",
    "AlarmThresholds",
    "Bound",
    "Bounded",
    "ComparisonOperator",
    "MetricAggregationType",
    "NeutralZone",
    "NormalizedInterval",
    "ScalingInterval",
    "StepAdjustment",
    "StepScalingPlan",
    "UNBOUNDED",
    "Unbounded",
    "aggregation_type_from_statistic",
    "find_alarm_thresholds",
    "find_neutral_zone",
    "lower_step_adjustments",
    "normalize_intervals",
    "plan_step_scaling",
    "upper_step_adjustments",
]
