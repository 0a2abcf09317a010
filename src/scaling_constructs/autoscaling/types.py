"""Closed enumerations shared by the step scaling constructs."""

from __future__ import annotations

import logging
from enum import Enum

from ..exceptions import UnsupportedStatisticError

logger = logging.getLogger(__name__)


class AdjustmentType(str, Enum):
    """How the ``change`` of a scaling interval is interpreted."""

    CHANGE_IN_CAPACITY = "ChangeInCapacity"
    PERCENT_CHANGE_IN_CAPACITY = "PercentChangeInCapacity"
    EXACT_CAPACITY = "ExactCapacity"

    @property
    def is_absolute(self) -> bool:
        return self is AdjustmentType.EXACT_CAPACITY


class MetricAggregationType(str, Enum):
    """Aggregation applied to the metric by the scaling policy."""

    AVERAGE = "Average"
    MINIMUM = "Minimum"
    MAXIMUM = "Maximum"


class ComparisonOperator(str, Enum):
    """Alarm comparisons used by step scaling alarms."""

    LESS_THAN_OR_EQUAL_TO_THRESHOLD = "LessThanOrEqualToThreshold"
    GREATER_THAN_OR_EQUAL_TO_THRESHOLD = "GreaterThanOrEqualToThreshold"


class AlarmDirection(str, Enum):
    """Which side of the neutral zone an alarm watches."""

    LOWER = "lower"
    UPPER = "upper"

    @property
    def comparison_operator(self) -> ComparisonOperator:
        if self is AlarmDirection.LOWER:
            return ComparisonOperator.LESS_THAN_OR_EQUAL_TO_THRESHOLD
        return ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD


# CloudWatch accepts these shorthands anywhere a statistic name is expected
_STATISTIC_ALIASES = {
    "average": MetricAggregationType.AVERAGE,
    "avg": MetricAggregationType.AVERAGE,
    "minimum": MetricAggregationType.MINIMUM,
    "min": MetricAggregationType.MINIMUM,
    "maximum": MetricAggregationType.MAXIMUM,
    "max": MetricAggregationType.MAXIMUM,
}


def aggregation_type_from_statistic(statistic: str | None) -> MetricAggregationType:
    """Map a metric statistic to the policy's aggregation type.

    Args:
        statistic: Statistic configured on the source metric

    Returns:
        Matching aggregation type

    Raises:
        UnsupportedStatisticError: For percentiles, ``Sum``, ``SampleCount`` and
            anything else step scaling can't aggregate on
    """
    key = statistic.strip().lower() if isinstance(statistic, str) else None
    aggregation = _STATISTIC_ALIASES.get(key) if key else None
    if aggregation is None:
        raise UnsupportedStatisticError(statistic)

    logger.debug(f"Statistic {statistic!r} maps to aggregation {aggregation.value}")
    return aggregation
