import pytest

from scaling_constructs.autoscaling.types import (
    AdjustmentType,
    AlarmDirection,
    ComparisonOperator,
    MetricAggregationType,
    aggregation_type_from_statistic,
)
from scaling_constructs.exceptions import ConfigurationError, UnsupportedStatisticError


@pytest.mark.parametrize(
    "statistic, expected",
    [
        ("Average", MetricAggregationType.AVERAGE),
        ("avg", MetricAggregationType.AVERAGE),
        ("Minimum", MetricAggregationType.MINIMUM),
        ("min", MetricAggregationType.MINIMUM),
        ("MAXIMUM", MetricAggregationType.MAXIMUM),
        (" Max ", MetricAggregationType.MAXIMUM),
    ],
)
def test_statistic_maps_to_aggregation(statistic, expected):
    assert aggregation_type_from_statistic(statistic) is expected


@pytest.mark.parametrize("statistic", ["p99", "Sum", "SampleCount", "tm90", "", None])
def test_unsupported_statistic(statistic):
    with pytest.raises(UnsupportedStatisticError) as exc_info:
        aggregation_type_from_statistic(statistic)

    assert exc_info.value.statistic == statistic
    assert isinstance(exc_info.value, ConfigurationError)


def test_unsupported_statistic_message():
    with pytest.raises(UnsupportedStatisticError, match="'Minimum', 'Maximum', 'Average'.*p99"):
        aggregation_type_from_statistic("p99")


def test_only_exact_capacity_is_absolute():
    assert AdjustmentType.EXACT_CAPACITY.is_absolute
    assert not AdjustmentType.CHANGE_IN_CAPACITY.is_absolute
    assert not AdjustmentType.PERCENT_CHANGE_IN_CAPACITY.is_absolute


def test_adjustment_type_parses_cloudformation_names():
    assert AdjustmentType("PercentChangeInCapacity") is AdjustmentType.PERCENT_CHANGE_IN_CAPACITY


def test_alarm_direction_comparison():
    assert (
        AlarmDirection.LOWER.comparison_operator
        is ComparisonOperator.LESS_THAN_OR_EQUAL_TO_THRESHOLD
    )
    assert (
        AlarmDirection.UPPER.comparison_operator
        is ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD
    )
