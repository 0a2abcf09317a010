"""Step scaling policies driven by CloudWatch alarms.

A step scaling policy maps ranges of a metric to capacity changes. It is
implemented with up to two alarms, one below and one above the neutral zone,
each triggering its own ``StepScalingAction``.
"""

from __future__ import annotations

import logging
from typing import Sequence

from aws_cdk import Duration
from aws_cdk import aws_autoscaling as autoscaling
from aws_cdk import aws_cloudwatch as cloudwatch
from constructs import Construct

from .intervals import ScalingInterval
from .planning import AlarmPlan, plan_step_scaling
from .step_scaling_action import StepScalingAction
from .types import AdjustmentType

logger = logging.getLogger(__name__)


class StepScalingPolicy(Construct):
    """Define a scaling strategy which scales depending on absolute values of some metric.

    You can specify the scaling behavior for various values of the metric.

    Implemented using one or more CloudWatch alarms and step scaling actions.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        auto_scaling_group: autoscaling.IAutoScalingGroup,
        metric: cloudwatch.Metric,
        scaling_steps: Sequence[ScalingInterval],
        adjustment_type: AdjustmentType | None = None,
        cooldown_seconds: int | None = None,
        estimated_instance_warmup_seconds: int | None = None,
        min_adjustment_magnitude: int | None = None,
    ) -> None:
        super().__init__(scope, construct_id)

        self.plan = plan_step_scaling(
            scaling_steps,
            statistic=metric.statistic,
            adjustment_type=adjustment_type,
            cooldown_seconds=cooldown_seconds,
            estimated_instance_warmup_seconds=estimated_instance_warmup_seconds,
            min_adjustment_magnitude=min_adjustment_magnitude,
        )

        self.lower_alarm: cloudwatch.Alarm | None = None
        self.lower_action: StepScalingAction | None = None
        self.upper_alarm: cloudwatch.Alarm | None = None
        self.upper_action: StepScalingAction | None = None

        if self.plan.lower is not None:
            self.lower_action, self.lower_alarm = self._create_alarm(
                self.plan.lower, auto_scaling_group, metric
            )
        if self.plan.upper is not None:
            self.upper_action, self.upper_alarm = self._create_alarm(
                self.plan.upper, auto_scaling_group, metric
            )

        logger.info(
            f"{self.node.path}: step scaling on {metric.metric_name} with "
            f"{len(self.plan.alarms)} alarm(s)"
        )

    def _create_alarm(
        self,
        alarm_plan: AlarmPlan,
        auto_scaling_group: autoscaling.IAutoScalingGroup,
        metric: cloudwatch.Metric,
    ) -> tuple[StepScalingAction, cloudwatch.Alarm]:
        prefix = alarm_plan.direction.value.capitalize()

        action = StepScalingAction(
            self, f"{prefix}Policy",
            auto_scaling_group=auto_scaling_group,
            adjustment_type=self.plan.adjustment_type,
            cooldown_seconds=self.plan.cooldown_seconds,
            estimated_instance_warmup_seconds=self.plan.estimated_instance_warmup_seconds,
            metric_aggregation_type=self.plan.metric_aggregation_type,
            min_adjustment_magnitude=self.plan.min_adjustment_magnitude,
        )
        for adjustment in alarm_plan.adjustments:
            action.add_adjustment(adjustment)

        alarm = cloudwatch.Alarm(
            self, f"{prefix}Alarm",
            metric=metric.with_(period=Duration.seconds(alarm_plan.period_seconds)),
            alarm_description=alarm_plan.description,
            comparison_operator=cloudwatch.ComparisonOperator[alarm_plan.comparison_operator.name],
            evaluation_periods=alarm_plan.evaluation_periods,
            threshold=alarm_plan.threshold,
        )
        alarm.add_alarm_action(action)

        return action, alarm


def scale_on_metric(
    auto_scaling_group: autoscaling.IAutoScalingGroup,
    construct_id: str,
    *,
    metric: cloudwatch.Metric,
    scaling_steps: Sequence[ScalingInterval],
    adjustment_type: AdjustmentType | None = None,
    cooldown_seconds: int | None = None,
    estimated_instance_warmup_seconds: int | None = None,
    min_adjustment_magnitude: int | None = None,
) -> StepScalingPolicy:
    """Scale an auto scaling group in steps based on a metric.

    The policy is created as a child of the group, or of the group's stack
    when the group is imported.
    """
    # Imported groups are interface proxies, not constructs
    scope = (
        auto_scaling_group
        if isinstance(auto_scaling_group, Construct)
        else auto_scaling_group.stack
    )
    return StepScalingPolicy(
        scope, construct_id,
        auto_scaling_group=auto_scaling_group,
        metric=metric,
        scaling_steps=scaling_steps,
        adjustment_type=adjustment_type,
        cooldown_seconds=cooldown_seconds,
        estimated_instance_warmup_seconds=estimated_instance_warmup_seconds,
        min_adjustment_magnitude=min_adjustment_magnitude,
    )
