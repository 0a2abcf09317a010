"""Step scaling action resource.

Wraps an ``AWS::AutoScaling::ScalingPolicy`` of type ``StepScaling`` and
exposes it as a CloudWatch alarm action.
"""

from __future__ import annotations

import logging

import jsii
from aws_cdk import aws_autoscaling as autoscaling
from aws_cdk import aws_cloudwatch as cloudwatch
from constructs import Construct

from ..exceptions import ConfigurationError
from .thresholds import StepAdjustment
from .types import AdjustmentType, MetricAggregationType

logger = logging.getLogger(__name__)


@jsii.implements(cloudwatch.IAlarmAction)
class StepScalingAction(Construct):
    """Scaling policy that adjusts capacity in steps when its alarm fires.

    Adjustments are added after construction with ``add_adjustment``; they are
    rendered in the order they were added.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        auto_scaling_group: autoscaling.IAutoScalingGroup,
        adjustment_type: AdjustmentType | None = None,
        cooldown_seconds: int | None = None,
        estimated_instance_warmup_seconds: int | None = None,
        metric_aggregation_type: MetricAggregationType | None = None,
        min_adjustment_magnitude: int | None = None,
    ) -> None:
        super().__init__(scope, construct_id)

        self._adjustments: list[StepAdjustment] = []

        self.resource = autoscaling.CfnScalingPolicy(
            self, "Resource",
            policy_type="StepScaling",
            auto_scaling_group_name=auto_scaling_group.auto_scaling_group_name,
            adjustment_type=adjustment_type.value if adjustment_type else None,
            cooldown=str(cooldown_seconds) if cooldown_seconds is not None else None,
            estimated_instance_warmup=estimated_instance_warmup_seconds,
            metric_aggregation_type=metric_aggregation_type.value if metric_aggregation_type else None,
            min_adjustment_magnitude=min_adjustment_magnitude,
        )

        self.scaling_policy_arn = self.resource.ref

    @property
    def adjustments(self) -> tuple[StepAdjustment, ...]:
        return tuple(self._adjustments)

    def add_adjustment(self, adjustment: StepAdjustment) -> None:
        """Add a step to the policy.

        Raises:
            ConfigurationError: If the step has neither a lower nor an upper bound
        """
        if adjustment.lower_bound is None and adjustment.upper_bound is None:
            raise ConfigurationError(
                "At least one of lower_bound or upper_bound is required",
                config_key="step_adjustments",
            )

        self._adjustments.append(adjustment)
        self.resource.step_adjustments = [_render_adjustment(a) for a in self._adjustments]
        logger.debug(f"{self.node.path}: added step {adjustment}")

    def bind(self, scope: Construct, alarm: cloudwatch.IAlarm) -> cloudwatch.AlarmActionConfig:
        return cloudwatch.AlarmActionConfig(alarm_action_arn=self.scaling_policy_arn)


def _render_adjustment(adjustment: StepAdjustment) -> autoscaling.CfnScalingPolicy.StepAdjustmentProperty:
    return autoscaling.CfnScalingPolicy.StepAdjustmentProperty(
        scaling_adjustment=adjustment.adjustment,
        metric_interval_lower_bound=adjustment.lower_bound,
        metric_interval_upper_bound=adjustment.upper_bound,
    )
