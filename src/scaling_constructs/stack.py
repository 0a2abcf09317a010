"""CDK stack assembling step scaling policies from configuration."""

from __future__ import annotations

import logging

import aws_cdk as cdk
from aws_cdk import Duration, Stack
from aws_cdk import aws_autoscaling as autoscaling
from aws_cdk import aws_cloudwatch as cloudwatch
from constructs import Construct

from .autoscaling.step_scaling_policy import StepScalingPolicy
from .config import MetricConfig, ScalingConfig, StepScalingPolicyConfig

logger = logging.getLogger(__name__)


class ScalingStack(Stack):
    """Stack with one step scaling policy per configured policy.

    Auto scaling groups are imported by name; the stack only adds scaling
    policies and alarms to them.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: ScalingConfig,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # `environment` is taken on Stack
        self.env_name = config.environment
        self.groups: dict[str, autoscaling.IAutoScalingGroup] = {}
        self.policies: dict[str, StepScalingPolicy] = {}

        for policy_config in config.policies:
            self.policies[policy_config.name] = self._create_policy(policy_config)

        self._create_outputs()

    def _import_group(self, name: str) -> autoscaling.IAutoScalingGroup:
        # Several policies may scale the same group
        if name not in self.groups:
            self.groups[name] = autoscaling.AutoScalingGroup.from_auto_scaling_group_name(
                self, f"Group-{name}", name
            )
        return self.groups[name]

    def _create_policy(self, policy_config: StepScalingPolicyConfig) -> StepScalingPolicy:
        logger.info(
            f"Creating policy {policy_config.name} for group {policy_config.auto_scaling_group_name}"
        )
        return StepScalingPolicy(
            self, policy_config.name,
            auto_scaling_group=self._import_group(policy_config.auto_scaling_group_name),
            metric=build_metric(policy_config.metric),
            scaling_steps=policy_config.to_scaling_intervals(),
            adjustment_type=policy_config.adjustment_type,
            cooldown_seconds=policy_config.cooldown_seconds,
            estimated_instance_warmup_seconds=policy_config.estimated_instance_warmup_seconds,
            min_adjustment_magnitude=policy_config.min_adjustment_magnitude,
        )

    def _create_outputs(self) -> None:
        for name, policy in self.policies.items():
            for direction, action in (("Lower", policy.lower_action), ("Upper", policy.upper_action)):
                if action is None:
                    continue
                cdk.CfnOutput(
                    self, f"{name}{direction}PolicyArn",
                    value=action.scaling_policy_arn,
                    description=f"{direction} step scaling policy of {name} ({self.env_name})",
                )


def build_metric(metric_config: MetricConfig) -> cloudwatch.Metric:
    return cloudwatch.Metric(
        namespace=metric_config.namespace,
        metric_name=metric_config.metric_name,
        statistic=metric_config.statistic,
        dimensions_map=metric_config.dimensions or None,
        period=Duration.seconds(metric_config.period_seconds),
    )
