"""Pytest configuration and shared fixtures for Scaling Constructs tests."""

from __future__ import annotations

import pytest

from scaling_constructs.autoscaling.intervals import ScalingInterval
from scaling_constructs.config import ScalingConfig


def make_policy_dict(name: str = "CpuStepScaling") -> dict:
    return {
        "name": name,
        "auto_scaling_group_name": "test-asg",
        "metric": {
            "namespace": "AWS/EC2",
            "metric_name": "CPUUtilization",
            "statistic": "Average",
            "dimensions": {"AutoScalingGroupName": "test-asg"},
        },
        "scaling_steps": [
            {"upper": 10, "change": -1},
            {"lower": 10, "upper": 50, "change": 0},
            {"lower": 50, "change": 1},
        ],
        "cooldown_seconds": 300,
    }


@pytest.fixture
def sample_config() -> ScalingConfig:
    """Sample configuration for testing."""
    config_data = {
        "environment": "dev",
        "aws_region": "us-east-1",
        "policies": [make_policy_dict()],
    }
    return ScalingConfig(**config_data)


@pytest.fixture
def three_step_intervals() -> list[ScalingInterval]:
    """Scale in below 10, hold between 10 and 50, scale out above 50."""
    return [
        ScalingInterval(upper=10, change=-1),
        ScalingInterval(lower=10, upper=50, change=0),
        ScalingInterval(lower=50, change=1),
    ]


@pytest.fixture
def cdk_stack():
    """An empty stack to add constructs to."""
    import aws_cdk as cdk

    app = cdk.App()
    return cdk.Stack(app, "TestStack", env=cdk.Environment(account="123456789012", region="us-east-1"))


@pytest.fixture
def auto_scaling_group(cdk_stack):
    """An auto scaling group imported by name."""
    from aws_cdk import aws_autoscaling as autoscaling

    return autoscaling.AutoScalingGroup.from_auto_scaling_group_name(
        cdk_stack, "Group", "test-asg"
    )


@pytest.fixture
def cpu_metric():
    from aws_cdk import aws_cloudwatch as cloudwatch

    return cloudwatch.Metric(
        namespace="AWS/EC2",
        metric_name="CPUUtilization",
        statistic="Average",
        dimensions_map={"AutoScalingGroupName": "test-asg"},
    )
