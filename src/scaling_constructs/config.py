"""Configuration management for scaling constructs.

Provides environment-specific loading and validation of step scaling
policy definitions.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from .autoscaling.intervals import ScalingInterval
from .autoscaling.types import AdjustmentType

ALLOWED_ENVIRONMENTS = ["dev", "staging", "prod"]
ALLOWED_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class MetricConfig(BaseModel):
    """CloudWatch metric a policy scales on."""

    namespace: str = Field("AWS/EC2", description="CloudWatch namespace")
    metric_name: str = Field("CPUUtilization", description="CloudWatch metric name")
    statistic: str = Field("Average", description="Statistic (Average/Minimum/Maximum)")
    dimensions: dict[str, str] = Field(default_factory=dict, description="Metric dimensions")
    period_seconds: int = Field(300, description="Metric period; alarms always use 60 seconds")


class ScalingStepConfig(BaseModel):
    """One metric range and its capacity change."""

    lower: float | None = Field(None, description="Lower bound, omit for minus infinity")
    upper: float | None = Field(None, description="Upper bound, omit for plus infinity")
    change: int = Field(..., description="Capacity change (or exact capacity)")


class StepScalingPolicyConfig(BaseModel):
    """Configuration for one step scaling policy."""

    name: str = Field(..., description="Construct id of the policy")
    auto_scaling_group_name: str = Field(..., description="Existing auto scaling group to scale")
    metric: MetricConfig = Field(default_factory=MetricConfig)
    scaling_steps: list[ScalingStepConfig] = Field(..., description="Scaling intervals")
    adjustment_type: AdjustmentType = Field(
        AdjustmentType.CHANGE_IN_CAPACITY, description="How changes are interpreted"
    )
    cooldown_seconds: int | None = Field(None, description="Grace period after scaling")
    estimated_instance_warmup_seconds: int | None = Field(
        None, description="Time until a new instance reports metrics"
    )
    min_adjustment_magnitude: int | None = Field(
        None, description="Minimum effect of percentage scaling"
    )

    def to_scaling_intervals(self) -> list[ScalingInterval]:
        return [
            ScalingInterval(lower=step.lower, upper=step.upper, change=step.change)
            for step in self.scaling_steps
        ]


class ScalingConfig(BaseModel):
    """Main configuration class for scaling constructs."""

    # Environment
    environment: str = Field(..., description="Deployment environment")
    aws_region: str = Field("us-east-1", description="AWS region")
    aws_account_id: str | None = Field(None, description="AWS account ID")

    policies: list[StepScalingPolicyConfig] = Field(
        default_factory=list, description="Step scaling policies"
    )

    # Logging
    log_level: str = Field("INFO", description="Logging level")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment values."""
        if v not in ALLOWED_ENVIRONMENTS:
            raise ValueError(f"Environment must be one of: {ALLOWED_ENVIRONMENTS}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level values."""
        if v.upper() not in ALLOWED_LOG_LEVELS:
            raise ValueError(f"Log level must be one of: {ALLOWED_LOG_LEVELS}")
        return v.upper()

    @field_validator("policies")
    @classmethod
    def validate_unique_policy_names(
        cls, v: list[StepScalingPolicyConfig]
    ) -> list[StepScalingPolicyConfig]:
        """Policy names become construct ids and must not collide."""
        names = [policy.name for policy in v]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate policy names: {duplicates}")
        return v

    def get_policy(self, name: str) -> StepScalingPolicyConfig:
        for policy in self.policies:
            if policy.name == name:
                return policy
        raise KeyError(f"No policy named {name!r}")

    @classmethod
    def from_env(cls) -> "ScalingConfig":
        """Load configuration from environment variables.

        Policies can't be expressed as environment variables; the result has
        the environment defaults from ``get_default_config``.
        """
        environment = os.environ.get("ENVIRONMENT", "dev")

        config_data = get_default_config(environment)
        config_data.update(
            {
                "aws_region": os.environ.get("AWS_REGION", "us-east-1"),
                "aws_account_id": os.environ.get("AWS_ACCOUNT_ID"),
                "log_level": os.environ.get("LOG_LEVEL", "INFO"),
            }
        )

        return cls(**config_data)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ScalingConfig":
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file

        Returns:
            ScalingConfig instance loaded from the file
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        # Try to infer environment from filename if not provided
        if "environment" not in data:
            stem = config_path.stem.lower()
            if stem in ALLOWED_ENVIRONMENTS:
                data["environment"] = stem
            else:
                data["environment"] = os.environ.get("ENVIRONMENT", "dev")

        data.setdefault("aws_account_id", os.getenv("AWS_ACCOUNT_ID"))

        return cls(**data)


def default_config_path(environment: str) -> Path:
    return Path(__file__).parent.parent.parent / "config" / f"{environment}.yml"


def load_config(environment: str, config_path: Path | None = None) -> ScalingConfig:
    """Load configuration for the specified environment.

    Args:
        environment: Target environment (dev/staging/prod)
        config_path: Optional custom config file path

    Returns:
        Loaded configuration object

    Raises:
        FileNotFoundError: If config file is not found
        ValueError: If configuration is invalid
    """
    if config_path is None:
        config_path = default_config_path(environment)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        config_data = yaml.safe_load(f) or {}

    config_data["environment"] = environment

    if "aws_account_id" not in config_data:
        config_data["aws_account_id"] = os.getenv("AWS_ACCOUNT_ID")

    return ScalingConfig(**config_data)


def get_default_config(environment: str) -> dict[str, Any]:
    """Get default configuration for an environment.

    Args:
        environment: Target environment

    Returns:
        Default configuration dictionary with a CPU based policy
    """
    cpu_steps: list[dict[str, Any]] = [
        {"upper": 30, "change": -1},
        {"lower": 30, "upper": 70, "change": 0},
        {"lower": 70, "change": 1},
    ]
    cooldown_seconds = 300

    # Environment-specific overrides
    if environment == "prod":
        cpu_steps = [
            {"upper": 30, "change": -1},
            {"lower": 30, "upper": 70, "change": 0},
            {"lower": 70, "upper": 90, "change": 2},
            {"lower": 90, "change": 4},
        ]
    elif environment == "dev":
        cooldown_seconds = 120  # React faster in dev

    return {
        "environment": environment,
        "aws_region": "us-east-1",
        "policies": [
            {
                "name": "CpuStepScaling",
                "auto_scaling_group_name": f"app-asg-{environment}",
                "metric": {
                    "namespace": "AWS/EC2",
                    "metric_name": "CPUUtilization",
                    "statistic": "Average",
                    "dimensions": {"AutoScalingGroupName": f"app-asg-{environment}"},
                },
                "scaling_steps": cpu_steps,
                "cooldown_seconds": cooldown_seconds,
            }
        ],
    }
