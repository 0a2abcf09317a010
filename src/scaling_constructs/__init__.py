"""Scaling Constructs - declarative AWS infrastructure building blocks.

Models auto scaling groups, queues and REST APIs as composable CDK
constructs. The core is step scaling: turning a list of metric intervals
into CloudWatch alarms and step adjustment tables.
"""

__version__ = "0.1.0"

from .config import ScalingConfig
from .exceptions import ConfigurationError, ScalingConstructsError

__all__ = [
    "ConfigurationError",
    "ScalingConfig",
    "ScalingConstructsError",
]
