"""Custom exceptions for scaling constructs.

Every error here is a configuration error raised synchronously while the
construct tree is being built; nothing is retried.
"""

from __future__ import annotations

from typing import Any


class ScalingConstructsError(Exception):
    """Base exception for all scaling construct errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.error_code = error_code

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class ConfigurationError(ScalingConstructsError, ValueError):
    """Raised when construct configuration is invalid."""

    def __init__(self, message: str, config_key: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.config_key = config_key
        if config_key:
            self.details["config_key"] = config_key


class InsufficientIntervalsError(ConfigurationError):
    """Raised when fewer than two scaling intervals are supplied."""

    def __init__(self, count: int, **kwargs):
        super().__init__(
            f"You must supply at least 2 intervals for autoscaling, got {count}",
            config_key="scaling_steps",
            error_code="INSUFFICIENT_INTERVALS",
            **kwargs,
        )
        self.count = count
        self.details["count"] = count


class InvalidIntervalError(ConfigurationError):
    """Raised when a single scaling interval is malformed."""

    def __init__(self, message: str, interval: Any = None, **kwargs):
        kwargs.setdefault("error_code", "INVALID_INTERVAL")
        super().__init__(message, config_key="scaling_steps", **kwargs)
        self.interval = interval
        if interval is not None:
            self.details["interval"] = repr(interval)


class AmbiguousOpenBoundaryError(ConfigurationError):
    """Raised when more than one interval leaves the same side open."""

    def __init__(self, side: str, intervals: list[Any], **kwargs):
        super().__init__(
            f"Only one interval may omit its '{side}' bound, got {len(intervals)}: {intervals}",
            config_key="scaling_steps",
            error_code="AMBIGUOUS_OPEN_BOUNDARY",
            **kwargs,
        )
        self.side = side
        self.details.update({"side": side, "count": len(intervals)})


class IntervalGapOrOverlapError(ConfigurationError):
    """Raised when normalized intervals are not contiguous."""

    def __init__(self, message: str, kind: str, **kwargs):
        super().__init__(
            message,
            config_key="scaling_steps",
            error_code="GAP_OR_OVERLAP",
            **kwargs,
        )
        self.kind = kind
        self.details["kind"] = kind


class UnsupportedStatisticError(ConfigurationError):
    """Raised when a metric statistic can't drive step scaling."""

    def __init__(self, statistic: str | None, **kwargs):
        super().__init__(
            f"Can only scale on 'Minimum', 'Maximum', 'Average' metrics, got {statistic}",
            config_key="statistic",
            error_code="UNSUPPORTED_STATISTIC",
            **kwargs,
        )
        self.statistic = statistic
        self.details["statistic"] = statistic


class InvalidResourceShapeError(ConfigurationError):
    """Raised when an API resource path part or method is malformed."""

    def __init__(self, message: str, value: str | None = None, **kwargs):
        super().__init__(message, error_code="INVALID_RESOURCE_SHAPE", **kwargs)
        self.value = value
        if value is not None:
            self.details["value"] = value
