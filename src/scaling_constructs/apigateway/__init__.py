"""API Gateway REST API resource tree constructs."""

from .resource import (
    ApiDeployment,
    ApiResource,
    RestApi,
    validate_http_method,
    validate_resource_path_part,
)

__all__ = [
    "ApiDeployment",
    "ApiResource",
    "RestApi",
    "validate_http_method",
    "validate_resource_path_part",
]
