"""REST API resource tree.

A ``RestApi`` is the root of a tree of ``ApiResource`` path parts. Every
resource and method added to the tree is folded into the logical ID of the
API's latest deployment, so changing the API model produces a new deployment
when the stack is updated.
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
from typing import Any, Protocol

import aws_cdk as cdk
from aws_cdk import aws_apigateway as apigw
from constructs import Construct

from ..exceptions import InvalidResourceShapeError

logger = logging.getLogger(__name__)

_PATH_PART_PATTERN = re.compile(r"^[a-zA-Z0-9._-]+$")

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS", "ANY"})


def validate_resource_path_part(part: str) -> None:
    """Check a path part, allowing one pair of curly braces for path parameters.

    Raises:
        InvalidResourceShapeError: If the part contains anything else
    """
    stripped = part
    if stripped.startswith("{") and stripped.endswith("}"):
        stripped = stripped[1:-1]

    if not _PATH_PART_PATTERN.match(stripped):
        raise InvalidResourceShapeError(
            "Resource's path part only allow a-zA-Z0-9._- and curly braces at the "
            f"beginning and the end: {part}",
            value=part,
        )


def validate_http_method(http_method: str) -> str:
    """Return the upper-cased method, raising if API Gateway doesn't accept it."""
    verb = http_method.upper()
    if verb not in HTTP_METHODS:
        raise InvalidResourceShapeError(
            f"Unsupported HTTP method {http_method!r}, expected one of {sorted(HTTP_METHODS)}",
            value=http_method,
        )
    return verb


class IRestApiResource(Protocol):
    """Anything a child resource can hang off: the API root or another resource."""

    rest_api: RestApi
    resource_id: str
    path: str


class ApiDeployment(Construct):
    """An ``AWS::ApiGateway::Deployment`` whose logical ID tracks the API model."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        rest_api_id: str,
        description: str | None = None,
        retain: bool = True,
    ) -> None:
        super().__init__(scope, construct_id)

        self.resource = apigw.CfnDeployment(
            self, "Resource",
            rest_api_id=rest_api_id,
            description=description,
        )
        if retain:
            self.resource.apply_removal_policy(cdk.RemovalPolicy.RETAIN)

        self.deployment_id = self.resource.ref
        self._original_logical_id = cdk.Stack.of(self).get_logical_id(self.resource)
        self._hash_components: list[Any] = []

    def add_to_logical_id(self, data: Any) -> None:
        """Fold ``data`` into the logical ID hash; tokens are resolved first."""
        self._hash_components.append(cdk.Stack.of(self).resolve(data))
        self.resource.override_logical_id(self._calculate_logical_id())

    def add_dependency(self, target: cdk.CfnResource) -> None:
        self.resource.add_dependency(target)

    def _calculate_logical_id(self) -> str:
        if not self._hash_components:
            return self._original_logical_id

        md5 = hashlib.md5()
        for component in self._hash_components:
            md5.update(json.dumps(component, sort_keys=True).encode("utf-8"))
        return self._original_logical_id + md5.hexdigest()


class _ResourceBase(Construct):
    """Shared child creation for the API root and its resources."""

    rest_api: RestApi
    resource_id: str
    path: str

    def add_resource(self, path_part: str) -> ApiResource:
        """Define a child resource of this one."""
        return ApiResource(self, path_part, parent=self, path_part=path_part)

    def add_method(
        self,
        http_method: str,
        *,
        authorization_type: str = "NONE",
        integration_type: str = "MOCK",
        integration_uri: str | None = None,
        api_key_required: bool | None = None,
    ) -> apigw.CfnMethod:
        """Define a method on this resource."""
        verb = validate_http_method(http_method)

        integration = apigw.CfnMethod.IntegrationProperty(
            type=integration_type,
            uri=integration_uri,
            integration_http_method="POST" if integration_uri else None,
        )
        method = apigw.CfnMethod(
            self, verb,
            http_method=verb,
            resource_id=self.resource_id,
            rest_api_id=self.rest_api.rest_api_id,
            authorization_type=authorization_type,
            api_key_required=api_key_required,
            integration=integration,
        )

        deployment = self.rest_api.latest_deployment
        if deployment is not None:
            fingerprint = {
                "resourceId": self.resource_id,
                "httpMethod": verb,
                "authorizationType": authorization_type,
                "integrationType": integration_type,
            }
            if integration_uri:
                fingerprint["integrationUri"] = integration_uri
            deployment.add_dependency(method)
            deployment.add_to_logical_id({"method": fingerprint})

        logger.debug(f"Added {verb} {self.path}")
        return method


class RestApi(_ResourceBase):
    """An ``AWS::ApiGateway::RestApi``; also the root of its resource tree."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        rest_api_name: str | None = None,
        description: str | None = None,
        deploy: bool = True,
        stage_name: str = "prod",
        retain_deployments: bool = True,
    ) -> None:
        super().__init__(scope, construct_id)

        self.resource = apigw.CfnRestApi(
            self, "Resource",
            name=rest_api_name or construct_id,
            description=description,
        )
        self.rest_api = self
        self.rest_api_id = self.resource.ref
        self.resource_id = self.resource.attr_root_resource_id
        self.path = "/"

        self.latest_deployment: ApiDeployment | None = None
        self.deployment_stage: apigw.CfnStage | None = None
        if deploy:
            self.latest_deployment = ApiDeployment(
                self, "LatestDeployment",
                rest_api_id=self.rest_api_id,
                description="Automatically created by the RestApi construct",
                retain=retain_deployments,
            )
            self.deployment_stage = apigw.CfnStage(
                self, "DeploymentStage",
                rest_api_id=self.rest_api_id,
                deployment_id=self.latest_deployment.deployment_id,
                stage_name=stage_name,
            )


class ApiResource(_ResourceBase):
    """An ``AWS::ApiGateway::Resource`` under a parent resource."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        parent: IRestApiResource,
        path_part: str,
    ) -> None:
        super().__init__(scope, construct_id)

        validate_resource_path_part(path_part)

        self.rest_api = parent.rest_api
        self.resource = apigw.CfnResource(
            self, "Resource",
            rest_api_id=self.rest_api.rest_api_id,
            parent_id=parent.resource_id,
            path_part=path_part,
        )
        self.resource_id = self.resource.ref
        self.path = f"{parent.path.rstrip('/')}/{path_part}"

        deployment = self.rest_api.latest_deployment
        if deployment is not None:
            deployment.add_dependency(self.resource)
            deployment.add_to_logical_id(
                {"resource": {"parentId": parent.resource_id, "pathPart": path_part}}
            )
