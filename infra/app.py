#!/usr/bin/env python3
"""
CDK Application for Scaling Constructs

Synthesizes the configured step scaling policies for one environment.
"""

import os

import aws_cdk as cdk

from scaling_constructs.config import get_default_config, load_config, ScalingConfig
from scaling_constructs.stack import ScalingStack


def main():
    """Main CDK application entry point."""
    app = cdk.App()

    # Get environment from context or environment variable
    environment = app.node.try_get_context("environment") or os.environ.get("ENVIRONMENT", "dev")

    account = app.node.try_get_context(f"{environment}_account") or os.environ.get("CDK_DEFAULT_ACCOUNT")
    region = app.node.try_get_context(f"{environment}_region") or os.environ.get("CDK_DEFAULT_REGION", "us-east-1")

    # Local file read only, fall back to built-in defaults when absent
    try:
        config = load_config(environment)
    except FileNotFoundError:
        config = ScalingConfig(**get_default_config(environment))

    stack = ScalingStack(
        app,
        f"scaling-constructs-{environment}",
        config,
        env=cdk.Environment(account=account, region=region),
        description=f"Step scaling policies for {environment} environment",
    )

    cdk.Tags.of(stack).add("App", "scaling-constructs")
    cdk.Tags.of(stack).add("Environment", environment)

    app.synth()


if __name__ == "__main__":
    main()
