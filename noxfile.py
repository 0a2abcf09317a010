"""Nox configuration for Scaling Constructs development automation.

This file defines automated development tasks including linting, testing,
formatting, and planning/synthesizing the configured environments.
"""

import nox

# Python versions to test against
PYTHON_VERSIONS = ["3.11"]

# Default sessions to run when no specific session is requested
nox.options.sessions = ["lint", "test", "coverage"]


@nox.session(python=PYTHON_VERSIONS)
def lint(session):
    """Run linting with ruff and mypy."""
    session.install("poetry")
    session.run("poetry", "install", "--all-extras")

    # Run ruff for code quality
    session.run("poetry", "run", "ruff", "check", "src", "tests")

    # Run mypy for type checking
    session.run("poetry", "run", "mypy", "src")

    session.log("✅ Linting completed successfully")


@nox.session(python=PYTHON_VERSIONS)
def format_code(session):
    """Format code with black and isort."""
    session.install("poetry")
    session.run("poetry", "install", "--all-extras")

    session.run("poetry", "run", "black", "src", "tests")
    session.run("poetry", "run", "isort", "src", "tests")

    # Fix auto-fixable ruff issues
    session.run("poetry", "run", "ruff", "check", "--fix", "src", "tests")

    session.log("✅ Code formatting completed")


@nox.session(python=PYTHON_VERSIONS)
def test(session):
    """Run the test suite with pytest."""
    session.install("poetry")
    session.run("poetry", "install", "--all-extras")

    session.run(
        "poetry", "run", "pytest",
        "tests/",
        "-v",
        "--tb=short",
        "--strict-markers",
        "-m", "not slow",  # Skip full stack synthesis by default
    )

    session.log("✅ Unit tests completed successfully")


@nox.session(python=PYTHON_VERSIONS)
def test_all(session):
    """Run all tests including full stack synthesis."""
    session.install("poetry")
    session.run("poetry", "install", "--all-extras")
    session.run("poetry", "run", "pytest", "tests/", "-v", "--tb=short")

    session.log("✅ All tests completed successfully")


@nox.session(python=PYTHON_VERSIONS)
def coverage(session):
    """Run tests with coverage reporting."""
    session.install("poetry")
    session.run("poetry", "install", "--all-extras")

    session.run(
        "poetry", "run", "pytest",
        "tests/",
        "--cov=scaling_constructs",
        "--cov-report=term-missing",
        "--cov-report=html:htmlcov",
        "--cov-report=xml:coverage.xml",
        "--cov-fail-under=80",
        "-m", "not slow",
    )

    session.log("✅ Coverage analysis completed")
    session.log("📊 Coverage report available at htmlcov/index.html")


@nox.session(python=PYTHON_VERSIONS)
def plan(session):
    """Print the step scaling plans of an environment.

    Examples:
      nox -s plan
      nox -s plan -- --env prod --policy CpuStepScaling
    """
    session.install("poetry")
    session.run("poetry", "install")

    args = session.posargs or ["--env", "dev"]
    session.run("poetry", "run", "scaling-constructs", "plan", *args)
    session.log("✅ Planning completed")


@nox.session(python=PYTHON_VERSIONS)
def synth(session):
    """Synthesize the CloudFormation template of an environment.

    Examples:
      nox -s synth -- --env staging --output cdk.out/staging.json
    """
    session.install("poetry")
    session.run("poetry", "install")

    args = session.posargs or ["--env", "dev"]
    session.run("poetry", "run", "scaling-constructs", "synth", *args)
    session.log("✅ Synthesis completed")


@nox.session(python=PYTHON_VERSIONS)
def clean(session):
    """Clean up build artifacts and cache files."""
    import shutil
    import os

    clean_dirs = [
        ".pytest_cache",
        "__pycache__",
        ".coverage",
        "htmlcov",
        "coverage.xml",
        "dist",
        "cdk.out",
        ".ruff_cache",
        ".mypy_cache",
    ]

    for dir_name in clean_dirs:
        if os.path.exists(dir_name):
            if os.path.isdir(dir_name):
                shutil.rmtree(dir_name)
                session.log(f"🗑️  Removed directory: {dir_name}")
            else:
                os.remove(dir_name)
                session.log(f"🗑️  Removed file: {dir_name}")

    session.log("✅ Cleanup completed")


@nox.session(python=PYTHON_VERSIONS)
def pre_commit(session):
    """Run all pre-commit checks."""
    session.install("poetry")
    session.run("poetry", "install", "--all-extras")

    session.notify("format_code")
    session.notify("lint")
    session.notify("test")

    session.log("✅ All pre-commit checks completed")
