"""Nox configuration for Queue Alarm Reconciler development automation.

This file defines automated development tasks including linting, testing,
formatting and plan generation.
"""

import nox

# Python versions to test against
PYTHON_VERSIONS = ["3.11"]

# Default sessions to run when no specific session is requested
nox.options.sessions = ["lint", "test", "coverage"]


@nox.session(python=PYTHON_VERSIONS)
def lint(session):
    """Run linting with ruff and mypy."""
    session.install("-e", ".[dev]")

    # Run ruff for code quality
    session.run("ruff", "check", "src", "tests", "lambda")

    # Run mypy for type checking
    session.run("mypy", "src")

    session.log("✅ Linting completed successfully")


@nox.session(python=PYTHON_VERSIONS)
def format_code(session):
    """Format code with black and isort."""
    session.install("-e", ".[dev]")

    session.run("black", "src", "tests", "lambda")
    session.run("isort", "src", "tests", "lambda")

    # Fix auto-fixable ruff issues
    session.run("ruff", "check", "--fix", "src", "tests", "lambda")

    session.log("✅ Code formatting completed")


@nox.session(python=PYTHON_VERSIONS)
def test(session):
    """Run the test suite with pytest."""
    session.install("-e", ".[test]")

    session.run(
        "pytest",
        "tests/",
        "-v",
        "--tb=short",
        "--strict-markers",
        "-m", "not slow",
        *session.posargs,
    )

    session.log("✅ Unit tests completed successfully")


@nox.session(python=PYTHON_VERSIONS)
def coverage(session):
    """Run tests with coverage reporting."""
    session.install("-e", ".[test]")

    session.run(
        "pytest",
        "tests/",
        "--cov=queuealarms",
        "--cov-report=term-missing",
        "--cov-report=xml:coverage.xml",
        "--cov-fail-under=80",
        "-m", "not slow",
    )

    session.log("✅ Coverage analysis completed")


@nox.session(python=PYTHON_VERSIONS)
def plan(session):
    """Build a reconciliation plan against a real account (requires AWS credentials).

    Examples:
      nox -s plan
      nox -s plan -- --region eu-west-1 --output plan.txt
    """
    session.install("-e", ".")
    args = session.posargs or ["--region", "us-east-1"]
    session.run("queuealarms", "plan", *args)
    session.log("✅ Plan generated")


@nox.session(python=PYTHON_VERSIONS)
def clean(session):
    """Clean up build artifacts and cache files."""
    import shutil
    import os

    # Directories to clean
    clean_dirs = [
        ".pytest_cache",
        "__pycache__",
        ".coverage",
        "coverage.xml",
        "dist",
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
