"""Configuration management for the queue alarm reconciler.

Provides environment-variable and YAML configuration loading, validated
with pydantic.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError
from .naming import DEFAULT_THRESHOLD, NamingConvention


class AlarmPolicyConfig(BaseModel):
    """Parameters applied to every alarm the reconciler creates."""

    threshold: int = Field(DEFAULT_THRESHOLD, gt=0, description="Threshold for normal queues")
    period_seconds: int = Field(60, gt=0, description="Evaluation period length in seconds")


class ReconcilerConfig(BaseModel):
    """Main configuration class for the reconciler."""

    # Environment
    environment: str = Field("dev", description="Deployment environment")
    aws_region: str = Field("us-east-1", description="AWS region")
    aws_account_id: str | None = Field(None, description="AWS account ID, used for alarm ARNs")

    alarm: AlarmPolicyConfig = Field(default_factory=AlarmPolicyConfig)

    # SNS topic receiving alarm transitions and the run summary
    notification_target: str | None = Field(None, description="SNS topic ARN")

    # None means each run mode applies its own default convention
    naming_convention: NamingConvention | None = Field(None, description="Alarm naming convention")

    plan_path: Path = Field(Path("plan.txt"), description="Plan file written by split mode")

    # Logging
    log_level: str = Field("INFO", description="Logging level")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment values."""
        allowed_envs = ["dev", "staging", "prod"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of: {allowed_envs}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level values."""
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            raise ValueError(f"Log level must be one of: {allowed_levels}")
        return v.upper()

    @field_validator("notification_target")
    @classmethod
    def empty_target_is_none(cls, v: str | None) -> str | None:
        return v or None

    def convention_for(self, default: NamingConvention) -> NamingConvention:
        """Return the configured naming convention, or the run mode's default."""
        return self.naming_convention or default

    @classmethod
    def from_env(cls) -> "ReconcilerConfig":
        """Load configuration from environment variables."""
        config_data: dict[str, Any] = {
            "environment": os.environ.get("ENVIRONMENT", "dev"),
            "aws_region": os.environ.get("AWS_REGION", "us-east-1"),
            "aws_account_id": os.environ.get("AWS_ACCOUNT_ID"),
            "alarm": {
                "threshold": os.environ.get("ALARM_THRESHOLD", str(DEFAULT_THRESHOLD)),
                "period_seconds": os.environ.get("ALARM_PERIOD", "60"),
            },
            "notification_target": os.environ.get("SNS_TOPIC_ARN"),
            "naming_convention": os.environ.get("ALARM_NAMING_CONVENTION") or None,
            "plan_path": os.environ.get("PLAN_PATH", "plan.txt"),
            "log_level": os.environ.get("LOG_LEVEL", "INFO"),
        }
        return _validated(config_data)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ReconcilerConfig":
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file

        Returns:
            ReconcilerConfig instance loaded from the file
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        # Try to infer environment from filename if not provided
        if "environment" not in data:
            stem = config_path.stem.lower()
            if stem in {"dev", "staging", "prod"}:
                data["environment"] = stem
            else:
                data["environment"] = os.environ.get("ENVIRONMENT", "dev")

        data.setdefault("aws_account_id", os.getenv("AWS_ACCOUNT_ID"))

        return _validated(data)


def _validated(data: dict[str, Any]) -> ReconcilerConfig:
    try:
        return ReconcilerConfig(**data)
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first.get("loc", ()))
        raise ConfigurationError(f"Invalid configuration: {first.get('msg')}", config_key=key or None) from e


def load_config(environment: str, config_path: Path | None = None) -> ReconcilerConfig:
    """Load configuration for the specified environment.

    Args:
        environment: Target environment (dev/staging/prod)
        config_path: Optional custom config file path

    Returns:
        Loaded configuration object

    Raises:
        FileNotFoundError: If config file is not found
        ConfigurationError: If configuration is invalid
    """
    if config_path is None:
        config_dir = Path(__file__).parent.parent.parent / "config"
        config_path = config_dir / f"{environment}.yml"

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        config_data = yaml.safe_load(f) or {}

    config_data["environment"] = environment

    if "aws_account_id" not in config_data:
        config_data["aws_account_id"] = os.getenv("AWS_ACCOUNT_ID")

    return _validated(config_data)
