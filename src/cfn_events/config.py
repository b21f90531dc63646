"""Configuration management for the CloudWatch Events custom resources.

Provides environment-specific configuration loading and validation
for the Rule and Target Lambda handlers.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

ALLOWED_ENVIRONMENTS = ["dev", "staging", "prod"]
ALLOWED_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class HandlerConfig(BaseModel):
    """Runtime configuration shared by both handlers."""

    # Environment
    environment: str = Field("dev", description="Deployment environment")
    aws_region: str = Field("us-east-1", description="AWS region")

    # CloudWatch Events client
    events_endpoint_url: str | None = Field(
        None, description="Override endpoint for the events API (local testing)"
    )

    # CloudFormation response
    response_timeout_seconds: float = Field(
        30.0, description="Timeout for the response PUT to the pre-signed URL"
    )

    # Logging
    log_level: str = Field("INFO", description="Logging level")
    structured_logging: bool = Field(False, description="Emit JSON log lines")

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

    @field_validator("response_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("response_timeout_seconds must be positive")
        return v

    @classmethod
    def from_env(cls) -> "HandlerConfig":
        """Load configuration from environment variables."""
        environment = os.environ.get("ENVIRONMENT", "dev")
        config_data: dict[str, Any] = get_default_config(environment)
        config_data.update(
            {
                "aws_region": os.environ.get("AWS_REGION", config_data["aws_region"]),
                "events_endpoint_url": os.environ.get("EVENTS_ENDPOINT_URL") or None,
            }
        )
        if "LOG_LEVEL" in os.environ:
            config_data["log_level"] = os.environ["LOG_LEVEL"]
        if "STRUCTURED_LOGGING" in os.environ:
            config_data["structured_logging"] = os.environ["STRUCTURED_LOGGING"].lower() in ("1", "true", "yes")
        if "RESPONSE_TIMEOUT_SECONDS" in os.environ:
            config_data["response_timeout_seconds"] = os.environ["RESPONSE_TIMEOUT_SECONDS"]

        return _build(config_data)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "HandlerConfig":
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file

        Returns:
            HandlerConfig instance loaded from the file
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

        return _build(data)


def _build(config_data: dict[str, Any]) -> HandlerConfig:
    try:
        return HandlerConfig(**config_data)
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(p) for p in first.get("loc", ()))
        raise ConfigurationError(str(first.get("msg", e)), config_key=key or None) from e


def load_config(environment: str, config_path: Path | None = None) -> HandlerConfig:
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

    config_data = {**get_default_config(environment), **config_data, "environment": environment}
    return _build(config_data)


def get_default_config(environment: str) -> dict[str, Any]:
    """Get default configuration for an environment.

    Args:
        environment: Target environment

    Returns:
        Default configuration dictionary
    """
    base_config: dict[str, Any] = {
        "environment": environment,
        "aws_region": "us-east-1",
        "log_level": "INFO",
        "structured_logging": False,
    }

    # Environment-specific overrides
    if environment == "prod":
        base_config["structured_logging"] = True
    elif environment == "dev":
        base_config["log_level"] = "DEBUG"

    return base_config
