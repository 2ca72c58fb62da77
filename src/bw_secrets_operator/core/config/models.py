"""Operator configuration with Pydantic validation."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from bw_secrets_operator.integrations.bitwarden.config import BitwardenConfig
from bw_secrets_operator.integrations.kubernetes.config import KubernetesConfig

logger = structlog.get_logger()

DEFAULT_REFRESH_INTERVAL = 300
MIN_REFRESH_INTERVAL = 180


class OperatorConfig(BaseModel):
    """Complete operator configuration."""

    model_config = ConfigDict(extra="forbid")

    refresh_interval: int = Field(
        default=DEFAULT_REFRESH_INTERVAL,
        description="Seconds between polls of Secrets Manager for each BitwardenSecret",
    )
    bitwarden: BitwardenConfig = Field(default_factory=BitwardenConfig)
    kubernetes: KubernetesConfig = Field(default_factory=KubernetesConfig)

    @field_validator("refresh_interval")
    @classmethod
    def validate_refresh_interval(cls, v: int) -> int:
        """Raise intervals below the minimum to the minimum."""
        if v < MIN_REFRESH_INTERVAL:
            logger.warning(
                "refresh_interval_below_minimum",
                requested=v,
                applied=MIN_REFRESH_INTERVAL,
            )
            return MIN_REFRESH_INTERVAL
        return v

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> OperatorConfig:
        """Create configuration with environment variable overrides.

        Supported environment variables (plus those of the nested sections):
            BW_SECRETS_MANAGER_REFRESH_INTERVAL: Poll interval in seconds
        """
        config_dict = base_config.copy() if base_config else {}

        if refresh_interval := os.environ.get("BW_SECRETS_MANAGER_REFRESH_INTERVAL"):
            config_dict["refresh_interval"] = int(refresh_interval)

        config_dict["bitwarden"] = BitwardenConfig.from_env(config_dict.get("bitwarden"))
        config_dict["kubernetes"] = KubernetesConfig.from_env(config_dict.get("kubernetes"))

        return cls.model_validate(config_dict)


def load_config(path: Path | None = None) -> OperatorConfig:
    """Load configuration from an optional YAML file, then apply the environment.

    Args:
        path: YAML file to read. A missing ``path`` means environment only.

    Returns:
        The validated configuration.

    Raises:
        FileNotFoundError: If ``path`` is given but does not exist.
        ValueError: If the file is not valid YAML or not a mapping.
    """
    base: dict[str, Any] = {}
    if path is not None:
        try:
            with path.open(encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(loaded, dict):
            raise ValueError(f"Configuration file {path} must contain a mapping")
        base = loaded
        logger.debug("loaded_config_file", path=str(path))

    return OperatorConfig.from_env(base)
