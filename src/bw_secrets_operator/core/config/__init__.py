"""Configuration management with Pydantic validation."""

from bw_secrets_operator.core.config.models import (
    DEFAULT_REFRESH_INTERVAL,
    MIN_REFRESH_INTERVAL,
    OperatorConfig,
    load_config,
)

__all__ = [
    "DEFAULT_REFRESH_INTERVAL",
    "MIN_REFRESH_INTERVAL",
    "OperatorConfig",
    "load_config",
]
