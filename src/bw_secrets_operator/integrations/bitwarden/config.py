"""Bitwarden Secrets Manager connection settings."""

from __future__ import annotations

import os
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_API_URL = "https://api.bitwarden.com"
DEFAULT_IDENTITY_API_URL = "https://identity.bitwarden.com"
DEFAULT_STATE_PATH = "/var/bitwarden_state"


class BitwardenConfig(BaseModel):
    """Endpoints and SDK state location for Secrets Manager."""

    model_config = ConfigDict(extra="forbid")

    api_url: str = DEFAULT_API_URL
    identity_api_url: str = DEFAULT_IDENTITY_API_URL
    state_path: str = DEFAULT_STATE_PATH

    @field_validator("api_url", "identity_api_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate the URL is an absolute http(s) URL."""
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"'{v}' is not a valid http(s) URL")
        return v.rstrip("/")

    @field_validator("state_path")
    @classmethod
    def validate_state_path(cls, v: str) -> str:
        """Validate state_path is not blank."""
        if not v.strip():
            raise ValueError("state_path must not be empty")
        return v

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> BitwardenConfig:
        """Create configuration with environment variable overrides.

        Supported environment variables:
            BW_API_URL: Secrets Manager API base URL
            BW_IDENTITY_API_URL: Identity service base URL
            BW_SECRETS_MANAGER_STATE_PATH: Directory for SDK state files
        """
        config_dict = base_config.copy() if base_config else {}

        if api_url := os.environ.get("BW_API_URL"):
            config_dict["api_url"] = api_url

        if identity_api_url := os.environ.get("BW_IDENTITY_API_URL"):
            config_dict["identity_api_url"] = identity_api_url

        if state_path := os.environ.get("BW_SECRETS_MANAGER_STATE_PATH"):
            config_dict["state_path"] = state_path

        return cls.model_validate(config_dict)
