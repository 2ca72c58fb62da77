"""Kubernetes integration configuration model."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class KubernetesConfig(BaseModel):
    """Connection settings for the cluster the operator runs against.

    ``kubeconfig`` and ``context`` are only consulted outside a cluster; inside a
    pod the service account credentials are picked up automatically.
    ``namespace`` restricts the controller to a single namespace, ``None``
    watches all namespaces.
    """

    model_config = ConfigDict(extra="forbid")

    kubeconfig: str | None = None
    context: str | None = None
    namespace: str | None = None
    timeout: int = 30
    retry_attempts: int = 3

    @field_validator("kubeconfig")
    @classmethod
    def validate_kubeconfig(cls, v: str | None) -> str | None:
        """Expand ~ in kubeconfig path."""
        if v is None:
            return None
        return str(Path(v).expanduser())

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        """Validate retry_attempts is at least one."""
        if v < 1:
            raise ValueError("retry_attempts must be at least 1")
        return v

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> KubernetesConfig:
        """Create configuration with environment variable overrides.

        Environment variables take precedence over base_config values.

        Supported environment variables:
            BW_K8S_KUBECONFIG: Path of the kubeconfig file
            BW_K8S_CONTEXT: Kubeconfig context to use
            WATCH_NAMESPACE: Only reconcile BitwardenSecrets in this namespace
            BW_K8S_TIMEOUT: API request timeout in seconds
            BW_K8S_RETRY_ATTEMPTS: Attempts for transient connection failures
        """
        config_dict = base_config.copy() if base_config else {}

        if kubeconfig := os.environ.get("BW_K8S_KUBECONFIG"):
            config_dict["kubeconfig"] = kubeconfig

        if context := os.environ.get("BW_K8S_CONTEXT"):
            config_dict["context"] = context

        if namespace := os.environ.get("WATCH_NAMESPACE"):
            config_dict["namespace"] = namespace

        if timeout := os.environ.get("BW_K8S_TIMEOUT"):
            config_dict["timeout"] = int(timeout)

        if retry_attempts := os.environ.get("BW_K8S_RETRY_ATTEMPTS"):
            config_dict["retry_attempts"] = int(retry_attempts)

        return cls.model_validate(config_dict)
