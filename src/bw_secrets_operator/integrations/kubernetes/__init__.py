"""Kubernetes integration - API client, configuration and exceptions."""

from bw_secrets_operator.integrations.kubernetes.client import KubernetesClient
from bw_secrets_operator.integrations.kubernetes.config import KubernetesConfig
from bw_secrets_operator.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesValidationError,
)

__all__ = [
    "KubernetesAuthError",
    "KubernetesClient",
    "KubernetesConfig",
    "KubernetesConflictError",
    "KubernetesConnectionError",
    "KubernetesError",
    "KubernetesNotFoundError",
    "KubernetesValidationError",
]
