"""Kubernetes stores used by the sync engine."""

from bw_secrets_operator.services.kubernetes.base import K8sBaseManager
from bw_secrets_operator.services.kubernetes.bitwarden_secret_manager import (
    BitwardenSecretManager,
)
from bw_secrets_operator.services.kubernetes.secret_manager import SecretManager

__all__ = [
    "BitwardenSecretManager",
    "K8sBaseManager",
    "SecretManager",
]
