"""Bitwarden Secrets Manager integration - client factory, configuration and exceptions."""

from bw_secrets_operator.integrations.bitwarden.client import (
    BitwardenClientFactory,
    SdkClientFactory,
    SdkSecretsManagerClient,
    SecretsManagerClient,
)
from bw_secrets_operator.integrations.bitwarden.config import BitwardenConfig
from bw_secrets_operator.integrations.bitwarden.exceptions import (
    BitwardenAuthError,
    BitwardenClientError,
    BitwardenError,
    BitwardenSyncError,
)
from bw_secrets_operator.integrations.bitwarden.models import SecretValue, SyncResponse

__all__ = [
    "BitwardenAuthError",
    "BitwardenClientError",
    "BitwardenClientFactory",
    "BitwardenConfig",
    "BitwardenError",
    "BitwardenSyncError",
    "SdkClientFactory",
    "SdkSecretsManagerClient",
    "SecretValue",
    "SecretsManagerClient",
    "SyncResponse",
]
