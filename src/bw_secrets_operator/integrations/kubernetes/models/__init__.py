"""Kubernetes resource models used by the operator."""

from bw_secrets_operator.integrations.kubernetes.models.base import (
    K8sEntityBase,
    OwnerReference,
    format_rfc3339_nano,
    parse_timestamp,
)
from bw_secrets_operator.integrations.kubernetes.models.bitwarden_secret import (
    BW_API_VERSION,
    BW_GROUP,
    BW_KIND,
    BW_PLURAL,
    BW_VERSION,
    AuthTokenRef,
    BitwardenSecret,
    BitwardenSecretSpec,
    BitwardenSecretStatus,
    ConditionReason,
    ConditionType,
    SecretMapping,
    StatusCondition,
)
from bw_secrets_operator.integrations.kubernetes.models.secret import (
    SECRET_TYPE_OPAQUE,
    TargetSecret,
)

__all__ = [
    "BW_API_VERSION",
    "BW_GROUP",
    "BW_KIND",
    "BW_PLURAL",
    "BW_VERSION",
    "SECRET_TYPE_OPAQUE",
    "AuthTokenRef",
    "BitwardenSecret",
    "BitwardenSecretSpec",
    "BitwardenSecretStatus",
    "ConditionReason",
    "ConditionType",
    "K8sEntityBase",
    "OwnerReference",
    "SecretMapping",
    "StatusCondition",
    "TargetSecret",
    "format_rfc3339_nano",
    "parse_timestamp",
]
