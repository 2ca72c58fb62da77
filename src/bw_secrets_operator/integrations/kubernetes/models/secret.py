"""Core ``v1/Secret`` model used as the sync target.

The kubernetes SDK carries Secret data base64 encoded.  ``TargetSecret`` keeps
decoded bytes so the sync pipeline works on plain values; encoding happens
only in ``to_k8s_object``.
"""

from __future__ import annotations

import base64
from typing import Any

from pydantic import ConfigDict, Field

from bw_secrets_operator.integrations.kubernetes.models.base import (
    K8sEntityBase,
    OwnerReference,
    _safe_get,
)

SECRET_TYPE_OPAQUE = "Opaque"


class TargetSecret(K8sEntityBase):
    """A Kubernetes Secret with decoded data."""

    # Labels and annotations of other writers are sent back verbatim
    model_config = ConfigDict(str_strip_whitespace=False)

    type: str = Field(default=SECRET_TYPE_OPAQUE, description="Secret type")
    data: dict[str, bytes] = Field(default_factory=dict, description="Decoded secret data")
    owner_references: list[OwnerReference] = Field(default_factory=list)

    @classmethod
    def from_k8s_object(cls, obj: Any) -> TargetSecret:
        """Create from a kubernetes ``V1Secret``."""
        raw_data: dict[str, str] = _safe_get(obj, "data", default={})
        owners = _safe_get(obj, "metadata", "owner_references", default=[])
        return cls(
            name=_safe_get(obj, "metadata", "name", default=""),
            namespace=_safe_get(obj, "metadata", "namespace"),
            uid=_safe_get(obj, "metadata", "uid"),
            resource_version=_safe_get(obj, "metadata", "resource_version"),
            labels=dict(_safe_get(obj, "metadata", "labels", default={})),
            annotations=dict(_safe_get(obj, "metadata", "annotations", default={})),
            type=_safe_get(obj, "type", default=SECRET_TYPE_OPAQUE),
            data={key: base64.b64decode(value) for key, value in raw_data.items()},
            owner_references=[OwnerReference.from_k8s_object(o) for o in owners],
        )

    def to_k8s_object(self) -> Any:
        """Convert to a kubernetes ``V1Secret`` request body."""
        from kubernetes.client import V1ObjectMeta, V1Secret

        return V1Secret(
            api_version="v1",
            kind="Secret",
            metadata=V1ObjectMeta(
                name=self.name,
                namespace=self.namespace,
                resource_version=self.resource_version,
                labels=dict(self.labels),
                annotations=dict(self.annotations),
                owner_references=[o.to_k8s_object() for o in self.owner_references] or None,
            ),
            type=self.type,
            data={key: base64.b64encode(value).decode("ascii") for key, value in self.data.items()},
        )

    def get_value(self, key: str) -> bytes | None:
        """Return the decoded value stored under ``key``."""
        return self.data.get(key)
