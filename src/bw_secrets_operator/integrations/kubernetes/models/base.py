"""Shared building blocks for the operator's Kubernetes resource models."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# RFC3339Nano allows nine fractional digits, datetime keeps six
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


class K8sEntityBase(BaseModel):
    """Identity and metadata common to every resource the operator touches."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    name: str = Field(description="Resource name")
    namespace: str | None = Field(default=None, description="Resource namespace")
    uid: str | None = Field(default=None, description="Kubernetes UID")
    resource_version: str | None = Field(default=None, description="Optimistic lock version")
    labels: dict[str, str] = Field(default_factory=dict, description="Resource labels")
    annotations: dict[str, str] = Field(
        default_factory=dict, description="Resource annotations"
    )

    @property
    def key(self) -> str:
        """``namespace/name`` identity used in logs and messages."""
        return f"{self.namespace}/{self.name}" if self.namespace else self.name


class OwnerReference(BaseModel):
    """Kubernetes owner reference."""

    model_config = ConfigDict(extra="ignore")

    api_version: str
    kind: str
    name: str
    uid: str
    controller: bool = False
    block_owner_deletion: bool = False

    @classmethod
    def from_k8s_object(cls, obj: Any) -> OwnerReference:
        """Create from a kubernetes ``V1OwnerReference``."""
        return cls(
            api_version=obj.api_version,
            kind=obj.kind,
            name=obj.name,
            uid=obj.uid,
            controller=bool(getattr(obj, "controller", False)),
            block_owner_deletion=bool(getattr(obj, "block_owner_deletion", False)),
        )

    def to_k8s_object(self) -> Any:
        """Convert to a kubernetes ``V1OwnerReference``."""
        from kubernetes.client import V1OwnerReference

        return V1OwnerReference(
            api_version=self.api_version,
            kind=self.kind,
            name=self.name,
            uid=self.uid,
            controller=self.controller,
            block_owner_deletion=self.block_owner_deletion,
        )


def _safe_get(obj: Any, *attrs: str, default: Any = None) -> Any:
    """Safely traverse nested attributes on kubernetes SDK objects."""
    current = obj
    for attr in attrs:
        if current is None:
            return default
        current = getattr(current, attr, None)
    return current if current is not None else default


def format_rfc3339_nano(value: datetime) -> str:
    """Format an instant as RFC3339 in UTC with trimmed fractional seconds.

    Mirrors the ``RFC3339Nano`` layout used across Kubernetes tooling:
    trailing zeros of the fraction are dropped, and the fraction is omitted
    entirely for whole seconds.

    >>> format_rfc3339_nano(datetime(2024, 5, 1, 12, 0, 0, 250000, tzinfo=UTC))
    '2024-05-01T12:00:00.25Z'
    """
    value = value.astimezone(UTC)
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    fraction = f"{value.microsecond:06d}".rstrip("0")
    if fraction:
        text += f".{fraction}"
    return text + "Z"


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a Kubernetes timestamp (string or datetime) into an aware UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = _FRACTION_RE.sub(r"\1", str(value).replace("Z", "+00:00"))
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)
