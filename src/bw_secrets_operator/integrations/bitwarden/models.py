"""Secrets Manager response models, decoupled from the SDK's generated types."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SecretValue(BaseModel):
    """One secret returned by a sync call."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Stable Secrets Manager secret id")
    value: str = Field(repr=False, description="Secret value")


class SyncResponse(BaseModel):
    """Result of ``secrets().sync``: the change flag and the changed secrets."""

    model_config = ConfigDict(frozen=True)

    has_changes: bool = False
    secrets: list[SecretValue] = Field(default_factory=list)

    @classmethod
    def from_sdk_object(cls, data: Any) -> SyncResponse:
        """Create from the SDK's ``SecretsSyncResponse``."""
        return cls(
            has_changes=bool(getattr(data, "has_changes", False)),
            secrets=[
                SecretValue(id=str(secret.id), value=secret.value)
                for secret in getattr(data, "secrets", None) or []
            ],
        )
