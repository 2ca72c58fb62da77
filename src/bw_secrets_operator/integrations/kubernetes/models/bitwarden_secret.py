"""BitwardenSecret custom resource models.

BitwardenSecret objects are read through ``CustomObjectsApi`` which returns
raw ``dict`` objects, so ``from_k8s_object`` works on camelCase dict keys and
``status_to_k8s`` produces the dict body of a status update.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from bw_secrets_operator.integrations.kubernetes.models.base import (
    K8sEntityBase,
    format_rfc3339_nano,
    parse_timestamp,
)

# CRD coordinates
BW_GROUP = "k8s.bitwarden.com"
BW_VERSION = "v1"
BW_KIND = "BitwardenSecret"
BW_PLURAL = "bitwardensecrets"
BW_API_VERSION = f"{BW_GROUP}/{BW_VERSION}"


class ConditionType(StrEnum):
    """Condition kinds recorded on a BitwardenSecret."""

    FAILED_SYNC = "FailedSync"
    SUCCESSFUL_SYNC = "SuccessfulSync"


class ConditionReason(StrEnum):
    """Machine readable condition reasons."""

    FAILED = "ReconciliationFailed"
    COMPLETE = "ReconciliationComplete"


class _CamelModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SecretMapping(_CamelModel):
    """Maps one Secrets Manager secret id onto a key of the target Secret."""

    bw_secret_id: str = Field(alias="bwSecretId", description="Secrets Manager secret id")
    secret_key_name: str = Field(alias="secretKeyName", description="Key in the target Secret")


class AuthTokenRef(_CamelModel):
    """Reference to the Secret holding the machine account access token."""

    secret_name: str = Field(alias="secretName")
    secret_key: str = Field(alias="secretKey")


class BitwardenSecretSpec(_CamelModel):
    """Desired state declared by the user."""

    organization_id: str = Field(alias="organizationId")
    secret_name: str = Field(alias="secretName", description="Target Secret name")
    auth_token: AuthTokenRef = Field(alias="authToken")
    secret_map: list[SecretMapping] | None = Field(
        default=None,
        alias="map",
        description="Optional id to key mapping; None passes every key through",
    )


class StatusCondition(_CamelModel):
    """A ``metav1.Condition`` entry in the BitwardenSecret status."""

    type: str
    status: str
    reason: str
    message: str = ""
    last_transition_time: datetime | None = Field(default=None, alias="lastTransitionTime")
    observed_generation: int | None = Field(default=None, alias="observedGeneration")

    def to_k8s(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "type": self.type,
            "status": self.status,
            "reason": self.reason,
            "message": self.message,
        }
        if self.last_transition_time is not None:
            body["lastTransitionTime"] = format_rfc3339_nano(self.last_transition_time)
        if self.observed_generation is not None:
            body["observedGeneration"] = self.observed_generation
        return body


class BitwardenSecretStatus(_CamelModel):
    """Observed sync state written by the operator."""

    last_successful_sync_time: datetime | None = Field(
        default=None, alias="lastSuccessfulSyncTime"
    )
    conditions: list[StatusCondition] = Field(default_factory=list)


class BitwardenSecret(K8sEntityBase):
    """A BitwardenSecret declaration."""

    generation: int | None = None
    spec: BitwardenSecretSpec
    status: BitwardenSecretStatus = Field(default_factory=BitwardenSecretStatus)

    @classmethod
    def from_k8s_object(cls, obj: dict[str, Any]) -> BitwardenSecret:
        """Create from a BitwardenSecret CRD dict."""
        metadata: dict[str, Any] = obj.get("metadata", {})
        status: dict[str, Any] = obj.get("status") or {}

        conditions = [
            StatusCondition(
                type=c.get("type", ""),
                status=c.get("status", "Unknown"),
                reason=c.get("reason", ""),
                message=c.get("message", ""),
                last_transition_time=parse_timestamp(c.get("lastTransitionTime")),
                observed_generation=c.get("observedGeneration"),
            )
            for c in status.get("conditions") or []
        ]

        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace"),
            uid=metadata.get("uid"),
            resource_version=metadata.get("resourceVersion"),
            generation=metadata.get("generation"),
            labels=metadata.get("labels") or {},
            annotations=metadata.get("annotations") or {},
            spec=BitwardenSecretSpec.model_validate(obj.get("spec") or {}),
            status=BitwardenSecretStatus(
                last_successful_sync_time=parse_timestamp(status.get("lastSuccessfulSyncTime")),
                conditions=conditions,
            ),
        )

    def status_to_k8s(self) -> dict[str, Any]:
        """Render the status subresource body."""
        body: dict[str, Any] = {
            "conditions": [c.to_k8s() for c in self.status.conditions],
        }
        if self.status.last_successful_sync_time is not None:
            body["lastSuccessfulSyncTime"] = format_rfc3339_nano(
                self.status.last_successful_sync_time
            )
        return body

    def get_condition(self, condition_type: str) -> StatusCondition | None:
        """Return the condition of the given type, if present."""
        for condition in self.status.conditions:
            if condition.type == condition_type:
                return condition
        return None

    def set_condition(
        self,
        condition_type: ConditionType,
        *,
        status: bool,
        reason: ConditionReason,
        message: str,
        now: datetime,
    ) -> None:
        """Set a status condition, replacing any prior condition of the same type.

        ``lastTransitionTime`` only moves when the status value changes.
        """
        status_value = "True" if status else "False"
        existing = self.get_condition(condition_type)
        if existing is None:
            self.status.conditions.append(
                StatusCondition(
                    type=str(condition_type),
                    status=status_value,
                    reason=str(reason),
                    message=message,
                    last_transition_time=now,
                    observed_generation=self.generation,
                )
            )
            return

        if existing.status != status_value:
            existing.status = status_value
            existing.last_transition_time = now
        existing.reason = str(reason)
        existing.message = message
        existing.observed_generation = self.generation
