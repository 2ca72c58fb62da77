"""Unit tests for BitwardenSecret models."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from pydantic import ValidationError

from bw_secrets_operator.integrations.kubernetes.models.bitwarden_secret import (
    BitwardenSecret,
    ConditionReason,
    ConditionType,
)

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)


def _crd(**overrides: Any) -> dict[str, Any]:
    obj: dict[str, Any] = {
        "apiVersion": "k8s.bitwarden.com/v1",
        "kind": "BitwardenSecret",
        "metadata": {
            "name": "app-secrets",
            "namespace": "default",
            "uid": "uid-1",
            "resourceVersion": "42",
            "generation": 3,
            "labels": {"team": "payments"},
        },
        "spec": {
            "organizationId": "org-1",
            "secretName": "app",
            "authToken": {"secretName": "bw-token", "secretKey": "token"},
        },
    }
    obj.update(overrides)
    return obj


@pytest.mark.unit
@pytest.mark.kubernetes
class TestBitwardenSecretFromK8s:
    """Tests for parsing the custom resource dict."""

    def test_parses_metadata_and_spec(self) -> None:
        bw_secret = BitwardenSecret.from_k8s_object(_crd())

        assert bw_secret.name == "app-secrets"
        assert bw_secret.namespace == "default"
        assert bw_secret.uid == "uid-1"
        assert bw_secret.resource_version == "42"
        assert bw_secret.generation == 3
        assert bw_secret.labels == {"team": "payments"}
        assert bw_secret.spec.organization_id == "org-1"
        assert bw_secret.spec.secret_name == "app"
        assert bw_secret.spec.auth_token.secret_name == "bw-token"
        assert bw_secret.spec.auth_token.secret_key == "token"

    def test_missing_map_is_none(self) -> None:
        """No map means every key passes through."""
        bw_secret = BitwardenSecret.from_k8s_object(_crd())

        assert bw_secret.spec.secret_map is None

    def test_empty_map_is_kept(self) -> None:
        """An empty map is distinct from no map."""
        crd = _crd()
        crd["spec"]["map"] = []

        bw_secret = BitwardenSecret.from_k8s_object(crd)

        assert bw_secret.spec.secret_map == []

    def test_parses_map_in_order(self) -> None:
        crd = _crd()
        crd["spec"]["map"] = [
            {"bwSecretId": "id2", "secretKeyName": "DB_PASSWORD"},
            {"bwSecretId": "id1", "secretKeyName": "API_KEY"},
        ]

        bw_secret = BitwardenSecret.from_k8s_object(crd)

        assert bw_secret.spec.secret_map is not None
        assert [m.bw_secret_id for m in bw_secret.spec.secret_map] == ["id2", "id1"]
        assert bw_secret.spec.secret_map[1].secret_key_name == "API_KEY"

    def test_no_status(self) -> None:
        bw_secret = BitwardenSecret.from_k8s_object(_crd())

        assert bw_secret.status.last_successful_sync_time is None
        assert bw_secret.status.conditions == []

    def test_parses_status(self) -> None:
        crd = _crd(
            status={
                "lastSuccessfulSyncTime": "2024-05-01T12:00:00.5Z",
                "conditions": [
                    {
                        "type": "SuccessfulSync",
                        "status": "True",
                        "reason": "ReconciliationComplete",
                        "message": "Completed sync for default/app-secrets",
                        "lastTransitionTime": "2024-05-01T12:00:00Z",
                    }
                ],
            }
        )

        bw_secret = BitwardenSecret.from_k8s_object(crd)

        assert bw_secret.status.last_successful_sync_time == NOW + timedelta(milliseconds=500)
        condition = bw_secret.get_condition(ConditionType.SUCCESSFUL_SYNC)
        assert condition is not None
        assert condition.status == "True"
        assert condition.last_transition_time == NOW

    def test_invalid_spec_raises(self) -> None:
        crd = _crd()
        del crd["spec"]["authToken"]

        with pytest.raises(ValidationError):
            BitwardenSecret.from_k8s_object(crd)


@pytest.mark.unit
@pytest.mark.kubernetes
class TestBitwardenSecretConditions:
    """Tests for set_condition and status rendering."""

    def test_set_condition_appends(self) -> None:
        bw_secret = BitwardenSecret.from_k8s_object(_crd())

        bw_secret.set_condition(
            ConditionType.FAILED_SYNC,
            status=False,
            reason=ConditionReason.FAILED,
            message="Error pulling authorization token secret - boom",
            now=NOW,
        )

        condition = bw_secret.get_condition("FailedSync")
        assert condition is not None
        assert condition.status == "False"
        assert condition.reason == "ReconciliationFailed"
        assert condition.last_transition_time == NOW
        assert condition.observed_generation == 3

    def test_set_condition_replaces_same_type(self) -> None:
        bw_secret = BitwardenSecret.from_k8s_object(_crd())
        for message in ("first", "second"):
            bw_secret.set_condition(
                ConditionType.SUCCESSFUL_SYNC,
                status=True,
                reason=ConditionReason.COMPLETE,
                message=message,
                now=NOW,
            )

        assert len(bw_secret.status.conditions) == 1
        assert bw_secret.status.conditions[0].message == "second"

    def test_transition_time_moves_only_on_status_change(self) -> None:
        bw_secret = BitwardenSecret.from_k8s_object(_crd())
        bw_secret.set_condition(
            ConditionType.SUCCESSFUL_SYNC,
            status=True,
            reason=ConditionReason.COMPLETE,
            message="ok",
            now=NOW,
        )

        bw_secret.set_condition(
            ConditionType.SUCCESSFUL_SYNC,
            status=True,
            reason=ConditionReason.COMPLETE,
            message="ok again",
            now=NOW + timedelta(minutes=5),
        )
        condition = bw_secret.get_condition(ConditionType.SUCCESSFUL_SYNC)
        assert condition is not None
        assert condition.last_transition_time == NOW

        bw_secret.set_condition(
            ConditionType.SUCCESSFUL_SYNC,
            status=False,
            reason=ConditionReason.FAILED,
            message="now failing",
            now=NOW + timedelta(minutes=10),
        )
        assert condition.last_transition_time == NOW + timedelta(minutes=10)

    def test_different_types_coexist(self) -> None:
        bw_secret = BitwardenSecret.from_k8s_object(_crd())
        bw_secret.set_condition(
            ConditionType.SUCCESSFUL_SYNC,
            status=True,
            reason=ConditionReason.COMPLETE,
            message="ok",
            now=NOW,
        )
        bw_secret.set_condition(
            ConditionType.FAILED_SYNC,
            status=False,
            reason=ConditionReason.FAILED,
            message="failed",
            now=NOW,
        )

        assert {c.type for c in bw_secret.status.conditions} == {"SuccessfulSync", "FailedSync"}

    def test_status_to_k8s(self) -> None:
        bw_secret = BitwardenSecret.from_k8s_object(_crd())
        bw_secret.status.last_successful_sync_time = NOW + timedelta(microseconds=250)
        bw_secret.set_condition(
            ConditionType.SUCCESSFUL_SYNC,
            status=True,
            reason=ConditionReason.COMPLETE,
            message="Completed sync for default/app-secrets",
            now=NOW,
        )

        body = bw_secret.status_to_k8s()

        assert body["lastSuccessfulSyncTime"] == "2024-05-01T12:00:00.00025Z"
        assert body["conditions"] == [
            {
                "type": "SuccessfulSync",
                "status": "True",
                "reason": "ReconciliationComplete",
                "message": "Completed sync for default/app-secrets",
                "lastTransitionTime": "2024-05-01T12:00:00Z",
                "observedGeneration": 3,
            }
        ]

    def test_status_to_k8s_without_sync_time(self) -> None:
        body = BitwardenSecret.from_k8s_object(_crd()).status_to_k8s()

        assert body == {"conditions": []}
