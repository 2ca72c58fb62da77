"""Unit tests for the TargetSecret model."""

from __future__ import annotations

import base64

import pytest

from bw_secrets_operator.integrations.kubernetes.models.base import OwnerReference
from bw_secrets_operator.integrations.kubernetes.models.secret import (
    SECRET_TYPE_OPAQUE,
    TargetSecret,
)


def _b64(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


@pytest.mark.unit
@pytest.mark.kubernetes
class TestTargetSecretFromK8s:
    """Tests for converting from V1Secret."""

    def test_decodes_data(self) -> None:
        from kubernetes.client import V1ObjectMeta, V1OwnerReference, V1Secret

        v1_secret = V1Secret(
            metadata=V1ObjectMeta(
                name="app",
                namespace="default",
                uid="uid-9",
                resource_version="7",
                labels={"k8s.bitwarden.com/bw-secret": "uid-1"},
                annotations={"k8s.bitwarden.com/sync-time": "2024-05-01T12:00:00Z"},
                owner_references=[
                    V1OwnerReference(
                        api_version="k8s.bitwarden.com/v1",
                        kind="BitwardenSecret",
                        name="app-secrets",
                        uid="uid-1",
                        controller=True,
                    )
                ],
            ),
            type="Opaque",
            data={"API_KEY": _b64(b"valA")},
        )

        secret = TargetSecret.from_k8s_object(v1_secret)

        assert secret.name == "app"
        assert secret.namespace == "default"
        assert secret.resource_version == "7"
        assert secret.data == {"API_KEY": b"valA"}
        assert secret.labels == {"k8s.bitwarden.com/bw-secret": "uid-1"}
        assert secret.owner_references[0].controller is True

    def test_empty_secret(self) -> None:
        from kubernetes.client import V1ObjectMeta, V1Secret

        secret = TargetSecret.from_k8s_object(V1Secret(metadata=V1ObjectMeta(name="empty")))

        assert secret.data == {}
        assert secret.labels == {}
        assert secret.owner_references == []
        assert secret.type == SECRET_TYPE_OPAQUE


@pytest.mark.unit
@pytest.mark.kubernetes
class TestTargetSecretToK8s:
    """Tests for converting to a V1Secret body."""

    def test_encodes_data_and_metadata(self) -> None:
        secret = TargetSecret(
            name="app",
            namespace="default",
            resource_version="7",
            labels={"k8s.bitwarden.com/bw-secret": "uid-1"},
            data={"API_KEY": b"valA"},
            owner_references=[
                OwnerReference(
                    api_version="k8s.bitwarden.com/v1",
                    kind="BitwardenSecret",
                    name="app-secrets",
                    uid="uid-1",
                    controller=True,
                    block_owner_deletion=True,
                )
            ],
        )

        body = secret.to_k8s_object()

        assert body.kind == "Secret"
        assert body.type == "Opaque"
        assert body.metadata.resource_version == "7"
        assert body.data == {"API_KEY": _b64(b"valA")}
        assert body.metadata.owner_references[0].uid == "uid-1"

    def test_foreign_metadata_kept_verbatim(self) -> None:
        """Whitespace in labels and annotations written by others survives a round trip."""
        from kubernetes.client import V1ObjectMeta, V1Secret

        applied = '{"apiVersion":"v1","kind":"Secret"}\n'
        v1_secret = V1Secret(
            metadata=V1ObjectMeta(
                name="app",
                namespace="default",
                labels={"team": " platform "},
                annotations={"kubectl.kubernetes.io/last-applied-configuration": applied},
            ),
        )

        body = TargetSecret.from_k8s_object(v1_secret).to_k8s_object()

        assert body.metadata.annotations == {
            "kubectl.kubernetes.io/last-applied-configuration": applied
        }
        assert body.metadata.labels == {"team": " platform "}

    def test_no_owner_references_omitted(self) -> None:
        body = TargetSecret(name="app", namespace="default").to_k8s_object()

        assert body.metadata.owner_references is None

    def test_get_value(self) -> None:
        secret = TargetSecret(name="bw-token", data={"token": b"abc"})

        assert secret.get_value("token") == b"abc"
        assert secret.get_value("missing") is None
