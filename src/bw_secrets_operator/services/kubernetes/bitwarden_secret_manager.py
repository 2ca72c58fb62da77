"""BitwardenSecret resource manager.

Reads, watches and writes the status of BitwardenSecret custom resources
through the Kubernetes ``CustomObjectsApi``.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from pydantic import ValidationError

from bw_secrets_operator.integrations.kubernetes.exceptions import KubernetesError
from bw_secrets_operator.integrations.kubernetes.models.bitwarden_secret import (
    BW_GROUP,
    BW_KIND,
    BW_PLURAL,
    BW_VERSION,
    BitwardenSecret,
)
from bw_secrets_operator.services.kubernetes.base import K8sBaseManager


class BitwardenSecretManager(K8sBaseManager):
    """Store for BitwardenSecret declarations."""

    _entity_name = "bitwarden_secret"

    def get(self, namespace: str, name: str) -> BitwardenSecret:
        """Get a BitwardenSecret by namespace and name.

        Raises:
            KubernetesNotFoundError: If the declaration was deleted.
            KubernetesError: For any other API failure.
        """
        self._log.debug("getting_bitwarden_secret", name=name, namespace=namespace)
        try:
            result = self._client.custom_objects.get_namespaced_custom_object(
                BW_GROUP,
                BW_VERSION,
                namespace,
                BW_PLURAL,
                name,
                **self._request_kwargs(),
            )
            return BitwardenSecret.from_k8s_object(result)
        except Exception as e:
            self._handle_api_error(e, BW_KIND, name, namespace)

    def list_all(self, namespace: str | None = None) -> tuple[list[BitwardenSecret], str | None]:
        """List BitwardenSecrets in one namespace or across the cluster.

        Returns:
            The declarations and the list's resourceVersion, suitable as the
            starting point of a watch.
        """
        self._log.debug("listing_bitwarden_secrets", namespace=namespace or "*")
        try:
            if namespace:
                result = self._client.custom_objects.list_namespaced_custom_object(
                    BW_GROUP, BW_VERSION, namespace, BW_PLURAL, **self._request_kwargs()
                )
            else:
                result = self._client.custom_objects.list_cluster_custom_object(
                    BW_GROUP, BW_VERSION, BW_PLURAL, **self._request_kwargs()
                )
        except Exception as e:
            self._handle_api_error(e, BW_KIND, None, namespace)

        items: list[dict[str, Any]] = result.get("items", [])
        secrets = [s for s in (self._parse(item) for item in items) if s is not None]
        resource_version = result.get("metadata", {}).get("resourceVersion")
        self._log.debug("listed_bitwarden_secrets", count=len(secrets))
        return secrets, resource_version

    def watch(
        self,
        namespace: str | None = None,
        *,
        resource_version: str | None = None,
        timeout_seconds: int = 60,
    ) -> Iterator[tuple[str, BitwardenSecret]]:
        """Stream ``(event_type, declaration)`` pairs until the server timeout.

        Raises:
            KubernetesError: If the stream cannot be opened or breaks.
        """
        from kubernetes import watch

        kwargs: dict[str, Any] = {"timeout_seconds": timeout_seconds}
        if resource_version:
            kwargs["resource_version"] = resource_version

        watcher = watch.Watch()
        try:
            if namespace:
                stream = watcher.stream(
                    self._client.custom_objects.list_namespaced_custom_object,
                    BW_GROUP,
                    BW_VERSION,
                    namespace,
                    BW_PLURAL,
                    **kwargs,
                )
            else:
                stream = watcher.stream(
                    self._client.custom_objects.list_cluster_custom_object,
                    BW_GROUP,
                    BW_VERSION,
                    BW_PLURAL,
                    **kwargs,
                )
            for event in stream:
                event_type: str = event.get("type", "")
                obj = event.get("object")
                if event_type == "ERROR":
                    details = obj if isinstance(obj, dict) else {}
                    raise KubernetesError(
                        message=details.get("message", "Watch stream returned an error"),
                        status_code=details.get("code"),
                    )
                if not isinstance(obj, dict):
                    continue
                if (bw_secret := self._parse(obj)) is not None:
                    yield event_type, bw_secret
        except Exception as e:
            self._handle_api_error(e, BW_KIND, None, namespace)
        finally:
            watcher.stop()

    def _parse(self, obj: dict[str, Any]) -> BitwardenSecret | None:
        """Parse a watched or listed object, skipping ones with an invalid spec."""
        try:
            return BitwardenSecret.from_k8s_object(obj)
        except ValidationError as e:
            metadata = obj.get("metadata", {})
            self._log.warning(
                "invalid_bitwarden_secret",
                name=metadata.get("name"),
                namespace=metadata.get("namespace"),
                errors=e.error_count(),
            )
            return None

    def update_status(self, bw_secret: BitwardenSecret) -> BitwardenSecret:
        """Write the status subresource of a declaration.

        Only ``status`` is sent, so spec edits made since the object was read
        are not overwritten.
        """
        namespace = bw_secret.namespace or ""
        self._log.debug("updating_status", name=bw_secret.name, namespace=namespace)
        try:
            result = self._client.custom_objects.patch_namespaced_custom_object_status(
                BW_GROUP,
                BW_VERSION,
                namespace,
                BW_PLURAL,
                bw_secret.name,
                {"status": bw_secret.status_to_k8s()},
                **self._request_kwargs(),
            )
            self._log.debug("updated_status", name=bw_secret.name, namespace=namespace)
            return BitwardenSecret.from_k8s_object(result)
        except Exception as e:
            self._handle_api_error(e, BW_KIND, bw_secret.name, namespace)
