"""Core ``Secret`` manager for auth-token sources and sync targets."""

from __future__ import annotations

from bw_secrets_operator.integrations.kubernetes.models.secret import TargetSecret
from bw_secrets_operator.services.kubernetes.base import K8sBaseManager


class SecretManager(K8sBaseManager):
    """Store for core v1 Secrets."""

    _entity_name = "secret"

    def get(self, namespace: str, name: str) -> TargetSecret:
        """Read a Secret.

        Raises:
            KubernetesNotFoundError: If the Secret does not exist.
            KubernetesError: For any other API failure.
        """
        self._log.debug("getting_secret", name=name, namespace=namespace)
        try:
            result = self._client.core_v1.read_namespaced_secret(
                name, namespace, **self._request_kwargs()
            )
            return TargetSecret.from_k8s_object(result)
        except Exception as e:
            self._handle_api_error(e, "Secret", name, namespace)

    def create(self, secret: TargetSecret) -> TargetSecret:
        """Create a Secret and return the stored object."""
        namespace = secret.namespace or ""
        self._log.debug("creating_secret", name=secret.name, namespace=namespace)
        try:
            result = self._client.core_v1.create_namespaced_secret(
                namespace, secret.to_k8s_object(), **self._request_kwargs()
            )
            self._log.info("created_secret", name=secret.name, namespace=namespace)
            return TargetSecret.from_k8s_object(result)
        except Exception as e:
            self._handle_api_error(e, "Secret", secret.name, namespace)

    def update(self, secret: TargetSecret) -> TargetSecret:
        """Replace a Secret.

        The body carries the ``resourceVersion`` that was read, so a concurrent
        writer makes this fail with a conflict rather than being overwritten.
        """
        namespace = secret.namespace or ""
        self._log.debug("updating_secret", name=secret.name, namespace=namespace)
        try:
            result = self._client.core_v1.replace_namespaced_secret(
                secret.name, namespace, secret.to_k8s_object(), **self._request_kwargs()
            )
            self._log.info("updated_secret", name=secret.name, namespace=namespace)
            return TargetSecret.from_k8s_object(result)
        except Exception as e:
            self._handle_api_error(e, "Secret", secret.name, namespace)
