"""Fakes and fixtures for sync engine tests.

The reconciler only sees its collaborators through protocols, so these tests
drive it with an in-memory declaration store, an in-memory Secret store, a
scripted Secrets Manager client factory and a frozen clock.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from bw_secrets_operator.integrations.bitwarden.exceptions import BitwardenError
from bw_secrets_operator.integrations.bitwarden.models import SecretValue, SyncResponse
from bw_secrets_operator.integrations.kubernetes.exceptions import (
    KubernetesConflictError,
    KubernetesError,
    KubernetesNotFoundError,
)
from bw_secrets_operator.integrations.kubernetes.models.bitwarden_secret import (
    AuthTokenRef,
    BitwardenSecret,
    BitwardenSecretSpec,
    SecretMapping,
)
from bw_secrets_operator.integrations.kubernetes.models.secret import TargetSecret
from bw_secrets_operator.services.sync.reconciler import BitwardenSecretReconciler

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)
NAMESPACE = "default"
NAME = "app-secrets"
TARGET = "app"
AUTH_SECRET = "bw-token"
AUTH_KEY = "token"
ACCESS_TOKEN = "0.machine-account.token"
ORG_ID = "org-1"
STATE_PATH = "/tmp/bw-state"
REFRESH_INTERVAL = 300


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


class FakeSecretsManagerClient:
    """Records calls and replays a scripted response."""

    def __init__(
        self,
        response: SyncResponse,
        login_error: BitwardenError | None = None,
        sync_error: Exception | None = None,
    ) -> None:
        self.response = response
        self.login_error = login_error
        self.sync_error = sync_error
        self.logins: list[tuple[str, str]] = []
        self.syncs: list[tuple[str, datetime | None]] = []
        self.closed = False

    def access_token_login(self, access_token: str, state_path: str) -> None:
        self.logins.append((access_token, state_path))
        if self.login_error is not None:
            raise self.login_error

    def sync(self, organization_id: str, last_synced: datetime | None) -> SyncResponse:
        self.syncs.append((organization_id, last_synced))
        if self.sync_error is not None:
            raise self.sync_error
        return self.response

    def close(self) -> None:
        self.closed = True


class FakeClientFactory:
    """Hands out a new fake client per call, answering from a queue."""

    api_url = "https://api.bitwarden.com"
    identity_api_url = "https://identity.bitwarden.com"

    def __init__(self) -> None:
        self.responses: deque[SyncResponse] = deque()
        self.clients: list[FakeSecretsManagerClient] = []
        self.login_error: BitwardenError | None = None
        self.sync_error: Exception | None = None

    def respond(self, has_changes: bool, secrets: dict[str, str] | None = None) -> None:
        """Queue the response of the next sync call."""
        self.responses.append(
            SyncResponse(
                has_changes=has_changes,
                secrets=[SecretValue(id=k, value=v) for k, v in (secrets or {}).items()],
            )
        )

    def get_client(self) -> FakeSecretsManagerClient:
        response = self.responses.popleft() if self.responses else SyncResponse()
        client = FakeSecretsManagerClient(response, self.login_error, self.sync_error)
        self.clients.append(client)
        return client

    def get_api_url(self) -> str:
        return self.api_url

    def get_identity_api_url(self) -> str:
        return self.identity_api_url


class InMemoryBitwardenSecretStore:
    """Declaration store keeping deep copies, like an API server would."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], BitwardenSecret] = {}
        self.status_writes: list[BitwardenSecret] = []
        self.get_error: KubernetesError | None = None
        self.status_error: KubernetesError | None = None

    def add(self, bw_secret: BitwardenSecret) -> None:
        self.objects[(bw_secret.namespace or "", bw_secret.name)] = bw_secret.model_copy(
            deep=True
        )

    def stored(self, namespace: str = NAMESPACE, name: str = NAME) -> BitwardenSecret:
        return self.objects[(namespace, name)]

    def get(self, namespace: str, name: str) -> BitwardenSecret:
        if self.get_error is not None:
            raise self.get_error
        try:
            return self.objects[(namespace, name)].model_copy(deep=True)
        except KeyError:
            raise KubernetesNotFoundError(
                resource_type="BitwardenSecret", resource_name=name, namespace=namespace
            ) from None

    def update_status(self, bw_secret: BitwardenSecret) -> BitwardenSecret:
        if self.status_error is not None:
            raise self.status_error
        stored = self.objects[(bw_secret.namespace or "", bw_secret.name)]
        stored.status = bw_secret.status.model_copy(deep=True)
        self.status_writes.append(stored.model_copy(deep=True))
        return stored.model_copy(deep=True)


class InMemorySecretStore:
    """Secret store counting writes and bumping resourceVersion."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], TargetSecret] = {}
        self.creates: list[TargetSecret] = []
        self.updates: list[TargetSecret] = []
        self.errors: dict[str, KubernetesError] = {}
        self._version = 0

    def _bump(self, secret: TargetSecret) -> TargetSecret:
        self._version += 1
        stored = secret.model_copy(deep=True)
        stored.resource_version = str(self._version)
        self.objects[(stored.namespace or "", stored.name)] = stored
        return stored.model_copy(deep=True)

    def add(self, secret: TargetSecret) -> None:
        self._bump(secret)

    def stored(self, name: str = TARGET, namespace: str = NAMESPACE) -> TargetSecret:
        return self.objects[(namespace, name)]

    def get(self, namespace: str, name: str) -> TargetSecret:
        if error := self.errors.get(f"get:{name}"):
            raise error
        try:
            return self.objects[(namespace, name)].model_copy(deep=True)
        except KeyError:
            raise KubernetesNotFoundError(
                resource_type="Secret", resource_name=name, namespace=namespace
            ) from None

    def create(self, secret: TargetSecret) -> TargetSecret:
        if error := self.errors.get("create"):
            raise error
        if (secret.namespace or "", secret.name) in self.objects:
            raise KubernetesConflictError(
                resource_type="Secret", resource_name=secret.name, namespace=secret.namespace
            )
        self.creates.append(secret.model_copy(deep=True))
        return self._bump(secret)

    def update(self, secret: TargetSecret) -> TargetSecret:
        if error := self.errors.get("update"):
            raise error
        self.updates.append(secret.model_copy(deep=True))
        return self._bump(secret)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(NOW)


@pytest.fixture
def client_factory() -> FakeClientFactory:
    return FakeClientFactory()


@pytest.fixture
def bitwarden_secrets() -> InMemoryBitwardenSecretStore:
    return InMemoryBitwardenSecretStore()


@pytest.fixture
def secrets() -> InMemorySecretStore:
    """Secret store pre-populated with the machine account token."""
    store = InMemorySecretStore()
    store.add(
        TargetSecret(
            name=AUTH_SECRET,
            namespace=NAMESPACE,
            data={AUTH_KEY: ACCESS_TOKEN.encode("utf-8")},
        )
    )
    return store


@pytest.fixture
def make_bitwarden_secret() -> Callable[..., BitwardenSecret]:
    """Build a BitwardenSecret declaration."""

    def _make(
        secret_map: list[tuple[str, str]] | None = None,
        uid: str | None = "uid-1",
        **overrides: Any,
    ) -> BitwardenSecret:
        mappings = (
            [SecretMapping(bw_secret_id=i, secret_key_name=k) for i, k in secret_map]
            if secret_map is not None
            else None
        )
        fields: dict[str, Any] = {
            "name": NAME,
            "namespace": NAMESPACE,
            "uid": uid,
            "generation": 1,
            "spec": BitwardenSecretSpec(
                organization_id=ORG_ID,
                secret_name=TARGET,
                auth_token=AuthTokenRef(secret_name=AUTH_SECRET, secret_key=AUTH_KEY),
                secret_map=mappings,
            ),
        }
        fields.update(overrides)
        return BitwardenSecret(**fields)

    return _make


@pytest.fixture
def reconciler(
    bitwarden_secrets: InMemoryBitwardenSecretStore,
    secrets: InMemorySecretStore,
    client_factory: FakeClientFactory,
    clock: FrozenClock,
) -> BitwardenSecretReconciler:
    return BitwardenSecretReconciler(
        bitwarden_secrets,
        secrets,
        client_factory,
        state_path=STATE_PATH,
        refresh_interval=REFRESH_INTERVAL,
        clock=clock,
    )
