"""Building and filling the target Secret."""

from __future__ import annotations

from collections.abc import Mapping

from bw_secrets_operator.integrations.kubernetes.models.bitwarden_secret import (
    BW_API_VERSION,
    BW_KIND,
    BitwardenSecret,
)
from bw_secrets_operator.integrations.kubernetes.models.base import OwnerReference
from bw_secrets_operator.integrations.kubernetes.models.secret import (
    SECRET_TYPE_OPAQUE,
    TargetSecret,
)
from bw_secrets_operator.services.sync.exceptions import OwnerReferenceError

# Label binding a Secret to the uid of the BitwardenSecret that owns it
BW_SECRET_LABEL = "k8s.bitwarden.com/bw-secret"


def create_k8s_secret(bw_secret: BitwardenSecret) -> TargetSecret:
    """Return an empty Opaque Secret shell for ``bw_secret``'s target."""
    return TargetSecret(
        name=bw_secret.spec.secret_name,
        namespace=bw_secret.namespace,
        type=SECRET_TYPE_OPAQUE,
        labels={BW_SECRET_LABEL: bw_secret.uid or ""},
        annotations={},
        data={},
    )


def set_controller_reference(owner: BitwardenSecret, secret: TargetSecret) -> None:
    """Make ``owner`` the controller of ``secret`` so deletion cascades.

    Raises:
        OwnerReferenceError: If the owner has no uid, lives in another
            namespace, or another object already controls the Secret.
    """
    if not owner.uid:
        raise OwnerReferenceError(f"{BW_KIND} {owner.key} has no uid")
    if owner.namespace != secret.namespace:
        raise OwnerReferenceError(
            f"cross-namespace owner references are disallowed: owner {owner.key}, "
            f"Secret {secret.key}"
        )

    for existing in secret.owner_references:
        if existing.controller and existing.uid != owner.uid:
            raise OwnerReferenceError(
                f"Secret {secret.key} is already controlled by "
                f"{existing.kind} {existing.name}"
            )

    secret.owner_references = [o for o in secret.owner_references if o.uid != owner.uid]
    secret.owner_references.append(
        OwnerReference(
            api_version=BW_API_VERSION,
            kind=BW_KIND,
            name=owner.name,
            uid=owner.uid,
            controller=True,
            block_owner_deletion=True,
        )
    )


def update_secret_values(secret: TargetSecret, values: Mapping[str, bytes]) -> None:
    """Merge changed values into the Secret; keys not in ``values`` are kept."""
    secret.data.update(values)
