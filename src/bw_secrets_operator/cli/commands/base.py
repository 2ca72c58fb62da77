"""Shared options, wiring and error rendering for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from pydantic import ValidationError
from rich.console import Console

from bw_secrets_operator.core.config.models import load_config
from bw_secrets_operator.integrations.bitwarden.client import SdkClientFactory
from bw_secrets_operator.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConnectionError,
    KubernetesError,
)
from bw_secrets_operator.services.kubernetes.bitwarden_secret_manager import (
    BitwardenSecretManager,
)
from bw_secrets_operator.services.kubernetes.secret_manager import SecretManager
from bw_secrets_operator.services.sync.reconciler import BitwardenSecretReconciler

if TYPE_CHECKING:
    from bw_secrets_operator.core.config.models import OperatorConfig
    from bw_secrets_operator.integrations.kubernetes.client import KubernetesClient

console = Console()


# =============================================================================
# Common Typer Option Annotations
# =============================================================================

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="YAML configuration file; environment variables override it",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
]


# =============================================================================
# Wiring
# =============================================================================


def load_operator_config(path: Path | None) -> OperatorConfig:
    """Load configuration, printing validation problems and exiting on failure."""
    try:
        return load_config(path)
    except (ValidationError, ValueError) as e:
        console.print(f"[red]Error:[/red] Invalid configuration\n  {e}")
        raise typer.Exit(1) from e


def build_reconciler(
    config: OperatorConfig,
    client: KubernetesClient,
) -> tuple[BitwardenSecretReconciler, BitwardenSecretManager]:
    """Assemble the reconciler and the declaration store it reads from."""
    bitwarden_secrets = BitwardenSecretManager(client)
    reconciler = BitwardenSecretReconciler(
        bitwarden_secrets,
        SecretManager(client),
        SdkClientFactory(config.bitwarden),
        state_path=config.bitwarden.state_path,
        refresh_interval=config.refresh_interval,
    )
    return reconciler, bitwarden_secrets


# =============================================================================
# Error Handling
# =============================================================================


def handle_k8s_error(error: KubernetesError) -> None:
    """Print a Kubernetes error and exit.

    Raises:
        typer.Exit: Always exits with code 1.
    """
    if isinstance(error, KubernetesConnectionError):
        console.print("[red]Error:[/red] Cannot connect to Kubernetes cluster")
        console.print(f"  {error.message}")
        if error.original_error:
            console.print(f"  Cause: {error.original_error}")
        console.print(
            "\n[dim]Hint: Check that your kubeconfig is valid and the cluster is reachable.[/dim]"
        )

    elif isinstance(error, KubernetesAuthError):
        console.print("[red]Error:[/red] Authentication/authorization failed")
        console.print(f"  {error.message}")
        console.print(
            "\n[dim]Hint: The service account needs get/list/watch on bitwardensecrets, "
            "patch on bitwardensecrets/status and get/create/update on secrets.[/dim]"
        )

    else:
        console.print(f"[red]Error:[/red] {error}")

    raise typer.Exit(1)
