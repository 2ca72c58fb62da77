"""Reconcile command: run a single reconciliation and report the outcome."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.table import Table

from bw_secrets_operator.cli.commands.base import (
    ConfigOption,
    build_reconciler,
    console,
    handle_k8s_error,
    load_operator_config,
)
from bw_secrets_operator.integrations.kubernetes.client import KubernetesClient
from bw_secrets_operator.integrations.kubernetes.exceptions import KubernetesError
from bw_secrets_operator.services.sync.reconciler import ReconcileResult


def render_result(namespace: str, name: str, result: ReconcileResult) -> Table:
    """Build the summary table printed after a reconcile."""
    table = Table(title=f"BitwardenSecret {namespace}/{name}")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value")

    style = "green" if result.succeeded else "red"
    table.add_row("Outcome", f"[{style}]{result.outcome}[/{style}]")
    table.add_row("Message", result.message or "-")
    requeue = (
        f"{int(result.requeue_after.total_seconds())}s" if result.requeue_after else "not requested"
    )
    table.add_row("Requeue", requeue)
    return table


def reconcile(
    namespace: Annotated[str, typer.Argument(help="Namespace of the BitwardenSecret")],
    name: Annotated[str, typer.Argument(help="Name of the BitwardenSecret")],
    config_path: ConfigOption = None,
) -> None:
    """Reconcile one BitwardenSecret now and print the result."""
    config = load_operator_config(config_path)

    try:
        with KubernetesClient(config.kubernetes) as client:
            reconciler, _ = build_reconciler(config, client)
            result = reconciler.reconcile(namespace, name)
    except KubernetesError as e:
        handle_k8s_error(e)
        return

    console.print(render_result(namespace, name, result))
    if not result.succeeded:
        raise typer.Exit(1)
