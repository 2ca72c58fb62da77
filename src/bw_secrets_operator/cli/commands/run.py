"""Run command: start the controller loop."""

from __future__ import annotations

import signal
from types import FrameType
from typing import Annotated

import structlog
import typer

from bw_secrets_operator.cli.commands.base import (
    ConfigOption,
    build_reconciler,
    console,
    handle_k8s_error,
    load_operator_config,
)
from bw_secrets_operator.integrations.kubernetes.client import KubernetesClient
from bw_secrets_operator.integrations.kubernetes.exceptions import KubernetesError
from bw_secrets_operator.services.controller import DEFAULT_WATCH_TIMEOUT, SyncController

logger = structlog.get_logger()


def run(
    config_path: ConfigOption = None,
    namespace: Annotated[
        str | None,
        typer.Option(
            "--namespace",
            "-n",
            help="Only reconcile BitwardenSecrets in this namespace (default: all)",
        ),
    ] = None,
    watch_timeout: Annotated[
        int,
        typer.Option("--watch-timeout", min=1, help="Longest single watch window in seconds"),
    ] = DEFAULT_WATCH_TIMEOUT,
) -> None:
    """Watch BitwardenSecrets and keep their Secrets in sync."""
    config = load_operator_config(config_path)
    if namespace:
        config.kubernetes.namespace = namespace

    logger.info(
        "operator_starting",
        refresh_interval=config.refresh_interval,
        api_url=config.bitwarden.api_url,
        identity_api_url=config.bitwarden.identity_api_url,
        state_path=config.bitwarden.state_path,
    )

    try:
        with KubernetesClient(config.kubernetes) as client:
            reconciler, bitwarden_secrets = build_reconciler(config, client)
            controller = SyncController(
                reconciler,
                bitwarden_secrets,
                namespace=config.kubernetes.namespace,
                watch_timeout=watch_timeout,
                retry_decorator=client.make_retry_decorator(),
            )

            def _shutdown(signum: int, frame: FrameType | None) -> None:
                logger.info("shutdown_requested", signal=signum)
                controller.stop()

            signal.signal(signal.SIGTERM, _shutdown)
            signal.signal(signal.SIGINT, _shutdown)

            console.print(
                f"[green]Syncing BitwardenSecrets[/green] in "
                f"{config.kubernetes.namespace or 'all namespaces'} "
                f"every {config.refresh_interval}s"
            )
            controller.run()
    except KubernetesError as e:
        handle_k8s_error(e)
