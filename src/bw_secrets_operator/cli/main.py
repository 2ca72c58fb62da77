"""Main CLI entry point using Typer."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from bw_secrets_operator import __version__
from bw_secrets_operator.cli.commands import reconcile, run
from bw_secrets_operator.logging.config import configure_logging

app = typer.Typer(
    name="bw-secrets-operator",
    help="Sync Bitwarden Secrets Manager secrets into Kubernetes Secrets.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"bw-secrets-operator version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        envvar="BW_LOG_JSON",
        help="Emit logs as JSON lines.",
    ),
    log_file: Path | None = typer.Option(
        None,
        "--log-file",
        envvar="BW_LOG_FILE",
        help="Also write JSON logs to this rotating file.",
    ),
) -> None:
    """Bitwarden Secrets Manager operator for Kubernetes."""
    configure_logging(verbose=verbose, debug=debug, json_output=json_logs, log_file=log_file)


app.command()(run.run)
app.command()(reconcile.reconcile)


if __name__ == "__main__":
    app()
