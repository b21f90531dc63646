"""Command-line interface for the CloudWatch Events custom resources.

Replays recorded CloudFormation requests against the events API and
inspects the handler configuration.
"""

from __future__ import annotations

import json
import sys
from enum import Enum
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .config import HandlerConfig, load_config
from .dispatch import dispatch
from .exceptions import CustomResourceError
from .logging_config import configure_logging
from .models import ReconciliationOutcome
from .naming import unique_suffix
from .resources import RuleReconciler, TargetReconciler
from .response import CloudFormationNotifier, RecordingNotifier

app = typer.Typer(
    name="cfn-events",
    help="CloudWatch Events custom resources for CloudFormation",
    rich_markup_mode="rich",
)
console = Console()


class ResourceKind(str, Enum):
    rule = "rule"
    target = "target"


def _config(env: str, config_path: Path | None) -> HandlerConfig:
    if config_path is not None:
        return load_config(env, config_path)
    return HandlerConfig.from_env().model_copy(update={"environment": env})


@app.command()
def invoke(
    kind: ResourceKind = typer.Argument(..., help="Resource type to reconcile"),
    event_file: Path = typer.Argument(..., exists=True, readable=True, help="Recorded CloudFormation request (JSON)"),
    env: str = typer.Option("dev", help="Environment (dev/staging/prod)"),
    config_path: Path | None = typer.Option(None, help="Custom config file path"),
    send: bool = typer.Option(False, "--send/--no-send", help="PUT the response to the event's ResponseURL"),
) -> None:
    """Run a recorded Create/Update/Delete request against the events API."""
    console.print(f"[bold blue]Replaying {kind.value} request from {event_file}[/bold blue]")

    try:
        config = _config(env, config_path)
        configure_logging(config)
        event = json.loads(event_file.read_text(encoding="utf-8"))

        import boto3

        events_client = boto3.client("events", region_name=config.aws_region, endpoint_url=config.events_endpoint_url)
        reconciler = RuleReconciler(events_client) if kind is ResourceKind.rule else TargetReconciler(events_client)
        notifier = CloudFormationNotifier(timeout=config.response_timeout_seconds) if send else RecordingNotifier()

        outcome = dispatch(event, None, reconciler, notifier)
        _display_outcome(outcome)

    except CustomResourceError as e:
        console.print(f"[bold red]Invocation failed: {e}[/bold red]")
        sys.exit(1)
    except Exception as e:
        console.print(f"[bold red]Unexpected error: {e}[/bold red]")
        sys.exit(1)

    if not outcome.succeeded:
        sys.exit(1)


@app.command()
def suffix(count: int = typer.Option(1, min=1, help="Number of suffixes to generate")) -> None:
    """Print generated name suffixes."""
    for _ in range(count):
        console.print(unique_suffix())


@app.command()
def config(
    env: str = typer.Option("dev", help="Environment (dev/staging/prod)"),
    config_path: Path | None = typer.Option(None, help="Custom config file path"),
) -> None:
    """Show the resolved handler configuration."""
    try:
        cfg = _config(env, config_path)
    except (CustomResourceError, FileNotFoundError) as e:
        console.print(f"[bold red]Invalid configuration: {e}[/bold red]")
        sys.exit(1)

    table = Table(title="Handler Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    for key, value in cfg.model_dump().items():
        table.add_row(key, str(value))
    console.print(table)


def _display_outcome(outcome: ReconciliationOutcome) -> None:
    """Display the reconciliation outcome."""
    table = Table(title="Reconciliation Outcome")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    status_icon = "✅" if outcome.succeeded else "❌"
    table.add_row("Status", f"{status_icon} {outcome.status.value}")
    table.add_row("PhysicalResourceId", outcome.physical_resource_id or "-")
    table.add_row("Data", json.dumps(outcome.data))
    if outcome.reason:
        table.add_row("Reason", outcome.reason)

    console.print(table)


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
