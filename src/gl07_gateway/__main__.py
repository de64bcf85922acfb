"""CLI entry point for gl07-gateway."""

import logging
import sys
from pathlib import Path

import click

from .adapters.logstore import SqliteLogStore
from .adapters.unit4 import Unit4ApiClient
from .cleanup import run_cleanup
from .config import load_settings
from .domain.errors import OperationCancelled
from .domain.models import RunFilter
from .worker import run_worker

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("-c", "--config", type=click.Path(exists=True), help="Config file path")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config: str | None) -> None:
    """GL07 gateway - post ABWTransaction XML files to Unit4."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config) if config else None


@cli.command()
@click.option("--source", "source_code", help="Only process this source system code")
@click.option("--file", "file_name", help="Only process this inbox file")
@click.option("--dry-run", is_flag=True, help="Transform without posting or moving files")
@click.pass_context
def run(
    ctx: click.Context, source_code: str | None, file_name: str | None, dry_run: bool
) -> None:
    """Process inbox files of all active source systems once."""
    settings = load_settings(ctx.obj["config_path"])
    run_filter = RunFilter(
        source_system_code=source_code, file_name=file_name, dry_run=dry_run
    )

    try:
        summary = run_worker(settings, run_filter)
    except OperationCancelled:
        click.echo("Cancelled", err=True)
        sys.exit(130)

    click.echo(f"execution_id: {summary.execution_id}")
    click.echo(f"processed: {summary.processed}")
    click.echo(f"succeeded: {summary.succeeded}")
    click.echo(f"failed: {summary.failed}")
    click.echo(f"duration_ms: {summary.duration_ms}")

    if summary.failed:
        sys.exit(1)


@cli.command()
@click.argument("execution_id")
@click.pass_context
def logs(ctx: click.Context, execution_id: str) -> None:
    """Show processing log entries of one run."""
    settings = load_settings(ctx.obj["config_path"])
    entries = SqliteLogStore(settings.paths.database).get_by_execution(execution_id)

    if not entries:
        click.echo(f"No log entries for execution {execution_id}")
        return

    for entry in entries:
        line = (
            f"{entry.processed_at:%Y-%m-%d %H:%M:%S} [{entry.status.value}] "
            f"source={entry.source_system_id} {entry.file_name}"
        )
        if entry.voucher_count is not None:
            line += f" vouchers={entry.voucher_count} rows={entry.transaction_count}"
        if entry.duration_ms is not None:
            line += f" {entry.duration_ms}ms"
        if entry.error_message:
            line += f" - {entry.error_message}"
        click.echo(line)


@cli.command("test-connection")
@click.pass_context
def test_connection(ctx: click.Context) -> None:
    """Check that a Unit4 OAuth token can be obtained."""
    settings = load_settings(ctx.obj["config_path"])
    client = Unit4ApiClient(settings.unit4)
    try:
        ok = client.test_connection()
    finally:
        client.close()

    if ok:
        click.echo("Unit4 connection OK")
    else:
        click.echo("Unit4 connection failed", err=True)
        sys.exit(1)


@cli.command()
@click.option("--retention-days", type=int, help="Override configured retention")
@click.pass_context
def cleanup(ctx: click.Context, retention_days: int | None) -> None:
    """Remove old processing log entries."""
    settings = load_settings(ctx.obj["config_path"])
    removed = run_cleanup(settings, retention_days)
    click.echo(f"Removed {removed} log entries")


if __name__ == "__main__":
    cli()
