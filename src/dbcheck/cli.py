# src/dbcheck/cli.py
"""
Command line entry point, built on click and rich.

Each command builds at most one snapshot per invocation and exits with:
  0  success
  2  infrastructure failure (DNS, provider, database, deadline, configuration)
  3  lambda-integration policy violation
"""

import functools
import logging
import sys
from dataclasses import replace
from typing import Optional

import click
import questionary
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.theme import Theme

from .adapters.aws.aws_provider import AWSControlPlane
from .adapters.mysql.mysql_adapter import MySQLDatabase
from .config import ProbeConfig
from .core.assembler import SnapshotAssembler
from .core.deadline import Deadline
from .core.checks.cluster import divergent_fields
from .core.checks.collation import check_unicode
from .core.checks.lambda_integration import LambdaIntegrationChecker, send_heartbeat
from .core.checks.tables import smallint_table_counts
from .core.evaluation import evaluate_all
from .core.exceptions import DbcheckError, PolicyViolation
from .core.models import ClusterSnapshot
from .reports.html_report import render_checks_report, render_unicode_report
from .reports.metrics import render_metrics
from .utils.formatters import (
    JsonLogFormatter,
    format_results_text,
    format_snapshot,
    format_table_counts,
    resolve_app_version,
)
from .utils.utility import generate_filename

logger = logging.getLogger(__name__)

custom_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
})

console = Console(theme=custom_theme, stderr=True)


def configure_logging(log_format: str, verbose: bool = False) -> None:
    if log_format == "json":
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonLogFormatter())
    else:
        handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )
    # botocore is chatty at DEBUG.
    logging.getLogger("botocore").setLevel(logging.WARNING)


class ProbeContext:
    """Lazily built collaborators shared by the commands of one invocation."""

    def __init__(self, config: ProbeConfig):
        self.config = config
        self.deadline = Deadline(config.timeout_seconds)
        self._control_plane: Optional[AWSControlPlane] = None
        self._db: Optional[MySQLDatabase] = None
        self._snapshot: Optional[ClusterSnapshot] = None

    @property
    def control_plane(self) -> AWSControlPlane:
        if self._control_plane is None:
            self._control_plane = AWSControlPlane(self.config, deadline=self.deadline)
        return self._control_plane

    @property
    def db(self) -> MySQLDatabase:
        if self._db is None:
            self._db = MySQLDatabase(self.config, deadline=self.deadline)
        return self._db

    def resolve_account_id(self) -> ProbeConfig:
        if not self.config.account_id:
            self.config = self.config.with_account_id(self.control_plane.get_account_id())
        return self.config

    def snapshot(self) -> ClusterSnapshot:
        if self._snapshot is None:
            self._snapshot = SnapshotAssembler(self.control_plane, self.config).assemble(deadline=self.deadline)
        return self._snapshot

    def close(self) -> None:
        if self._db is not None:
            self._db.close()


pass_probe = click.make_pass_decorator(ProbeContext)


def handle_errors(func):
    """Map dbcheck errors to a red message and the documented exit code."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PolicyViolation as e:
            console.print(f"[error]Policy violation ({e.step}):[/] {e.reason}")
            sys.exit(3)
        except DbcheckError as e:
            console.print(f"[error]Error:[/] {e}")
            sys.exit(2)
    return wrapper


def emit(content: str, output: Optional[str]) -> None:
    if not output:
        click.echo(content)
        return
    with open(output, "w", encoding="utf-8") as f:
        f.write(content)
    console.print(f"[success]✅ Report saved to {output}[/]")


output_option = click.option("--output", "-o", help="Save output to this file.")


@click.group(invoke_without_command=True)
@click.option("--host", help="Logical database hostname (default from DBCHECK_MYSQL_HOST).")
@click.option("--region", help="AWS region.")
@click.option("--profile", help="AWS shared config profile.")
@click.option("--timeout", type=float, help="Deadline in seconds for the whole invocation.")
@click.option("--log-format", type=click.Choice(["text", "json"]), help="Log output format.")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging.")
@click.option("--interactive", "-i", is_flag=True, help="Choose the report interactively.")
@click.version_option(resolve_app_version(), prog_name="dbcheck")
@click.pass_context
def cli(ctx, host, region, profile, timeout, log_format, verbose, interactive):
    """🛠 dbcheck - cluster discovery and compliance probe."""
    config = ProbeConfig.from_env(
        mysql_host=host,
        region=region,
        profile=profile,
        timeout_seconds=timeout,
        log_format=log_format,
    )
    configure_logging(config.log_format, verbose)
    ctx.obj = ProbeContext(config)
    ctx.call_on_close(ctx.obj.close)

    if ctx.invoked_subcommand is not None:
        return
    if not interactive:
        click.echo(ctx.get_help())
        return

    command, host = run_interactive_prompts(config)
    if command is None or host is None:
        console.print("\n[warning]⚠️  Operation cancelled.[/]")
        return
    ctx.obj.config = replace(ctx.obj.config, mysql_host=host)
    # The budget starts once the prompts are answered.
    ctx.obj.deadline = Deadline(ctx.obj.config.timeout_seconds)
    ctx.invoke(cli.commands[command])


def run_interactive_prompts(config: ProbeConfig):
    """Wraps questionary prompts for interactive mode."""
    command = questionary.select(
        "Which report?",
        choices=sorted(cli.commands),
        default="summary",
    ).ask()
    host = questionary.text("Logical database hostname:", default=config.mysql_host).ask()
    return command, host


# ---------------------------------------------------------------------------
# Snapshot reports
# ---------------------------------------------------------------------------

@cli.command()
@output_option
@pass_probe
@handle_errors
def describe(probe: ProbeContext, output=None):
    """Print the assembled cluster snapshot as JSON."""
    snapshot = probe.snapshot()
    emit(format_snapshot(snapshot, divergent_fields(snapshot)), output)


@cli.command()
@output_option
@pass_probe
@handle_errors
def metrics(probe: ProbeContext, output=None):
    """Print every policy signal in Prometheus exposition format."""
    results = evaluate_all(probe.snapshot(), probe.db, probe.config, probe.deadline)
    emit(render_metrics(results), output)


@cli.command()
@pass_probe
@handle_errors
def summary(probe: ProbeContext):
    """Show every policy signal as a table (plain lines when piped)."""
    snapshot = probe.snapshot()
    results = evaluate_all(snapshot, probe.db, probe.config, probe.deadline)
    if not sys.stdout.isatty():
        click.echo(format_results_text(results))
        return

    table = Table(title=f"Cluster {snapshot.identifier}", box=None, padding=(0, 2))
    table.add_column("Signal", style="cyan")
    table.add_column("Value", justify="right")
    table.add_column("Labels")
    for r in results.values():
        value = f"[green]{r.value:g}[/]" if r.ok else f"[red]{r.value:g}[/]"
        table.add_row(r.name, value, r.label_text())
    console.print(table)


# ---------------------------------------------------------------------------
# Database reports
# ---------------------------------------------------------------------------

@cli.command()
@output_option
@pass_probe
@handle_errors
def checks(probe: ProbeContext, output=None):
    """Run the lambda-integration gate and the stored routine diagnostics (HTML)."""
    config = probe.resolve_account_id()
    checker = LambdaIntegrationChecker(probe.db, probe.control_plane, probe.snapshot(), config, probe.deadline)
    report = checker.check()
    emit(render_checks_report(report, config), output or generate_filename("checks", "html"))


@cli.command()
@output_option
@pass_probe
@handle_errors
def unicode(probe: ProbeContext, output=None):
    """Collation of the tracked schemas and their tables (HTML)."""
    schemas = check_unicode(probe.db, probe.config)
    emit(render_unicode_report(schemas, probe.config), output or generate_filename("unicode", "html"))


@cli.command()
@output_option
@pass_probe
@handle_errors
def tables(probe: ProbeContext, output=None):
    """Row counts of tables keyed by a smallint, largest first (JSON)."""
    emit(format_table_counts(smallint_table_counts(probe.db)), output)


@cli.command()
@pass_probe
@handle_errors
def ping(probe: ProbeContext):
    """Check that the database answers."""
    probe.db.ping()
    click.echo("OK")


@cli.command()
@pass_probe
@handle_errors
def call(probe: ProbeContext):
    """Send a heartbeat through mysql.lambda_async."""
    send_heartbeat(probe.db, probe.resolve_account_id())
    click.echo("OK")


def main():
    cli()


if __name__ == "__main__":
    main()
