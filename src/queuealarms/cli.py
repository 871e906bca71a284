"""Command-line interface for the queue alarm reconciler.

Progress and summaries go to stderr; only plan contents are written to
stdout.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import ReconcilerConfig, load_config
from .exceptions import ReconcilerError
from .naming import NamingConvention
from .notify import build_summary_message
from .plan import format_plan_for_display, read_plan, write_plan
from .reconciler import ReconciliationPlan, build_plan, run_reconciliation

app = typer.Typer(
    name="queuealarms",
    help="Queue Alarm Reconciler - keep CloudWatch alarms in sync with SQS queues",
    rich_markup_mode="rich",
)
console = Console()
err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%Y-%m-%d %H:%M:%S]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load(
    env: str,
    config_path: Path | None,
    region: str | None = None,
    threshold: int | None = None,
    period: int | None = None,
    topic_arn: str | None = None,
) -> ReconcilerConfig:
    try:
        config = load_config(env, config_path)
    except FileNotFoundError:
        # An explicit file must exist; a missing config/<env>.yml falls back to env vars
        if config_path:
            raise
        config = ReconcilerConfig.from_env()

    overrides: dict = {}
    if region:
        overrides["aws_region"] = region
    if topic_arn:
        overrides["notification_target"] = topic_arn
    alarm_overrides: dict = {}
    if threshold is not None:
        alarm_overrides["threshold"] = threshold
    if period is not None:
        alarm_overrides["period_seconds"] = period
    if alarm_overrides:
        overrides["alarm"] = config.alarm.model_copy(update=alarm_overrides)

    config = config.model_copy(update=overrides)
    configure_logging(config.log_level)
    return config


def _log_configuration(config: ReconcilerConfig, convention: NamingConvention) -> None:
    logger = logging.getLogger(__name__)
    logger.info("Configuration:")
    logger.info("  Region:          %s", config.aws_region)
    logger.info("  Alarm Threshold: %s messages", config.alarm.threshold)
    logger.info("  Alarm Period:    %s seconds", config.alarm.period_seconds)
    logger.info("  SNS Topic:       %s", config.notification_target or "(none)")
    logger.info("  Convention:      %s (%s)", convention.value, convention.marker)


@app.command()
def reconcile(
    env: str = typer.Option("dev", help="Environment (dev/staging/prod)"),
    config_path: Path | None = typer.Option(None, help="Custom config file path"),
    region: str | None = typer.Option(None, help="AWS region"),
    threshold: int | None = typer.Option(None, min=1, help="Threshold for normal queues"),
    period: int | None = typer.Option(None, min=1, help="Alarm period in seconds"),
    topic_arn: str | None = typer.Option(None, help="SNS topic for alarm actions and the summary"),
    convention: NamingConvention | None = typer.Option(None, help="Alarm naming convention"),
    notify: bool = typer.Option(True, help="Publish the run summary to SNS"),
) -> None:
    """Create missing alarms, delete orphaned ones, and notify."""
    err_console.print("[bold blue]🔄 SQS CloudWatch Alarm Reconciliation[/bold blue]")

    try:
        config = _load(env, config_path, region, threshold, period, topic_arn)
        active = convention or config.convention_for(NamingConvention.PREFIX)
        _log_configuration(config, active)

        summary = run_reconciliation(config, convention=active, notify=notify)
        err_console.print(build_summary_message(summary))

    except ReconcilerError as e:
        err_console.print(f"[bold red]❌ Reconciliation failed: {e}[/bold red]")
        sys.exit(1)
    except Exception as e:
        err_console.print(f"[bold red]💥 Unexpected error: {e}[/bold red]")
        sys.exit(1)

    if not summary.succeeded:
        err_console.print(f"[bold yellow]⚠ Completed with {summary.failed} error(s)[/bold yellow]")
        sys.exit(1)
    err_console.print("[bold green]✅ Reconciliation completed successfully![/bold green]")


@app.command()
def plan(
    env: str = typer.Option("dev", help="Environment (dev/staging/prod)"),
    config_path: Path | None = typer.Option(None, help="Custom config file path"),
    region: str | None = typer.Option(None, help="AWS region"),
    threshold: int | None = typer.Option(None, min=1, help="Threshold for normal queues"),
    convention: NamingConvention | None = typer.Option(None, help="Alarm naming convention"),
    output: Path | None = typer.Option(None, help="Plan file to write"),
) -> None:
    """Analyze queues and alarms and write a plan file. Makes no changes."""
    err_console.print("[bold blue]🔍 Build Stage: Analyzing SQS Queues[/bold blue]")

    try:
        config = _load(env, config_path, region, threshold)
        active = convention or config.convention_for(NamingConvention.SUFFIX)
        _log_configuration(config, active)

        result = build_plan(config, convention=active)
        path = write_plan(result, output or config.plan_path)

    except ReconcilerError as e:
        err_console.print(f"[bold red]❌ Plan failed: {e}[/bold red]")
        sys.exit(1)
    except Exception as e:
        err_console.print(f"[bold red]💥 Unexpected error: {e}[/bold red]")
        sys.exit(1)

    _display_plan_table(result, err_console)
    err_console.print(f"💾 Plan saved to: {path}")
    console.print(format_plan_for_display(result), markup=False, highlight=False)


@app.command("show-plan")
def show_plan(
    path: Path = typer.Argument(Path("plan.txt"), help="Plan file to display"),
) -> None:
    """Validate a plan file and display its actions."""
    try:
        result = read_plan(path)
    except (ReconcilerError, FileNotFoundError) as e:
        err_console.print(f"[bold red]❌ Cannot read plan: {e}[/bold red]")
        sys.exit(1)

    console.print(f"Region: {result.region}  Convention: {result.convention.value}")
    _display_plan_table(result, console)


def _display_plan_table(result: ReconciliationPlan, target: Console) -> None:
    """Display plan actions table."""
    table = Table(title="Reconciliation Plan")
    table.add_column("Action", style="cyan")
    table.add_column("Alarm", style="green")
    table.add_column("Queue", style="blue")
    table.add_column("Threshold", style="yellow")

    for action in result.creates:
        table.add_row("CREATE", action.alarm_name, action.queue_name, str(action.threshold))
    for alarm_name in result.deletes:
        table.add_row("DELETE", alarm_name, "(orphaned)", "")

    target.print(table)
    target.print(f"Alarms to create: {len(result.creates)}  Alarms to delete: {len(result.deletes)}")


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
