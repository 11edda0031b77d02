"""CLI command for applying a change plan transactionally."""

from __future__ import annotations

import importlib
import json
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

from pydantic import ValidationError
from rich.console import Console

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
    from typer import Typer as TyperType
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")
    TyperType = Any

from component_txn.core.logging import configure_logging
from component_txn.core.notifications import (
    Notification,
    NotificationKind,
    NotifyHandler,
)
from component_txn.plan.runner import load_plan, run_plan
from component_txn.plan.schemas import PlanReport

app: TyperType = typer.Typer(help="Apply a component change plan with rollback.")

PlanArgument = Annotated[
    Path,
    typer.Argument(help="JSON change plan to apply.", exists=True, dir_okay=False),
]
RootOption = Annotated[
    Path,
    typer.Option("--root", help="Install prefix the plan paths are relative to."),
]
TempDirOption = Annotated[
    Path | None,
    typer.Option(
        "--temp-dir",
        help="Backup directory; defaults to one beside --root on the same volume.",
    ),
]
DryRunFlag = Annotated[
    bool,
    typer.Option("--dry-run", help="Validate the plan without touching files."),
]
JsonFlag = Annotated[
    bool,
    typer.Option("--json", help="Emit the report as JSON."),
]


def console_handler(console: Console) -> NotifyHandler:
    """Render rollback-related notifications on a Rich console."""

    def handle(notification: Notification) -> None:
        if notification.kind is NotificationKind.ROLLING_BACK:
            console.print("🔄 [yellow]Rolling back...[/yellow]")
        elif notification.kind is NotificationKind.NON_FATAL_ERROR:
            console.print(
                f"⚠️ [yellow]non-fatal error[/yellow] {notification.path}: "
                f"{notification.error}"
            )
        elif notification.kind is NotificationKind.ROLLBACK_FINISHED:
            console.print(
                f"↩️ [blue]Rollback finished[/blue] ({notification.detail})"
            )

    return handle


def _show_report(console: Console, report: PlanReport) -> None:
    if report.dry_run:
        console.print(
            f"🔍 [blue]DRY RUN[/blue] {report.component}: "
            f"{report.total_ops} operations validated"
        )
    elif report.committed:
        console.print(
            f"✅ [green]COMMITTED[/green] {report.component}: "
            f"{report.applied_count}/{report.total_ops} operations"
        )
    else:
        reason = (report.error or {}).get("error", "unknown")
        console.print(
            f"❌ [red]ROLLED BACK[/red] {report.component}: "
            f"operation {report.failed_index} failed ({reason})"
        )


def apply(
    plan_path: PlanArgument,
    root: RootOption,
    temp_dir: TempDirOption = None,
    dry_run: DryRunFlag = False,
    json_output: JsonFlag = False,
) -> None:
    """Apply PLAN_PATH under --root, rolling back on the first failure."""

    configure_logging(level="ERROR" if json_output else None)
    console = Console()
    try:
        plan = load_plan(plan_path)
    except ValidationError as e:
        typer.secho(f"Invalid plan: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from e

    report = run_plan(
        plan,
        root,
        temp_root=temp_dir,
        notify=None if json_output else console_handler(console),
        dry_run=dry_run,
    )

    if json_output:
        typer.echo(json.dumps(report.model_dump(mode="json"), indent=2))
    else:
        _show_report(console, report)

    if not (report.committed or report.dry_run):
        raise typer.Exit(code=1)


app.command("apply")(apply)
