"""Update command: recompute a plan's Progress Summary and report the tallies."""

import os
from typing import Annotated

import typer
from rich.table import Table

from workdocs.config import (
    BLOCKED_WARN_THRESHOLD,
    COUNT_MODES,
    IN_PROGRESS_WARN_THRESHOLD,
    load_settings,
    validate_count_mode,
)
from workdocs.errors import PlanNotFoundError, WorkdocsError
from workdocs.git_helpers import get_current_branch, missing_plan_message, resolve_plan_path
from workdocs.progress import PlanProgress, TaskTally, UpdateResult, update_plan
from workdocs.utils import console, log


def progress_warnings(totals: TaskTally) -> list[str]:
    """Return actionable warnings for the grand totals.

    Pure function: blocked tasks always warrant a warning, and more than a
    handful of tasks in flight at once suggests losing focus.
    """
    warnings = []
    if totals.blocked > BLOCKED_WARN_THRESHOLD:
        warnings.append(f"{totals.blocked} tasks blocked — review and address blockers")
    if totals.in_progress > IN_PROGRESS_WARN_THRESHOLD:
        warnings.append(f"{totals.in_progress} tasks in progress — consider focusing on fewer tasks")
    return warnings


def overall_line(progress: PlanProgress) -> str:
    if progress.percent is None:
        return "No tasks found"
    t = progress.totals
    return f"Overall Progress: {progress.percent}% ({t.done}/{t.total} tasks)"


def print_progress(progress: PlanProgress) -> None:
    """Print per-phase tallies, totals and the overall percentage."""
    table = Table(title="Plan Progress")
    table.add_column("Phase", justify="right")
    table.add_column("Title")
    for name in ("Total", "Done", "In Progress", "Pending", "Blocked"):
        table.add_column(name, justify="right")

    for phase in progress.phases:
        t = phase.tally
        table.add_row(
            phase.label, phase.title, str(t.total), str(t.done),
            str(t.in_progress), str(t.pending), str(t.blocked),
        )
    t = progress.totals
    table.add_row(
        "TOTAL", "", str(t.total), str(t.done),
        str(t.in_progress), str(t.pending), str(t.blocked),
        style="bold",
    )
    console.print(table)
    log(overall_line(progress), style="bold cyan" if progress.percent is not None else "yellow")


def _report_result(result: UpdateResult, dry_run: bool, check: bool) -> int:
    """Log the outcome of an update. Returns the exit code."""
    if not result.section_found:
        log(
            "WARNING: No '## Progress Summary' section found — plan file left unchanged.",
            style="yellow",
        )
        return 0
    if check:
        if result.changed:
            log(f"Progress Summary is out of date: {result.path}", style="bold red")
            return 1
        log("Progress Summary is up to date.", style="green")
        return 0
    if not result.changed:
        log("Progress Summary already up to date.", style="green")
    elif dry_run:
        log(f"Dry run: would update {result.path}", style="cyan")
    elif result.written:
        log(f"Updated {result.path}", style="green")
    return 0


def register(app: typer.Typer) -> None:
    """Register plan update commands on the shared app."""
    app.command()(update)


def update(
    path: Annotated[str, typer.Argument(help="Plan file (default: docs/work/<branch>/implementation-plan.md)")] = None,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show the tallies without writing the file")] = False,
    check: Annotated[bool, typer.Option("--check", help="Exit 1 if the Progress Summary is stale; never writes")] = False,
    count_mode: Annotated[str, typer.Option(help=f"Counting discipline: {' or '.join(COUNT_MODES)}")] = "",
) -> None:
    """Recount phase task statuses and rewrite the plan's Progress Summary."""
    try:
        settings = load_settings()
        mode = validate_count_mode(count_mode) if count_mode else settings.count_mode
        plan_path = resolve_plan_path(path, get_current_branch, settings.docs_dir, settings.plan_filename)
        if not os.path.isfile(plan_path):
            raise PlanNotFoundError(missing_plan_message(plan_path), path=plan_path)
        result = update_plan(plan_path, count_mode=mode, dry_run=dry_run or check)
    except WorkdocsError as exc:
        log(f"ERROR: {exc.user_message}", style="bold red")
        raise typer.Exit(1)

    print_progress(result.progress)
    for warning in progress_warnings(result.progress.totals):
        log(f"WARNING: {warning}", style="yellow")

    exit_code = _report_result(result, dry_run, check)
    if exit_code:
        raise typer.Exit(exit_code)
