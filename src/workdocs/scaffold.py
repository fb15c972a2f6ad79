"""Init command: create a new implementation plan for the current branch."""

import os
from datetime import date
from typing import Annotated

import typer

from workdocs.config import DEFAULT_PHASE_COUNT, load_settings
from workdocs.errors import PlanExistsError, PlanWriteError, WorkdocsError
from workdocs.git_helpers import get_current_branch, resolve_plan_path
from workdocs.progress import update_plan_text, write_plan_atomic
from workdocs.templates import IMPLEMENTATION_PLAN_TEMPLATE, PHASE_TEMPLATE
from workdocs.utils import log

DEFAULT_PHASE_TITLES = ["Setup", "Core Implementation", "Testing", "Documentation"]


def default_phase_title(number: int) -> str:
    if number <= len(DEFAULT_PHASE_TITLES):
        return DEFAULT_PHASE_TITLES[number - 1]
    return "Follow-up Work"


def render_plan(title: str, branch: str, phase_count: int, created: str) -> str:
    """Render a new plan document with *phase_count* placeholder phases.

    Pure function. The Progress Summary section is left empty; create_plan()
    fills it in with the updater.
    """
    phases = "\n".join(
        PHASE_TEMPLATE.format(number=n, title=default_phase_title(n))
        for n in range(1, phase_count + 1)
    )
    return IMPLEMENTATION_PLAN_TEMPLATE.format(
        title=title,
        branch=branch or "(none)",
        created=created,
        phases=phases,
    )


def create_plan(
    path: str,
    title: str,
    branch: str = "",
    phase_count: int = DEFAULT_PHASE_COUNT,
    force: bool = False,
    created: str | None = None,
) -> str:
    """Write a new plan file at *path* with its Progress Summary already filled in.

    Raises PlanExistsError if the file exists and *force* is False. Returns
    the text that was written.
    """
    if os.path.exists(path) and not force:
        raise PlanExistsError(
            f"Plan file already exists: {path}",
            user_message=f"Plan file already exists: {path} (use --force to overwrite)",
            path=path,
        )
    if created is None:
        created = date.today().isoformat()
    text, _progress, _found = update_plan_text(render_plan(title, branch, phase_count, created))
    parent = os.path.dirname(path)
    if parent:
        try:
            os.makedirs(parent, exist_ok=True)
        except OSError as exc:
            raise PlanWriteError(f"Cannot create directory {parent}: {exc}", path=path) from exc
    write_plan_atomic(path, text)
    return text


def register(app: typer.Typer) -> None:
    """Register scaffolding commands on the shared app."""
    app.command()(init)


def init(
    path: Annotated[str, typer.Argument(help="Plan file to create (default: docs/work/<branch>/implementation-plan.md)")] = None,
    title: Annotated[str, typer.Option(help="Plan title (defaults to the branch name)")] = "",
    phases: Annotated[int, typer.Option(min=1, max=20, help="Number of placeholder phases")] = DEFAULT_PHASE_COUNT,
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing plan file")] = False,
) -> None:
    """Create an implementation plan with phase tables and a Progress Summary."""
    try:
        settings = load_settings()
        branch = get_current_branch()
        plan_path = resolve_plan_path(path, lambda: branch, settings.docs_dir, settings.plan_filename)
        plan_title = title or branch or os.path.splitext(os.path.basename(plan_path))[0]
        create_plan(plan_path, plan_title, branch=branch, phase_count=phases, force=force)
    except WorkdocsError as exc:
        log(f"ERROR: {exc.user_message}", style="bold red")
        raise typer.Exit(1)

    log(f"Created plan: {plan_path}", style="green")
    log("Fill in the phase tables, then run 'workdocs update' to refresh the summary.", style="dim")
