"""CLI app definition and command registration."""

from typing import Annotated

import typer

from workdocs.config import load_settings
from workdocs.errors import ConfigError
from workdocs.utils import console, set_log_file
from workdocs.version import get_version


def _version_callback(value: bool):
    if value:
        console.print(get_version())
        raise typer.Exit()


app = typer.Typer(
    help="Keep AI pair-programming work docs (implementation plans) in sync with their tasks.",
    no_args_is_help=True,
)


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit.", callback=_version_callback, is_eager=True),
    ] = False,
    log_file: Annotated[
        str,
        typer.Option(help="Also append log lines to this file (overrides WORKDOCS_LOG_FILE)."),
    ] = "",
) -> None:
    """Work-docs helper for implementation plans."""
    try:
        settings = load_settings()
    except ConfigError as exc:
        console.print(f"ERROR: {exc.user_message}", style="bold red")
        raise typer.Exit(1)
    set_log_file(log_file or settings.log_file)

# Register commands from submodules
from workdocs import scaffold as _scaffold_mod
from workdocs import updater as _updater_mod

_scaffold_mod.register(app)
_updater_mod.register(app)
