"""
FILE: tasker/cli/shared.py
PURPOSE: Objects shared by every CLI command module
EXPORTS:
  - app, project_app, idea_app, config_app (Typer applications)
  - console, error_console (rich consoles)
  - get_workspace() -> Workspace
  - configure_logging(level)
  - fail(error) -> NoReturn (prints and exits with the mapped code)
  - EXIT_* exit codes
DEPENDENCIES:
  - typer (CLI framework)
  - rich (formatted output)
  - loguru (logging sink setup)
  - tasker.core.workspace, tasker.core.exceptions
NOTES:
  - Exit codes: 0 ok, 2 invalid input or usage, 3 not found, 4 ambiguous
    selector, 10 anything else
  - Logging goes to stderr only; stdout carries command output
"""

import sys
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape

from ..core.exceptions import (
    InvalidInputError,
    MatchConflictError,
    NotFoundError,
    TaskerError,
)
from ..core.workspace import ROOT_ENV_VAR, Workspace
from ..formatting import conflict_lines

__version__ = "0.1.0"

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_NOT_FOUND = 3
EXIT_CONFLICT = 4
EXIT_INTERNAL = 10

LOG_FORMAT = "<level>{level: <8}</level> | {name}:{function}:{line} - {message}"

# Typer app setup
app = typer.Typer(
    name="tasker",
    help="File-backed tasks and ideas for humans and agents",
    add_completion=False,
    no_args_is_help=True,
)

project_app = typer.Typer(name="project", help="Project management commands", no_args_is_help=True)
idea_app = typer.Typer(name="idea", help="Capture and manage ideas", no_args_is_help=True)
config_app = typer.Typer(name="config", help="Show and change configuration", no_args_is_help=True)
app.add_typer(project_app, name="project")
app.add_typer(idea_app, name="idea")
app.add_typer(config_app, name="config")

# Rich console for formatted output
console = Console()
error_console = Console(stderr=True)

# Set by the app callback before any command runs
state = {"root": None}


def configure_logging(level: str = "WARNING") -> None:
    """Send loguru output to stderr at the given level."""
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)


@app.callback()
def main_callback(
    root: Optional[str] = typer.Option(
        None, "--root", envvar=ROOT_ENV_VAR, help="Workspace directory (default: ~/.tasker)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Tasker - tasks and ideas stored as plain files."""
    state["root"] = root
    configure_logging("DEBUG" if verbose else "WARNING")


def get_workspace() -> Workspace:
    return Workspace(state["root"])


def exit_code_for(error: Exception) -> int:
    if isinstance(error, InvalidInputError):
        return EXIT_USAGE
    if isinstance(error, NotFoundError):
        return EXIT_NOT_FOUND
    if isinstance(error, MatchConflictError):
        return EXIT_CONFLICT
    return EXIT_INTERNAL


def fail(error: Exception) -> None:
    """
    Report an error on stderr and exit with its mapped code.

    Ambiguous selectors list every candidate so the caller can retry by id.
    """
    if isinstance(error, MatchConflictError):
        error_console.print(f"[yellow]Ambiguous:[/yellow] {escape(str(error))}")
        for line in conflict_lines(error):
            error_console.print(escape(line), highlight=False)
    elif isinstance(error, TaskerError):
        error_console.print(f"[red]Error:[/red] {escape(str(error))}")
    else:
        logger.opt(exception=error).debug("Unexpected failure")
        error_console.print(f"[red]Unexpected error:[/red] {escape(str(error))}")
    raise typer.Exit(exit_code_for(error))
