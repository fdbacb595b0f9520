"""
FILE: tasker/cli/commands/system.py
PURPOSE: System commands (version, init, config show, config set)
"""

from typing import Optional

import typer
from rich.markup import escape

from ..shared import __version__, app, config_app, console, fail, get_workspace
from ...core import service
from ...core.constants import DEFAULT_PROJECT_NAME
from ...core.exceptions import TaskerError


@app.command()
def version():
    """Show tasker version."""
    console.print(f"tasker v{__version__}")


@app.command()
def init(
    project: str = typer.Option(DEFAULT_PROJECT_NAME, "--project", "-p", help="Default project to create"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Create the workspace directory, default config and a first project.

    Running it again is harmless: existing files are kept.
    """
    try:
        ws = get_workspace()
        created = ws.init(project)
    except (TaskerError, OSError) as e:
        fail(e)

    if json_output:
        typer.echo(created.to_json())
    else:
        console.print(f"[green]✓ Workspace ready[/green] at {escape(str(ws.root))}")
        console.print(f"  Default project: {escape(created.name)} ({created.slug})")


@config_app.command("show")
def config_show(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show columns and agent settings."""
    ws = get_workspace()
    cfg = ws.config.load()
    if json_output:
        typer.echo(cfg.to_json())
        return

    typer.echo(f"root: {ws.root}")
    typer.echo(f"config: {ws.config.path}{'' if ws.config.exists() else ' (defaults, not written)'}")
    typer.echo("columns:")
    for column in cfg.columns:
        typer.echo(f"  {column.id}\t{column.dir}\t{column.status}")
    if cfg.agent is not None:
        typer.echo("agent:")
        for key, value in cfg.agent.to_dict().items():
            typer.echo(f"  {key}: {value}")


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Setting, e.g. agent.default_project"),
    value: Optional[str] = typer.Argument(None, help="New value (omit or 'none' to clear text settings)"),
):
    """
    Change an agent setting.

    Example:
        tasker config set agent.default_project Work
        tasker config set agent.open_only yes
    """
    try:
        service.set_config_value(get_workspace(), key, value or "")
    except (TaskerError, OSError) as e:
        fail(e)
    console.print(f"[green]✓ Updated[/green] {escape(key)}")
