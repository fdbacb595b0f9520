"""
FILE: tasker/cli/commands/projects.py
PURPOSE: Project management commands (project add, project ls)
"""

import typer
from rich.markup import escape

from ..shared import console, fail, get_workspace, project_app
from ...core.exceptions import TaskerError
from ...formatting import ProjectFormatter


@project_app.command("add")
def project_add(
    name: str = typer.Argument(..., help="Project name"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Create a project (or show the existing one with the same slug).

    Example:
        tasker project add "Work"
    """
    try:
        project = get_workspace().projects.create_project(name)
    except (TaskerError, OSError) as e:
        fail(e)

    if json_output:
        typer.echo(project.to_json())
    elif raw:
        typer.echo(project.slug)
    else:
        console.print(f"[green]✓[/green] Project {escape(project.name)} ({project.slug})")


@project_app.command("ls")
def project_ls(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """List all projects."""
    try:
        projects = get_workspace().projects.list_projects()
    except (TaskerError, OSError) as e:
        fail(e)

    if json_output:
        typer.echo(ProjectFormatter.to_json_array(projects))
    elif raw:
        for line in ProjectFormatter.to_raw_lines(projects):
            typer.echo(line)
    elif not projects:
        console.print("[dim]No projects found[/dim]")
    else:
        console.print(ProjectFormatter.create_table(projects))
