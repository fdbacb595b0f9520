"""
FILE: tasker/cli/commands/tasks.py
PURPOSE: Task commands (add, ls, show, resolve, mv, done, note)
"""

from typing import List, Optional

import typer
from rich.markup import escape

from ..shared import EXIT_NOT_FOUND, app, console, fail, get_workspace
from ...core import service
from ...core.constants import MATCH_AUTO
from ...core.exceptions import TaskerError
from ...core.models import AddTaskInput, ListFilter, SelectorFilter
from ...formatting import TaskFormatter, render_task_detail


def _scope(project, column, status, include_archived, match) -> SelectorFilter:
    return SelectorFilter(
        project=project or "",
        column=column or "",
        status=status or "",
        include_archived=include_archived,
        match=match or MATCH_AUTO,
    )


@app.command()
def add(
    title: str = typer.Argument(..., help="Task title"),
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project name"),
    column: Optional[str] = typer.Option(None, "--column", "-c", help="Column id (default: inbox)"),
    due: Optional[str] = typer.Option(None, "--due", help="Due date, e.g. 2026-01-31"),
    priority: Optional[str] = typer.Option(None, "--priority", help="low, normal, high or urgent"),
    tags: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Tag (repeatable)"),
    desc: Optional[str] = typer.Option(None, "--desc", "-d", help="Description, stored under Notes"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Create a new task.

    Example:
        tasker add "Write documentation"
        tasker add "Fix bug" --project Work --column todo --priority high
    """
    try:
        task = get_workspace().tasks.add_task(
            AddTaskInput(
                title=title,
                project=project or "",
                column=column or "",
                due=due or "",
                priority=priority or "",
                tags=tags or [],
                description=desc or "",
            )
        )
    except (TaskerError, OSError) as e:
        fail(e)

    if json_output:
        typer.echo(task.to_json())
    elif raw:
        typer.echo(task.id)
    else:
        console.print(
            f"[green]✓ Created task[/green] [bold]{task.id}[/bold] "
            f"in {escape(task.project)}/{task.column}: {escape(task.title)}"
        )


@app.command()
def ls(
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Filter by project"),
    column: Optional[str] = typer.Option(None, "--column", "-c", help="Filter by column id"),
    status: Optional[str] = typer.Option(None, "--status", "-s", help="Filter by status"),
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Filter by tag"),
    search: Optional[str] = typer.Option(None, "--search", "-q", help="Search title and body"),
    include_archived: bool = typer.Option(False, "--all", "-a", help="Include archived tasks"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    List tasks (archived tasks are hidden unless --all).

    Example:
        tasker ls
        tasker ls --project Work --status doing
        tasker ls --json
    """
    try:
        tasks = get_workspace().tasks.list_tasks(
            ListFilter(
                project=project or "",
                column=column or "",
                status=status or "",
                tag=tag or "",
                search=search or "",
                include_archived=include_archived,
            )
        )
    except (TaskerError, OSError) as e:
        fail(e)

    if json_output:
        typer.echo(TaskFormatter.to_json_array(tasks))
    elif raw:
        for line in TaskFormatter.to_raw_lines(tasks):
            typer.echo(line)
    elif not tasks:
        console.print("[dim]No tasks found[/dim]")
    else:
        console.print(TaskFormatter.create_table(tasks, show_project=not project))


@app.command()
def show(
    selector: str = typer.Argument(..., help="Task id, id prefix or title"),
    project: Optional[str] = typer.Option(None, "--project", "-p"),
    column: Optional[str] = typer.Option(None, "--column", "-c"),
    status: Optional[str] = typer.Option(None, "--status", "-s"),
    include_archived: bool = typer.Option(False, "--all", "-a", help="Include archived tasks"),
    match: str = typer.Option(MATCH_AUTO, "--match", "-m", help="auto, exact, prefix, contains or search"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    View full task details.

    Example:
        tasker show "Draft proposal"
        tasker show tsk_01J
    """
    try:
        task = get_workspace().tasks.get_task_by_selector(
            selector, _scope(project, column, status, include_archived, match)
        )
    except (TaskerError, OSError) as e:
        fail(e)

    if json_output:
        typer.echo(task.to_json())
    else:
        typer.echo(render_task_detail(task), nl=False)


@app.command()
def resolve(
    selector: str = typer.Argument(..., help="Task id, id prefix or title"),
    project: Optional[str] = typer.Option(None, "--project", "-p"),
    column: Optional[str] = typer.Option(None, "--column", "-c"),
    status: Optional[str] = typer.Option(None, "--status", "-s"),
    include_archived: bool = typer.Option(False, "--all", "-a", help="Include archived tasks"),
    match: str = typer.Option(MATCH_AUTO, "--match", "-m", help="auto, exact, prefix, contains or search"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    List every task a selector matches, without acting on it.

    Exits with 3 when nothing matches.
    """
    try:
        tasks = get_workspace().tasks.resolve_tasks(
            selector, _scope(project, column, status, include_archived, match)
        )
    except (TaskerError, OSError) as e:
        fail(e)

    if json_output:
        typer.echo(TaskFormatter.to_json_array(tasks))
    elif raw:
        for line in TaskFormatter.to_raw_lines(tasks):
            typer.echo(line)
    elif tasks:
        console.print(TaskFormatter.create_table(tasks, title=f"Matches for '{escape(selector)}'"))
    if not tasks:
        raise typer.Exit(EXIT_NOT_FOUND)


@app.command()
def mv(
    selector: str = typer.Argument(..., help="Task id, id prefix or title"),
    to_column: str = typer.Argument(..., help="Target column id"),
    project: Optional[str] = typer.Option(None, "--project", "-p"),
    column: Optional[str] = typer.Option(None, "--column", "-c", help="Only match tasks in this column"),
    status: Optional[str] = typer.Option(None, "--status", "-s"),
    include_archived: bool = typer.Option(False, "--all", "-a", help="Include archived tasks"),
    match: str = typer.Option(MATCH_AUTO, "--match", "-m"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Move a task to another column.

    Example:
        tasker mv "Draft proposal" doing
    """
    try:
        store = get_workspace().tasks
        task = store.get_task_by_selector(
            selector, _scope(project, column, status, include_archived, match)
        )
        task = store.move_task(task.id, to_column)
    except (TaskerError, OSError) as e:
        fail(e)

    if json_output:
        typer.echo(task.to_json())
    elif raw:
        typer.echo(f"{task.id}\t{task.column}")
    else:
        console.print(f"[green]✓ Moved[/green] {escape(task.title)} → [bold]{task.column}[/bold]")


@app.command()
def done(
    selector: str = typer.Argument(..., help="Task id, id prefix or title"),
    project: Optional[str] = typer.Option(None, "--project", "-p"),
    column: Optional[str] = typer.Option(None, "--column", "-c"),
    status: Optional[str] = typer.Option(None, "--status", "-s"),
    match: str = typer.Option(MATCH_AUTO, "--match", "-m"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Mark a task as complete (move it to the done column).

    Example:
        tasker done "Draft proposal"
    """
    try:
        task = service.complete_task(
            get_workspace(), selector, _scope(project, column, status, False, match)
        )
    except (TaskerError, OSError) as e:
        fail(e)

    if json_output:
        typer.echo(task.to_json())
    elif raw:
        typer.echo(task.id)
    else:
        console.print(f"[green]✓ Completed[/green] {escape(task.title)}")


@app.command()
def note(
    selector: str = typer.Argument(..., help="Task id, id prefix or title"),
    text: str = typer.Argument(..., help="Note text"),
    project: Optional[str] = typer.Option(None, "--project", "-p"),
    column: Optional[str] = typer.Option(None, "--column", "-c"),
    status: Optional[str] = typer.Option(None, "--status", "-s"),
    include_archived: bool = typer.Option(False, "--all", "-a", help="Include archived tasks"),
    match: str = typer.Option(MATCH_AUTO, "--match", "-m"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Append a timestamped note to a task.

    Example:
        tasker note "Draft proposal" "sent to Sam for review"
    """
    try:
        store = get_workspace().tasks
        task = store.get_task_by_selector(
            selector, _scope(project, column, status, include_archived, match)
        )
        task = store.add_note(task.id, text)
    except (TaskerError, OSError) as e:
        fail(e)

    if json_output:
        typer.echo(task.to_json())
    else:
        console.print(f"[green]✓ Noted[/green] {escape(task.title)}")
