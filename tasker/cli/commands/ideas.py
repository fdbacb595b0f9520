"""
FILE: tasker/cli/commands/ideas.py
PURPOSE: Idea commands (idea add, ls, show, resolve, note, promote, rm)
NOTES:
  - `idea add` without a title reads the idea from stdin and parses its
    title, tags and body
"""

from typing import List, Optional

import typer
from rich.markup import escape

from ..shared import EXIT_NOT_FOUND, console, fail, get_workspace, idea_app
from ...core import service
from ...core.constants import MATCH_AUTO
from ...core.exceptions import InvalidInputError, TaskerError
from ...core.idea_file import parse_idea_content
from ...core.models import AddIdeaInput, IdeaListFilter, IdeaSelectorFilter
from ...formatting import IdeaFormatter, render_idea_detail

_SCOPE_HELP = "root, project or all (default: project when --project is given, else root)"


def _scope(project, scope, match=MATCH_AUTO) -> IdeaSelectorFilter:
    return IdeaSelectorFilter(project=project or "", scope=scope or "", match=match or MATCH_AUTO)


@idea_app.command("add")
def idea_add(
    title: Optional[str] = typer.Argument(None, help="Idea title (omit to read from stdin)"),
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project name"),
    body: Optional[str] = typer.Option(None, "--body", "-b", help="Idea body"),
    tags: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Tag (repeatable)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Capture an idea.

    Example:
        tasker idea add "Offline mode" --body "sync later #mobile"
        pbpaste | tasker idea add --project Work
    """
    explicit = list(tags or [])
    text = body or ""
    try:
        if title is None:
            title, parsed_tags, text = parse_idea_content(typer.get_text_stream("stdin").read())
            explicit.extend(parsed_tags)
        idea = get_workspace().ideas.add_idea(
            AddIdeaInput(title=title, project=project or "", tags=explicit, body=text)
        )
    except (TaskerError, OSError) as e:
        fail(e)

    if json_output:
        typer.echo(idea.to_json())
    elif raw:
        typer.echo(idea.id)
    else:
        console.print(f"[green]✓ Captured idea[/green] [bold]{idea.id}[/bold]: {escape(idea.title)}")


@idea_app.command("ls")
def idea_ls(
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project name"),
    scope: Optional[str] = typer.Option(None, "--scope", help=_SCOPE_HELP),
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Filter by tag"),
    search: Optional[str] = typer.Option(None, "--search", "-q", help="Search title and body"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """List ideas, most recently updated first."""
    try:
        ideas = get_workspace().ideas.list_ideas(
            IdeaListFilter(project=project or "", scope=scope or "", tag=tag or "", search=search or "")
        )
    except (TaskerError, OSError) as e:
        fail(e)

    if json_output:
        typer.echo(IdeaFormatter.to_json_array(ideas))
    elif raw:
        for line in IdeaFormatter.to_raw_lines(ideas):
            typer.echo(line)
    elif not ideas:
        console.print("[dim]No ideas found[/dim]")
    else:
        console.print(IdeaFormatter.create_table(ideas))


@idea_app.command("show")
def idea_show(
    selector: str = typer.Argument(..., help="Idea id, id prefix or title"),
    project: Optional[str] = typer.Option(None, "--project", "-p"),
    scope: Optional[str] = typer.Option(None, "--scope", help=_SCOPE_HELP),
    match: str = typer.Option(MATCH_AUTO, "--match", "-m"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """View an idea."""
    try:
        idea = get_workspace().ideas.get_idea_by_selector(selector, _scope(project, scope, match))
    except (TaskerError, OSError) as e:
        fail(e)

    if json_output:
        typer.echo(idea.to_json())
    else:
        typer.echo(render_idea_detail(idea), nl=False)


@idea_app.command("resolve")
def idea_resolve(
    selector: str = typer.Argument(..., help="Idea id, id prefix or title"),
    project: Optional[str] = typer.Option(None, "--project", "-p"),
    scope: Optional[str] = typer.Option(None, "--scope", help=_SCOPE_HELP),
    match: str = typer.Option(MATCH_AUTO, "--match", "-m"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """List every idea a selector matches. Exits with 3 when nothing matches."""
    try:
        ideas = get_workspace().ideas.resolve_ideas(selector, _scope(project, scope, match))
    except (TaskerError, OSError) as e:
        fail(e)

    if json_output:
        typer.echo(IdeaFormatter.to_json_array(ideas))
    elif raw:
        for line in IdeaFormatter.to_raw_lines(ideas):
            typer.echo(line)
    elif ideas:
        console.print(IdeaFormatter.create_table(ideas, title=f"Matches for '{escape(selector)}'"))
    if not ideas:
        raise typer.Exit(EXIT_NOT_FOUND)


@idea_app.command("note")
def idea_note(
    selector: str = typer.Argument(..., help="Idea id, id prefix or title"),
    text: str = typer.Argument(..., help="Note text"),
    project: Optional[str] = typer.Option(None, "--project", "-p"),
    scope: Optional[str] = typer.Option(None, "--scope", help=_SCOPE_HELP),
    match: str = typer.Option(MATCH_AUTO, "--match", "-m"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Append a timestamped note to an idea."""
    try:
        store = get_workspace().ideas
        idea = store.get_idea_by_selector(selector, _scope(project, scope, match))
        idea = store.add_idea_note(idea, text)
    except (TaskerError, OSError) as e:
        fail(e)

    if json_output:
        typer.echo(idea.to_json())
    else:
        console.print(f"[green]✓ Noted[/green] {escape(idea.title)}")


@idea_app.command("promote")
def idea_promote(
    selector: str = typer.Argument(..., help="Idea id, id prefix or title"),
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project the idea lives in"),
    scope: Optional[str] = typer.Option(None, "--scope", help=_SCOPE_HELP),
    match: str = typer.Option(MATCH_AUTO, "--match", "-m"),
    to_project: Optional[str] = typer.Option(None, "--to-project", help="Project for the new task"),
    column: Optional[str] = typer.Option(None, "--column", "-c", help="Column for the new task"),
    due: Optional[str] = typer.Option(None, "--due", help="Due date for the new task"),
    priority: Optional[str] = typer.Option(None, "--priority", help="Priority for the new task"),
    tags: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Extra tag (repeatable)"),
    link: bool = typer.Option(False, "--link", help="Add a backlink to the idea in the task"),
    delete: bool = typer.Option(False, "--delete", help="Remove the idea after promoting"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Turn an idea into a task.

    Example:
        tasker idea promote "Offline mode" --to-project Work --column todo --delete
    """
    try:
        task, idea = service.promote_idea(
            get_workspace(),
            selector,
            _scope(project, scope, match),
            to_project=to_project or "",
            column=column or "",
            due=due or "",
            priority=priority or "",
            extra_tags=tags or [],
            link=link,
            delete=delete,
        )
    except (TaskerError, OSError) as e:
        fail(e)

    if json_output:
        typer.echo(task.to_json())
    elif raw:
        typer.echo(task.id)
    else:
        console.print(f"[green]✓ Promoted[/green] {escape(idea.title)} → [bold]{task.id}[/bold]")
        if delete:
            console.print(f"[dim]Removed idea {idea.id}[/dim]")


@idea_app.command("rm")
def idea_rm(
    selector: str = typer.Argument(..., help="Idea id, id prefix or title"),
    project: Optional[str] = typer.Option(None, "--project", "-p"),
    scope: Optional[str] = typer.Option(None, "--scope", help=_SCOPE_HELP),
    match: str = typer.Option(MATCH_AUTO, "--match", "-m"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
):
    """Delete an idea file."""
    try:
        store = get_workspace().ideas
        idea = store.get_idea_by_selector(selector, _scope(project, scope, match))
        if not force and not typer.confirm(f"Delete idea '{idea.title}'?"):
            raise InvalidInputError("Aborted")
        store.delete_idea(idea)
    except (TaskerError, OSError) as e:
        fail(e)

    console.print(f"[green]✓ Deleted idea[/green] {escape(idea.title)}")
