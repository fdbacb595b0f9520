"""
FILE: tasker/formatting.py
PURPOSE: Shared formatting utilities for CLI output
EXPORTS:
  - TaskFormatter: tables, JSON and plain lines for tasks
  - IdeaFormatter: tables, JSON and plain lines for ideas
  - ProjectFormatter: tables, JSON and plain lines for projects
  - render_task_detail(task) / render_idea_detail(idea) -> str
  - conflict_lines(error) -> List[str]
DEPENDENCIES:
  - rich (table formatting)
  - json (JSON serialization)
  - tasker.core.models (Task, Idea, Project)
NOTES:
  - Centralized formatting logic for consistency across commands
  - Table cells are passed as rich Text so titles containing [brackets]
    are never parsed as markup
"""

import json
from typing import List

from rich.table import Table
from rich.text import Text

from .core.constants import UNTITLED
from .core.exceptions import MatchConflictError
from .core.models import Idea, Project, Task
from .utils import format_timestamp

_STATUS_STYLES = {
    "open": "white",
    "doing": "bright_magenta",
    "blocked": "red",
    "done": "green",
    "archived": "dim",
}

_PRIORITY_STYLES = {
    "low": "dim",
    "normal": "white",
    "high": "yellow",
    "urgent": "bold red",
}


def short_id(record_id: str, length: int = 12) -> str:
    """Trimmed id for table display; full ids stay in JSON and raw output."""
    return record_id if len(record_id) <= length else record_id[:length]


class TaskFormatter:
    """Centralized task display formatting."""

    @staticmethod
    def create_table(tasks: List[Task], title: str = "Tasks", show_project: bool = True) -> Table:
        """
        Create Rich table for tasks.

        Args:
            tasks: List of tasks to display
            title: Table title
            show_project: Whether to show project column

        Returns:
            Rich Table object ready for display
        """
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("S", width=1)
        table.add_column("P", width=1)
        table.add_column("Title", style="white")
        if show_project:
            table.add_column("Project", style="yellow")
        table.add_column("Column", style="blue")
        table.add_column("Due", style="magenta")
        table.add_column("Tags", style="green")

        for task in tasks:
            row = [
                short_id(task.id),
                Text(task.status_abbrev(), style=_STATUS_STYLES.get(task.status, "white")),
                Text(task.priority_abbrev(), style=_PRIORITY_STYLES.get(task.priority, "white")),
                Text(task.title),
            ]
            if show_project:
                row.append(Text(task.project or "-"))
            row.extend([Text(task.column), Text(task.due or "-"), Text(", ".join(task.tags))])
            table.add_row(*row)

        return table

    @staticmethod
    def to_json_array(tasks: List[Task]) -> str:
        """
        Convert task list to JSON array string.

        Args:
            tasks: List of tasks to serialize

        Returns:
            JSON string with array of task objects
        """
        return json.dumps([t.to_dict() for t in tasks], indent=2, ensure_ascii=False)

    @staticmethod
    def to_raw_lines(tasks: List[Task]) -> List[str]:
        """One tab-separated line per task: id, status, column, project, title."""
        return [
            f"{t.id}\t{t.status}\t{t.column}\t{t.project}\t{t.title}"
            for t in tasks
        ]


class IdeaFormatter:
    """Idea display formatting."""

    @staticmethod
    def create_table(ideas: List[Idea], title: str = "Ideas") -> Table:
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Scope", style="yellow")
        table.add_column("Tags", style="green")
        table.add_column("Updated", style="dim")
        for idea in ideas:
            table.add_row(
                short_id(idea.id, 13),
                Text(idea.title or UNTITLED),
                Text(idea.project or "root"),
                Text(", ".join(idea.tags)),
                format_timestamp(idea.updated_at) or "-",
            )
        return table

    @staticmethod
    def to_json_array(ideas: List[Idea]) -> str:
        return json.dumps([i.to_dict() for i in ideas], indent=2, ensure_ascii=False)

    @staticmethod
    def to_raw_lines(ideas: List[Idea]) -> List[str]:
        return [f"{i.id}\t{i.project or 'root'}\t{i.title}" for i in ideas]


class ProjectFormatter:
    """Project display formatting."""

    @staticmethod
    def create_table(projects: List[Project], title: str = "Projects") -> Table:
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("Slug", style="cyan", no_wrap=True)
        table.add_column("Name", style="white")
        table.add_column("ID", style="dim")
        table.add_column("Created", style="dim")
        for project in projects:
            table.add_row(
                Text(project.slug),
                Text(project.name),
                project.id,
                format_timestamp(project.created_at) or "-",
            )
        return table

    @staticmethod
    def to_json_array(projects: List[Project]) -> str:
        return json.dumps([p.to_dict() for p in projects], indent=2, ensure_ascii=False)

    @staticmethod
    def to_raw_lines(projects: List[Project]) -> List[str]:
        return [f"{p.slug}\t{p.name}" for p in projects]


def render_task_detail(task: Task) -> str:
    """Human-readable task view: header fields, blank line, then the body."""
    lines = [
        task.title or UNTITLED,
        f"ID: {task.id}",
        f"Project: {task.project}",
        f"Column: {task.column} ({task.status})",
        f"Priority: {task.priority}",
    ]
    if task.due:
        lines.append(f"Due: {task.due}")
    if task.tags:
        lines.append(f"Tags: {', '.join(task.tags)}")
    lines.append(f"Created: {format_timestamp(task.created_at) or '-'}")
    lines.append(f"Updated: {format_timestamp(task.updated_at) or '-'}")
    if task.completed_at:
        lines.append(f"Completed: {format_timestamp(task.completed_at)}")
    if task.archived_at:
        lines.append(f"Archived: {format_timestamp(task.archived_at)}")
    text = "\n".join(lines) + "\n"
    if task.body.strip():
        text += "\n" + task.body.rstrip("\n") + "\n"
    return text


def render_idea_detail(idea: Idea) -> str:
    lines = [idea.title or UNTITLED]
    lines.append(f"Project: {idea.project}" if idea.project else "Scope: root")
    if idea.tags:
        lines.append(f"Tags: {', '.join(idea.tags)}")
    text = "\n".join(lines) + "\n\n"
    if idea.body.strip():
        text += idea.body.rstrip("\n") + "\n"
    return text


def conflict_lines(error: MatchConflictError) -> List[str]:
    """Candidate list printed when a selector is ambiguous."""
    lines = []
    for record in error.matches:
        if isinstance(record, Task):
            location = f"{record.project}/{record.column}"
        else:
            location = record.project or "root"
        lines.append(f"  {record.id}  {location}  {record.title}")
    return lines
