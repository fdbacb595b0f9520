"""
FILE: tasker/core/tasks.py
PURPOSE: Task store: file persistence, kanban moves, notes, listing, selectors
EXPORTS:
  - TaskStore
    - add_task(input) -> Task
    - list_tasks(filter) -> List[Task]
    - read_task(path) -> Task
    - get_task(id_prefix) -> Task
    - resolve_tasks(selector, filter) -> List[Task]
    - get_task_by_selector(selector, filter) -> Task
    - move_task(id_prefix, column_id) -> Task
    - add_note(id_prefix, text) -> Task
    - reconcile(task) -> Task
DEPENDENCIES:
  - pathlib (stdlib)
  - loguru (logging)
  - tasker.core.task_file (codec), tasker.core.selector (SelectorEngine)
  - tasker.core.config, tasker.core.projects, tasker.core.ids
NOTES:
  - Layout: <root>/projects/<slug>/columns/<NN-dir>/<id>__<slug>.md
  - The path is authoritative for project/column/status; reconcile() runs
    right after every parse so the rest of the code sees consistent tasks
  - Directory scans skip malformed files; reading one file directly raises
  - move_task renames first and rewrites the header second; a failed rename
    leaves the task untouched
"""

import os
import re
from pathlib import Path
from typing import List, Optional

from loguru import logger

from .atomic import atomic_write
from .config import ConfigStore
from .constants import (
    ARCHIVE_COLUMN_ID,
    COLUMNS_DIRNAME,
    DEFAULT_COLUMN_ID,
    DEFAULT_PROJECT_NAME,
    NOTES_HEADING,
    PROJECTS_DIRNAME,
    STATUS_ARCHIVED,
    STATUS_DONE,
    TASK_FILE_SUFFIX,
    TASK_PREFIX,
)
from .exceptions import InvalidInputError, MalformedFileError, MatchConflictError, NotFoundError
from .ids import IdGenerator
from .models import AddTaskInput, Column, ListFilter, RecordMeta, SelectorFilter, Task
from .projects import ProjectRegistry
from .selector import SelectorEngine, selector_sort_key
from .task_file import read_task_file, render_task, task_filename
from ..utils import (
    Clock,
    dedupe_tags,
    format_timestamp,
    has_tag,
    normalize_priority,
    slugify_or_default,
    stamp,
)

_HEADING_RE = re.compile(r"^#{1,6}\s")


def apply_column(task: Task, column: Column, now) -> None:
    """
    Put a task into a column's state.

    completed_at is set exactly when the status is done, archived_at exactly
    when it is archived; both are cleared otherwise.
    """
    task.column = column.id
    task.status = column.status
    task.meta.updated_at = now
    task.completed_at = now if column.status == STATUS_DONE else None
    task.archived_at = now if column.status == STATUS_ARCHIVED else None


def append_note(body: str, entry: str) -> str:
    """
    Append a bullet at the end of the Notes section.

    The heading is added at the end of the body when absent. When another
    heading follows Notes, the bullet goes before it.
    """
    body = body.rstrip("\n")
    if not body:
        return f"{NOTES_HEADING}\n\n{entry}\n"
    lines = body.split("\n")
    start = next((i for i, line in enumerate(lines) if line.strip() == NOTES_HEADING), None)
    if start is None:
        return f"{body}\n\n{NOTES_HEADING}\n\n{entry}\n"
    end = next((i for i in range(start + 1, len(lines)) if _HEADING_RE.match(lines[i])), None)
    if end is None:
        return f"{body}\n{entry}\n"

    section = lines[:end]
    while len(section) > start + 1 and not section[-1].strip():
        section.pop()
    return "\n".join(section + [entry, ""] + lines[end:]) + "\n"


def _list_sort_key(task: Task) -> tuple:
    updated = task.updated_at.timestamp() if task.updated_at else float("-inf")
    return (task.due == "", task.due, -updated, task.id)


class TaskStore:
    """Tasks persisted as one file each under project column directories."""

    def __init__(
        self,
        root: Path,
        config: ConfigStore,
        projects: ProjectRegistry,
        ids: IdGenerator,
        clock: Clock,
    ):
        self.root = Path(root)
        self.config = config
        self.projects = projects
        self.ids = ids
        self.clock = clock
        self.selector = SelectorEngine("task", TASK_PREFIX, self._selector_candidates)

    # --- paths ---

    @property
    def projects_dir(self) -> Path:
        return self.root / PROJECTS_DIRNAME

    def column_dir(self, project_slug: str, column: Column) -> Path:
        return self.projects_dir / project_slug / COLUMNS_DIRNAME / column.dir

    def _column_or_raise(self, column_id: str) -> Column:
        column = self.config.column_by_id(column_id)
        if column is None:
            available = ", ".join(c.id for c in self.config.load().columns)
            raise InvalidInputError(
                f"Unknown column '{column_id}'. Available columns: {available}"
            )
        return column

    def _project_slugs(self) -> List[str]:
        if not self.projects_dir.is_dir():
            return []
        return sorted(p.name for p in self.projects_dir.iterdir() if p.is_dir())

    # --- reading ---

    def reconcile(self, task: Task) -> Task:
        """Overwrite project/column/status with what the file's path says."""
        if task.path is None:
            return task
        try:
            rel = Path(task.path).relative_to(self.projects_dir)
        except ValueError:
            return task
        parts = rel.parts
        if len(parts) < 4 or parts[1] != COLUMNS_DIRNAME:
            return task
        task.meta.project = parts[0]
        column = self.config.column_by_dir(parts[2])
        if column is not None:
            task.column = column.id
            task.status = column.status
        return task

    def read_task(self, path) -> Task:
        """
        Read one task file and reconcile it with its location.

        Raises:
            MalformedFileError: If the file cannot be parsed
            OSError: If the file cannot be read
        """
        return self.reconcile(read_task_file(path))

    def _scan_dir(self, directory: Path) -> List[Task]:
        if not directory.is_dir():
            return []
        tasks = []
        for path in sorted(directory.iterdir()):
            if not path.is_file() or path.name.startswith("."):
                continue
            if path.suffix.lower() != TASK_FILE_SUFFIX:
                continue
            try:
                tasks.append(self.read_task(path))
            except (MalformedFileError, OSError) as e:
                logger.debug("Skipping unreadable task file {}: {}", path, e)
        return tasks

    def _all_tasks(self) -> List[Task]:
        tasks = []
        for slug in self._project_slugs():
            columns_root = self.projects_dir / slug / COLUMNS_DIRNAME
            if not columns_root.is_dir():
                continue
            for directory in sorted(columns_root.iterdir()):
                tasks.extend(self._scan_dir(directory))
        return tasks

    # --- listing ---

    def _normalize_filter(self, f: ListFilter) -> ListFilter:
        project = (f.project or "").strip()
        column = (f.column or "").strip().lower()
        status = (f.status or "").strip().lower()
        include_archived = f.include_archived or status == STATUS_ARCHIVED or column == ARCHIVE_COLUMN_ID
        return ListFilter(
            project=slugify_or_default(project, project) if project else "",
            column=column,
            status=status,
            tag=(f.tag or "").strip(),
            search=(f.search or "").strip(),
            include_archived=include_archived,
        )

    def _scan(self, f: ListFilter) -> List[Task]:
        slugs = [f.project] if f.project else self._project_slugs()
        tasks = []
        for slug in slugs:
            for column in self.config.load().columns:
                if not f.include_archived and column.id == ARCHIVE_COLUMN_ID:
                    continue
                if f.column and column.id != f.column:
                    continue
                for task in self._scan_dir(self.column_dir(slug, column)):
                    if f.status and task.status != f.status:
                        continue
                    if f.tag and not has_tag(task.tags, f.tag):
                        continue
                    if f.search:
                        needle = f.search.lower()
                        if needle not in task.title.lower() and needle not in task.body.lower():
                            continue
                    tasks.append(task)
        return tasks

    def list_tasks(self, f: Optional[ListFilter] = None) -> List[Task]:
        """
        List tasks matching a filter.

        Args:
            f: Project/column/status/tag/search filters; archive column is
               excluded unless include_archived (or the filter targets it)

        Returns:
            Tasks sorted by due date (empty last), then most recently
            updated, then id
        """
        tasks = self._scan(self._normalize_filter(f or ListFilter()))
        tasks.sort(key=_list_sort_key)
        return tasks

    # --- selectors ---

    def _selector_candidates(self, scope: SelectorFilter) -> List[Task]:
        return self._scan(
            self._normalize_filter(
                ListFilter(
                    project=scope.project,
                    column=scope.column,
                    status=scope.status,
                    include_archived=scope.include_archived,
                )
            )
        )

    def resolve_tasks(self, selector: str, scope: Optional[SelectorFilter] = None) -> List[Task]:
        """All in-scope tasks the selector matches, in deterministic order."""
        return self.selector.resolve_all(selector, scope or SelectorFilter())

    def get_task_by_selector(self, selector: str, scope: Optional[SelectorFilter] = None) -> Task:
        """
        The one in-scope task the selector identifies.

        Raises:
            NotFoundError: If nothing matches
            MatchConflictError: If several tasks match
        """
        return self.selector.resolve_one(selector, scope or SelectorFilter())

    def get_task(self, id_prefix: str) -> Task:
        """
        Fetch a task by id or unique id prefix, across every project and column.

        Raises:
            InvalidInputError: If id_prefix is blank
            NotFoundError: If no task id starts with id_prefix
            MatchConflictError: If several task ids start with id_prefix
        """
        needle = (id_prefix or "").strip()
        if not needle:
            raise InvalidInputError("Task id cannot be empty")
        matches = SelectorEngine.match_id_prefix(needle, self._all_tasks())
        if not matches:
            raise NotFoundError(needle, kind="task")
        if len(matches) > 1:
            matches.sort(key=selector_sort_key)
            raise MatchConflictError(needle, matches, reason="prefix", kind="task")
        return matches[0]

    # --- writing ---

    def _write(self, task: Task) -> None:
        atomic_write(task.path, render_task(task))

    def add_task(self, data: AddTaskInput) -> Task:
        """
        Create a new task file.

        Args:
            data: Title (required), project, column (default inbox), due,
                  priority, tags and optional description

        Returns:
            Newly created Task

        Raises:
            InvalidInputError: If the title is blank or the column is unknown
        """
        title = (data.title or "").strip()
        if not title:
            raise InvalidInputError("Task title cannot be empty")
        column = self._column_or_raise((data.column or "").strip() or DEFAULT_COLUMN_ID)

        project_name = (data.project or "").strip()
        if not project_name:
            agent = self.config.load().agent
            project_name = (agent.default_project if agent else "") or DEFAULT_PROJECT_NAME
        project = self.projects.create_project(project_name)

        now = stamp(self.clock)
        task_id = TASK_PREFIX + self.ids.new_id()
        description = (data.description or "").strip()
        task = Task(
            meta=RecordMeta(
                id=task_id,
                title=title,
                project=project.slug,
                tags=dedupe_tags(data.tags),
                created_at=now,
                updated_at=now,
            ),
            priority=normalize_priority(data.priority),
            due=(data.due or "").strip(),
            body=f"{NOTES_HEADING}\n\n{description}\n" if description else "",
        )
        apply_column(task, column, now)
        task.path = self.column_dir(project.slug, column) / task_filename(task_id, title)
        self._write(task)
        logger.debug("Added task {} to {}/{}", task_id, project.slug, column.id)
        return task

    def move_task(self, id_prefix: str, column_id: str) -> Task:
        """
        Move a task to another column (kanban transition).

        Any column may move to any other; moving to the current column only
        refreshes the timestamps.

        Raises:
            InvalidInputError: If the column is unknown
            NotFoundError / MatchConflictError: If id_prefix does not
                identify exactly one task
            OSError: If the rename fails (the task is left unchanged)
        """
        column = self._column_or_raise(column_id)
        task = self.get_task(id_prefix)
        if not task.project:
            raise InvalidInputError(f"Task {task.id} has no project")

        old_path = Path(task.path)
        new_dir = self.column_dir(task.project, column)
        new_path = new_dir / old_path.name
        if new_path != old_path:
            new_dir.mkdir(parents=True, exist_ok=True)
            os.replace(old_path, new_path)

        apply_column(task, column, stamp(self.clock))
        task.path = new_path
        self._write(task)
        logger.debug("Moved task {} to {}", task.id, column.id)
        return task

    def add_note(self, id_prefix: str, text: str) -> Task:
        """
        Append a timestamped note bullet to a task's body.

        Raises:
            InvalidInputError: If text is blank
            NotFoundError / MatchConflictError: If id_prefix is not unique
        """
        text = (text or "").strip()
        if not text:
            raise InvalidInputError("Note text cannot be empty")
        task = self.get_task(id_prefix)
        now = stamp(self.clock)
        task.body = append_note(task.body, f"- {format_timestamp(now)} — {text}")
        task.meta.updated_at = now
        self._write(task)
        return task
