"""
FILE: tasker/core/service.py
PURPOSE: Workflows that span more than one store
EXPORTS:
  - promote_idea(ws, selector, scope, ...) -> (Task, Idea)
  - complete_task(ws, selector, scope) -> Task
  - set_config_value(ws, key, value) -> Config
  - idea_backlink(ws, idea) -> str
  - CONFIG_KEYS
DEPENDENCIES:
  - pathlib (stdlib)
  - loguru (logging)
  - tasker.core.workspace, tasker.core.models, tasker.core.exceptions
NOTES:
  - Selector resolution happens first, then the mutating call by id; the
    two steps are not transactional
"""

from pathlib import Path
from typing import List, Optional, Tuple

from loguru import logger

from .constants import STATUS_DONE
from .exceptions import InvalidInputError
from .models import AddTaskInput, AgentConfig, Config, Idea, IdeaSelectorFilter, SelectorFilter, Task
from .workspace import Workspace
from ..utils import parse_bool

CONFIG_KEYS = (
    "agent.require_explicit",
    "agent.default_project",
    "agent.default_view",
    "agent.week_days",
    "agent.open_only",
    "agent.summary_group",
    "agent.summary_totals",
)

_CLEAR_VALUES = {"", "none", "null"}
_DEFAULT_VIEWS = ("today", "week")
_SUMMARY_GROUPS = ("project", "column")


def idea_backlink(ws: Workspace, idea: Idea) -> str:
    """Line recorded on a task that was promoted from an idea."""
    location = idea.project or "root"
    if idea.path is None:
        return f"Source idea: {idea.id} ({location})"
    path = Path(idea.path)
    try:
        path = path.relative_to(ws.root)
    except ValueError:
        pass
    return f"Source idea: {idea.id} ({location}, {path.as_posix()})"


def promote_idea(
    ws: Workspace,
    selector: str,
    scope: Optional[IdeaSelectorFilter] = None,
    to_project: str = "",
    column: str = "",
    due: str = "",
    priority: str = "",
    extra_tags: Optional[List[str]] = None,
    link: bool = False,
    delete: bool = False,
) -> Tuple[Task, Idea]:
    """
    Turn an idea into a task.

    Args:
        ws: Workspace
        selector: Idea selector
        scope: Idea scope used to resolve the selector
        to_project: Target project; defaults to the idea's project, then the
                    configured default project
        column, due, priority: Passed to the new task
        extra_tags: Tags added on top of the idea's own
        link: Append a backlink line to the task description
        delete: Remove the idea file once the task exists

    Returns:
        (new task, source idea)

    Raises:
        NotFoundError / MatchConflictError: If the selector is not unique
        InvalidInputError: If the task cannot be created
    """
    idea = ws.ideas.get_idea_by_selector(selector, scope)

    project = (to_project or "").strip() or idea.project
    description = idea.body.strip()
    if link:
        backlink = idea_backlink(ws, idea)
        description = f"{description}\n\n{backlink}" if description else backlink

    task = ws.tasks.add_task(
        AddTaskInput(
            title=idea.title.strip() or "(untitled idea)",
            project=project,
            column=column,
            due=due,
            priority=priority,
            tags=list(idea.tags) + list(extra_tags or []),
            description=description,
        )
    )
    logger.info("Promoted idea {} to task {}", idea.id, task.id)
    if delete:
        ws.ideas.delete_idea(idea)
    return task, idea


def complete_task(ws: Workspace, selector: str, scope: Optional[SelectorFilter] = None) -> Task:
    """
    Move the selected task to the first column whose status is done.

    Raises:
        InvalidInputError: If no column has status done
        NotFoundError / MatchConflictError: If the selector is not unique
    """
    done = next((c for c in ws.config.load().columns if c.status == STATUS_DONE), None)
    if done is None:
        raise InvalidInputError("No column with status 'done' is configured")
    task = ws.tasks.get_task_by_selector(selector, scope)
    return ws.tasks.move_task(task.id, done.id)


def _invalid(key: str, value: str) -> InvalidInputError:
    return InvalidInputError(f"Invalid value for {key}: '{value}'")


def _choice(key: str, value: str, choices) -> str:
    lowered = value.lower()
    if lowered in _CLEAR_VALUES:
        return ""
    if lowered not in choices:
        raise _invalid(key, value)
    return lowered


def _boolean(key: str, value: str) -> bool:
    parsed = parse_bool(value)
    if parsed is None:
        raise _invalid(key, value)
    return parsed


def set_config_value(ws: Workspace, key: str, value: str) -> Config:
    """
    Update one agent.* setting and save the config.

    Raises:
        InvalidInputError: If the key is unknown or the value does not parse
    """
    key = (key or "").strip().lower()
    value = (value or "").strip()
    if key not in CONFIG_KEYS:
        raise InvalidInputError(
            f"Unknown config key '{key}'. Allowed keys: {', '.join(CONFIG_KEYS)}"
        )

    cfg = ws.config.load()
    agent = cfg.agent or AgentConfig()
    if key == "agent.require_explicit":
        agent.require_explicit = _boolean(key, value)
    elif key == "agent.default_project":
        agent.default_project = "" if value.lower() in _CLEAR_VALUES else value
    elif key == "agent.default_view":
        agent.default_view = _choice(key, value, _DEFAULT_VIEWS)
    elif key == "agent.week_days":
        try:
            days = int(value)
        except ValueError:
            raise _invalid(key, value) from None
        if days < 1:
            raise _invalid(key, value)
        agent.week_days = days
    elif key == "agent.open_only":
        agent.open_only = _boolean(key, value)
    elif key == "agent.summary_group":
        agent.summary_group = _choice(key, value, _SUMMARY_GROUPS)
    else:
        agent.summary_totals = _boolean(key, value)

    cfg.agent = agent
    return ws.config.save(cfg)
