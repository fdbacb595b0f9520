"""
FILE: tasker/core/task_file.py
PURPOSE: Task file codec (YAML header between --- delimiters + markdown body)
EXPORTS:
  - render_task(task) -> str
  - parse_task(text, path) -> Task
  - read_task_file(path) -> Task
  - task_filename(task_id, title) -> str
DEPENDENCIES:
  - yaml (PyYAML, header serialization)
  - tasker.core.models (Task, RecordMeta)
  - tasker.core.exceptions (MalformedFileError)
NOTES:
  - Layout: "---\\n<yaml>---\\n\\n<body>"
  - Header field order is fixed so files diff cleanly
  - Parsing never trusts project/column/status for placement; the task
    store reconciles those from the path right after parsing
  - Bodies are normalised on write: a whitespace-only body is dropped and a
    missing trailing newline is added. Anything else round-trips unchanged,
    leading blank lines included
"""

from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

from .constants import SCHEMA_VERSION, TASK_FILE_SUFFIX
from .exceptions import MalformedFileError
from .models import RecordMeta, Task
from ..utils import (
    coerce_text,
    dedupe_tags,
    format_timestamp,
    normalize_priority,
    parse_timestamp,
    slugify,
)

_DELIMITER = "---"


def task_filename(task_id: str, title: str) -> str:
    return f"{task_id}__{slugify(title)}{TASK_FILE_SUFFIX}"


def _header(task: Task) -> Dict[str, Any]:
    return {
        "schema": task.schema or SCHEMA_VERSION,
        "id": task.id,
        "title": task.title,
        "status": task.status,
        "project": task.project,
        "column": task.column,
        "priority": task.priority,
        "tags": list(task.tags),
        "due": task.due,
        "created_at": format_timestamp(task.created_at),
        "updated_at": format_timestamp(task.updated_at),
        "completed_at": format_timestamp(task.completed_at),
        "archived_at": format_timestamp(task.archived_at),
    }


def render_task(task: Task) -> str:
    """Serialize a task to file content."""
    header = yaml.safe_dump(
        _header(task),
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )
    parts = [_DELIMITER, "\n", header, _DELIMITER, "\n\n"]
    if task.body.strip():
        parts.append(task.body)
        if not task.body.endswith("\n"):
            parts.append("\n")
    return "".join(parts)


def _split(text: str, path) -> Tuple[str, str]:
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    if not text.startswith(_DELIMITER + "\n"):
        raise MalformedFileError(path, "missing header")
    rest = text[len(_DELIMITER) + 1:]
    if rest.startswith(_DELIMITER + "\n"):
        return "", rest[len(_DELIMITER) + 1:]
    closing = "\n" + _DELIMITER + "\n"
    end = rest.find(closing)
    if end == -1:
        if rest.endswith("\n" + _DELIMITER):
            return rest[: -len(_DELIMITER) - 1], ""
        raise MalformedFileError(path, "unterminated header")
    return rest[:end], rest[end + len(closing):]


def _tags(value) -> list:
    if value is None:
        return []
    if isinstance(value, str):
        return dedupe_tags(value.replace(",", " ").split())
    if isinstance(value, (list, tuple)):
        return dedupe_tags(coerce_text(v) for v in value)
    return dedupe_tags([coerce_text(value)])


def parse_task(text: str, path=None) -> Task:
    """
    Parse file content into a Task.

    Args:
        text: Full file content
        path: Source path, recorded on the task and used in error messages

    Raises:
        MalformedFileError: If the header delimiters are missing or the
            header is not a YAML mapping with an id
    """
    header_text, body = _split(text, path)
    try:
        data = yaml.safe_load(header_text) if header_text.strip() else None
    except (yaml.YAMLError, ValueError) as e:
        # ValueError: impossible unquoted dates such as 2026-02-30
        raise MalformedFileError(path, f"invalid header: {e}") from e
    if not isinstance(data, dict):
        raise MalformedFileError(path, "header is not a mapping")
    task_id = coerce_text(data.get("id"))
    if not task_id:
        raise MalformedFileError(path, "header has no id")

    # The blank line after the header is a separator, not body content.
    if body.startswith("\n"):
        body = body[1:]

    meta = RecordMeta(
        id=task_id,
        title=coerce_text(data.get("title")),
        project=coerce_text(data.get("project")),
        tags=_tags(data.get("tags")),
        created_at=parse_timestamp(data.get("created_at")),
        updated_at=parse_timestamp(data.get("updated_at")),
    )
    return Task(
        meta=meta,
        status=coerce_text(data.get("status")).lower(),
        column=coerce_text(data.get("column")).lower(),
        priority=normalize_priority(coerce_text(data.get("priority"))),
        due=coerce_text(data.get("due")),
        completed_at=parse_timestamp(data.get("completed_at")),
        archived_at=parse_timestamp(data.get("archived_at")),
        path=Path(path) if path is not None else None,
        body=body,
        schema=data["schema"] if isinstance(data.get("schema"), int) else SCHEMA_VERSION,
    )


def read_task_file(path) -> Task:
    """Read and parse one task file. OSError propagates unchanged."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise MalformedFileError(path, "not valid UTF-8") from e
    return parse_task(text, path)
