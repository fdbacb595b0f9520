"""
FILE: tasker/core/models.py
PURPOSE: Domain models for tasks, ideas, projects, columns and config
EXPORTS:
  - Column, AgentConfig, Config (dataclasses)
  - Project (dataclass)
  - RecordMeta (shared metadata, embedded by Task and Idea)
  - Task, Idea (dataclasses)
  - AddTaskInput, ListFilter, SelectorFilter (task inputs)
  - AddIdeaInput, IdeaListFilter, IdeaSelectorFilter (idea inputs)
DEPENDENCIES:
  - dataclasses, datetime, json, pathlib (stdlib)
  - tasker.core.constants
NOTES:
  - Task and Idea embed RecordMeta by value (composition, no inheritance)
  - Optional timestamps are Optional[datetime]; None means absent
  - All models have to_dict()/to_json() for serialization
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .constants import (
    SCHEMA_VERSION,
    DEFAULT_COLUMN_ID,
    DEFAULT_COLUMNS,
    MATCH_AUTO,
    PRIORITY_NORMAL,
    STATUS_OPEN,
    STATUS_DOING,
    STATUS_BLOCKED,
    STATUS_DONE,
    STATUS_ARCHIVED,
    PRIORITY_LOW,
    PRIORITY_HIGH,
    PRIORITY_URGENT,
)
from ..utils import format_timestamp, parse_timestamp


@dataclass
class Column:
    """A configured kanban stage."""

    id: str
    name: str
    dir: str
    status: str = STATUS_OPEN

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Column":
        return cls(
            id=str(data.get("id", "")).strip().lower(),
            name=str(data.get("name", "")),
            dir=str(data.get("dir", "")),
            status=str(data.get("status", STATUS_OPEN)).strip().lower(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "dir": self.dir, "status": self.status}


@dataclass
class AgentConfig:
    """Optional per-agent defaults stored alongside the column list."""

    require_explicit: bool = False
    default_project: str = ""
    default_view: str = ""
    week_days: int = 0
    open_only: bool = False
    summary_group: str = ""
    summary_totals: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AgentConfig":
        return cls(
            require_explicit=bool(data.get("require_explicit", False)),
            default_project=str(data.get("default_project") or ""),
            default_view=str(data.get("default_view") or ""),
            week_days=int(data.get("week_days") or 0),
            open_only=bool(data.get("open_only", False)),
            summary_group=str(data.get("summary_group") or ""),
            summary_totals=bool(data.get("summary_totals", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "require_explicit": self.require_explicit,
            "default_project": self.default_project,
            "default_view": self.default_view,
            "week_days": self.week_days,
            "open_only": self.open_only,
            "summary_group": self.summary_group,
            "summary_totals": self.summary_totals,
        }


def default_columns() -> List[Column]:
    return [Column(id=c[0], name=c[1], dir=c[2], status=c[3]) for c in DEFAULT_COLUMNS]


@dataclass
class Config:
    """Workspace configuration (config.json)."""

    schema: int = SCHEMA_VERSION
    columns: List[Column] = field(default_factory=default_columns)
    agent: Optional[AgentConfig] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        columns = [Column.from_dict(c) for c in data.get("columns") or [] if isinstance(c, dict)]
        agent = data.get("agent")
        return cls(
            schema=int(data.get("schema") or 0),
            columns=columns,
            agent=AgentConfig.from_dict(agent) if isinstance(agent, dict) else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "schema": self.schema,
            "columns": [c.to_dict() for c in self.columns],
        }
        if self.agent is not None:
            data["agent"] = self.agent.to_dict()
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


@dataclass
class Project:
    """A named project directory holding columns and ideas."""

    id: str
    name: str
    slug: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    schema: int = SCHEMA_VERSION

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            slug=str(data["slug"]),
            created_at=parse_timestamp(data.get("created_at")),
            updated_at=parse_timestamp(data.get("updated_at")),
            schema=int(data.get("schema") or SCHEMA_VERSION),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema": self.schema,
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


@dataclass
class RecordMeta:
    """Metadata shared by tasks and ideas."""

    id: str
    title: str
    project: str = ""
    tags: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


_STATUS_ABBREV = {
    STATUS_OPEN: "o",
    STATUS_DOING: "d",
    STATUS_BLOCKED: "b",
    STATUS_DONE: "✓",
    STATUS_ARCHIVED: "a",
}

_PRIORITY_ABBREV = {
    PRIORITY_LOW: "L",
    PRIORITY_NORMAL: "N",
    PRIORITY_HIGH: "H",
    PRIORITY_URGENT: "U",
}


@dataclass
class Task:
    """A kanban task stored as one markdown file with a YAML header."""

    meta: RecordMeta
    status: str = STATUS_OPEN
    column: str = DEFAULT_COLUMN_ID
    priority: str = PRIORITY_NORMAL
    due: str = ""
    completed_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None
    path: Optional[Path] = None
    body: str = ""
    schema: int = SCHEMA_VERSION

    @property
    def id(self) -> str:
        return self.meta.id

    @property
    def title(self) -> str:
        return self.meta.title

    @property
    def project(self) -> str:
        return self.meta.project

    @property
    def tags(self) -> List[str]:
        return self.meta.tags

    @property
    def created_at(self) -> Optional[datetime]:
        return self.meta.created_at

    @property
    def updated_at(self) -> Optional[datetime]:
        return self.meta.updated_at

    @property
    def sort_group(self) -> str:
        return self.column

    def status_abbrev(self) -> str:
        return _STATUS_ABBREV.get(self.status, "?")

    def priority_abbrev(self) -> str:
        return _PRIORITY_ABBREV.get(self.priority, "?")

    def to_dict(self, include_body: bool = False) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "project": self.project,
            "column": self.column,
            "priority": self.priority,
            "tags": list(self.tags),
            "due": self.due,
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
            "completed_at": format_timestamp(self.completed_at),
            "archived_at": format_timestamp(self.archived_at),
            "path": str(self.path) if self.path else None,
        }
        if include_body:
            data["body"] = self.body
        return data

    def to_json(self) -> str:
        """Serialize task to JSON string."""
        return json.dumps(self.to_dict(include_body=True), indent=2, ensure_ascii=False)


@dataclass
class Idea:
    """A freeform note, either at the root or inside a project."""

    meta: RecordMeta
    path: Optional[Path] = None
    body: str = ""

    @property
    def id(self) -> str:
        return self.meta.id

    @property
    def title(self) -> str:
        return self.meta.title

    @property
    def project(self) -> str:
        return self.meta.project

    @property
    def tags(self) -> List[str]:
        return self.meta.tags

    @property
    def created_at(self) -> Optional[datetime]:
        return self.meta.created_at

    @property
    def updated_at(self) -> Optional[datetime]:
        return self.meta.updated_at

    @property
    def sort_group(self) -> str:
        return ""

    def to_dict(self, include_body: bool = False) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "title": self.title,
            "project": self.project,
            "tags": list(self.tags),
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
            "path": str(self.path) if self.path else None,
        }
        if include_body:
            data["body"] = self.body
        return data

    def to_json(self) -> str:
        """Serialize idea to JSON string."""
        return json.dumps(self.to_dict(include_body=True), indent=2, ensure_ascii=False)


# --- Operation inputs ---


@dataclass
class AddTaskInput:
    title: str
    project: str = ""
    column: str = ""
    due: str = ""
    priority: str = ""
    tags: List[str] = field(default_factory=list)
    description: str = ""


@dataclass
class ListFilter:
    project: str = ""
    column: str = ""
    status: str = ""
    tag: str = ""
    search: str = ""
    include_archived: bool = False


@dataclass
class SelectorFilter:
    """Scope for task selector resolution. Empty fields do not constrain."""

    project: str = ""
    column: str = ""
    status: str = ""
    include_archived: bool = False
    match: str = MATCH_AUTO


@dataclass
class AddIdeaInput:
    title: str
    project: str = ""
    tags: List[str] = field(default_factory=list)
    body: str = ""


@dataclass
class IdeaListFilter:
    project: str = ""
    scope: str = ""
    tag: str = ""
    search: str = ""


@dataclass
class IdeaSelectorFilter:
    project: str = ""
    scope: str = ""
    match: str = MATCH_AUTO
