"""
FILE: tasker/core/projects.py
PURPOSE: Project registry (named, slugified project directories)
EXPORTS:
  - ProjectRegistry
DEPENDENCIES:
  - json, pathlib (stdlib)
  - loguru (logging)
  - tasker.core.atomic, tasker.core.config, tasker.core.ids
NOTES:
  - Project identity is the slug; create is idempotent and never overwrites
    an existing project.json
  - Every project gets one directory per configured column plus ideas/
"""

import json
from pathlib import Path
from typing import List, Optional

from loguru import logger

from .atomic import atomic_write
from .config import ConfigStore
from .constants import (
    COLUMNS_DIRNAME,
    IDEAS_DIRNAME,
    PROJECT_FILENAME,
    PROJECT_PREFIX,
    PROJECTS_DIRNAME,
    SCHEMA_VERSION,
)
from .exceptions import InvalidInputError
from .ids import IdGenerator
from .models import Project
from ..utils import Clock, slugify, stamp


def read_project(path: Path) -> Project:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not hold a JSON object")
    return Project.from_dict(data)


class ProjectRegistry:
    """Creates and lists projects under <root>/projects."""

    def __init__(self, root: Path, config: ConfigStore, ids: IdGenerator, clock: Clock):
        self.root = Path(root)
        self.config = config
        self.ids = ids
        self.clock = clock

    @property
    def projects_dir(self) -> Path:
        return self.root / PROJECTS_DIRNAME

    def project_dir(self, slug: str) -> Path:
        return self.projects_dir / slug

    def columns_dir(self, slug: str) -> Path:
        return self.project_dir(slug) / COLUMNS_DIRNAME

    def ideas_dir(self, slug: str) -> Path:
        return self.project_dir(slug) / IDEAS_DIRNAME

    def create_project(self, name: str) -> Project:
        """
        Create a project, or return the existing one with the same slug.

        Args:
            name: Human project name (required, must not be blank)

        Returns:
            The new Project, or the unchanged existing record

        Raises:
            InvalidInputError: If name is empty or whitespace-only
            OSError: If directories or metadata cannot be written
        """
        name = (name or "").strip()
        if not name:
            raise InvalidInputError("Project name cannot be empty")
        slug = slugify(name)

        columns_dir = self.columns_dir(slug)
        for column in self.config.load().columns:
            (columns_dir / column.dir).mkdir(parents=True, exist_ok=True)
        self.ideas_dir(slug).mkdir(parents=True, exist_ok=True)

        meta_path = self.project_dir(slug) / PROJECT_FILENAME
        if meta_path.exists():
            try:
                return read_project(meta_path)
            except (OSError, ValueError, KeyError) as e:
                logger.warning("Rewriting unreadable project metadata {}: {}", meta_path, e)

        now = stamp(self.clock)
        project = Project(
            id=PROJECT_PREFIX + self.ids.new_id(),
            name=name,
            slug=slug,
            created_at=now,
            updated_at=now,
            schema=SCHEMA_VERSION,
        )
        atomic_write(meta_path, project.to_json() + "\n")
        logger.info("Created project {} ({})", project.name, project.slug)
        return project

    def list_projects(self) -> List[Project]:
        """All readable projects, sorted by slug. Broken metadata is skipped."""
        if not self.projects_dir.is_dir():
            return []
        projects = []
        for entry in self.projects_dir.iterdir():
            if not entry.is_dir():
                continue
            meta_path = entry / PROJECT_FILENAME
            try:
                projects.append(read_project(meta_path))
            except (OSError, ValueError, KeyError) as e:
                logger.debug("Skipping project {}: {}", entry.name, e)
        projects.sort(key=lambda p: p.slug)
        return projects

    def get_project(self, name_or_slug: str) -> Optional[Project]:
        """Find a project by name or slug; None if it does not exist."""
        slug = slugify(name_or_slug)
        meta_path = self.project_dir(slug) / PROJECT_FILENAME
        try:
            return read_project(meta_path)
        except (OSError, ValueError, KeyError):
            return None
