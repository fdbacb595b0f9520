"""
FILE: tasker/core/workspace.py
PURPOSE: Wire the stores for one workspace root
EXPORTS:
  - Workspace
    - init(default_project) -> Project
    - config / projects / tasks / ideas (store attributes)
  - default_root() -> Path
DEPENDENCIES:
  - os, pathlib (stdlib)
  - loguru (logging)
  - tasker.core stores
NOTES:
  - One clock and one id generator are shared by every store so ids and
    timestamps stay monotonic across entity kinds
  - Constructing a Workspace touches no files; init() creates the tree
"""

import os
from pathlib import Path
from typing import Optional

from loguru import logger

from .config import ConfigStore
from .constants import DEFAULT_PROJECT_NAME
from .ideas import IdeaStore
from .ids import IdGenerator
from .models import Project
from .projects import ProjectRegistry
from .tasks import TaskStore
from ..utils import Clock, expand_home, utc_now

ROOT_ENV_VAR = "TASKER_ROOT"
DEFAULT_ROOT = "~/.tasker"


def default_root() -> Path:
    """Workspace root from TASKER_ROOT, else ~/.tasker."""
    return expand_home(os.environ.get(ROOT_ENV_VAR) or DEFAULT_ROOT)


class Workspace:
    """All stores for one workspace root."""

    def __init__(self, root=None, clock: Optional[Clock] = None):
        self.root = expand_home(root) if root else default_root()
        self.clock = clock or utc_now
        self.ids = IdGenerator(clock=self.clock)
        self.config = ConfigStore(self.root)
        self.projects = ProjectRegistry(self.root, self.config, self.ids, self.clock)
        self.tasks = TaskStore(self.root, self.config, self.projects, self.ids, self.clock)
        self.ideas = IdeaStore(self.root, self.projects, self.ids, self.clock)

    def init(self, default_project: str = DEFAULT_PROJECT_NAME) -> Project:
        """
        Create the workspace tree, default config and a first project.

        Safe to run repeatedly: existing config and projects are kept.

        Args:
            default_project: Name of the project to create (default "Personal")

        Returns:
            The default project
        """
        self.config.ensure()
        self.ideas.root_ideas_dir.mkdir(parents=True, exist_ok=True)
        project = self.projects.create_project(default_project or DEFAULT_PROJECT_NAME)
        logger.info("Initialized workspace at {}", self.root)
        return project
