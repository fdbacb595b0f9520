"""
FILE: tasker/core/ideas.py
PURPOSE: Idea store: add, note, delete, list and select freeform ideas
EXPORTS:
  - IdeaStore
    - add_idea(input) -> Idea
    - add_idea_note(idea, text) -> Idea
    - delete_idea(idea) -> None
    - list_ideas(filter) -> List[Idea]
    - resolve_ideas(selector, filter) -> List[Idea]
    - get_idea_by_selector(selector, filter) -> Idea
DEPENDENCIES:
  - pathlib (stdlib)
  - loguru (logging)
  - tasker.core.idea_file (codec), tasker.core.selector (SelectorEngine)
NOTES:
  - Root ideas live in <root>/ideas, project ideas in
    <root>/projects/<slug>/ideas; scope picks which directories are read
  - Ideas have no column or status; selector ordering ignores that slot
"""

from pathlib import Path
from typing import List, Optional, Tuple

from loguru import logger

from .atomic import atomic_write
from .constants import (
    IDEA_PREFIX,
    IDEA_SCOPE_ALL,
    IDEA_SCOPE_PROJECT,
    IDEA_SCOPE_ROOT,
    IDEAS_DIRNAME,
    VALID_IDEA_SCOPES,
)
from .exceptions import InvalidInputError
from .ids import IdGenerator
from .idea_file import (
    clean_tags,
    format_idea_content,
    idea_filename,
    infer_tags,
    is_idea_file,
    normalize_idea_title,
    read_idea_file,
)
from .models import AddIdeaInput, Idea, IdeaListFilter, IdeaSelectorFilter, RecordMeta
from .projects import ProjectRegistry
from .selector import SelectorEngine
from ..utils import Clock, format_timestamp, has_tag, slugify_or_default, stamp


def normalize_scope(scope: str, project: str) -> str:
    """Canonical scope; unrecognised or empty means project-or-root."""
    scope = (scope or "").strip().lower()
    if scope in VALID_IDEA_SCOPES:
        return scope
    return IDEA_SCOPE_PROJECT if (project or "").strip() else IDEA_SCOPE_ROOT


def _project_slug(project: str) -> str:
    project = (project or "").strip()
    return slugify_or_default(project, project) if project else ""


def _list_sort_key(idea: Idea) -> tuple:
    updated = idea.updated_at.timestamp() if idea.updated_at else float("-inf")
    return (-updated, idea.project, idea.title.lower(), idea.id)


class IdeaStore:
    """Freeform idea files at the workspace root or inside projects."""

    def __init__(self, root: Path, projects: ProjectRegistry, ids: IdGenerator, clock: Clock):
        self.root = Path(root)
        self.projects = projects
        self.ids = ids
        self.clock = clock
        self.selector = SelectorEngine("idea", IDEA_PREFIX, self._selector_candidates)

    @property
    def root_ideas_dir(self) -> Path:
        return self.root / IDEAS_DIRNAME

    def ideas_dir(self, project_slug: str = "") -> Path:
        if not project_slug:
            return self.root_ideas_dir
        return self.projects.ideas_dir(project_slug)

    def _idea_dirs(self, scope: str, project: str) -> List[Tuple[str, Path]]:
        """(project slug, directory) pairs to read for a scope."""
        project = _project_slug(project)
        scope = normalize_scope(scope, project)
        if scope == IDEA_SCOPE_PROJECT:
            if not project:
                raise InvalidInputError("Idea scope 'project' requires a project")
            return [(project, self.ideas_dir(project))]
        dirs = [("", self.root_ideas_dir)]
        if scope == IDEA_SCOPE_ALL:
            if project:
                dirs.append((project, self.ideas_dir(project)))
            else:
                dirs.extend((p.slug, self.ideas_dir(p.slug)) for p in self.projects.list_projects())
        return dirs

    def _load(self, scope: str, project: str) -> List[Idea]:
        paths = []
        for slug, directory in self._idea_dirs(scope, project):
            if not directory.is_dir():
                continue
            paths.extend(
                (p, slug) for p in directory.rglob("*") if p.is_file() and is_idea_file(p.name)
            )
        paths.sort(key=lambda item: str(item[0]))

        ideas = []
        for path, slug in paths:
            try:
                ideas.append(read_idea_file(path, slug))
            except OSError as e:
                logger.debug("Skipping unreadable idea file {}: {}", path, e)
        return ideas

    # --- writing ---

    def add_idea(self, data: AddIdeaInput) -> Idea:
        """
        Create a new idea file.

        Args:
            data: Title (required), optional project, tags and body

        Returns:
            The new Idea, with inline tags from title and body merged in

        Raises:
            InvalidInputError: If the title is blank after normalisation
        """
        title = normalize_idea_title(data.title)
        if not title:
            raise InvalidInputError("Idea title cannot be empty")
        project_slug = ""
        if (data.project or "").strip():
            project_slug = self.projects.create_project(data.project).slug

        body = (data.body or "").rstrip("\n")
        tags = infer_tags(title, body, clean_tags(data.tags))
        idea_id = IDEA_PREFIX + self.ids.new_id()
        path = self.ideas_dir(project_slug) / idea_filename(idea_id, title)
        atomic_write(path, format_idea_content(title, tags, body))

        now = stamp(self.clock)
        logger.debug("Added idea {} ({})", idea_id, project_slug or "root")
        return Idea(
            meta=RecordMeta(
                id=idea_id,
                title=title,
                project=project_slug,
                tags=tags,
                created_at=now,
                updated_at=now,
            ),
            path=path,
            body=body,
        )

    def add_idea_note(self, idea: Idea, text: str) -> Idea:
        """
        Append a timestamped bullet to an idea's body.

        The file is re-read first so concurrent edits to the body are kept.

        Raises:
            InvalidInputError: If the idea has no path or text is blank
        """
        if idea is None or idea.path is None:
            raise InvalidInputError("Idea has no file path")
        text = (text or "").strip()
        if not text:
            raise InvalidInputError("Note text cannot be empty")

        current = read_idea_file(idea.path, idea.project)
        now = stamp(self.clock)
        entry = f"- {format_timestamp(now)} — {text}"
        body = current.body.rstrip("\n")
        body = f"{body}\n{entry}" if body else entry
        tags = infer_tags(current.title, body, current.tags)
        atomic_write(current.path, format_idea_content(current.title, tags, body))

        current.body = body
        current.meta.tags = tags
        current.meta.updated_at = now
        return current

    def delete_idea(self, idea: Idea) -> None:
        """
        Remove an idea's file.

        Raises:
            InvalidInputError: If the idea has no path
            OSError: If the file cannot be removed
        """
        if idea is None or idea.path is None:
            raise InvalidInputError("Idea has no file path")
        Path(idea.path).unlink()
        logger.debug("Deleted idea {}", idea.id)

    # --- reading ---

    def list_ideas(self, f: Optional[IdeaListFilter] = None) -> List[Idea]:
        """
        List ideas in a scope, filtered by tag and search text.

        Returns:
            Ideas, most recently updated first, then project, title, id

        Raises:
            InvalidInputError: If scope is 'project' and no project is given
        """
        f = f or IdeaListFilter()
        tag = (f.tag or "").strip()
        needle = (f.search or "").strip().lower()
        ideas = []
        for idea in self._load(f.scope, f.project):
            if tag and not has_tag(idea.tags, tag):
                continue
            if needle and needle not in idea.title.lower() and needle not in idea.body.lower():
                continue
            ideas.append(idea)
        ideas.sort(key=_list_sort_key)
        return ideas

    def _selector_candidates(self, scope: IdeaSelectorFilter) -> List[Idea]:
        return self._load(scope.scope, scope.project)

    def resolve_ideas(self, selector: str, scope: Optional[IdeaSelectorFilter] = None) -> List[Idea]:
        return self.selector.resolve_all(selector, scope or IdeaSelectorFilter())

    def get_idea_by_selector(self, selector: str, scope: Optional[IdeaSelectorFilter] = None) -> Idea:
        """
        The one in-scope idea the selector identifies.

        Raises:
            NotFoundError: If nothing matches
            MatchConflictError: If several ideas match
        """
        return self.selector.resolve_one(selector, scope or IdeaSelectorFilter())
