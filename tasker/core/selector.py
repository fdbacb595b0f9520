"""
FILE: tasker/core/selector.py
PURPOSE: Selector resolution engine shared by the task and idea stores
EXPORTS:
  - Selectable (protocol the engine reads records through)
  - SelectorEngine: resolve_all() / resolve_one()
  - selector_sort_key(record) -> tuple
  - is_id_like(selector, prefix) -> bool
  - normalize_match_mode(mode) -> str
DEPENDENCIES:
  - re, typing (stdlib)
  - loguru (debug logging)
  - tasker.core.ids (is_id_alphabet)
NOTES:
  - Scope filters are applied by the candidate loader, before matching,
    so match counts only ever reflect in-scope records
  - Title matching cascades exact -> prefix -> contains -> search and stops
    at the first stage with hits; an explicit match mode runs one stage
  - Id-like selectors try the id-prefix path first; other selectors fall
    back to it only when no title matched
  - Results are always sorted: project, column/status, title, id
"""

import re
from typing import Callable, Generic, List, Optional, Protocol, Sequence, TypeVar

from loguru import logger

from .constants import (
    ID_SELECTOR_MIN_LENGTH,
    MATCH_AUTO,
    MATCH_CASCADE,
    MATCH_CONTAINS,
    MATCH_EXACT,
    MATCH_PREFIX,
    MATCH_SEARCH,
    VALID_MATCH_MODES,
)
from .exceptions import InvalidInputError, MatchConflictError, NotFoundError
from .ids import is_id_alphabet
from ..utils import slugify

_ALNUM_RE = re.compile(r"[A-Za-z0-9]")

_MATCH_ALIASES = {
    "": MATCH_AUTO,
    "auto": MATCH_AUTO,
    "exact": MATCH_EXACT,
    "prefix": MATCH_PREFIX,
    "starts": MATCH_PREFIX,
    "starts-with": MATCH_PREFIX,
    "startswith": MATCH_PREFIX,
    "contains": MATCH_CONTAINS,
    "substring": MATCH_CONTAINS,
    "substr": MATCH_CONTAINS,
    "search": MATCH_SEARCH,
    "text": MATCH_SEARCH,
    "body": MATCH_SEARCH,
}


class Selectable(Protocol):
    id: str
    title: str
    body: str
    project: str
    sort_group: str


R = TypeVar("R", bound=Selectable)


def selector_sort_key(record) -> tuple:
    return (record.project, record.sort_group, record.title.lower(), record.id)


def normalize_match_mode(mode: Optional[str]) -> str:
    """
    Map a user-facing match mode (or alias) to a canonical one.

    Raises:
        InvalidInputError: If the mode is not recognised
    """
    key = (mode or "").strip().lower()
    if key not in _MATCH_ALIASES:
        raise InvalidInputError(
            f"Unknown match mode '{mode}'. Must be one of: {', '.join(VALID_MATCH_MODES)}"
        )
    return _MATCH_ALIASES[key]


def is_id_like(selector: str, prefix: str) -> bool:
    """
    Decide whether a selector should be tried as an id first.

    True when it starts with the entity prefix (any case), or when it is
    long enough, drawn entirely from the id alphabet and contains a digit.
    """
    selector = (selector or "").strip()
    if not selector:
        return False
    if selector.lower().startswith(prefix.lower()):
        return True
    if len(selector) < ID_SELECTOR_MIN_LENGTH:
        return False
    return is_id_alphabet(selector) and any(ch.isdigit() for ch in selector)


class SelectorEngine(Generic[R]):
    """
    Turn a human-typed selector into matching records of one kind.

    Args:
        kind: Entity name used in error messages ("task", "idea")
        prefix: Entity id prefix ("tsk_", "idea_")
        load_candidates: Callable returning the in-scope records for a filter
    """

    def __init__(self, kind: str, prefix: str, load_candidates: Callable[[object], List[R]]):
        self.kind = kind
        self.prefix = prefix
        self.load_candidates = load_candidates

    # --- matching stages ---

    @staticmethod
    def match_id_prefix(selector: str, records: Sequence[R]) -> List[R]:
        needle = selector.strip().upper()
        if not needle:
            return []
        return [r for r in records if r.id.upper().startswith(needle)]

    @staticmethod
    def match_title(selector: str, records: Sequence[R], mode: str) -> List[R]:
        needle = selector.strip().lower()
        if not needle:
            return []
        needle_slug = slugify(needle) if _ALNUM_RE.search(needle) else None

        matches = []
        for record in records:
            title = record.title.strip()
            if mode == MATCH_SEARCH:
                if needle in title.lower() or needle in (record.body or "").lower():
                    matches.append(record)
                continue
            if not title:
                continue
            title_lower = title.lower()
            title_slug = slugify(title)
            if mode == MATCH_EXACT:
                hit = title_lower == needle or (needle_slug is not None and title_slug == needle_slug)
            elif mode == MATCH_PREFIX:
                hit = title_lower.startswith(needle) or (
                    needle_slug is not None and title_slug.startswith(needle_slug)
                )
            else:
                hit = needle in title_lower or (needle_slug is not None and needle_slug in title_slug)
            if hit:
                matches.append(record)
        return matches

    def _match_titles(self, selector: str, records: Sequence[R], mode: str) -> List[R]:
        if mode != MATCH_AUTO:
            return self.match_title(selector, records, mode)
        for stage in MATCH_CASCADE:
            matches = self.match_title(selector, records, stage)
            if matches:
                logger.debug("Selector '{}' matched {} {}(s) at stage {}", selector, len(matches), self.kind, stage)
                return matches
        return []

    # --- public API ---

    def resolve_all(self, selector: str, scope) -> List[R]:
        """
        Return every in-scope record the selector matches, sorted.

        Raises:
            InvalidInputError: If the selector is blank or the match mode unknown
        """
        selector = (selector or "").strip()
        if not selector:
            raise InvalidInputError(f"{self.kind.capitalize()} selector cannot be empty")
        mode = normalize_match_mode(getattr(scope, "match", MATCH_AUTO))
        records = self.load_candidates(scope)

        id_like = is_id_like(selector, self.prefix)
        matches: List[R] = []
        if id_like:
            matches = self.match_id_prefix(selector, records)
        if not matches:
            matches = self._match_titles(selector, records, mode)
        if not matches and not id_like:
            matches = self.match_id_prefix(selector, records)
        return sorted(matches, key=selector_sort_key)

    def resolve_one(self, selector: str, scope) -> R:
        """
        Return the single record the selector identifies.

        Raises:
            InvalidInputError: If the selector is blank
            NotFoundError: If nothing in scope matches
            MatchConflictError: If more than one record matches; carries the
                sorted candidate list
        """
        matches = self.resolve_all(selector, scope)
        if not matches:
            raise NotFoundError(selector, kind=self.kind)
        if len(matches) > 1:
            raise MatchConflictError(selector, matches, reason="selector", kind=self.kind)
        return matches[0]
