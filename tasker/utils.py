"""
FILE: tasker/utils.py
PURPOSE: Shared helper functions for the stores and the CLI
EXPORTS:
  - Clock: type of the injected "now" callable
  - utc_now() -> datetime
  - stamp(clock) -> datetime
  - format_timestamp(dt) -> str
  - parse_timestamp(value) -> Optional[datetime]
  - slugify(text) -> str
  - slugify_or_default(text, default) -> str
  - dedupe_tags(tags) -> List[str]
  - has_tag(tags, tag) -> bool
  - normalize_priority(value) -> str
  - parse_bool(value) -> Optional[bool]
  - expand_home(path) -> Path
DEPENDENCIES:
  - datetime, re, pathlib (stdlib)
NOTES:
  - All timestamps are timezone-aware UTC
  - Persisted timestamps are RFC3339 with second precision
"""

import re
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from .core.constants import (
    PRIORITY_LOW,
    PRIORITY_NORMAL,
    PRIORITY_HIGH,
    PRIORITY_URGENT,
)

Clock = Callable[[], datetime]

_SLUG_RE = re.compile(r"[^a-z0-9]+")
_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_PRIORITY_ALIASES = {
    "low": PRIORITY_LOW,
    "l": PRIORITY_LOW,
    "normal": PRIORITY_NORMAL,
    "n": PRIORITY_NORMAL,
    "med": PRIORITY_NORMAL,
    "medium": PRIORITY_NORMAL,
    "high": PRIORITY_HIGH,
    "h": PRIORITY_HIGH,
    "urgent": PRIORITY_URGENT,
    "u": PRIORITY_URGENT,
    "p0": PRIORITY_URGENT,
}


def utc_now() -> datetime:
    """Default clock: current UTC time."""
    return datetime.now(timezone.utc)


def stamp(clock: Clock) -> datetime:
    """Read the clock and truncate to the precision we persist."""
    now = clock()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).replace(microsecond=0)


def format_timestamp(dt: Optional[datetime]) -> Optional[str]:
    """Render a timestamp as RFC3339 UTC, or None when absent."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime(_TIMESTAMP_FORMAT)


def parse_timestamp(value) -> Optional[datetime]:
    """
    Parse a persisted timestamp.

    Accepts RFC3339 strings (with 'Z' or an offset) and datetime objects,
    which is what YAML hands back for unquoted timestamps. Anything else,
    including empty values, is treated as absent.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def coerce_text(value) -> str:
    """Turn a loosely typed header value into a stripped string."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def slugify(text: str) -> str:
    """
    Derive a filesystem- and URL-safe slug.

    Lowercases, collapses every run of non [a-z0-9] characters into a single
    hyphen and trims hyphens from both ends. Empty results become "x".
    """
    slug = _SLUG_RE.sub("-", (text or "").strip().lower()).strip("-")
    return slug or "x"


def slugify_or_default(text: str, default: str) -> str:
    text = (text or "").strip()
    if not text:
        text = default
    return slugify(text)


def dedupe_tags(tags: Optional[Iterable[str]]) -> List[str]:
    """Case-fold, drop blanks and duplicates, and sort."""
    seen = set()
    for tag in tags or []:
        tag = str(tag).strip().lower()
        if tag:
            seen.add(tag)
    return sorted(seen)


def has_tag(tags: Iterable[str], tag: str) -> bool:
    wanted = (tag or "").strip().lower()
    return any(t.lower() == wanted for t in tags)


def normalize_priority(value: Optional[str]) -> str:
    """Map priority aliases onto canonical names; unknown values pass through."""
    value = (value or "").strip().lower()
    if not value:
        return PRIORITY_NORMAL
    return _PRIORITY_ALIASES.get(value, value)


def parse_bool(value: str) -> Optional[bool]:
    """Parse a user-supplied boolean; None when unrecognised."""
    value = (value or "").strip().lower()
    if value in {"1", "true", "yes", "y", "on"}:
        return True
    if value in {"0", "false", "no", "n", "off"}:
        return False
    return None


def expand_home(path) -> Path:
    return Path(path).expanduser()
