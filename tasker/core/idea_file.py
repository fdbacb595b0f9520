"""
FILE: tasker/core/idea_file.py
PURPOSE: Plain-text idea codec (heuristic title/tags/body parser, inline tags)
EXPORTS:
  - parse_idea_content(text) -> (title, tags, body)
  - format_idea_content(title, tags, body) -> str
  - extract_inline_tags(text) -> List[str]
  - infer_tags(title, body, explicit) -> List[str]
  - normalize_idea_title(line) -> str
  - clean_tags(tags) -> List[str]
  - is_idea_file(name) -> bool
  - idea_id_from_filename(name) / idea_title_from_filename(name) -> str
  - idea_filename(idea_id, title) -> str
  - read_idea_file(path, project) -> Idea
DEPENDENCIES:
  - re, datetime, pathlib (stdlib)
  - tasker.core.models (Idea, RecordMeta)
NOTES:
  - Idea files have no header delimiters. The first non-blank line that is
    not a "tags:" line is the title; "tags:"/"tag:" lines directly after it
    hold explicit tags; the rest is the body
  - Inline #tag / @tag tokens are collected from title and body, skipping
    fenced code blocks and markdown heading lines
"""

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .constants import IDEA_FILE_SUFFIXES, IDEA_PREFIX, UNTITLED
from .models import Idea, RecordMeta
from ..utils import dedupe_tags, slugify

_TAG_CHARS = "A-Za-z0-9_-"
_INLINE_TAG_RE = re.compile(rf"(?<![{_TAG_CHARS}])[#@]([{_TAG_CHARS}]+)")
_HEADING_RE = re.compile(r"^[ \t]*#+ ")
_FENCE_MARKERS = ("```", "~~~")


def _normalize_newlines(text: str) -> str:
    return (text or "").replace("\r\n", "\n").replace("\r", "\n")


def normalize_idea_title(line: str) -> str:
    """Strip a 'title:' prefix or leading markdown heading markers."""
    line = (line or "").strip()
    if line.lower().startswith("title:"):
        return line[len("title:"):].strip()
    if line.startswith("#"):
        return line.lstrip("#").strip()
    return line


def is_tags_line(line: str) -> bool:
    lower = line.strip().lower()
    return lower.startswith("tags:") or lower.startswith("tag:")


def clean_tags(tags: Optional[Iterable[str]]) -> List[str]:
    """Strip leading #, @ and + markers from explicit tags, then dedupe."""
    cleaned = []
    for tag in tags or []:
        tag = str(tag).strip().lstrip("#@+").strip()
        if tag:
            cleaned.append(tag)
    return dedupe_tags(cleaned)


def parse_tag_list(value: str) -> List[str]:
    return clean_tags(value.replace(",", " ").split())


def _parse_tags_line(line: str) -> List[str]:
    _, _, value = line.strip().partition(":")
    return parse_tag_list(value)


def extract_inline_tags(text: str) -> List[str]:
    """
    Collect #token and @token tags from free text.

    Lines inside ``` or ~~~ fences (closed only by the same marker) and
    markdown heading lines are ignored. A token directly preceded by a tag
    character, as in an email address, does not count.
    """
    tags = []
    fence = None
    for line in _normalize_newlines(text).split("\n"):
        trimmed = line.strip()
        marker = trimmed[:3]
        if marker in _FENCE_MARKERS:
            if fence is None:
                fence = marker
            elif marker == fence:
                fence = None
            continue
        if fence is not None or _HEADING_RE.match(line):
            continue
        tags.extend(_INLINE_TAG_RE.findall(line))
    return tags


def infer_tags(title: str, body: str, explicit: Optional[Iterable[str]] = None) -> List[str]:
    """Explicit tags merged with inline tags from title and body."""
    tags = list(explicit or [])
    tags.extend(extract_inline_tags(title))
    tags.extend(extract_inline_tags(body))
    return dedupe_tags(tags)


def parse_idea_content(text: str) -> Tuple[str, List[str], str]:
    """
    Split idea text into (title, tags, body).

    Args:
        text: Raw file or stdin content

    Returns:
        Title ("" when the text has no title line), merged tags sorted and
        case-folded, and the body with trailing newlines removed
    """
    lines = _normalize_newlines(text).split("\n")
    explicit: List[str] = []
    title = ""
    title_index = None
    for i, line in enumerate(lines):
        if not line.strip():
            continue
        if is_tags_line(line):
            explicit.extend(_parse_tags_line(line))
            continue
        title = normalize_idea_title(line)
        title_index = i
        break

    if title_index is None:
        return "", dedupe_tags(explicit), "\n".join(lines).rstrip("\n")

    i = title_index + 1
    while i < len(lines):
        if is_tags_line(lines[i]):
            explicit.extend(_parse_tags_line(lines[i]))
        elif lines[i].strip():
            break
        i += 1
    body = "\n".join(lines[i:]).rstrip("\n")
    return title, infer_tags(title, body, explicit), body


def format_idea_content(title: str, tags: Iterable[str], body: str) -> str:
    """Render an idea as 'title\\n[tags: a, b\\n][\\nbody\\n]'."""
    title = normalize_idea_title(title) or UNTITLED
    tags = list(tags or [])
    parts = [title, "\n"]
    if tags:
        parts.extend(["tags: ", ", ".join(tags), "\n"])
    body = (body or "").rstrip("\n")
    if body:
        parts.extend(["\n", body, "\n"])
    return "".join(parts)


# --- filenames ---


def idea_filename(idea_id: str, title: str) -> str:
    return f"{idea_id}__{slugify(title)}.md"


def is_idea_file(name: str) -> bool:
    if name.startswith("."):
        return False
    return Path(name).suffix.lower() in IDEA_FILE_SUFFIXES


def idea_id_from_filename(name: str) -> str:
    stem = Path(name).stem
    if stem.lower().startswith(IDEA_PREFIX):
        return stem.split("__", 1)[0]
    return stem


def idea_title_from_filename(name: str) -> str:
    stem = Path(name).stem
    if stem.lower().startswith(IDEA_PREFIX):
        stem = stem[len(IDEA_PREFIX):]
    if "__" in stem:
        stem = stem.split("__", 1)[1]
    return stem.replace("-", " ").replace("_", " ").strip()


def read_idea_file(path, project: str = "") -> Idea:
    """
    Read one idea file.

    Id and fallback title come from the filename; both timestamps come from
    the file's modification time. OSError propagates.
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8", errors="replace")
    title, tags, body = parse_idea_content(text)
    if not title:
        title = idea_title_from_filename(path.name)
    modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    return Idea(
        meta=RecordMeta(
            id=idea_id_from_filename(path.name),
            title=title,
            project=project,
            tags=tags,
            created_at=modified,
            updated_at=modified,
        ),
        path=path,
        body=body,
    )
