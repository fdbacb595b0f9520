"""
FILE: tasker/core/constants.py
PURPOSE: Constants used throughout the application
EXPORTS:
  - DEFAULT_COLUMNS: Canonical kanban columns written by init
  - VALID_STATUSES: All column status values
  - OPEN_STATUSES: Statuses that count as "still open" work
  - TASK_PREFIX, IDEA_PREFIX, PROJECT_PREFIX: Entity id prefixes
  - MATCH_*: Selector match modes
  - IDEA_SCOPE_*: Idea listing scopes
DEPENDENCIES:
  - None (stdlib only)
NOTES:
  - Centralized constants to avoid magic strings
  - Directory names carry a numeric prefix so listings sort in workflow order
"""

SCHEMA_VERSION = 1

# Column status constants
STATUS_OPEN = "open"
STATUS_DOING = "doing"
STATUS_BLOCKED = "blocked"
STATUS_DONE = "done"
STATUS_ARCHIVED = "archived"
VALID_STATUSES = (STATUS_OPEN, STATUS_DOING, STATUS_BLOCKED, STATUS_DONE, STATUS_ARCHIVED)
OPEN_STATUSES = (STATUS_OPEN, STATUS_DOING, STATUS_BLOCKED)

# (id, display name, directory, status)
DEFAULT_COLUMNS = (
    ("inbox", "Inbox", "00-inbox", STATUS_OPEN),
    ("todo", "To Do", "01-todo", STATUS_OPEN),
    ("doing", "Doing", "02-doing", STATUS_DOING),
    ("blocked", "Blocked", "03-blocked", STATUS_BLOCKED),
    ("done", "Done", "04-done", STATUS_DONE),
    ("archive", "Archive", "99-archive", STATUS_ARCHIVED),
)
DEFAULT_COLUMN_ID = "inbox"
ARCHIVE_COLUMN_ID = "archive"
DEFAULT_PROJECT_NAME = "Personal"

# Entity id prefixes
TASK_PREFIX = "tsk_"
IDEA_PREFIX = "idea_"
PROJECT_PREFIX = "prj_"

# Crockford base32 (no I, L, O, U)
ID_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
ID_SELECTOR_MIN_LENGTH = 8

# Priorities
PRIORITY_LOW = "low"
PRIORITY_NORMAL = "normal"
PRIORITY_HIGH = "high"
PRIORITY_URGENT = "urgent"

# Selector match modes
MATCH_AUTO = "auto"
MATCH_EXACT = "exact"
MATCH_PREFIX = "prefix"
MATCH_CONTAINS = "contains"
MATCH_SEARCH = "search"
VALID_MATCH_MODES = (MATCH_AUTO, MATCH_EXACT, MATCH_PREFIX, MATCH_CONTAINS, MATCH_SEARCH)
MATCH_CASCADE = (MATCH_EXACT, MATCH_PREFIX, MATCH_CONTAINS, MATCH_SEARCH)

# Idea scopes
IDEA_SCOPE_ROOT = "root"
IDEA_SCOPE_PROJECT = "project"
IDEA_SCOPE_ALL = "all"
VALID_IDEA_SCOPES = (IDEA_SCOPE_ROOT, IDEA_SCOPE_PROJECT, IDEA_SCOPE_ALL)

# On-disk layout
CONFIG_FILENAME = "config.json"
PROJECT_FILENAME = "project.json"
PROJECTS_DIRNAME = "projects"
COLUMNS_DIRNAME = "columns"
IDEAS_DIRNAME = "ideas"
TASK_FILE_SUFFIX = ".md"
IDEA_FILE_SUFFIXES = (".md", ".markdown", ".txt")

NOTES_HEADING = "## Notes"
UNTITLED = "(untitled)"
