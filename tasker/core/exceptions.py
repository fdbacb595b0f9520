"""
FILE: tasker/core/exceptions.py
PURPOSE: Custom exception classes for error handling
EXPORTS:
  - TaskerError (base exception)
  - InvalidInputError
  - MalformedFileError
  - NotFoundError
  - MatchConflictError
DEPENDENCIES:
  - None (stdlib only)
NOTES:
  - All domain exceptions inherit from TaskerError for easy catching
  - I/O failures are not wrapped; they surface as OSError
  - Stores raise these, the CLI catches and maps them to exit codes
"""


class TaskerError(Exception):
    """Base exception for all tasker errors."""
    pass


class InvalidInputError(TaskerError):
    """Input validation failed (blank title, unknown column, blank note...)."""

    def __init__(self, message: str):
        super().__init__(message)


class MalformedFileError(InvalidInputError):
    """A record file addressed directly could not be parsed."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Malformed file {path}: {reason}")


class NotFoundError(TaskerError):
    """Selector or id matched nothing in scope."""

    def __init__(self, selector: str, kind: str = "task"):
        self.selector = selector
        self.kind = kind
        super().__init__(f"No {kind} matches '{selector}'")


class MatchConflictError(TaskerError):
    """Selector matched more than one record.

    Carries the full, deterministically sorted candidate list so callers can
    render a disambiguation prompt without querying again.
    """

    def __init__(self, selector: str, matches: list, reason: str = "selector", kind: str = "task"):
        self.selector = selector
        self.matches = list(matches)
        self.reason = reason
        self.kind = kind
        super().__init__(
            f"'{selector}' matches {len(self.matches)} {kind}s ({reason})"
        )
