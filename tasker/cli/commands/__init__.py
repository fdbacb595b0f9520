"""
FILE: tasker/cli/commands/__init__.py
PURPOSE: CLI command modules
"""

# Export all command handlers for easy importing
from .tasks import (
    add,
    ls,
    show,
    resolve,
    mv,
    done,
    note,
)
from .projects import (
    project_add,
    project_ls,
)
from .ideas import (
    idea_add,
    idea_ls,
    idea_show,
    idea_resolve,
    idea_note,
    idea_promote,
    idea_rm,
)
from .system import (
    version,
    init,
    config_show,
    config_set,
)

__all__ = [
    "add",
    "ls",
    "show",
    "resolve",
    "mv",
    "done",
    "note",
    "project_add",
    "project_ls",
    "idea_add",
    "idea_ls",
    "idea_show",
    "idea_resolve",
    "idea_note",
    "idea_promote",
    "idea_rm",
    "version",
    "init",
    "config_show",
    "config_set",
]
