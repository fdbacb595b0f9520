"""
FILE: tasker/cli/main.py
PURPOSE: Typer-based CLI entry point
EXPORTS:
  - app (Typer application, re-exported from shared)
  - main() (entry point)
DEPENDENCIES:
  - typer (CLI framework)
  - tasker.cli.shared (app, consoles, error mapping)
  - tasker.cli.commands (registers every command on import)
NOTES:
  - All listing and show commands support --json; most support --raw
  - Error messages go to stderr
  - Exit codes: 0 ok, 2 invalid input, 3 not found, 4 ambiguous, 10 internal
  - Workspace root comes from --root or TASKER_ROOT (default ~/.tasker)
"""

import sys

# Fix Windows console encoding for Unicode characters
if sys.platform == "win32":
    import io
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8')

from .shared import app

# Import command modules to register commands with app
# Commands are decorated with @app.command() in their modules
from . import commands  # noqa: F401


def main():
    """Main entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
