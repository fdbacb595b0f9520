"""Shared pytest configuration and fixtures for tests."""

import sys
import io
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Fix Windows console encoding
if sys.platform == "win32":
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8')

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tasker.core.workspace import Workspace  # noqa: E402

START = datetime(2026, 1, 1, 9, 0, 0, tzinfo=timezone.utc)


class SteppingClock:
    """Deterministic clock: every call returns a time one second later."""

    def __init__(self, start: datetime = START, step: timedelta = timedelta(seconds=1)):
        self.now = start - step
        self.step = step

    def __call__(self) -> datetime:
        self.now += self.step
        return self.now


@pytest.fixture
def clock():
    return SteppingClock()


@pytest.fixture
def workspace(tmp_path, clock):
    """Initialized workspace in a temp directory with a stepping clock."""
    ws = Workspace(tmp_path / "ws", clock=clock)
    ws.init()
    return ws
