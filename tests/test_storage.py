"""
Tests for the storage primitives: atomic writes, ids, config and projects.
"""

import json
import os
from datetime import datetime, timezone

import pytest

from tasker.core import atomic
from tasker.core.atomic import atomic_write
from tasker.core.config import ConfigStore
from tasker.core.constants import ID_ALPHABET
from tasker.core.exceptions import InvalidInputError
from tasker.core.ids import IdGenerator, encode_crockford
from tasker.core.models import AgentConfig, IdeaListFilter


# --- Atomic writes ---

def test_atomic_write_creates_parents(tmp_path):
    """Test that missing parent directories are created."""
    target = tmp_path / "a" / "b" / "file.txt"

    atomic_write(target, "hello\n")

    assert target.read_text(encoding="utf-8") == "hello\n"


def test_atomic_write_replaces_and_leaves_no_temp_files(tmp_path):
    """Test overwriting an existing file leaves only the destination."""
    target = tmp_path / "file.txt"
    atomic_write(target, "old")
    atomic_write(target, b"new")

    assert target.read_bytes() == b"new"
    assert [p.name for p in tmp_path.iterdir()] == ["file.txt"]


def test_atomic_write_crash_keeps_old_content(tmp_path, monkeypatch):
    """Test a failure between temp write and rename keeps the old file intact."""
    target = tmp_path / "file.txt"
    atomic_write(target, "old content")

    def crash(src, dst):
        raise OSError("simulated crash before rename")

    monkeypatch.setattr(atomic.os, "replace", crash)

    with pytest.raises(OSError):
        atomic_write(target, "new content that never lands")

    monkeypatch.undo()
    assert target.read_text(encoding="utf-8") == "old content"
    assert [p.name for p in tmp_path.iterdir()] == ["file.txt"]


# --- Ids ---

def test_encode_crockford():
    """Test fixed-width base32 encoding."""
    assert encode_crockford(0, 4) == "0000"
    assert encode_crockford(31, 2) == "0Z"
    assert encode_crockford(32, 2) == "10"


def test_ids_are_monotonic_with_frozen_clock():
    """Test ids keep increasing when the clock does not move."""
    frozen = datetime(2026, 1, 1, tzinfo=timezone.utc)
    gen = IdGenerator(clock=lambda: frozen)

    ids = [gen.new_id() for _ in range(500)]

    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)
    assert all(len(i) == 26 for i in ids)
    assert all(ch in ID_ALPHABET for i in ids for ch in i)


def test_ids_sort_by_time(clock):
    """Test ids from later timestamps sort after earlier ones."""
    gen = IdGenerator(clock=clock)
    first = gen.new_id()
    second = gen.new_id()

    assert first < second
    assert first[:10] != second[:10]


# --- Config ---

def test_config_defaults_when_missing(tmp_path):
    """Test missing config yields defaults without writing a file."""
    store = ConfigStore(tmp_path)

    cfg = store.load()

    assert [c.id for c in cfg.columns] == ["inbox", "todo", "doing", "blocked", "done", "archive"]
    assert cfg.agent is None
    assert not store.exists()


def test_config_ensure_writes_once(tmp_path):
    """Test ensure creates config.json and never overwrites it."""
    store = ConfigStore(tmp_path)
    store.ensure()
    data = json.loads(store.path.read_text(encoding="utf-8"))
    assert data["schema"] == 1
    assert data["columns"][0] == {"id": "inbox", "name": "Inbox", "dir": "00-inbox", "status": "open"}

    cfg = store.load()
    cfg.agent = AgentConfig(default_project="Work")
    store.save(cfg)

    again = ConfigStore(tmp_path).ensure()
    assert again.agent.default_project == "Work"
    assert (tmp_path / "projects").is_dir()


def test_config_unreadable_falls_back_to_defaults(tmp_path):
    """Test invalid JSON is ignored in favour of defaults."""
    (tmp_path / "config.json").write_text("{not json", encoding="utf-8")

    cfg = ConfigStore(tmp_path).load()

    assert len(cfg.columns) == 6


def test_column_lookup(tmp_path):
    """Test columns are found by id (any case) and by directory."""
    store = ConfigStore(tmp_path)

    assert store.column_by_id("DOING").status == "doing"
    assert store.column_by_dir("99-archive").id == "archive"
    assert store.column_by_id("nope") is None


# --- Projects ---

def test_create_project_is_idempotent(workspace):
    """Test creating the same project twice returns the original record."""
    first = workspace.projects.create_project("Side Project")
    second = workspace.projects.create_project("side project!")

    assert first.slug == "side-project"
    assert second.id == first.id
    assert second.name == "Side Project"
    assert first.id.startswith("prj_")


def test_create_project_builds_directories(workspace):
    """Test a project gets one directory per column plus ideas/."""
    project = workspace.projects.create_project("Work")
    columns_dir = workspace.projects.columns_dir(project.slug)

    assert sorted(p.name for p in columns_dir.iterdir()) == [
        "00-inbox", "01-todo", "02-doing", "03-blocked", "04-done", "99-archive",
    ]
    assert workspace.projects.ideas_dir(project.slug).is_dir()


def test_create_project_blank_name(workspace):
    """Test blank project names are rejected."""
    with pytest.raises(InvalidInputError):
        workspace.projects.create_project("   ")


def test_list_projects_sorted_and_skips_broken(workspace):
    """Test projects are listed by slug and broken metadata is skipped."""
    workspace.projects.create_project("Zeta")
    workspace.projects.create_project("Alpha")
    broken = workspace.projects.projects_dir / "broken"
    broken.mkdir()
    (broken / "project.json").write_text("nope", encoding="utf-8")
    for name, payload in (("listed", "[]"), ("empty", "null")):
        (workspace.projects.projects_dir / name).mkdir()
        (workspace.projects.projects_dir / name / "project.json").write_text(payload, encoding="utf-8")

    slugs = [p.slug for p in workspace.projects.list_projects()]

    assert slugs == ["alpha", "personal", "zeta"]


def test_non_object_project_metadata(workspace):
    """Test project.json holding a JSON array is treated as unreadable."""
    broken = workspace.projects.projects_dir / "side"
    broken.mkdir()
    (broken / "project.json").write_text("[]", encoding="utf-8")

    assert workspace.projects.get_project("side") is None
    assert [i.id for i in workspace.ideas.list_ideas(IdeaListFilter(scope="all"))] == []

    project = workspace.projects.create_project("Side")

    assert project.slug == "side"
    assert workspace.projects.get_project("side").id == project.id


def test_get_project(workspace):
    """Test looking a project up by name or slug."""
    workspace.projects.create_project("Home Stuff")

    assert workspace.projects.get_project("home stuff").slug == "home-stuff"
    assert workspace.projects.get_project("missing") is None


def test_init_is_repeatable(workspace):
    """Test running init again keeps config and the default project."""
    before = workspace.projects.get_project("Personal")

    project = workspace.init()

    assert project.id == before.id
    assert workspace.config.exists()
    assert (workspace.root / "ideas").is_dir()
    assert os.path.isdir(workspace.root / "projects" / "personal" / "columns" / "00-inbox")
