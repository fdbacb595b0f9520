"""
Tests for selector resolution over tasks and ideas.
"""

import pytest

from tasker.core.exceptions import InvalidInputError, MatchConflictError, NotFoundError
from tasker.core.models import AddIdeaInput, AddTaskInput, IdeaSelectorFilter, SelectorFilter
from tasker.core.selector import SelectorEngine, is_id_like, normalize_match_mode


def add(ws, title, **kwargs):
    return ws.tasks.add_task(AddTaskInput(title=title, **kwargs))


# --- Helpers ---

@pytest.mark.parametrize("mode,expected", [
    (None, "auto"),
    ("", "auto"),
    ("EXACT", "exact"),
    ("starts-with", "prefix"),
    ("substr", "contains"),
    ("body", "search"),
])
def test_normalize_match_mode(mode, expected):
    """Test match mode aliases map to canonical modes."""
    assert normalize_match_mode(mode) == expected


def test_normalize_match_mode_unknown():
    """Test unknown match modes are rejected."""
    with pytest.raises(InvalidInputError):
        normalize_match_mode("fuzzy")


@pytest.mark.parametrize("selector,expected", [
    ("tsk_", True),
    ("TSK_01abc", True),
    ("01J8ZQ4K", True),
    ("01j8zq4k", True),
    ("ABCDEFGH", False),
    ("01J8ZQ4", False),
    ("01J8ZQ4I", False),
    ("draft proposal", False),
])
def test_is_id_like(selector, expected):
    """Test id-like detection by prefix, length, alphabet and digits."""
    assert is_id_like(selector, "tsk_") is expected


# --- Task selectors ---

def test_exact_title_beats_prefix(workspace):
    """Test the cascade stops at exact matches."""
    exact = add(workspace, "Draft proposal")
    add(workspace, "Draft proposal v2")

    found = workspace.tasks.get_task_by_selector("Draft proposal")

    assert found.id == exact.id


def test_exact_match_by_slug(workspace):
    """Test slug equality counts as an exact match."""
    task = add(workspace, "Fix: login page!")

    assert workspace.tasks.get_task_by_selector("fix-login-page").id == task.id


def test_prefix_then_contains_then_search(workspace):
    """Test each later cascade stage is reached when earlier ones miss."""
    report = add(workspace, "Quarterly report", description="numbers from finance")
    add(workspace, "Plan offsite")

    assert workspace.tasks.get_task_by_selector("quarter").id == report.id
    assert workspace.tasks.get_task_by_selector("report").id == report.id
    assert workspace.tasks.get_task_by_selector("finance").id == report.id


def test_explicit_match_mode_runs_one_stage(workspace):
    """Test an explicit mode skips the cascade."""
    add(workspace, "Draft proposal")
    add(workspace, "Draft proposal v2")

    matches = workspace.tasks.resolve_tasks("Draft proposal", SelectorFilter(match="prefix"))
    assert len(matches) == 2

    with pytest.raises(NotFoundError):
        workspace.tasks.get_task_by_selector("proposal", SelectorFilter(match="exact"))


def test_conflict_is_ordered_by_project(workspace):
    """Test conflict candidates are sorted by project then title."""
    add(workspace, "Same title", project="beta")
    add(workspace, "Same title", project="alpha")

    with pytest.raises(MatchConflictError) as exc:
        workspace.tasks.get_task_by_selector("Same title")

    assert exc.value.reason == "selector"
    assert [t.project for t in exc.value.matches] == ["alpha", "beta"]


def test_scope_applies_before_matching(workspace):
    """Test scoping filters remove candidates before counting matches."""
    add(workspace, "Same title", project="beta")
    alpha = add(workspace, "Same title", project="alpha")

    found = workspace.tasks.get_task_by_selector("same title", SelectorFilter(project="Alpha"))

    assert found.id == alpha.id


def test_scope_by_column_and_archive(workspace):
    """Test column/status scopes and archived tasks."""
    doing = add(workspace, "Review", column="doing")
    old = add(workspace, "Review", column="archive")

    assert workspace.tasks.get_task_by_selector("Review").id == doing.id
    assert workspace.tasks.get_task_by_selector("Review", SelectorFilter(status="archived")).id == old.id
    assert len(workspace.tasks.resolve_tasks("Review", SelectorFilter(include_archived=True))) == 2
    with pytest.raises(NotFoundError):
        workspace.tasks.get_task_by_selector("Review", SelectorFilter(column="todo"))


def test_id_selector_takes_precedence(workspace):
    """Test an id-like selector resolves by id even when a title equals it."""
    first = add(workspace, "First task")
    add(workspace, first.id)

    assert workspace.tasks.get_task_by_selector(first.id).id == first.id


def test_id_like_selector_falls_back_to_title(workspace):
    """Test an id-shaped title is still found when no id matches."""
    task = add(workspace, "ABCD1234")

    assert workspace.tasks.get_task_by_selector("abcd1234").id == task.id


def test_id_prefix_last_resort(workspace):
    """Test a non id-like selector still matches id prefixes when titles miss."""
    task = add(workspace, "Something")

    assert workspace.tasks.get_task_by_selector("tsk").id == task.id


def test_blank_selector(workspace):
    """Test blank selectors are rejected."""
    with pytest.raises(InvalidInputError):
        workspace.tasks.resolve_tasks("   ")


def test_resolve_returns_empty_list(workspace):
    """Test resolve_all reports no matches as an empty list."""
    assert workspace.tasks.resolve_tasks("nothing like this") == []


def test_unknown_match_mode_rejected(workspace):
    """Test an unknown match mode raises before any matching."""
    add(workspace, "Anything")

    with pytest.raises(InvalidInputError):
        workspace.tasks.resolve_tasks("Anything", SelectorFilter(match="regex"))


def test_engine_with_plain_records():
    """Test the engine works with any record exposing the selectable fields."""
    class Note:
        def __init__(self, id, title, project=""):
            self.id = id
            self.title = title
            self.body = ""
            self.project = project
            self.sort_group = ""

    notes = [Note("n_2", "beta"), Note("n_1", "Beta", "p")]
    engine = SelectorEngine("note", "n_", lambda scope: notes)

    matches = engine.resolve_all("beta", None)

    assert [n.id for n in matches] == ["n_2", "n_1"]


# --- Idea selectors ---

def test_idea_selector_scopes(workspace):
    """Test idea selectors honour root, project and all scopes."""
    root_idea = workspace.ideas.add_idea(AddIdeaInput(title="Garden plan"))
    work_idea = workspace.ideas.add_idea(AddIdeaInput(title="Garden plan", project="Work"))

    assert workspace.ideas.get_idea_by_selector("garden plan").id == root_idea.id
    assert workspace.ideas.get_idea_by_selector(
        "garden plan", IdeaSelectorFilter(project="Work")
    ).id == work_idea.id

    with pytest.raises(MatchConflictError) as exc:
        workspace.ideas.get_idea_by_selector("garden", IdeaSelectorFilter(scope="all"))
    assert [i.project for i in exc.value.matches] == ["", "work"]
    assert exc.value.kind == "idea"


def test_idea_selector_by_id(workspace):
    """Test idea ids and id prefixes resolve."""
    idea = workspace.ideas.add_idea(AddIdeaInput(title="Podcast"))

    assert workspace.ideas.get_idea_by_selector(idea.id).id == idea.id
    assert workspace.ideas.get_idea_by_selector(idea.id.upper()).id == idea.id
