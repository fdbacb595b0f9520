"""
Test suite for ideas: the plain-text parser, inline tags and the idea store.
"""

import os

import pytest

from tasker.core.exceptions import InvalidInputError
from tasker.core.idea_file import (
    extract_inline_tags,
    format_idea_content,
    idea_id_from_filename,
    idea_title_from_filename,
    is_idea_file,
    normalize_idea_title,
    parse_idea_content,
    read_idea_file,
)
from tasker.core.models import AddIdeaInput, IdeaListFilter


# --- Parser ---

def test_inline_tags_skip_code_fences():
    """Test tags inside fenced code are ignored."""
    text = "Keep #one\n```\n#two\n```\nAfter #three"

    assert sorted(extract_inline_tags(text)) == ["one", "three"]


def test_fence_closes_only_on_same_marker():
    """Test a ~~~ fence is not closed by ```."""
    text = "~~~\n#a\n```\n#b\n~~~\n#c"

    assert extract_inline_tags(text) == ["c"]


def test_inline_tags_skip_headings_and_emails():
    """Test heading lines and word-attached markers are not tags."""
    text = "## Section #nope\nmail me at sam@example.com\nping @dana about #launch-v2\n#hashtag"

    assert extract_inline_tags(text) == ["dana", "launch-v2", "hashtag"]


def test_parse_idea_content():
    """Test title, explicit tag lines, inline tags and body are separated."""
    text = "# Better onboarding\ntags: #alpha, @Beta +gamma\n\nEmail drip #delta\n\nmore text\n\n"

    title, tags, body = parse_idea_content(text)

    assert title == "Better onboarding"
    assert tags == ["alpha", "beta", "delta", "gamma"]
    assert body == "Email drip #delta\n\nmore text"


def test_parse_idea_tags_before_title():
    """Test tag lines above the title are still collected."""
    title, tags, body = parse_idea_content("\n\ntag: misc\ntitle: Bake bread\nflour, water")

    assert title == "Bake bread"
    assert tags == ["misc"]
    assert body == "flour, water"


def test_parse_idea_empty():
    """Test empty text has no title."""
    title, tags, _ = parse_idea_content("  \n\n")

    assert title == ""
    assert tags == []


def test_normalize_idea_title():
    """Test heading markers and title prefixes are removed."""
    assert normalize_idea_title("### Big idea") == "Big idea"
    assert normalize_idea_title("Title:  Small idea ") == "Small idea"
    assert normalize_idea_title("plain") == "plain"


def test_format_idea_content():
    """Test the written layout is title, tags line, blank line, body."""
    assert format_idea_content("Idea", ["a", "b"], "body\n\n") == "Idea\ntags: a, b\n\nbody\n"
    assert format_idea_content("Idea", [], "") == "Idea\n"
    assert format_idea_content("  ", [], "") == "(untitled)\n"


def test_filename_helpers():
    """Test ids and fallback titles come from filenames."""
    assert idea_id_from_filename("idea_01ABC__my-idea.md") == "idea_01ABC"
    assert idea_id_from_filename("scratch notes.txt") == "scratch notes"
    assert idea_title_from_filename("idea_01ABC__my-big_idea.md") == "my big idea"
    assert is_idea_file("x.MARKDOWN")
    assert not is_idea_file(".draft.md")
    assert not is_idea_file("image.png")


def test_read_idea_file_uses_filename_and_mtime(tmp_path):
    """Test a file without a title line falls back to its name."""
    path = tmp_path / "idea_01XYZ__road-trip.md"
    path.write_text("\n\n", encoding="utf-8")
    os.utime(path, (1767225600, 1767225600))

    idea = read_idea_file(path, "travel")

    assert idea.id == "idea_01XYZ"
    assert idea.title == "road trip"
    assert idea.project == "travel"
    assert idea.updated_at.timestamp() == 1767225600
    assert idea.created_at == idea.updated_at


# --- Store ---

def test_add_root_idea(workspace):
    """Test root ideas are written under <root>/ideas with inferred tags."""
    idea = workspace.ideas.add_idea(
        AddIdeaInput(title="## Weekly review #habit", tags=["@Planning"], body="Every Friday #focus\n")
    )

    assert idea.id.startswith("idea_")
    assert idea.title == "Weekly review #habit"
    assert idea.project == ""
    assert idea.tags == ["focus", "habit", "planning"]
    assert idea.path.parent == workspace.root / "ideas"
    assert idea.path.read_text(encoding="utf-8") == (
        "Weekly review #habit\ntags: focus, habit, planning\n\nEvery Friday #focus\n"
    )


def test_add_idea_blank_title(workspace):
    """Test blank titles are rejected."""
    with pytest.raises(InvalidInputError):
        workspace.ideas.add_idea(AddIdeaInput(title="  ## "))


def test_add_project_idea_and_scopes(workspace):
    """Test project ideas and scope filtering."""
    root = workspace.ideas.add_idea(AddIdeaInput(title="Root idea"))
    work = workspace.ideas.add_idea(AddIdeaInput(title="Work idea", project="Work"))

    def ids(**kwargs):
        return {i.id for i in workspace.ideas.list_ideas(IdeaListFilter(**kwargs))}

    assert work.path.parent == workspace.root / "projects" / "work" / "ideas"
    assert ids() == {root.id}
    assert ids(project="Work") == {work.id}
    assert ids(scope="all") == {root.id, work.id}
    assert ids(scope="all", project="work") == {root.id, work.id}
    assert ids(scope="root", project="work") == {root.id}

    with pytest.raises(InvalidInputError):
        workspace.ideas.list_ideas(IdeaListFilter(scope="project"))


def test_list_ideas_filters_and_order(workspace):
    """Test tag/search filters and newest-first ordering."""
    older = workspace.ideas.add_idea(AddIdeaInput(title="Older", body="about #cats"))
    newer = workspace.ideas.add_idea(AddIdeaInput(title="Newer", body="about dogs"))
    os.utime(older.path, (1767225600, 1767225600))
    os.utime(newer.path, (1767229200, 1767229200))

    assert [i.id for i in workspace.ideas.list_ideas()] == [newer.id, older.id]
    assert [i.id for i in workspace.ideas.list_ideas(IdeaListFilter(tag="CATS"))] == [older.id]
    assert [i.id for i in workspace.ideas.list_ideas(IdeaListFilter(search="dogs"))] == [newer.id]


def test_list_ideas_ignores_other_files(workspace):
    """Test hidden files and unknown extensions are not ideas."""
    ideas_dir = workspace.root / "ideas"
    (ideas_dir / ".hidden.md").write_text("Secret\n", encoding="utf-8")
    (ideas_dir / "photo.jpg").write_bytes(b"\xff\xd8")
    (ideas_dir / "loose.txt").write_text("Loose note\n", encoding="utf-8")

    ideas = workspace.ideas.list_ideas()

    assert [(i.id, i.title) for i in ideas] == [("loose", "Loose note")]


def test_add_idea_note(workspace):
    """Test notes append a timestamped bullet and keep edits made on disk."""
    idea = workspace.ideas.add_idea(AddIdeaInput(title="Side project", body="First thought"))
    idea.path.write_text("Side project\n\nFirst thought\nEdited by hand\n", encoding="utf-8")

    noted = workspace.ideas.add_idea_note(idea, "talk to #design")

    lines = noted.body.splitlines()
    assert lines[:2] == ["First thought", "Edited by hand"]
    assert lines[2].startswith("- 2026-")
    assert lines[2].endswith("— talk to #design")
    assert noted.tags == ["design"]
    assert "tags: design" in idea.path.read_text(encoding="utf-8")


def test_add_idea_note_validation(workspace):
    """Test blank notes are rejected."""
    idea = workspace.ideas.add_idea(AddIdeaInput(title="Quiet"))

    with pytest.raises(InvalidInputError):
        workspace.ideas.add_idea_note(idea, "   ")


def test_delete_idea(workspace):
    """Test deleting removes the file; ideas without a path are rejected."""
    idea = workspace.ideas.add_idea(AddIdeaInput(title="Temporary"))

    workspace.ideas.delete_idea(idea)

    assert not idea.path.exists()
    idea.path = None
    with pytest.raises(InvalidInputError):
        workspace.ideas.delete_idea(idea)
