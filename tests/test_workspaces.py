"""Tests for WorkspaceRegistry."""

from __future__ import annotations

import pytest

from notedeck.deck import NoteDeck
from notedeck.errors import (
    DuplicateWorkspaceError,
    InvalidWorkspaceNameError,
    LastWorkspaceError,
    WorkspaceNotFoundError,
)
from notedeck.models.workspace import DEFAULT_WORKSPACE_NAME


async def test_create_sanitizes_and_appends(deck: NoteDeck) -> None:
    ws = await deck.workspaces.create_workspace('  Re<se>arch:  "2026"  ')

    assert ws.name == "Research  2026"
    assert ws.slots == []
    assert [w.name for w in deck.workspaces.get_all_workspaces()] == [DEFAULT_WORKSPACE_NAME, ws.name]
    # Creating does not switch.
    assert deck.workspaces.get_active_workspace().name == DEFAULT_WORKSPACE_NAME


@pytest.mark.parametrize("name", ["", "   ", "<>|?*"])
async def test_create_rejects_empty_names(deck: NoteDeck, name: str) -> None:
    with pytest.raises(InvalidWorkspaceNameError, match="cannot be empty"):
        await deck.workspaces.create_workspace(name)


async def test_names_are_unique(deck: NoteDeck) -> None:
    await deck.workspaces.create_workspace("Work")

    with pytest.raises(DuplicateWorkspaceError):
        await deck.workspaces.create_workspace("Work")
    # Duplicates are detected after sanitation.
    with pytest.raises(DuplicateWorkspaceError):
        await deck.workspaces.create_workspace(" Wo?rk ")
    # Case-sensitive.
    await deck.workspaces.create_workspace("work")


async def test_rename(deck: NoteDeck) -> None:
    work = await deck.workspaces.create_workspace("Work")
    await deck.workspaces.create_workspace("Play")

    renamed = await deck.workspaces.rename_workspace(work.id, "  Deep Work ")
    assert renamed.name == "Deep Work"
    assert renamed.updated_at >= work.updated_at

    # Renaming to its own name is allowed; to another workspace's name is not.
    await deck.workspaces.rename_workspace(work.id, "Deep Work")
    with pytest.raises(DuplicateWorkspaceError):
        await deck.workspaces.rename_workspace(work.id, "Play")
    with pytest.raises(WorkspaceNotFoundError):
        await deck.workspaces.rename_workspace("ghost", "Anything")


async def test_switch(deck: NoteDeck) -> None:
    work = await deck.workspaces.create_workspace("Work")

    await deck.workspaces.switch_workspace(work.id)
    assert deck.workspaces.get_active_workspace().id == work.id

    with pytest.raises(WorkspaceNotFoundError):
        await deck.workspaces.switch_workspace("ghost")
    assert deck.workspaces.get_active_workspace().id == work.id


async def test_delete_active_moves_to_first_survivor(deck: NoteDeck) -> None:
    """Two workspaces A and B with A active: deleting A activates B."""
    default = deck.workspaces.get_active_workspace()
    a = await deck.workspaces.rename_workspace(default.id, "A")
    b = await deck.workspaces.create_workspace("B")

    deleted = await deck.workspaces.delete_workspace(a.id)

    assert deleted.id == a.id
    assert deck.workspaces.get_active_workspace().id == b.id
    assert len(deck.workspaces.get_all_workspaces()) == 1


async def test_delete_inactive_keeps_active(deck: NoteDeck) -> None:
    active = deck.workspaces.get_active_workspace()
    other = await deck.workspaces.create_workspace("Other")

    await deck.workspaces.delete_workspace(other.id)
    assert deck.workspaces.get_active_workspace().id == active.id


async def test_cannot_delete_last_workspace(deck: NoteDeck) -> None:
    only = deck.workspaces.get_active_workspace()

    with pytest.raises(LastWorkspaceError, match="Cannot delete the last workspace"):
        await deck.workspaces.delete_workspace(only.id)
    assert len(deck.workspaces.get_all_workspaces()) == 1

    with pytest.raises(WorkspaceNotFoundError):
        await deck.workspaces.delete_workspace("ghost")


async def test_queries_return_copies(deck: NoteDeck) -> None:
    active = deck.workspaces.get_active_workspace()
    active.name = "Changed locally"

    assert deck.workspaces.get_active_workspace().name == DEFAULT_WORKSPACE_NAME
    assert deck.workspaces.get_workspace_by_id("ghost") is None


async def test_validate_workspace_files_is_pure(deck: NoteDeck, vault, add_note) -> None:
    await add_note("notes/a.md")
    await add_note("notes/b.md")
    (vault / "notes" / "b.md").unlink()
    workspace_id = deck.workspaces.get_active_workspace().id

    missing = await deck.workspaces.validate_workspace_files(workspace_id)

    assert missing == ["notes/b.md"]
    assert all(not s.is_missing for s in deck.slots.get_slots())
    with pytest.raises(WorkspaceNotFoundError):
        await deck.workspaces.validate_workspace_files("ghost")
