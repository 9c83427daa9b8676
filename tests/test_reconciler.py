"""Tests for the Reconciler: host notifications and sweeps."""

from __future__ import annotations

import pytest

from notedeck.deck import NoteDeck
from notedeck.host.local import LocalVault
from notedeck.models.actions import FileEvent
from notedeck.models.enums import FileEventType, ReconcilerState


def _rename(old: str, new: str) -> FileEvent:
    return FileEvent(type=FileEventType.RENAME, path=new, old_path=old)


def _delete(path: str) -> FileEvent:
    return FileEvent(type=FileEventType.DELETE, path=path)


def _create(path: str) -> FileEvent:
    return FileEvent(type=FileEventType.CREATE, path=path)


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


async def test_rename_rebinds_slot(deck: NoteDeck, local_vault: LocalVault, add_note) -> None:
    await add_note("notes/a.md")

    await local_vault.dispatch(_rename("notes/a.md", "notes/b.md"))

    slots = deck.slots.get_slots()
    assert [s.note_path for s in slots] == ["notes/b.md"]
    assert slots[0].is_missing is None
    assert deck.reconciler.state == ReconcilerState.IDLE


async def test_rename_clears_missing_flag(deck: NoteDeck, local_vault: LocalVault, add_note) -> None:
    slot = await add_note("notes/a.md")
    await deck.slots.mark_slot_missing(slot.id)

    await local_vault.dispatch(_rename("notes/a.md", "archive/a.md"))

    assert deck.slots.get_slots()[0].is_missing is None


async def test_rename_fixes_legacy_duplicates_forward(deck: NoteDeck, local_vault: LocalVault, add_note) -> None:
    original = await add_note("notes/a.md")
    data = deck.data.get_data()
    data.active_workspace.slots.append(original.model_copy(update={"id": "legacy-copy"}))
    await deck.data.commit(data)

    await local_vault.dispatch(_rename("notes/a.md", "notes/renamed.md"))

    assert [s.note_path for s in deck.slots.get_slots()] == ["notes/renamed.md", "notes/renamed.md"]


async def test_rename_of_unbound_document_is_ignored(deck: NoteDeck, local_vault: LocalVault, add_note) -> None:
    await add_note("notes/a.md")
    before = deck.data.export_data()

    await local_vault.dispatch(_rename("notes/c.md", "notes/d.md"))

    assert deck.data.export_data() == before


async def test_delete_marks_missing_then_auto_removes(deck: NoteDeck, local_vault: LocalVault, add_note) -> None:
    """Delete with auto-remove off keeps a flagged slot; with it on the slot goes."""
    await add_note("notes/a.md")
    await add_note("notes/b.md")

    await local_vault.dispatch(_delete("notes/a.md"))
    slots = deck.slots.get_slots()
    assert len(slots) == 2
    assert slots[0].note_path == "notes/a.md"
    assert slots[0].is_missing is True

    await deck.data.update_settings(auto_remove_missing=True)
    await local_vault.dispatch(_delete("notes/b.md"))

    slots = deck.slots.get_slots()
    assert len(slots) == 1
    # Only the slot of this event is removed; the earlier one stays flagged.
    assert slots[0].note_path == "notes/a.md"
    assert slots[0].is_missing is True


async def test_create_recovers_missing_slot(deck: NoteDeck, local_vault: LocalVault, add_note) -> None:
    await add_note("notes/a.md")
    await local_vault.dispatch(_delete("notes/a.md"))
    assert deck.slots.get_slots()[0].is_missing is True

    await local_vault.dispatch(_create("notes/a.md"))

    assert not deck.slots.get_slots()[0].is_missing


async def test_events_only_touch_active_workspace(deck: NoteDeck, local_vault: LocalVault, add_note) -> None:
    home = deck.workspaces.get_active_workspace()
    await add_note("notes/a.md")
    other = await deck.workspaces.create_workspace("Other")
    await deck.workspaces.switch_workspace(other.id)

    await local_vault.dispatch(_rename("notes/a.md", "notes/z.md"))

    assert deck.workspaces.get_workspace_by_id(home.id).slots[0].note_path == "notes/a.md"


async def test_nested_notification_is_dropped(deck: NoteDeck, add_note) -> None:
    await add_note("notes/a.md")
    deck.reconciler.state = ReconcilerState.HANDLING

    await deck.reconciler.handle_rename("notes/a.md", "notes/b.md")

    assert [s.note_path for s in deck.slots.get_slots()] == ["notes/a.md"]
    assert deck.reconciler.state == ReconcilerState.HANDLING


async def test_handler_failure_is_contained(
    deck: NoteDeck, local_vault: LocalVault, add_note, monkeypatch: pytest.MonkeyPatch
) -> None:
    await add_note("notes/a.md")

    async def _boom(slot_id: str, new_path: str) -> None:
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(deck.slots, "update_slot_path", _boom)

    await local_vault.dispatch(_rename("notes/a.md", "notes/b.md"))

    assert deck.reconciler.state == ReconcilerState.IDLE
    assert [s.note_path for s in deck.slots.get_slots()] == ["notes/a.md"]


# ---------------------------------------------------------------------------
# Sweeps
# ---------------------------------------------------------------------------


async def test_validate_all_slots_is_idempotent(deck: NoteDeck, vault, add_note) -> None:
    await add_note("notes/a.md")
    await add_note("notes/b.md")
    (vault / "notes" / "a.md").unlink()

    first = await deck.reconciler.validate_all_slots()
    snapshot = deck.data.export_data()
    second = await deck.reconciler.validate_all_slots()

    assert first == second == ["notes/a.md"]
    assert deck.data.export_data() == snapshot
    assert [s.is_missing for s in deck.slots.get_slots()] == [True, None]


async def test_validate_all_slots_recovers(deck: NoteDeck, vault, add_note) -> None:
    slot = await add_note("notes/a.md")
    await deck.slots.mark_slot_missing(slot.id)

    assert await deck.reconciler.validate_all_slots() == []
    assert not deck.slots.get_slots()[0].is_missing


async def test_cleanup_missing_files(deck: NoteDeck, vault, add_note) -> None:
    for path in ("notes/a.md", "notes/b.md", "notes/c.md"):
        await add_note(path)
    (vault / "notes" / "a.md").unlink()
    (vault / "notes" / "c.md").unlink()

    assert await deck.reconciler.cleanup_missing_files() == 2
    assert [s.note_path for s in deck.slots.get_slots()] == ["notes/b.md"]
    assert await deck.reconciler.cleanup_missing_files() == 0


async def test_handle_vault_change_respects_auto_remove(deck: NoteDeck, vault, add_note) -> None:
    await add_note("notes/a.md")
    await add_note("notes/b.md")
    (vault / "notes" / "b.md").unlink()

    assert await deck.reconciler.handle_vault_change() == ["notes/b.md"]
    assert len(deck.slots.get_slots()) == 2

    await deck.data.update_settings(auto_remove_missing=True)
    assert await deck.reconciler.handle_vault_change() == ["notes/b.md"]
    assert [s.note_path for s in deck.slots.get_slots()] == ["notes/a.md"]


async def test_start_sweeps_active_workspace(settings, vault, deck: NoteDeck, add_note) -> None:
    await add_note("notes/a.md")
    (vault / "notes" / "a.md").unlink()

    restarted = NoteDeck(settings)
    missing = await restarted.start()

    assert missing == ["notes/a.md"]
    assert restarted.slots.get_slots()[0].is_missing is True
