"""Slot CRUD within the active workspace, plus single-level undo.

Undo keeps only the most recent add/remove in a ring buffer of capacity one:
each new add/remove overwrites it, a successful undo clears it.  Actions
remember the workspace they were applied to, so switching workspaces in
between does not redirect the undo elsewhere.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Collection
from typing import TYPE_CHECKING

from loguru import logger

from notedeck.errors import (
    DocumentNotFoundError,
    InvalidNotePathError,
    NoActiveDocumentError,
    NoteAlreadyBoundError,
    NothingToUndoError,
    SlotCapacityError,
    SlotIndexError,
    SlotNotFoundError,
    WorkspaceNotFoundError,
)
from notedeck.models.actions import SlotAction
from notedeck.models.enums import SlotActionType
from notedeck.models.workspace import Slot, StoreDocument, Workspace
from notedeck.validation import generate_id, is_valid_note_path, validate_slot_index

if TYPE_CHECKING:
    from notedeck.host.base import DocumentHost
    from notedeck.managers.data import DataStore
    from notedeck.managers.workspaces import WorkspaceRegistry

UNDO_CAPACITY = 1


class SlotRegistry:
    def __init__(self, data: DataStore, workspaces: WorkspaceRegistry, host: DocumentHost) -> None:
        self._data = data
        self._workspaces = workspaces
        self._host = host
        self._undo: deque[SlotAction] = deque(maxlen=UNDO_CAPACITY)

    @property
    def max_slots(self) -> int:
        return self._data.settings.max_slots

    # -- Add / remove ----------------------------------------------------------

    async def add_current_note(self, slot_index: int | None = None) -> Slot:
        """Bind the host's focused document to a slot of the active workspace.

        With ``slot_index`` inside the current list the slot is inserted
        before the one at that position; past the end it is appended.
        """
        note_path = self._host.get_focused_document_path()
        if not note_path:
            raise NoActiveDocumentError
        if not is_valid_note_path(note_path):
            raise InvalidNotePathError(note_path)

        max_slots = self.max_slots
        if slot_index is not None and not validate_slot_index(slot_index, max_slots):
            msg = f"Invalid slot index. Must be between 0 and {max_slots - 1}"
            raise SlotIndexError(msg)

        data = self._data.get_data()
        workspace = data.active_workspace
        existing = workspace.index_of_path(note_path)
        if existing is not None:
            raise NoteAlreadyBoundError(note_path, existing + 1)
        if len(workspace.slots) >= max_slots:
            raise SlotCapacityError

        slot = Slot(id=generate_id(), note_path=note_path)
        if slot_index is None or slot_index >= len(workspace.slots):
            workspace.slots.append(slot)
            position = len(workspace.slots) - 1
        else:
            workspace.slots.insert(slot_index, slot)
            position = slot_index
        workspace.touch()
        await self._data.commit(data)

        self._record(SlotActionType.ADD, slot, workspace.id)
        logger.info("Note {} added to slot {} of {}", note_path, position + 1, workspace.name)
        return slot

    async def remove_note(self, slot_index: int) -> Slot:
        data = self._data.get_data()
        workspace = data.active_workspace
        if not validate_slot_index(slot_index, len(workspace.slots)):
            msg = f"Invalid slot index: {slot_index}"
            raise SlotIndexError(msg)

        slot = workspace.slots.pop(slot_index)
        workspace.touch()
        await self._data.commit(data)

        self._record(SlotActionType.REMOVE, slot, workspace.id)
        logger.info("Note {} removed from slot {} of {}", slot.note_path, slot_index + 1, workspace.name)
        return slot

    async def goto_slot(self, slot_index: int) -> str:
        """Open the document bound to *slot_index*; returns the host handle."""
        slot = self._require_slot(slot_index)
        if not await self._host.document_exists(slot.note_path):
            raise DocumentNotFoundError(slot.note_path)
        return await self._host.open_document(slot.note_path)

    # -- Undo ------------------------------------------------------------------

    async def undo_last_action(self) -> SlotAction:
        """Revert the pending action and return it.

        A removed slot comes back at the end of the list, not at its old
        position.
        """
        if not self._undo:
            raise NothingToUndoError
        action = self._undo[-1]

        data = self._data.get_data()
        workspace = data.find_workspace(action.workspace_id)
        if workspace is None:
            self._undo.clear()
            raise WorkspaceNotFoundError(action.workspace_id)

        if action.type == SlotActionType.ADD:
            added = workspace.find_slot(action.slot.id)
            if added is None:
                # Already gone (removed by a sweep or a rename/delete); nothing to write.
                self._undo.clear()
                logger.info("Undid {} of {}: slot already gone", action.type, action.slot.note_path)
                return action
            workspace.slots.remove(added)
        else:
            existing = workspace.index_of_path(action.slot.note_path)
            if existing is not None:
                raise NoteAlreadyBoundError(action.slot.note_path, existing + 1)
            if len(workspace.slots) >= self.max_slots:
                raise SlotCapacityError
            workspace.slots.append(action.slot.model_copy())
        workspace.touch()
        await self._data.commit(data)

        self._undo.clear()
        logger.info("Undid {} of {} in {}", action.type, action.slot.note_path, workspace.name)
        return action

    def has_undo_action(self) -> bool:
        return bool(self._undo)

    def get_last_action(self) -> SlotAction | None:
        return self._undo[-1].model_copy(deep=True) if self._undo else None

    def _record(self, action_type: SlotActionType, slot: Slot, workspace_id: str) -> None:
        self._undo.append(SlotAction(type=action_type, slot=slot.model_copy(), workspace_id=workspace_id))

    # -- Reconciliation hooks --------------------------------------------------

    async def mark_slot_missing(self, slot_id: str, is_missing: bool = True) -> Slot:
        """Set the missing flag.  No write when it already has that value."""
        data, workspace, slot = self._find(slot_id)
        if bool(slot.is_missing) == is_missing:
            return slot

        slot.is_missing = is_missing
        workspace.touch()
        await self._data.commit(data)
        return slot

    async def update_slot_path(self, slot_id: str, new_path: str) -> Slot:
        """Rebind a slot to *new_path* and clear its missing flag."""
        if not is_valid_note_path(new_path):
            raise InvalidNotePathError(new_path)
        data, workspace, slot = self._find(slot_id)

        slot.note_path = new_path
        slot.is_missing = None
        workspace.touch()
        await self._data.commit(data)
        return slot

    async def remove_missing_slots(self, only: Collection[str] | None = None) -> list[Slot]:
        """Drop every missing slot of the active workspace in one write.

        ``only`` restricts the sweep to the given slot ids.
        """
        data = self._data.get_data()
        workspace = data.active_workspace
        missing = [s for s in workspace.slots if s.is_missing and (only is None or s.id in only)]
        if not missing:
            return []

        removed_ids = {s.id for s in missing}
        workspace.slots = [s for s in workspace.slots if s.id not in removed_ids]
        workspace.touch()
        await self._data.commit(data)

        logger.info("Removed {} missing slots from {}", len(missing), workspace.name)
        return missing

    # -- Query -----------------------------------------------------------------

    def get_slots(self) -> list[Slot]:
        return self._workspaces.get_active_workspace().slots

    def get_slot(self, slot_index: int) -> Slot | None:
        slots = self.get_slots()
        return slots[slot_index] if validate_slot_index(slot_index, len(slots)) else None

    def _require_slot(self, slot_index: int) -> Slot:
        slot = self.get_slot(slot_index)
        if slot is None:
            msg = f"Invalid slot index: {slot_index}"
            raise SlotIndexError(msg)
        return slot

    def _find(self, slot_id: str) -> tuple[StoreDocument, Workspace, Slot]:
        data = self._data.get_data()
        workspace = data.active_workspace
        slot = workspace.find_slot(slot_id)
        if slot is None:
            raise SlotNotFoundError(slot_id)
        return data, workspace, slot
