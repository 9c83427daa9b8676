"""Slot endpoints for the active workspace (RPC-style).

Slot indices in paths are 0-based.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from notedeck.deps import Deck, translate_errors
from notedeck.host.local import LocalVault
from notedeck.models.api import CleanupResponse, GotoResponse, MissingFilesResponse, SlotAdd, UndoResponse
from notedeck.models.workspace import Slot

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/list", response_model=list[Slot])
async def list_slots(deck: Deck) -> list[Slot]:
    return deck.slots.get_slots()


@router.post("/add", response_model=Slot, status_code=status.HTTP_201_CREATED)
async def add_slot(body: SlotAdd, deck: Deck) -> Slot:
    """Bind a document to a slot.

    With ``note_path`` the document is focused first, as if the user had
    opened it; otherwise the currently focused document is bound.
    """
    if body.note_path is not None:
        if not isinstance(deck.host, LocalVault):
            raise HTTPException(
                status.HTTP_400_BAD_REQUEST,
                detail="This host does not accept an explicit note_path.",
            )
        with translate_errors():
            deck.host.focus(body.note_path)

    with translate_errors():
        return await deck.slots.add_current_note(body.slot_index)


@router.post("/undo", response_model=UndoResponse)
async def undo(deck: Deck) -> UndoResponse:
    """Revert the most recent add or remove."""
    with translate_errors():
        action = await deck.slots.undo_last_action()
    return UndoResponse(undone=action)


@router.post("/validate", response_model=MissingFilesResponse)
async def validate_slots(deck: Deck) -> MissingFilesResponse:
    """Sweep the active workspace, updating missing flags."""
    with translate_errors():
        missing = await deck.reconciler.validate_all_slots()
    return MissingFilesResponse(missing=missing)


@router.post("/cleanup", response_model=CleanupResponse)
async def cleanup_slots(deck: Deck) -> CleanupResponse:
    with translate_errors():
        removed = await deck.reconciler.cleanup_missing_files()
    return CleanupResponse(removed=removed)


@router.get("/{slot_index}/get", response_model=Slot)
async def get_slot(slot_index: int, deck: Deck) -> Slot:
    slot = deck.slots.get_slot(slot_index)
    if slot is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"Invalid slot index: {slot_index}")
    return slot


@router.post("/{slot_index}/remove", response_model=Slot)
async def remove_slot(slot_index: int, deck: Deck) -> Slot:
    with translate_errors():
        return await deck.slots.remove_note(slot_index)


@router.post("/{slot_index}/goto", response_model=GotoResponse)
async def goto_slot(slot_index: int, deck: Deck) -> GotoResponse:
    """Open the document bound to the slot through the host."""
    slot = deck.slots.get_slot(slot_index)
    if slot is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"Invalid slot index: {slot_index}")
    with translate_errors():
        opened = await deck.slots.goto_slot(slot_index)
    return GotoResponse(note_path=slot.note_path, opened=opened)
