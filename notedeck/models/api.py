"""API request / response schemas for the HTTP control API.

Domain models (``Workspace``, ``Slot``) are returned as-is and serialize with
their camelCase aliases; these thin schemas only cover request bodies and
the few responses that are not domain objects.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from notedeck.models.actions import SlotAction


class WorkspaceCreate(BaseModel):
    name: str


class WorkspaceRename(BaseModel):
    name: str


class SlotAdd(BaseModel):
    """Bind a document to a slot.

    ``note_path`` focuses the given document first; when omitted the host's
    currently focused document is used.
    """

    note_path: str | None = None
    slot_index: int | None = Field(default=None, description="0-based; omitted appends.")


class GotoResponse(BaseModel):
    note_path: str
    opened: str = Field(description="Host handle for the opened document.")


class UndoResponse(BaseModel):
    undone: SlotAction


class MissingFilesResponse(BaseModel):
    missing: list[str]


class CleanupResponse(BaseModel):
    removed: int


class DataImport(BaseModel):
    content: str = Field(description="Full store document as JSON text.")
