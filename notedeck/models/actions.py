"""Undo records and external file events."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from notedeck.models.enums import FileEventType, SlotActionType
from notedeck.models.workspace import Slot, utcnow


class SlotAction(BaseModel):
    """The most recent add/remove, revocable exactly once."""

    type: SlotActionType
    slot: Slot
    workspace_id: str = Field(description="Workspace the action was applied to.")
    timestamp: datetime = Field(default_factory=utcnow)


class FileEvent(BaseModel):
    """A document notification from the host.

    Paths are vault-relative POSIX strings (``notes/a.md``).
    """

    type: FileEventType
    path: str
    old_path: str | None = Field(default=None, description="Previous path (rename only).")
