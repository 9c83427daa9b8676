"""Store document data model.

The whole bookmark state lives in one JSON document::

    {
      "schemaVersion": 1,
      "activeWorkspaceId": "...",
      "workspaces": [
        {"id": "...", "name": "...", "createdAt": "...", "updatedAt": "...",
         "slots": [{"id": "...", "notePath": "notes/a.md", "isMissing": true}]}
      ],
      "updatedAt": "..."
    }

Python attributes are snake_case; the camelCase aliases are the on-disk
field names and must not change.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SCHEMA_VERSION = 1
DEFAULT_WORKSPACE_NAME = "Default Workspace"


def utcnow() -> datetime:
    return datetime.now(UTC)


class _DocumentModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Slot(_DocumentModel):
    """A single bookmark: positional index -> external document path."""

    id: str
    note_path: str
    is_missing: bool | None = Field(default=None, description="Absent means present (false).")


class Workspace(_DocumentModel):
    """A named, ordered collection of slots."""

    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    slots: list[Slot] = Field(default_factory=list)

    def find_slot(self, slot_id: str) -> Slot | None:
        return next((s for s in self.slots if s.id == slot_id), None)

    def index_of_path(self, note_path: str) -> int | None:
        """Position of the first slot bound to *note_path*, or ``None``."""
        for i, slot in enumerate(self.slots):
            if slot.note_path == note_path:
                return i
        return None

    def touch(self) -> None:
        self.updated_at = utcnow()


class StoreDocument(_DocumentModel):
    """Root persisted object.

    Invariants (enforced by ``notedeck.validation.validate_store``):
    ``workspaces`` is non-empty and ``active_workspace_id`` resolves to one of
    them.
    """

    schema_version: int
    active_workspace_id: str
    workspaces: list[Workspace]
    updated_at: datetime | None = None

    def find_workspace(self, workspace_id: str) -> Workspace | None:
        return next((w for w in self.workspaces if w.id == workspace_id), None)

    @property
    def active_workspace(self) -> Workspace:
        workspace = self.find_workspace(self.active_workspace_id)
        if workspace is None:
            msg = f"Active workspace '{self.active_workspace_id}' is not in the store"
            raise LookupError(msg)
        return workspace

    def to_json(self) -> str:
        """Deterministic serialization used for the data file and exports."""
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)
