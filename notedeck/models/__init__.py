"""Data models for notedeck."""

from notedeck.models.actions import FileEvent, SlotAction
from notedeck.models.api import (
    CleanupResponse,
    DataImport,
    GotoResponse,
    MissingFilesResponse,
    SlotAdd,
    UndoResponse,
    WorkspaceCreate,
    WorkspaceRename,
)
from notedeck.models.enums import FileEventType, ReconcilerState, SlotActionType
from notedeck.models.workspace import (
    DEFAULT_WORKSPACE_NAME,
    SCHEMA_VERSION,
    Slot,
    StoreDocument,
    Workspace,
)

__all__ = [
    "DEFAULT_WORKSPACE_NAME",
    "SCHEMA_VERSION",
    # API schemas
    "CleanupResponse",
    "DataImport",
    # Events
    "FileEvent",
    # Enums
    "FileEventType",
    "GotoResponse",
    "MissingFilesResponse",
    "ReconcilerState",
    # Store
    "Slot",
    "SlotAction",
    "SlotActionType",
    "SlotAdd",
    "StoreDocument",
    "UndoResponse",
    "Workspace",
    "WorkspaceCreate",
    "WorkspaceRename",
]
