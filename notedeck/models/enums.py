"""Shared enumerations."""

from __future__ import annotations

from enum import StrEnum


class SlotActionType(StrEnum):
    """Kind of slot mutation recorded for undo."""

    ADD = "add"
    REMOVE = "remove"


class FileEventType(StrEnum):
    """External document notifications consumed by the reconciler."""

    RENAME = "rename"
    DELETE = "delete"
    CREATE = "create"


class ReconcilerState(StrEnum):
    IDLE = "idle"
    HANDLING = "handling"
