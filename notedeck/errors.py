"""Domain exceptions.

Managers raise these, never HTTP exceptions or ``click`` errors -- that
translation is the responsibility of the router / CLI layer.  Every class
also derives from the closest builtin (``LookupError``, ``ValueError``,
``OSError``) so callers that only know the builtins still catch them.
"""

from __future__ import annotations


class NoteDeckError(Exception):
    """Base class for all notedeck errors."""


# -- Validation ----------------------------------------------------------------


class StoreValidationError(NoteDeckError, ValueError):
    """Raised when a store document fails the schema check."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("Invalid data format: " + "; ".join(errors))


# -- Not found -----------------------------------------------------------------


class NotFoundError(NoteDeckError, LookupError):
    """An id, index or document could not be resolved."""


class WorkspaceNotFoundError(NotFoundError):
    def __init__(self, workspace_id: str) -> None:
        self.workspace_id = workspace_id
        super().__init__(f"Workspace not found: {workspace_id}")


class SlotNotFoundError(NotFoundError):
    def __init__(self, slot_id: str) -> None:
        self.slot_id = slot_id
        super().__init__(f"Slot not found: {slot_id}")


class SlotIndexError(NotFoundError):
    """Slot index outside the permitted range."""


class DocumentNotFoundError(NotFoundError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"File not found: {path}")


class NoActiveDocumentError(NotFoundError):
    def __init__(self) -> None:
        super().__init__("No active file")


class NothingToUndoError(NotFoundError):
    def __init__(self) -> None:
        super().__init__("No action to undo")


class BackupNotFoundError(NotFoundError):
    def __init__(self, backup: str) -> None:
        self.backup = backup
        super().__init__(f"Backup not found: {backup}")


# -- Constraint violations -----------------------------------------------------


class ConstraintViolation(NoteDeckError, ValueError):  # noqa: N818
    """An operation would break a store invariant."""


class DuplicateWorkspaceError(ConstraintViolation):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Workspace with this name already exists: {name}")


class NoteAlreadyBoundError(ConstraintViolation):
    def __init__(self, note_path: str, slot_number: int) -> None:
        self.note_path = note_path
        self.slot_number = slot_number
        super().__init__(f"Note already exists in slot {slot_number}")


class SlotCapacityError(ConstraintViolation):
    def __init__(self) -> None:
        super().__init__("All slots are full")


class LastWorkspaceError(ConstraintViolation):
    def __init__(self) -> None:
        super().__init__("Cannot delete the last workspace")


class InvalidWorkspaceNameError(ConstraintViolation):
    def __init__(self) -> None:
        super().__init__("Workspace name cannot be empty")


class InvalidNotePathError(ConstraintViolation):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Invalid note path: {path!r}")


# -- I/O -----------------------------------------------------------------------


class StoreIOError(NoteDeckError, OSError):
    """Reading or writing the persisted document (or a backup) failed."""
