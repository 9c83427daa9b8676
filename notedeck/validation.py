"""Schema checking and input sanitation.

``validate_store`` is the single gate every externally-sourced document goes
through (data file on load, ``set_data``, imports, backup restores).  It
returns a discriminated result instead of raising so that ``load`` can fall
back to defaults while ``set_data`` / ``import_data`` turn the same result
into a ``StoreValidationError``.
"""

from __future__ import annotations

import json
import re
import uuid
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import ValidationError

from notedeck.models.workspace import StoreDocument

_ILLEGAL_NAME_CHARS = re.compile(r'[<>:"/\\|?*]')
_PATH_SEPARATORS = re.compile(r"[\\/]")


@dataclass(frozen=True)
class ValidStore:
    document: StoreDocument
    ok: Literal[True] = True


@dataclass(frozen=True)
class InvalidStore:
    errors: list[str]
    ok: Literal[False] = False


StoreValidation = ValidStore | InvalidStore


def validate_store(raw: str | bytes | dict[str, Any] | StoreDocument) -> StoreValidation:
    """Check *raw* against the store schema and its invariants.

    Accepts JSON text, an already-parsed mapping, or a ``StoreDocument``.
    Types are checked strictly (``"1"`` is not a valid ``schemaVersion``).
    """
    if isinstance(raw, StoreDocument):
        text: str | bytes = raw.model_dump_json(by_alias=True)
    elif isinstance(raw, str | bytes):
        text = raw
    else:
        try:
            text = json.dumps(raw)
        except (TypeError, ValueError) as exc:
            return InvalidStore([f"<root>: not JSON-serializable ({exc})"])

    try:
        document = StoreDocument.model_validate_json(text, strict=True)
    except ValidationError as exc:
        return InvalidStore([_format_error(err) for err in exc.errors()])

    errors = _check_invariants(document)
    if errors:
        return InvalidStore(errors)
    return ValidStore(document)


def _format_error(err: Any) -> str:
    loc = ".".join(str(part) for part in err["loc"]) or "<root>"
    return f"{loc}: {err['msg']}"


def _check_invariants(document: StoreDocument) -> list[str]:
    errors: list[str] = []
    if not document.workspaces:
        errors.append("workspaces: must contain at least one workspace")

    seen_ids: set[str] = set()
    seen_names: set[str] = set()
    for i, workspace in enumerate(document.workspaces):
        if workspace.id in seen_ids:
            errors.append(f"workspaces.{i}.id: duplicate workspace id {workspace.id!r}")
        seen_ids.add(workspace.id)
        if workspace.name in seen_names:
            errors.append(f"workspaces.{i}.name: duplicate workspace name {workspace.name!r}")
        seen_names.add(workspace.name)

        slot_ids: set[str] = set()
        for j, slot in enumerate(workspace.slots):
            if slot.id in slot_ids:
                errors.append(f"workspaces.{i}.slots.{j}.id: duplicate slot id {slot.id!r}")
            slot_ids.add(slot.id)

    if document.workspaces and document.active_workspace_id not in seen_ids:
        errors.append(f"activeWorkspaceId: {document.active_workspace_id!r} does not match any workspace")
    return errors


# -- Input helpers -------------------------------------------------------------


def sanitize_workspace_name(name: str) -> str:
    """Strip characters that are illegal in file paths, then trim."""
    return _ILLEGAL_NAME_CHARS.sub("", name).strip()


def is_valid_note_path(path: str) -> bool:
    """Non-empty and free of ``..`` traversal segments."""
    if not isinstance(path, str) or not path.strip():
        return False
    return ".." not in _PATH_SEPARATORS.split(path)


def validate_slot_index(index: int, limit: int) -> bool:
    return isinstance(index, int) and not isinstance(index, bool) and 0 <= index < limit


def generate_id() -> str:
    return uuid.uuid4().hex
