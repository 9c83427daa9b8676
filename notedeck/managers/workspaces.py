"""Workspace CRUD and active-workspace selection.

Names are sanitized (path-illegal characters stripped, whitespace trimmed)
and unique, case-sensitively.  The store always keeps at least one workspace.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from notedeck.errors import (
    DuplicateWorkspaceError,
    InvalidWorkspaceNameError,
    LastWorkspaceError,
    WorkspaceNotFoundError,
)
from notedeck.models.workspace import StoreDocument, Workspace, utcnow
from notedeck.validation import generate_id, sanitize_workspace_name

if TYPE_CHECKING:
    from notedeck.host.base import DocumentHost
    from notedeck.managers.data import DataStore


class WorkspaceRegistry:
    def __init__(self, data: DataStore, host: DocumentHost) -> None:
        self._data = data
        self._host = host

    # -- Mutation --------------------------------------------------------------

    async def create_workspace(self, name: str) -> Workspace:
        """Append a new empty workspace.

        Raises ``InvalidWorkspaceNameError`` / ``DuplicateWorkspaceError``.
        """
        sanitized = _clean_name(name)
        data = self._data.get_data()
        _ensure_unique(data, sanitized)

        now = utcnow()
        workspace = Workspace(id=generate_id(), name=sanitized, created_at=now, updated_at=now)
        data.workspaces.append(workspace)
        await self._data.commit(data)

        logger.info("Workspace created: {} ({})", workspace.name, workspace.id)
        return workspace

    async def rename_workspace(self, workspace_id: str, new_name: str) -> Workspace:
        sanitized = _clean_name(new_name)
        data = self._data.get_data()
        workspace = _get(data, workspace_id)
        _ensure_unique(data, sanitized, exclude_id=workspace_id)

        old_name = workspace.name
        workspace.name = sanitized
        workspace.touch()
        await self._data.commit(data)

        logger.info("Workspace renamed: {} -> {}", old_name, sanitized)
        return workspace

    async def delete_workspace(self, workspace_id: str) -> Workspace:
        """Delete a workspace and return it.

        Raises ``WorkspaceNotFoundError``, or ``LastWorkspaceError`` when it is
        the only one.  Deleting the active workspace activates the first
        surviving one.
        """
        data = self._data.get_data()
        workspace = _get(data, workspace_id)
        if len(data.workspaces) == 1:
            raise LastWorkspaceError

        data.workspaces = [w for w in data.workspaces if w.id != workspace_id]
        if data.active_workspace_id == workspace_id:
            data.active_workspace_id = data.workspaces[0].id
        await self._data.commit(data)

        logger.info("Workspace deleted: {} (active={})", workspace.name, data.active_workspace.name)
        return workspace

    async def switch_workspace(self, workspace_id: str) -> Workspace:
        data = self._data.get_data()
        workspace = _get(data, workspace_id)
        data.active_workspace_id = workspace_id
        await self._data.commit(data)

        logger.info("Switched to workspace {}", workspace.name)
        return workspace

    # -- Query -----------------------------------------------------------------

    def get_active_workspace(self) -> Workspace:
        return self._data.get_data().active_workspace

    def get_all_workspaces(self) -> list[Workspace]:
        return self._data.get_data().workspaces

    def get_workspace_by_id(self, workspace_id: str) -> Workspace | None:
        return self._data.get_data().find_workspace(workspace_id)

    async def validate_workspace_files(self, workspace_id: str) -> list[str]:
        """Paths in the workspace with no document behind them.

        Diagnostic only: slot state is not touched (see ``Reconciler`` for the
        mutating sweep).
        """
        workspace = self.get_workspace_by_id(workspace_id)
        if workspace is None:
            raise WorkspaceNotFoundError(workspace_id)
        return [slot.note_path for slot in workspace.slots if not await self._host.document_exists(slot.note_path)]


def _clean_name(name: str) -> str:
    sanitized = sanitize_workspace_name(name)
    if not sanitized:
        raise InvalidWorkspaceNameError
    return sanitized


def _get(data: StoreDocument, workspace_id: str) -> Workspace:
    workspace = data.find_workspace(workspace_id)
    if workspace is None:
        raise WorkspaceNotFoundError(workspace_id)
    return workspace


def _ensure_unique(data: StoreDocument, name: str, *, exclude_id: str | None = None) -> None:
    if any(w.name == name and w.id != exclude_id for w in data.workspaces):
        raise DuplicateWorkspaceError(name)
