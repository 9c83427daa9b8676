"""Workspace endpoints (RPC-style).

All write operations use POST; reads use GET.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from notedeck.deps import Deck, translate_errors
from notedeck.models.api import MissingFilesResponse, WorkspaceCreate, WorkspaceRename
from notedeck.models.workspace import Workspace

router = APIRouter(prefix="/workspaces", tags=["workspaces"])


@router.get("/list", response_model=list[Workspace])
async def list_workspaces(deck: Deck) -> list[Workspace]:
    """List all workspaces in store order."""
    return deck.workspaces.get_all_workspaces()


@router.get("/active", response_model=Workspace)
async def get_active_workspace(deck: Deck) -> Workspace:
    return deck.workspaces.get_active_workspace()


@router.post("/create", response_model=Workspace, status_code=status.HTTP_201_CREATED)
async def create_workspace(body: WorkspaceCreate, deck: Deck) -> Workspace:
    with translate_errors():
        return await deck.workspaces.create_workspace(body.name)


@router.get("/{workspace_id}/get", response_model=Workspace)
async def get_workspace(workspace_id: str, deck: Deck) -> Workspace:
    workspace = deck.workspaces.get_workspace_by_id(workspace_id)
    if workspace is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"Workspace '{workspace_id}' not found.")
    return workspace


@router.post("/{workspace_id}/rename", response_model=Workspace)
async def rename_workspace(workspace_id: str, body: WorkspaceRename, deck: Deck) -> Workspace:
    with translate_errors():
        return await deck.workspaces.rename_workspace(workspace_id, body.name)


@router.post("/{workspace_id}/switch", response_model=Workspace)
async def switch_workspace(workspace_id: str, deck: Deck) -> Workspace:
    with translate_errors():
        return await deck.workspaces.switch_workspace(workspace_id)


@router.post("/{workspace_id}/delete", status_code=status.HTTP_204_NO_CONTENT)
async def delete_workspace(workspace_id: str, deck: Deck) -> None:
    """Delete a workspace.  The last remaining workspace cannot be deleted (409)."""
    with translate_errors():
        await deck.workspaces.delete_workspace(workspace_id)


@router.get("/{workspace_id}/validate", response_model=MissingFilesResponse)
async def validate_workspace(workspace_id: str, deck: Deck) -> MissingFilesResponse:
    """Report paths with no document behind them, without changing slot state."""
    with translate_errors():
        missing = await deck.workspaces.validate_workspace_files(workspace_id)
    return MissingFilesResponse(missing=missing)
