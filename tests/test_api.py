"""HTTP control API tests.

The app lifespan does NOT run under ``ASGITransport``, so the fixture wires a
started ``NoteDeck`` into ``app.state`` directly.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from notedeck.app import app
from notedeck.deck import NoteDeck


@pytest.fixture
async def client(deck: NoteDeck) -> AsyncIterator[AsyncClient]:
    app.state.deck = deck
    app.state.watcher = None

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.state.deck = None


async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


async def test_not_started_is_503() -> None:
    app.state.deck = None
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        resp = await ac.get("/api/slots/list")
    assert resp.status_code == 503


# ---------------------------------------------------------------------------
# Workspaces
# ---------------------------------------------------------------------------


async def test_workspace_lifecycle(client: AsyncClient) -> None:
    """Exercise create -> get -> rename -> switch -> delete in one test."""
    resp = await client.post("/api/workspaces/create", json={"name": "Research"})
    assert resp.status_code == 201
    ws = resp.json()
    ws_id = ws["id"]
    assert ws["name"] == "Research"
    assert ws["slots"] == []
    assert "createdAt" in ws

    resp = await client.get(f"/api/workspaces/{ws_id}/get")
    assert resp.status_code == 200
    assert resp.json()["id"] == ws_id

    resp = await client.post(f"/api/workspaces/{ws_id}/rename", json={"name": "Deep Research"})
    assert resp.status_code == 200
    assert resp.json()["name"] == "Deep Research"

    resp = await client.post(f"/api/workspaces/{ws_id}/switch")
    assert resp.status_code == 200
    resp = await client.get("/api/workspaces/active")
    assert resp.json()["id"] == ws_id

    resp = await client.get("/api/workspaces/list")
    assert [w["name"] for w in resp.json()] == ["Default Workspace", "Deep Research"]

    resp = await client.post(f"/api/workspaces/{ws_id}/delete")
    assert resp.status_code == 204
    resp = await client.get(f"/api/workspaces/{ws_id}/get")
    assert resp.status_code == 404


async def test_workspace_errors(client: AsyncClient) -> None:
    resp = await client.post("/api/workspaces/create", json={"name": "Default Workspace"})
    assert resp.status_code == 409

    resp = await client.post("/api/workspaces/create", json={"name": "  "})
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Workspace name cannot be empty"

    active_id = (await client.get("/api/workspaces/active")).json()["id"]
    resp = await client.post(f"/api/workspaces/{active_id}/delete")
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Cannot delete the last workspace"

    resp = await client.post("/api/workspaces/ghost/switch")
    assert resp.status_code == 404


async def test_workspace_validate(client: AsyncClient, vault: Path) -> None:
    await client.post("/api/slots/add", json={"note_path": "notes/a.md"})
    (vault / "notes" / "a.md").unlink()
    active_id = (await client.get("/api/workspaces/active")).json()["id"]

    resp = await client.get(f"/api/workspaces/{active_id}/validate")
    assert resp.status_code == 200
    assert resp.json() == {"missing": ["notes/a.md"]}


# ---------------------------------------------------------------------------
# Slots
# ---------------------------------------------------------------------------


async def test_slot_add_remove_undo(client: AsyncClient) -> None:
    resp = await client.post("/api/slots/add", json={"note_path": "notes/a.md"})
    assert resp.status_code == 201
    assert resp.json()["notePath"] == "notes/a.md"

    resp = await client.post("/api/slots/add", json={"note_path": "notes/a.md"})
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Note already exists in slot 1"

    resp = await client.post("/api/slots/add", json={"note_path": "notes/b.md", "slot_index": 0})
    assert resp.status_code == 201

    resp = await client.get("/api/slots/list")
    assert [s["notePath"] for s in resp.json()] == ["notes/b.md", "notes/a.md"]

    resp = await client.get("/api/slots/1/get")
    assert resp.json()["notePath"] == "notes/a.md"
    resp = await client.get("/api/slots/5/get")
    assert resp.status_code == 404

    resp = await client.post("/api/slots/0/remove")
    assert resp.status_code == 200
    assert resp.json()["notePath"] == "notes/b.md"

    resp = await client.post("/api/slots/undo")
    assert resp.status_code == 200
    assert resp.json()["undone"]["type"] == "remove"

    resp = await client.get("/api/slots/list")
    assert [s["notePath"] for s in resp.json()] == ["notes/a.md", "notes/b.md"]

    resp = await client.post("/api/slots/undo")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "No action to undo"


async def test_slot_add_without_focus(client: AsyncClient) -> None:
    resp = await client.post("/api/slots/add", json={})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "No active file"


async def test_slot_add_invalid_index(client: AsyncClient) -> None:
    resp = await client.post("/api/slots/add", json={"note_path": "notes/a.md", "slot_index": 9})
    assert resp.status_code == 404


async def test_goto(client: AsyncClient, vault: Path) -> None:
    await client.post("/api/slots/add", json={"note_path": "notes/a.md"})

    resp = await client.post("/api/slots/0/goto")
    assert resp.status_code == 200
    assert resp.json() == {"note_path": "notes/a.md", "opened": str(vault / "notes" / "a.md")}

    (vault / "notes" / "a.md").unlink()
    resp = await client.post("/api/slots/0/goto")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "File not found: notes/a.md"

    resp = await client.post("/api/slots/3/goto")
    assert resp.status_code == 404


async def test_validate_and_cleanup(client: AsyncClient, vault: Path) -> None:
    for path in ("notes/a.md", "notes/b.md"):
        await client.post("/api/slots/add", json={"note_path": path})
    (vault / "notes" / "b.md").unlink()

    resp = await client.post("/api/slots/validate")
    assert resp.json() == {"missing": ["notes/b.md"]}
    resp = await client.get("/api/slots/list")
    assert resp.json()[1]["isMissing"] is True

    resp = await client.post("/api/slots/cleanup")
    assert resp.json() == {"removed": 1}
    resp = await client.get("/api/slots/list")
    assert [s["notePath"] for s in resp.json()] == ["notes/a.md"]


# ---------------------------------------------------------------------------
# Data
# ---------------------------------------------------------------------------


async def test_export_import_reset(client: AsyncClient) -> None:
    await client.post("/api/workspaces/create", json={"name": "Kept"})

    resp = await client.get("/api/data/export")
    assert resp.status_code == 200
    exported = resp.text
    assert [w["name"] for w in resp.json()["workspaces"]] == ["Default Workspace", "Kept"]

    resp = await client.post("/api/data/reset")
    assert resp.status_code == 200
    assert [w["name"] for w in resp.json()["workspaces"]] == ["Default Workspace"]

    resp = await client.post("/api/data/import", json={"content": exported})
    assert resp.status_code == 200
    assert [w["name"] for w in resp.json()["workspaces"]] == ["Default Workspace", "Kept"]

    resp = await client.post("/api/data/import", json={"content": '{"schemaVersion": 1}'})
    assert resp.status_code == 422
    assert isinstance(resp.json()["detail"], list)
