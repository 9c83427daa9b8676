"""Shared test fixtures.

Every test gets its own vault under ``tmp_path`` with a few real documents,
so the engine runs against the real ``LocalVault`` and real file I/O.  No
mocking of the file system.
"""

from __future__ import annotations

import sys
from collections.abc import Awaitable, Callable, Iterator
from pathlib import Path

import pytest
from loguru import logger

from notedeck.deck import NoteDeck
from notedeck.host.local import LocalVault
from notedeck.models.workspace import Slot
from notedeck.settings import NoteDeckSettings, get_settings

DOCUMENTS = ("notes/a.md", "notes/b.md", "notes/c.md", "journal/today.md")

AddNote = Callable[..., Awaitable[Slot]]


@pytest.fixture(autouse=True)
def _isolate_process_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep env-driven settings and loguru sinks from leaking between tests."""
    for key in ("NOTEDECK_VAULT_ROOT", "NOTEDECK_LOG_LEVEL", "NOTEDECK_WATCH"):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    logger.remove()
    logger.add(sys.stderr, level="WARNING")


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    """A vault directory holding the documents in ``DOCUMENTS``."""
    root = tmp_path / "vault"
    for rel in DOCUMENTS:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"# {rel}\n", encoding="utf-8")
    return root


@pytest.fixture
def settings(vault: Path) -> NoteDeckSettings:
    return NoteDeckSettings(vault_root=str(vault), auto_remove_missing=False)


@pytest.fixture
async def deck(settings: NoteDeckSettings) -> NoteDeck:
    """A started deck on a fresh vault (default store, one empty workspace)."""
    deck = NoteDeck(settings)
    await deck.start()
    return deck


@pytest.fixture
def local_vault(deck: NoteDeck) -> LocalVault:
    assert isinstance(deck.host, LocalVault)
    return deck.host


@pytest.fixture
def add_note(deck: NoteDeck, local_vault: LocalVault) -> AddNote:
    """Focus *path* in the vault, then bind it as the user would."""

    async def _add(path: str, slot_index: int | None = None) -> Slot:
        local_vault.focus(path)
        return await deck.slots.add_current_note(slot_index)

    return _add
