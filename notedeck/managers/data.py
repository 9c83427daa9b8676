"""Data store -- sole owner of the persisted store document.

Every other component works on copies: ``get_data`` hands out a deep copy,
callers mutate it and hand the full replacement back through ``commit``
(validate, swap, save).  Nothing outside this module ever holds a live
reference to the in-memory document.

Load never fails because of bad data: a missing, unparsable or invalid file
is replaced by the default store (one empty workspace) and persisted.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from loguru import logger

from notedeck.errors import StoreIOError, StoreValidationError
from notedeck.migrations import migrate, needs_migration
from notedeck.models.workspace import (
    DEFAULT_WORKSPACE_NAME,
    SCHEMA_VERSION,
    StoreDocument,
    Workspace,
    utcnow,
)
from notedeck.validation import InvalidStore, generate_id, validate_store

if TYPE_CHECKING:
    from notedeck.backup import BackupManager
    from notedeck.host.base import DocumentHost
    from notedeck.settings import NoteDeckSettings


def create_default_data() -> StoreDocument:
    """A fresh store: one empty workspace, active."""
    now = utcnow()
    workspace = Workspace(id=generate_id(), name=DEFAULT_WORKSPACE_NAME, created_at=now, updated_at=now)
    return StoreDocument(
        schema_version=SCHEMA_VERSION,
        active_workspace_id=workspace.id,
        workspaces=[workspace],
    )


class DataStore:
    """Reads, validates, migrates and writes the store document."""

    def __init__(
        self,
        host: DocumentHost,
        settings: NoteDeckSettings,
        backups: BackupManager | None = None,
    ) -> None:
        self._host = host
        self._settings = settings
        self._backups = backups
        self._data = create_default_data()
        # One write at a time; see save().
        self._write_lock = asyncio.Lock()

    @property
    def settings(self) -> NoteDeckSettings:
        return self._settings

    @property
    def backups(self) -> BackupManager | None:
        return self._backups

    # -- Load ------------------------------------------------------------------

    async def load(self) -> StoreDocument:
        """Load the data file, falling back to (and persisting) defaults."""
        path = self._settings.data_path
        try:
            raw = await self._host.read_file(path)
        except FileNotFoundError:
            logger.info("No data file at {}, creating default data", path)
            await self._persist_default()
            return self.get_data()
        except OSError as exc:
            logger.error("Failed to read data file {}: {}", path, exc)
            await self._persist_default()
            return self.get_data()

        result = validate_store(raw)
        if isinstance(result, InvalidStore):
            logger.warning("Invalid data in {}, creating default data: {}", path, "; ".join(result.errors))
            await self._persist_default()
            return self.get_data()

        document = result.document
        if needs_migration(document):
            self._data = migrate(document)
            await self._save_during_load()
        else:
            self._data = document

        logger.info(
            "Data loaded from {} ({} workspaces, {} slots, active={})",
            path,
            len(self._data.workspaces),
            sum(len(w.slots) for w in self._data.workspaces),
            self._data.active_workspace.name,
        )
        return self.get_data()

    async def _persist_default(self) -> None:
        self._data = create_default_data()
        await self._save_during_load()

    async def _save_during_load(self) -> None:
        # The in-memory store stays usable even if the vault is read-only.
        try:
            await self.save()
        except StoreIOError:
            logger.exception("Failed to persist data while loading")

    # -- Save ------------------------------------------------------------------

    async def save(self) -> None:
        """Stamp ``updatedAt`` and write the document.

        Raises ``StoreIOError`` if the write fails; the in-memory document is
        left as it was.  Backup failures are logged, never raised.

        Writes are serialized.  A document committed while an earlier write
        is in flight is not replaced by that earlier copy; its own save
        follows and writes it.
        """
        async with self._write_lock:
            source = self._data
            document = source.model_copy(deep=True)
            document.updated_at = utcnow()
            path = self._settings.data_path
            try:
                await self._host.write_file(path, document.to_json())
            except OSError as exc:
                msg = f"Failed to save data to {path}: {exc}"
                raise StoreIOError(msg) from exc

            if self._data is not source:
                logger.debug("Data changed during save to {}, newer save pending", path)
                return
            self._data = document
            logger.debug(
                "Data saved to {} ({} workspaces, active={})",
                path,
                len(document.workspaces),
                document.active_workspace_id,
            )

            if self._settings.auto_backup and self._backups is not None:
                await self._backup(self._backups, document)

    async def _backup(self, backups: BackupManager, document: StoreDocument) -> None:
        try:
            await backups.create_backup(document)
            await backups.cleanup_old_backups(self._settings.backup_keep)
        except OSError:
            logger.exception("Backup failed, continuing without backup")

    # -- Copies in / out -------------------------------------------------------

    def get_data(self) -> StoreDocument:
        return self._data.model_copy(deep=True)

    def set_data(self, data: StoreDocument) -> None:
        """Replace the in-memory document.  Raises ``StoreValidationError``."""
        result = validate_store(data)
        if isinstance(result, InvalidStore):
            raise StoreValidationError(result.errors)
        self._data = result.document

    async def commit(self, data: StoreDocument) -> None:
        """Replace the document with *data* and persist it."""
        self.set_data(data)
        await self.save()

    # -- Transfer --------------------------------------------------------------

    def export_data(self) -> str:
        return self._data.to_json()

    async def import_data(self, text: str) -> StoreDocument:
        """Validate, migrate and install an exported document, then save."""
        result = validate_store(text)
        if isinstance(result, InvalidStore):
            raise StoreValidationError(result.errors)
        self._data = migrate(result.document)
        await self.save()
        logger.info("Data imported ({} workspaces)", len(self._data.workspaces))
        return self.get_data()

    async def reset_to_default(self) -> StoreDocument:
        self._data = create_default_data()
        await self.save()
        logger.info("Data reset to default")
        return self.get_data()

    # -- Settings --------------------------------------------------------------

    async def update_settings(self, **changes: object) -> NoteDeckSettings:
        """Apply setting changes.

        Changing ``data_path`` writes the current document to the new location;
        a failure there is logged and the new path is kept.
        """
        old_path = self._settings.data_path
        self._settings = self._settings.with_changes(**changes)
        if self._backups is not None:
            self._backups.keep_count = self._settings.backup_keep

        if self._settings.data_path != old_path:
            logger.info("Moving data from {} to {}", old_path, self._settings.data_path)
            try:
                await self.save()
            except StoreIOError:
                logger.exception("Failed to move data file")
        return self._settings
