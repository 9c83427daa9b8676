"""Component wiring.

``NoteDeck`` builds the engine leaf-first (host -> backups -> data store ->
registries -> reconciler) and owns its start/stop sequence.  The CLI and the
HTTP app each create exactly one.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import PurePosixPath

from loguru import logger

from notedeck.backup import BackupManager
from notedeck.host.base import DocumentHost
from notedeck.host.local import LocalVault
from notedeck.host.watcher import VaultWatcher
from notedeck.managers.data import DataStore
from notedeck.managers.slots import SlotRegistry
from notedeck.managers.workspaces import WorkspaceRegistry
from notedeck.reconciler import Reconciler
from notedeck.settings import NoteDeckSettings


class NoteDeck:
    def __init__(
        self,
        settings: NoteDeckSettings,
        *,
        host: DocumentHost | None = None,
        opener: Callable[[str], object] | None = None,
    ) -> None:
        self.host: DocumentHost = host or LocalVault(settings.vault_path, opener=opener)
        self.backups = BackupManager(
            settings.backup_path,
            stem=PurePosixPath(settings.data_path).stem,
            keep_count=settings.backup_keep,
        )
        self.data = DataStore(self.host, settings, self.backups)
        self.workspaces = WorkspaceRegistry(self.data, self.host)
        self.slots = SlotRegistry(self.data, self.workspaces, self.host)
        self.reconciler = Reconciler(self.host, self.data, self.workspaces, self.slots)
        self._registered = False

    @property
    def settings(self) -> NoteDeckSettings:
        return self.data.settings

    # -- Lifecycle -------------------------------------------------------------

    async def start(self, *, validate: bool = True) -> list[str]:
        """Load the store, subscribe the reconciler, and sweep the active workspace.

        Returns the missing paths found by the startup sweep.
        """
        await self.data.load()
        if not self._registered:
            self.reconciler.register()
            self._registered = True

        if not validate:
            return []
        missing = await self.reconciler.validate_all_slots()
        if missing:
            logger.warning("{} slots point at missing files: {}", len(missing), ", ".join(missing))
        return missing

    async def stop(self) -> None:
        await self.data.save()

    def create_watcher(self) -> VaultWatcher:
        """File-system watcher for a local vault; the data file is never reported."""
        if not isinstance(self.host, LocalVault):
            msg = f"Watching requires a LocalVault host, got {type(self.host).__name__}"
            raise TypeError(msg)
        return VaultWatcher(self.host, ignored_paths=[self.settings.data_path])
