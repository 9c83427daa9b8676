"""File watcher feeding vault notifications into the reconciler.

watchdog delivers events on its observer thread; the handler only translates
them into ``FileEvent`` values and schedules ``LocalVault.dispatch`` on the
asyncio loop, so the store is never touched off-loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from concurrent.futures import Future

from loguru import logger
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from notedeck.host.local import LocalVault
from notedeck.models.actions import FileEvent
from notedeck.models.enums import FileEventType


class VaultEventHandler(FileSystemEventHandler):
    """Translates watchdog events into vault-relative ``FileEvent``s."""

    def __init__(
        self,
        vault: LocalVault,
        loop: asyncio.AbstractEventLoop,
        ignored_paths: Iterable[str] = (),
    ) -> None:
        super().__init__()
        self._vault = vault
        self._loop = loop
        self._ignored = set(ignored_paths)

    def _to_vault_path(self, raw: bytes | str) -> str | None:
        """Vault-relative path, or ``None`` for paths the engine must not see."""
        if isinstance(raw, bytes):
            raw = raw.decode()
        rel = self._vault.relative(raw)
        if rel is None or rel == "." or rel in self._ignored:
            return None
        # Dot-directories hold our own backups and temp files
        if any(part.startswith(".") for part in rel.split("/")):
            return None
        return rel

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        src = self._to_vault_path(event.src_path)
        dest = self._to_vault_path(event.dest_path)
        if src and dest:
            self._submit(FileEvent(type=FileEventType.RENAME, path=dest, old_path=src))
        elif dest:
            self._submit(FileEvent(type=FileEventType.CREATE, path=dest))
        elif src:
            self._submit(FileEvent(type=FileEventType.DELETE, path=src))

    def on_deleted(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        path = self._to_vault_path(event.src_path)
        if path:
            self._submit(FileEvent(type=FileEventType.DELETE, path=path))

    def on_created(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        path = self._to_vault_path(event.src_path)
        if path:
            self._submit(FileEvent(type=FileEventType.CREATE, path=path))

    def _submit(self, event: FileEvent) -> Future[None]:
        logger.debug("Watcher: {} {}", event.type, event.path)
        return asyncio.run_coroutine_threadsafe(self._vault.dispatch(event), self._loop)


class VaultWatcher:
    """Watches a vault recursively and dispatches its document events."""

    def __init__(
        self,
        vault: LocalVault,
        *,
        ignored_paths: Iterable[str] = (),
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._vault = vault
        self._ignored_paths = tuple(ignored_paths)
        self._loop = loop
        self._observer: Observer | None = None
        self.handler: VaultEventHandler | None = None

    def start(self) -> None:
        """Start watching.  Must be called from within the running event loop."""
        if self.is_running():
            logger.warning("Vault watcher already running")
            return

        loop = self._loop or asyncio.get_running_loop()
        self.handler = VaultEventHandler(self._vault, loop, self._ignored_paths)
        self._observer = Observer()
        self._observer.schedule(self.handler, str(self._vault.root), recursive=True)
        self._observer.start()
        logger.info("Vault watcher started for {}", self._vault.root)

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5.0)
        self._observer = None
        logger.info("Vault watcher stopped")

    def is_running(self) -> bool:
        return self._observer is not None
