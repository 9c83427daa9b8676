"""Local filesystem document host.

A vault is a plain directory of documents::

    {root}/notes/a.md
    {root}/notedeck_data.json          <- store document
    {root}/.notedeck/backups/...       <- backups (see BackupManager)

Uses ``anyio.to_thread.run_sync`` for non-blocking file I/O.

Writes are atomic: data is written to a temporary file in the same directory,
then renamed to the target path, so a crash mid-write never leaves a
truncated store document behind.

Event notifications are not produced here: ``VaultWatcher`` (or a test)
feeds them in through ``dispatch``.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from collections.abc import Callable
from functools import partial
from pathlib import Path, PurePosixPath

from anyio import to_thread
from loguru import logger

from notedeck.errors import DocumentNotFoundError, InvalidNotePathError
from notedeck.host.base import PathHandler, RenameHandler
from notedeck.models.actions import FileEvent
from notedeck.models.enums import FileEventType
from notedeck.validation import is_valid_note_path


class LocalVault:
    """Local filesystem implementation of the DocumentHost protocol.

    ``opener`` is called with the absolute path of a document when the engine
    asks to open it (``click.launch`` from the CLI).  Without one, opening
    only records ``last_opened`` and moves the focus.
    """

    def __init__(self, root: str | Path, *, opener: Callable[[str], object] | None = None) -> None:
        self._root = Path(os.path.abspath(Path(root).expanduser()))
        self._opener = opener
        self._focused: str | None = None
        self._rename_handlers: list[RenameHandler] = []
        self._delete_handlers: list[PathHandler] = []
        self._create_handlers: list[PathHandler] = []
        self.last_opened: str | None = None

    @property
    def root(self) -> Path:
        return self._root

    # -- Paths -----------------------------------------------------------------

    def resolve(self, path: str) -> Path:
        """Absolute filesystem path for a vault-relative *path*."""
        if not is_valid_note_path(path):
            raise InvalidNotePathError(path)
        return self._root / PurePosixPath(path)

    def relative(self, path: str | os.PathLike[str]) -> str | None:
        """Vault-relative POSIX path, or ``None`` if *path* is outside the vault."""
        try:
            rel = Path(os.path.abspath(path)).relative_to(self._root)
        except ValueError:
            return None
        return rel.as_posix()

    def normalize(self, path: str) -> str:
        """Accept an absolute path inside the vault or a relative one."""
        if os.path.isabs(path):
            rel = self.relative(path)
            if rel is None:
                raise InvalidNotePathError(path)
            return rel
        return PurePosixPath(path.replace("\\", "/")).as_posix()

    # -- Focus -----------------------------------------------------------------

    def focus(self, path: str | None) -> None:
        """Set the focused document (what an editor would report as active)."""
        self._focused = self.normalize(path) if path else None

    def get_focused_document_path(self) -> str | None:
        return self._focused

    # -- Documents -------------------------------------------------------------

    async def document_exists(self, path: str) -> bool:
        try:
            full = self.resolve(path)
        except InvalidNotePathError:
            return False
        return await to_thread.run_sync(full.is_file)

    async def open_document(self, path: str) -> str:
        full = self.resolve(path)
        if not await to_thread.run_sync(full.is_file):
            raise DocumentNotFoundError(path)
        if self._opener is not None:
            await to_thread.run_sync(partial(self._opener, str(full)))
        self.last_opened = path
        self._focused = path
        logger.debug("Vault: opened {}", full)
        return str(full)

    async def read_file(self, path: str) -> str:
        return await to_thread.run_sync(partial(read_text, self.resolve(path)))

    async def write_file(self, path: str, text: str) -> None:
        await to_thread.run_sync(partial(atomic_write, self.resolve(path), text))

    # -- Events ----------------------------------------------------------------

    def on_rename(self, handler: RenameHandler) -> None:
        self._rename_handlers.append(handler)

    def on_delete(self, handler: PathHandler) -> None:
        self._delete_handlers.append(handler)

    def on_create(self, handler: PathHandler) -> None:
        self._create_handlers.append(handler)

    async def dispatch(self, event: FileEvent) -> None:
        """Deliver *event* to every registered handler, in registration order."""
        if event.type == FileEventType.RENAME:
            if event.old_path is None:
                msg = "Rename event requires old_path"
                raise ValueError(msg)
            for rename_handler in self._rename_handlers:
                await rename_handler(event.old_path, event.path)
        elif event.type == FileEventType.DELETE:
            for handler in self._delete_handlers:
                await handler(event.path)
        else:
            for handler in self._create_handlers:
                await handler(event.path)


# -- Sync helpers (run in thread pool) -----------------------------------------


def atomic_write(path: Path, data: str) -> None:
    """Write data atomically: temp file + rename.

    The temp file is created in the same directory so ``os.replace`` is
    atomic on POSIX.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise


def read_text(path: Path) -> str:
    """Read file contents.  Raises ``FileNotFoundError`` if missing."""
    return path.read_text(encoding="utf-8")
