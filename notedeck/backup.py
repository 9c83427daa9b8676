"""Change-detected backups of the store document.

Layout (``stem`` is the data file name without extension)::

    {backup_dir}/{stem}.backup.json                        # keep_count == 1
    {backup_dir}/{stem}.backup-20261019T101112123456Z.json # keep_count > 1

A backup is skipped when its content equals the newest existing backup once
the backup-only metadata (``backupCreatedAt``, ``backupType``) and the root
``updatedAt`` stamp are stripped -- saving an unchanged store produces no new
artifact.
"""

from __future__ import annotations

import json
from functools import partial
from pathlib import Path
from typing import Any

from anyio import to_thread
from loguru import logger

from notedeck.errors import BackupNotFoundError, StoreIOError, StoreValidationError
from notedeck.host.local import atomic_write, read_text
from notedeck.models.workspace import StoreDocument, utcnow
from notedeck.validation import InvalidStore, validate_store

BACKUP_META_FIELDS = ("backupCreatedAt", "backupType")
_VOLATILE_FIELDS = ("updatedAt",)


class BackupManager:
    def __init__(self, backup_dir: str | Path, *, stem: str = "notedeck_data", keep_count: int = 1) -> None:
        if keep_count < 1:
            msg = f"keep_count must be >= 1, got {keep_count}"
            raise ValueError(msg)
        self._dir = Path(backup_dir)
        self._stem = stem
        self.keep_count = keep_count

    @property
    def backup_dir(self) -> Path:
        return self._dir

    @property
    def rolling(self) -> bool:
        """Single rolling backup file instead of timestamped artifacts."""
        return self.keep_count == 1

    @property
    def _rolling_path(self) -> Path:
        return self._dir / f"{self._stem}.backup.json"

    def _timestamped_path(self) -> Path:
        return self._dir / f"{self._stem}.backup-{utcnow():%Y%m%dT%H%M%S%fZ}.json"

    # -- Create ----------------------------------------------------------------

    async def create_backup(self, document: StoreDocument, *, backup_type: str = "auto") -> Path | None:
        """Write a backup of *document* unless it matches the newest one.

        Returns the written path, or ``None`` when the write was skipped.
        Raises ``StoreIOError`` if the artifact cannot be written.
        """
        payload: dict[str, Any] = json.loads(document.to_json())

        previous = await self._read_latest()
        if previous is not None and _comparable(previous) == _comparable(payload):
            logger.debug("Backup skipped: content unchanged")
            return None

        payload["backupCreatedAt"] = utcnow().isoformat()
        payload["backupType"] = backup_type
        path = self._rolling_path if self.rolling else self._timestamped_path()
        try:
            await to_thread.run_sync(partial(atomic_write, path, json.dumps(payload, indent=2)))
        except OSError as exc:
            msg = f"Failed to write backup {path}: {exc}"
            raise StoreIOError(msg) from exc

        logger.info("Backup written: {}", path)
        return path

    async def _read_latest(self) -> dict[str, Any] | None:
        backups = await self.list_backups()
        if not backups:
            return None
        try:
            raw = await to_thread.run_sync(partial(read_text, backups[0]))
            parsed = json.loads(raw)
        except (OSError, ValueError):
            logger.warning("Newest backup {} is unreadable, writing a fresh one", backups[0])
            return None
        return parsed if isinstance(parsed, dict) else None

    # -- Query -----------------------------------------------------------------

    async def list_backups(self) -> list[Path]:
        """All backup artifacts, newest first."""
        return await to_thread.run_sync(self._list_sync)

    def _list_sync(self) -> list[Path]:
        if not self._dir.is_dir():
            return []
        candidates = [p for p in self._dir.glob(f"{self._stem}.backup*.json") if p.is_file()]
        return sorted(candidates, key=lambda p: (p.stat().st_mtime_ns, p.name), reverse=True)

    # -- Cleanup ---------------------------------------------------------------

    async def cleanup_old_backups(self, keep_count: int | None = None) -> list[Path]:
        """Delete timestamped backups beyond *keep_count* (newest kept).

        A no-op under the single rolling backup policy.  Returns the deleted
        paths.
        """
        if self.rolling:
            return []
        keep = self.keep_count if keep_count is None else keep_count
        backups = [p for p in await self.list_backups() if p != self._rolling_path]
        stale = backups[keep:]
        for path in stale:
            await to_thread.run_sync(partial(path.unlink, missing_ok=True))
        if stale:
            logger.info("Pruned {} old backups (keeping {})", len(stale), keep)
        return stale

    # -- Restore ---------------------------------------------------------------

    async def restore_from_backup(self, path_or_id: str | Path) -> StoreDocument:
        """Read a backup back into a store document.

        *path_or_id* is a path or a file name inside the backup directory.
        Does not touch the live store; hand the result to ``DataStore.set_data``.
        """
        path = Path(path_or_id)
        if not path.is_absolute():
            in_dir = self._dir / path
            if await to_thread.run_sync(in_dir.is_file) or not await to_thread.run_sync(path.is_file):
                path = in_dir
        try:
            raw = await to_thread.run_sync(partial(read_text, path))
        except FileNotFoundError:
            raise BackupNotFoundError(str(path_or_id)) from None
        except OSError as exc:
            msg = f"Failed to read backup {path}: {exc}"
            raise StoreIOError(msg) from exc

        result = validate_store(raw)
        if isinstance(result, InvalidStore):
            raise StoreValidationError(result.errors)
        return result.document


def _comparable(payload: dict[str, Any]) -> str:
    stripped = {k: v for k, v in payload.items() if k not in BACKUP_META_FIELDS + _VOLATILE_FIELDS}
    return json.dumps(stripped, sort_keys=True, separators=(",", ":"))
