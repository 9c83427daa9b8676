"""Configuration loaded from NOTEDECK_* environment variables."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class NoteDeckSettings(BaseSettings):
    """notedeck settings.

    All fields are read from environment variables with the ``NOTEDECK_``
    prefix.  For example, ``NOTEDECK_MAX_SLOTS=5`` maps to ``max_slots``.

    Settings are process-wide and are **not** part of the persisted store
    document.
    """

    model_config = SettingsConfigDict(
        env_prefix="NOTEDECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"

    # -- Vault -----------------------------------------------------------------
    vault_root: str = "."
    """Directory holding the bookmarked documents (the host's document store)."""

    data_path: str = "notedeck_data.json"
    """Store document location, relative to ``vault_root``."""

    # -- Slots -----------------------------------------------------------------
    max_slots: int = Field(default=9, ge=1)
    auto_remove_missing: bool = True
    """Drop slots as soon as their document is deleted, instead of only marking them."""

    # -- Backups ---------------------------------------------------------------
    auto_backup: bool = False
    backup_dir: str = ".notedeck/backups"
    """Relative to ``vault_root`` unless absolute."""

    backup_keep: int = Field(default=1, ge=1)
    """1 keeps a single rolling backup; more keeps that many timestamped ones."""

    # -- Server ----------------------------------------------------------------
    watch: bool = True
    """Run the file-system watcher inside ``notedeck serve``."""

    host: str = "127.0.0.1"
    port: int = 8765

    # -- Helpers ---------------------------------------------------------------

    @property
    def vault_path(self) -> Path:
        return Path(self.vault_root).expanduser()

    @property
    def backup_path(self) -> Path:
        path = Path(self.backup_dir).expanduser()
        return path if path.is_absolute() else self.vault_path / path

    def with_changes(self, **changes: object) -> NoteDeckSettings:
        """Return a validated copy with *changes* applied."""
        return NoteDeckSettings.model_validate({**self.model_dump(), **changes})


@lru_cache(maxsize=1)
def get_settings() -> NoteDeckSettings:
    """Return a cached settings instance.

    Call ``get_settings.cache_clear()`` in tests to force a re-read after
    overriding env vars.
    """
    return NoteDeckSettings()
