"""Schema migrations for the store document.

Each step upgrades a document from exactly one source version to the next and
is registered in ``MIGRATIONS`` under its source version.  ``migrate`` walks
the chain until ``SCHEMA_VERSION`` is reached; versions without a registered
step are carried forward unchanged (identity plus version bump).
"""

from __future__ import annotations

from collections.abc import Callable

from loguru import logger

from notedeck.models.workspace import SCHEMA_VERSION, StoreDocument

Migration = Callable[[StoreDocument], StoreDocument]

MIGRATIONS: dict[int, Migration] = {}


def needs_migration(document: StoreDocument) -> bool:
    return document.schema_version != SCHEMA_VERSION


def migrate(document: StoreDocument, *, target: int = SCHEMA_VERSION) -> StoreDocument:
    """Return a copy of *document* upgraded to *target*."""
    if document.schema_version == target:
        return document

    logger.info("Migrating store from schema version {} to {}", document.schema_version, target)
    migrated = document.model_copy(deep=True)
    version = migrated.schema_version
    while version < target:
        step = MIGRATIONS.get(version)
        if step is not None:
            migrated = step(migrated)
        version += 1
        migrated.schema_version = version

    if migrated.schema_version != target:
        # Written by a newer release; keep the content, restamp the version.
        logger.warning(
            "Store schema version {} is newer than supported {}, restamping",
            migrated.schema_version,
            target,
        )
        migrated.schema_version = target
    return migrated
