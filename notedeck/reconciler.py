"""Keeps slot bindings in step with the documents they point at.

Handlers react to the host's rename / delete / create notifications for the
active workspace.  Saving the store can itself produce file-system events, so
the reconciler runs a two-state machine: while one notification is being
handled (``HANDLING``) any other notification is dropped instead of being
processed recursively.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from loguru import logger

from notedeck.models.enums import ReconcilerState

if TYPE_CHECKING:
    from notedeck.host.base import DocumentHost
    from notedeck.managers.data import DataStore
    from notedeck.managers.slots import SlotRegistry
    from notedeck.managers.workspaces import WorkspaceRegistry


class Reconciler:
    def __init__(
        self,
        host: DocumentHost,
        data: DataStore,
        workspaces: WorkspaceRegistry,
        slots: SlotRegistry,
    ) -> None:
        self._host = host
        self._data = data
        self._workspaces = workspaces
        self._slots = slots
        self.state = ReconcilerState.IDLE

    def register(self) -> None:
        """Subscribe the handlers to the host's notifications."""
        self._host.on_rename(self.handle_rename)
        self._host.on_delete(self.handle_delete)
        self._host.on_create(self.handle_create)

    # -- Event handlers --------------------------------------------------------

    async def handle_rename(self, old_path: str, new_path: str) -> None:
        await self._guarded("rename", self._rebind, old_path, new_path)

    async def handle_delete(self, path: str) -> None:
        await self._guarded("delete", self._mark_missing, path)

    async def handle_create(self, path: str) -> None:
        await self._guarded("create", self._recover, path)

    async def _guarded(self, event: str, handler: Callable[..., Awaitable[None]], *paths: str) -> None:
        if self.state == ReconcilerState.HANDLING:
            logger.debug("Reconciler: dropping nested {} event for {}", event, paths)
            return

        self.state = ReconcilerState.HANDLING
        try:
            await handler(*paths)
        except Exception:
            # The event source must keep running; the next sweep repairs state.
            logger.exception("Reconciler: error handling {} event for {}", event, paths)
        finally:
            self.state = ReconcilerState.IDLE

    async def _rebind(self, old_path: str, new_path: str) -> None:
        # Legacy data may hold duplicates: every match moves with the file.
        matches = [s for s in self._slots.get_slots() if s.note_path == old_path]
        for slot in matches:
            await self._slots.update_slot_path(slot.id, new_path)
        if matches:
            logger.info("Updated slot path from {} to {}", old_path, new_path)

    async def _mark_missing(self, path: str) -> None:
        matches = [s for s in self._slots.get_slots() if s.note_path == path]
        if not matches:
            return
        for slot in matches:
            await self._slots.mark_slot_missing(slot.id, True)
        logger.info("Marked slot as missing: {}", path)

        # Only this event's slots; older missing slots wait for an explicit cleanup.
        if self._data.settings.auto_remove_missing:
            await self._slots.remove_missing_slots(only={s.id for s in matches})

    async def _recover(self, path: str) -> None:
        for slot in self._slots.get_slots():
            if slot.note_path == path and slot.is_missing:
                await self._slots.mark_slot_missing(slot.id, False)
                logger.info("Recovered missing file: {}", path)

    # -- Sweeps ----------------------------------------------------------------

    async def validate_all_slots(self) -> list[str]:
        """Check every slot of the active workspace against the host.

        Marks newly-missing slots, recovers slots whose document is back, and
        returns the missing paths.  Slots whose state is already correct are
        not written, so a repeated sweep is a no-op.
        """
        missing: list[str] = []
        for slot in self._slots.get_slots():
            if not await self._host.document_exists(slot.note_path):
                missing.append(slot.note_path)
                if not slot.is_missing:
                    await self._slots.mark_slot_missing(slot.id, True)
            elif slot.is_missing:
                await self._slots.mark_slot_missing(slot.id, False)
        return missing

    async def cleanup_missing_files(self) -> int:
        """Sweep, then remove every missing slot regardless of settings."""
        missing = await self.validate_all_slots()
        if not missing:
            return 0
        removed = await self._slots.remove_missing_slots()
        return len(removed)

    async def handle_vault_change(self) -> list[str]:
        """Sweep after the vault changed unobserved; auto-remove if enabled."""
        missing = await self.validate_all_slots()
        if missing:
            logger.info("Found {} missing files after vault change", len(missing))
            if self._data.settings.auto_remove_missing:
                removed = await self._slots.remove_missing_slots()
                logger.info("Auto-removed {} missing slots", len(removed))
        return missing
