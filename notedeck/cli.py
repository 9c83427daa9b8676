from __future__ import annotations

import asyncio
import os
from collections.abc import Awaitable, Callable
from typing import IO, TypeVar

import click

from notedeck.deck import NoteDeck
from notedeck.errors import NoteDeckError, WorkspaceNotFoundError
from notedeck.host.local import LocalVault
from notedeck.log import setup_logging
from notedeck.models.workspace import Workspace
from notedeck.settings import NoteDeckSettings, get_settings

T = TypeVar("T")

# Slot numbers on the command line are 1-based, as shown by ``slot list``.
SLOT_NUMBER = click.IntRange(min=1)


@click.group()
@click.option(
    "--vault",
    type=click.Path(file_okay=False),
    default=None,
    help="Vault directory (default: from NOTEDECK_VAULT_ROOT or the current directory).",
)
@click.option("--log-level", default=None, help="Log level (default: from NOTEDECK_LOG_LEVEL or INFO).")
@click.pass_context
def main(ctx: click.Context, vault: str | None, log_level: str | None) -> None:
    """notedeck - numbered document bookmarks grouped into workspaces."""
    changes: dict[str, object] = {}
    if vault is not None:
        changes["vault_root"] = vault
    if log_level is not None:
        changes["log_level"] = log_level

    settings = get_settings()
    if changes:
        settings = settings.with_changes(**changes)
    setup_logging(settings.log_level, compact=True)
    ctx.obj = settings


def _run(
    settings: NoteDeckSettings,
    action: Callable[[NoteDeck], Awaitable[T]],
    *,
    validate: bool = False,
    opener: Callable[[str], object] | None = None,
) -> T:
    """Start a deck, run *action* against it, and map domain errors to exit code 1."""

    async def _main() -> T:
        deck = NoteDeck(settings, opener=opener)
        await deck.start(validate=validate)
        return await action(deck)

    try:
        return asyncio.run(_main())
    except NoteDeckError as exc:
        raise click.ClickException(str(exc)) from exc


def _resolve_workspace(deck: NoteDeck, ref: str) -> Workspace:
    """Look a workspace up by id, then by exact name."""
    workspace = deck.workspaces.get_workspace_by_id(ref)
    if workspace is not None:
        return workspace
    for candidate in deck.workspaces.get_all_workspaces():
        if candidate.name == ref:
            return candidate
    raise WorkspaceNotFoundError(ref)


# ---------------------------------------------------------------------------
# Workspaces
# ---------------------------------------------------------------------------


@main.group()
def workspace() -> None:
    """Create, rename, delete and switch workspaces."""


@workspace.command("list")
@click.pass_obj
def workspace_list(settings: NoteDeckSettings) -> None:
    """List workspaces; the active one is marked with '*'."""

    async def action(deck: NoteDeck) -> None:
        active_id = deck.workspaces.get_active_workspace().id
        for ws in deck.workspaces.get_all_workspaces():
            marker = "*" if ws.id == active_id else " "
            click.echo(f"{marker} {ws.name}  ({ws.id}, {len(ws.slots)} slots)")

    _run(settings, action)


@workspace.command("create")
@click.argument("name")
@click.pass_obj
def workspace_create(settings: NoteDeckSettings, name: str) -> None:
    async def action(deck: NoteDeck) -> None:
        ws = await deck.workspaces.create_workspace(name)
        click.echo(f"Created workspace {ws.name} ({ws.id})")

    _run(settings, action)


@workspace.command("rename")
@click.argument("ref")
@click.argument("name")
@click.pass_obj
def workspace_rename(settings: NoteDeckSettings, ref: str, name: str) -> None:
    """Rename the workspace REF (id or name) to NAME."""

    async def action(deck: NoteDeck) -> None:
        ws = await deck.workspaces.rename_workspace(_resolve_workspace(deck, ref).id, name)
        click.echo(f"Renamed workspace to {ws.name}")

    _run(settings, action)


@workspace.command("delete")
@click.argument("ref")
@click.pass_obj
def workspace_delete(settings: NoteDeckSettings, ref: str) -> None:
    async def action(deck: NoteDeck) -> None:
        ws = await deck.workspaces.delete_workspace(_resolve_workspace(deck, ref).id)
        active = deck.workspaces.get_active_workspace()
        click.echo(f"Deleted workspace {ws.name} (active: {active.name})")

    _run(settings, action)


@workspace.command("switch")
@click.argument("ref")
@click.pass_obj
def workspace_switch(settings: NoteDeckSettings, ref: str) -> None:
    async def action(deck: NoteDeck) -> None:
        ws = await deck.workspaces.switch_workspace(_resolve_workspace(deck, ref).id)
        click.echo(f"Switched to workspace {ws.name}")

    _run(settings, action)


# ---------------------------------------------------------------------------
# Slots (active workspace)
# ---------------------------------------------------------------------------


@main.group()
def slot() -> None:
    """Bind, unbind and open the slots of the active workspace."""


@slot.command("list")
@click.pass_obj
def slot_list(settings: NoteDeckSettings) -> None:
    async def action(deck: NoteDeck) -> None:
        slots = deck.slots.get_slots()
        if not slots:
            click.echo("No slots")
            return
        for number, s in enumerate(slots, start=1):
            suffix = "  [missing]" if s.is_missing else ""
            click.echo(f"{number}. {s.note_path}{suffix}")

    _run(settings, action)


@slot.command("add")
@click.argument("path")
@click.option("--slot", "number", type=SLOT_NUMBER, default=None, help="Insert at this slot number.")
@click.pass_obj
def slot_add(settings: NoteDeckSettings, path: str, number: int | None) -> None:
    """Bind the document PATH (relative to the vault) to a slot."""

    async def action(deck: NoteDeck) -> None:
        if not isinstance(deck.host, LocalVault):
            msg = f"Adding by path requires a LocalVault host, got {type(deck.host).__name__}"
            raise click.ClickException(msg)
        deck.host.focus(path)
        index = None if number is None else number - 1
        added = await deck.slots.add_current_note(index)
        position = deck.slots.get_slots().index(added) + 1
        click.echo(f"Added {added.note_path} to slot {position}")

    _run(settings, action)


@slot.command("remove")
@click.argument("number", type=SLOT_NUMBER)
@click.pass_obj
def slot_remove(settings: NoteDeckSettings, number: int) -> None:
    async def action(deck: NoteDeck) -> None:
        removed = await deck.slots.remove_note(number - 1)
        click.echo(f"Removed {removed.note_path} from slot {number}")

    _run(settings, action)


@slot.command("goto")
@click.argument("number", type=SLOT_NUMBER)
@click.option("--print", "print_only", is_flag=True, default=False, help="Print the path instead of opening it.")
@click.pass_obj
def slot_goto(settings: NoteDeckSettings, number: int, print_only: bool) -> None:
    """Open the document bound to slot NUMBER with the system default application."""

    async def action(deck: NoteDeck) -> str:
        return await deck.slots.goto_slot(number - 1)

    opened = _run(settings, action, opener=None if print_only else click.launch)
    if print_only:
        click.echo(opened)


# ---------------------------------------------------------------------------
# Maintenance
# ---------------------------------------------------------------------------


@main.command()
@click.pass_obj
def validate(settings: NoteDeckSettings) -> None:
    """Check every slot of the active workspace and flag missing documents."""

    async def action(deck: NoteDeck) -> list[str]:
        return await deck.reconciler.validate_all_slots()

    missing = _run(settings, action)
    if not missing:
        click.echo("All slots OK")
        return
    for path in missing:
        click.echo(f"missing: {path}")


@main.command()
@click.pass_obj
def cleanup(settings: NoteDeckSettings) -> None:
    """Remove every slot whose document no longer exists."""

    async def action(deck: NoteDeck) -> int:
        return await deck.reconciler.cleanup_missing_files()

    removed = _run(settings, action)
    click.echo(f"Removed {removed} missing slots")


@main.command("export")
@click.option("--output", "-o", type=click.File("w", encoding="utf-8"), default="-", help="Output file (default: stdout).")
@click.pass_obj
def export_cmd(settings: NoteDeckSettings, output: IO[str]) -> None:
    """Write the full store document as JSON."""

    async def action(deck: NoteDeck) -> str:
        return deck.data.export_data()

    output.write(_run(settings, action) + "\n")


@main.command("import")
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.pass_obj
def import_cmd(settings: NoteDeckSettings, source: IO[str]) -> None:
    """Replace the store with an exported document."""
    text = source.read()

    async def action(deck: NoteDeck) -> int:
        document = await deck.data.import_data(text)
        return len(document.workspaces)

    count = _run(settings, action)
    click.echo(f"Imported {count} workspaces")


@main.command()
@click.confirmation_option(prompt="Replace all workspaces and slots with the default store?")
@click.pass_obj
def reset(settings: NoteDeckSettings) -> None:
    async def action(deck: NoteDeck) -> None:
        await deck.data.reset_to_default()

    _run(settings, action)
    click.echo("Data reset to default")


# ---------------------------------------------------------------------------
# Backups
# ---------------------------------------------------------------------------


@main.group()
def backup() -> None:
    """List, create and restore store backups."""


@backup.command("list")
@click.pass_obj
def backup_list(settings: NoteDeckSettings) -> None:
    async def action(deck: NoteDeck) -> list[str]:
        return [p.name for p in await deck.backups.list_backups()]

    names = _run(settings, action)
    if not names:
        click.echo("No backups")
    for name in names:
        click.echo(name)


@backup.command("create")
@click.pass_obj
def backup_create(settings: NoteDeckSettings) -> None:
    """Back up the current store now (skipped if nothing changed)."""

    async def action(deck: NoteDeck) -> str | None:
        path = await deck.backups.create_backup(deck.data.get_data(), backup_type="manual")
        await deck.backups.cleanup_old_backups()
        return None if path is None else path.name

    name = _run(settings, action)
    click.echo(f"Backup written: {name}" if name else "Backup skipped: content unchanged")


@backup.command("restore")
@click.argument("name")
@click.pass_obj
def backup_restore(settings: NoteDeckSettings, name: str) -> None:
    """Replace the store with the backup NAME (a file name from 'backup list' or a path)."""

    async def action(deck: NoteDeck) -> None:
        document = await deck.backups.restore_from_backup(name)
        await deck.data.commit(document)

    _run(settings, action)
    click.echo(f"Restored {name}")


# ---------------------------------------------------------------------------
# Long-running
# ---------------------------------------------------------------------------


@main.command()
@click.pass_obj
def watch(settings: NoteDeckSettings) -> None:
    """Track renames and deletes in the vault until interrupted."""

    async def _watch() -> None:
        deck = NoteDeck(settings)
        await deck.start(validate=False)
        # Catch up on changes made while nothing was watching.
        await deck.reconciler.handle_vault_change()

        watcher = deck.create_watcher()
        watcher.start()
        click.echo(f"Watching {settings.vault_path} (Ctrl+C to stop)")
        try:
            await asyncio.Event().wait()
        finally:
            watcher.stop()
            await deck.stop()

    try:
        asyncio.run(_watch())
    except KeyboardInterrupt:
        pass
    except NoteDeckError as exc:
        raise click.ClickException(str(exc)) from exc


@main.command()
@click.option("--host", default=None, help="Bind host (default: from NOTEDECK_HOST or 127.0.0.1).")
@click.option("--port", default=None, type=int, help="Bind port (default: from NOTEDECK_PORT or 8765).")
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload for development.")
@click.pass_obj
def serve(settings: NoteDeckSettings, host: str | None, port: int | None, reload: bool) -> None:
    """Start the HTTP control API."""
    import uvicorn

    # The app reads its settings from the environment; carry CLI overrides over.
    os.environ["NOTEDECK_VAULT_ROOT"] = settings.vault_root
    os.environ["NOTEDECK_LOG_LEVEL"] = settings.log_level
    get_settings.cache_clear()

    uvicorn.run(
        "notedeck.app:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level="warning",  # uvicorn's own logging is intercepted by loguru
    )


if __name__ == "__main__":
    main()
