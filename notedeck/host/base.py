"""Document host interface.

The host is the environment that owns the bookmarked documents: it knows
which document is focused, whether a path exists, how to open it, and it
emits notifications when documents are renamed, deleted or created.  The
store document itself is read and written through the host as well.

All paths crossing this interface are host-relative POSIX strings
(``notes/a.md``).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Protocol, runtime_checkable

RenameHandler = Callable[[str, str], Awaitable[None]]
"""``handler(old_path, new_path)``"""

PathHandler = Callable[[str], Awaitable[None]]
"""``handler(path)``"""


@runtime_checkable
class DocumentHost(Protocol):
    """Async protocol consumed by the consistency engine."""

    def get_focused_document_path(self) -> str | None:
        """Path of the currently focused document, or ``None``."""
        ...

    async def document_exists(self, path: str) -> bool: ...

    async def open_document(self, path: str) -> str:
        """Open *path* in the host.  Returns an opaque handle."""
        ...

    def on_rename(self, handler: RenameHandler) -> None: ...

    def on_delete(self, handler: PathHandler) -> None: ...

    def on_create(self, handler: PathHandler) -> None: ...

    async def read_file(self, path: str) -> str:
        """Read a text file.  Raises ``FileNotFoundError`` if missing."""
        ...

    async def write_file(self, path: str, text: str) -> None: ...
