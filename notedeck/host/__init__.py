"""Document host implementations."""

from notedeck.host.base import DocumentHost
from notedeck.host.local import LocalVault

__all__ = ["DocumentHost", "LocalVault"]
