"""Store-backed managers.

``DataStore`` owns the persisted document; ``WorkspaceRegistry`` and
``SlotRegistry`` read copies from it and hand back full replacements.
Managers raise domain exceptions (``notedeck.errors``), never HTTP or CLI
errors -- that translation is the outer layer's responsibility.
"""

from notedeck.managers.data import DataStore
from notedeck.managers.slots import SlotRegistry
from notedeck.managers.workspaces import WorkspaceRegistry

__all__ = ["DataStore", "SlotRegistry", "WorkspaceRegistry"]
