"""notedeck - numbered document bookmarks grouped into workspaces."""

__version__ = "0.1.0"
