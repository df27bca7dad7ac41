"""
Errors raised by the catalog tools.

Parsing and extraction never raise; they log and degrade. Only conditions
that make a whole command meaningless are raised, and the CLI turns them
into a non-zero exit status.
"""


class CatalogError(Exception):
    """Base class for catalog errors."""


class MissingDirectoryError(CatalogError):
    """A directory required by a command does not exist."""

    def __init__(self, path, label: str = "directory"):
        self.path = path
        self.label = label
        super().__init__(f"{label} not found at {path}")


class PluginScaffoldError(CatalogError):
    """A new plugin could not be created."""
