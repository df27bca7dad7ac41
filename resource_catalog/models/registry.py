"""
MCP registry models and name matching.

A catalog is fetched once per run and passed explicitly to whatever needs
it, so tests can hand in a fixture catalog.
"""

from typing import Optional

from pydantic import BaseModel, Field

# Suffixes stripped from the segment after "/" in a registry name before
# comparing it with a local server name. Heuristic, order matters.
REGISTRY_NAME_SUFFIXES = ("-mcp-server", "-mcp")

REGISTRY_LINK_BASE = "https://github.com/mcp"


class RegistryEntry(BaseModel):
    """One server known to the registry."""

    name: str  # As published, e.g. "com.apify/apify-mcp-server"
    display_name: str = Field(alias="displayName")  # Lowercased
    full_name: str = Field(alias="fullName")  # Lowercased name

    model_config = {"populate_by_name": True}

    @classmethod
    def from_server(cls, name: str, display_name: Optional[str] = None) -> "RegistryEntry":
        return cls(
            name=name,
            display_name=(display_name or name).lower(),
            full_name=name.lower(),
        )

    @property
    def link(self) -> str:
        return f"{REGISTRY_LINK_BASE}/{self.name}"


def _strip_registry_suffix(segment: str) -> str:
    for suffix in REGISTRY_NAME_SUFFIXES:
        if segment.endswith(suffix):
            return segment[: -len(suffix)]
    return segment


class RegistryCatalog(BaseModel):
    """Registry entries in fetch order."""

    entries: list[RegistryEntry] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def match(self, server_name: str) -> Optional[RegistryEntry]:
        """Find the registry entry for a local MCP server name.

        Matches, first hit in fetch order wins:
        - exact (case-insensitive) displayName or full name
        - the segment after "/" in the full name, minus a -mcp-server/-mcp
          suffix, e.g. "apify" -> "com.apify/apify-mcp-server"
        """
        wanted = server_name.strip().lower()
        if not wanted:
            return None

        for entry in self.entries:
            if wanted in (entry.display_name, entry.full_name):
                return entry
            parts = entry.full_name.split("/")
            if len(parts) > 1 and parts[1] and _strip_registry_suffix(parts[1]) == wanted:
                return entry
        return None
