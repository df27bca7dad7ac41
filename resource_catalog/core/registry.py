"""
MCP registry fetch.

Pages are requested one after another (each response carries the cursor for
the next). Any failure discards everything read so far: the caller gets an
empty catalog and renders servers unlinked.
"""

import logging
from typing import Any, Optional

import httpx

from resource_catalog.models.registry import RegistryCatalog, RegistryEntry

logger = logging.getLogger(__name__)

PUBLISHER_META_KEY = "io.modelcontextprotocol.registry/publisher-provided"


def _display_name(server: dict[str, Any]) -> Optional[str]:
    node: Any = server
    for key in ("_meta", PUBLISHER_META_KEY, "github", "displayName"):
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node if isinstance(node, str) and node else None


def parse_registry_page(payload: Any) -> tuple[list[RegistryEntry], Optional[str]]:
    """Entries and next cursor from one registry response body.

    Raises ValueError when the body does not have the registry shape.
    """
    if not isinstance(payload, dict):
        raise ValueError("registry response is not a JSON object")

    servers = payload.get("servers") or []
    if not isinstance(servers, list):
        raise ValueError("registry 'servers' is not a list")

    entries = []
    for item in servers:
        server = item.get("server") if isinstance(item, dict) else None
        if not isinstance(server, dict):
            continue
        name = server.get("name")
        if not isinstance(name, str) or not name:
            continue
        entries.append(RegistryEntry.from_server(name, _display_name(server)))

    metadata = payload.get("metadata") or {}
    cursor = metadata.get("nextCursor") if isinstance(metadata, dict) else None
    return entries, cursor or None


async def _fetch_all(client: httpx.AsyncClient, url: str) -> list[RegistryEntry]:
    entries: list[RegistryEntry] = []
    cursor: Optional[str] = None
    while True:
        params = {"cursor": cursor} if cursor else None
        response = await client.get(url, params=params)
        response.raise_for_status()
        page, cursor = parse_registry_page(response.json())
        entries.extend(page)
        if not cursor:
            return entries


async def fetch_registry(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = 30.0,
) -> RegistryCatalog:
    """Fetch every registry page into a catalog; empty catalog on any failure.

    A client passed in is used as-is and left open.
    """
    logger.info("Fetching MCP registry...")
    try:
        if client is not None:
            entries = await _fetch_all(client, url)
        else:
            async with httpx.AsyncClient(timeout=timeout) as own_client:
                entries = await _fetch_all(own_client, url)
    except httpx.HTTPStatusError as e:
        logger.warning(f"Failed to load MCP registry: HTTP {e.response.status_code}")
        return RegistryCatalog()
    except httpx.HTTPError as e:
        logger.warning(f"Failed to load MCP registry: {e}")
        return RegistryCatalog()
    except ValueError as e:
        # Covers undecodable JSON and unexpected body shapes
        logger.warning(f"Failed to load MCP registry: malformed response: {e}")
        return RegistryCatalog()

    logger.info(f"Loaded {len(entries)} servers from MCP registry")
    return RegistryCatalog(entries=entries)
