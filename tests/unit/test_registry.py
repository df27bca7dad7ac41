"""
Unit tests for the MCP registry fetch and name matching.
"""

import httpx
import pytest

from resource_catalog.core.registry import fetch_registry, parse_registry_page
from resource_catalog.models.registry import RegistryCatalog, RegistryEntry

REGISTRY_URL = "https://registry.test/v0.1/servers/"


def _server(name, display_name=None):
    server = {"name": name}
    if display_name:
        server["_meta"] = {
            "io.modelcontextprotocol.registry/publisher-provided": {
                "github": {"displayName": display_name},
            },
        }
    return {"server": server}


PAGE_1 = {
    "servers": [_server("com.apify/apify-mcp-server", "Apify"), _server("io.github/github-mcp")],
    "metadata": {"nextCursor": "page-2"},
}
PAGE_2 = {
    "servers": [_server("com.example/weather")],
    "metadata": {},
}


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ---------------------------------------------------------------------------
# Fetch
# ---------------------------------------------------------------------------


class TestFetchRegistry:
    """Tests for paginated fetching."""

    @pytest.mark.asyncio
    async def test_follows_cursor_until_exhausted(self):
        cursors = []

        def handler(request: httpx.Request) -> httpx.Response:
            cursor = request.url.params.get("cursor")
            cursors.append(cursor)
            return httpx.Response(200, json=PAGE_2 if cursor == "page-2" else PAGE_1)

        async with _client(handler) as client:
            catalog = await fetch_registry(REGISTRY_URL, client=client)

        assert cursors == [None, "page-2"]
        assert [e.name for e in catalog.entries] == [
            "com.apify/apify-mcp-server",
            "io.github/github-mcp",
            "com.example/weather",
        ]
        assert catalog.entries[0].display_name == "apify"
        assert catalog.entries[1].display_name == "io.github/github-mcp"

    @pytest.mark.asyncio
    async def test_error_on_second_page_yields_empty_catalog(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params.get("cursor") == "page-2":
                return httpx.Response(500, text="boom")
            return httpx.Response(200, json=PAGE_1)

        async with _client(handler) as client:
            catalog = await fetch_registry(REGISTRY_URL, client=client)

        assert len(catalog) == 0

    @pytest.mark.asyncio
    async def test_network_error_yields_empty_catalog(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        async with _client(handler) as client:
            catalog = await fetch_registry(REGISTRY_URL, client=client)

        assert len(catalog) == 0

    @pytest.mark.asyncio
    async def test_malformed_body_yields_empty_catalog(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>not json</html>")

        async with _client(handler) as client:
            catalog = await fetch_registry(REGISTRY_URL, client=client)

        assert len(catalog) == 0

    @pytest.mark.asyncio
    async def test_passed_client_left_open(self):
        async with _client(lambda request: httpx.Response(200, json=PAGE_2)) as client:
            await fetch_registry(REGISTRY_URL, client=client)
            assert not client.is_closed

    def test_parse_page_rejects_non_object(self):
        with pytest.raises(ValueError):
            parse_registry_page(["not", "an", "object"])

    def test_parse_page_skips_nameless_servers(self):
        entries, cursor = parse_registry_page({"servers": [{"server": {}}, {"oops": 1}]})
        assert entries == []
        assert cursor is None


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------


@pytest.fixture
def catalog() -> RegistryCatalog:
    return RegistryCatalog(entries=[
        RegistryEntry.from_server("com.apify/apify-mcp-server"),
        RegistryEntry.from_server("io.github/github-mcp", "GitHub"),
        RegistryEntry.from_server("com.example/weather"),
    ])


class TestRegistryMatch:
    """Tests for local server name matching."""

    def test_second_segment_suffix_stripped(self, catalog: RegistryCatalog):
        entry = catalog.match("apify")
        assert entry is not None
        assert entry.name == "com.apify/apify-mcp-server"
        assert entry.link == "https://github.com/mcp/com.apify/apify-mcp-server"

    def test_mcp_suffix_stripped(self, catalog: RegistryCatalog):
        assert catalog.match("github").name == "io.github/github-mcp"

    def test_display_name_is_case_insensitive(self, catalog: RegistryCatalog):
        assert catalog.match("GitHub").name == "io.github/github-mcp"

    def test_full_name_exact(self, catalog: RegistryCatalog):
        assert catalog.match("COM.EXAMPLE/WEATHER").name == "com.example/weather"

    def test_second_segment_without_suffix(self, catalog: RegistryCatalog):
        assert catalog.match("weather").name == "com.example/weather"

    def test_unknown_name_unmatched(self, catalog: RegistryCatalog):
        assert catalog.match("unknown-tool") is None

    def test_empty_name_unmatched(self, catalog: RegistryCatalog):
        assert catalog.match("  ") is None

    def test_first_hit_wins(self):
        catalog = RegistryCatalog(entries=[
            RegistryEntry.from_server("a.one/tool-mcp"),
            RegistryEntry.from_server("b.two/tool-mcp-server"),
        ])
        assert catalog.match("tool").name == "a.one/tool-mcp"

    def test_empty_catalog_never_matches(self):
        assert RegistryCatalog().match("apify") is None
