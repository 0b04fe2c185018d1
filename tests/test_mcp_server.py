"""
Tests for MCP Server initialization, tool registration and tool output.
"""

import json
from unittest.mock import Mock

import pytest

from helpers import ORIGIN, FakeAdapter, make_entry
from restroom_search.application.search import SearchOrchestrator, walk_minutes
from restroom_search.config import SearchSettings
from restroom_search.domain.entities import DataSource, EntryKind
from restroom_search.presentation.mcp_server.tools import register_all_tools
from restroom_search.presentation.mcp_server.tools.formatting import ResponseFormatter, entry_to_dict, format_entry
from restroom_search.shared.exceptions import NetworkError


def _capture_tools(orchestrator):
    """Register tools on a mock server and return them by name."""
    tools = {}

    def tool():
        def decorator(func):
            tools[func.__name__] = func
            return func

        return decorator

    mock_mcp = Mock()
    mock_mcp.tool = tool
    register_all_tools(mock_mcp, orchestrator)
    return tools


@pytest.fixture
def tools(public_adapter, commercial_adapter):
    return _capture_tools(SearchOrchestrator([public_adapter, commercial_adapter]))


# ============================================================
# Server
# ============================================================


class TestCreateServer:
    """Tests for create_server()."""

    async def test_registers_tools(self):
        from restroom_search.presentation.mcp_server import create_server

        server = create_server(seoul_api_key="k1", google_places_api_key="k2", http_timeout=3.0)

        names = {tool.name for tool in await server.list_tools()}
        assert names == {"search_restrooms", "list_urgency_profiles", "list_venue_categories"}

    def test_container_is_initialized(self):
        from restroom_search.presentation.mcp_server import create_server, server

        create_server(seoul_api_key=None, google_places_api_key=None)

        orchestrator = server.get_container().orchestrator()
        assert [a.source for a in orchestrator.adapters] == [DataSource.SEOUL_PUBLIC, DataSource.GOOGLE_PLACES]

    def test_register_all_tools_counts(self, public_adapter):
        mock_mcp = Mock()
        mock_mcp.tool = Mock(return_value=lambda f: f)
        stats = register_all_tools(mock_mcp, SearchOrchestrator([public_adapter]))
        assert stats == {"search": 1, "catalogs": 2}
        assert mock_mcp.tool.call_count == 3


# ============================================================
# search_restrooms
# ============================================================


class TestSearchRestroomsTool:
    async def test_text_output(self, tools):
        text = await tools["search_restrooms"](ORIGIN.latitude, ORIGIN.longitude, urgency="emergency")

        assert text.startswith("🚽 **Restroom Search** (profile: Emergency")
        assert "Found 6 restrooms (public 3, commercial 3)." in text
        assert "1. ☕ **Starbucks City Hall** (Starbucks)" in text
        assert "📊 average distance" in text

    async def test_json_output(self, tools):
        text = await tools["search_restrooms"](ORIGIN.latitude, ORIGIN.longitude, output_format="json")
        data = json.loads(text)

        assert data["success"] is True
        assert data["profile"] == "moderate"
        assert data["source_counts"] == {"public": 3, "commercial": 3}
        assert {"walk_minutes", "quality_label"} <= set(data["entries"][0])

    async def test_walk_time_uses_configured_speed(self, public_adapter, commercial_adapter):
        settings = SearchSettings(walking_speed_kmh=9.0)
        tools = _capture_tools(SearchOrchestrator([public_adapter, commercial_adapter], settings=settings))
        text = await tools["search_restrooms"](ORIGIN.latitude, ORIGIN.longitude, output_format="json")

        entries = json.loads(text)["entries"]
        assert entries
        assert all(e["walk_minutes"] == walk_minutes(e["distance_meters"], 9.0) for e in entries)

    async def test_empty_result_hint(self, tools):
        text = await tools["search_restrooms"](ORIGIN.latitude, ORIGIN.longitude, min_quality=5)
        assert "Nothing nearby, try widening your search." in text
        assert "Increase radius_meters" in text

    async def test_total_failure_shows_samples(self):
        orchestrator = SearchOrchestrator(
            [
                FakeAdapter(DataSource.SEOUL_PUBLIC, EntryKind.PUBLIC_FACILITY, error=NetworkError("down")),
                FakeAdapter(DataSource.GOOGLE_PLACES, EntryKind.COMMERCIAL_VENUE, error=NetworkError("down")),
            ]
        )
        text = await _capture_tools(orchestrator)["search_restrooms"](ORIGIN.latitude, ORIGIN.longitude)

        assert "⚠️ Search failed:" in text
        assert "**Sample locations (not live data):**" in text
        assert "Nothing nearby" not in text

    async def test_invalid_coordinate_is_agent_error(self, tools):
        text = await tools["search_restrooms"](123.0, ORIGIN.longitude)
        assert text.startswith("❌ **Error**: Invalid coordinate")
        assert "💡 **Suggestion**" in text

    async def test_unknown_category_is_agent_error(self, tools):
        text = await tools["search_restrooms"](ORIGIN.latitude, ORIGIN.longitude, categories=["sauna"])
        assert "Invalid parameter 'categories'" in text


# ============================================================
# Catalog tools
# ============================================================


class TestCatalogTools:
    def test_list_urgency_profiles(self, tools):
        profiles = json.loads(tools["list_urgency_profiles"]())
        assert [p["key"] for p in profiles] == ["emergency", "moderate", "relaxed"]
        assert profiles[0]["distance_weight"] == 0.9

    def test_list_venue_categories(self, tools):
        categories = {c["key"]: c for c in json.loads(tools["list_venue_categories"]())}
        assert categories["public"]["kind"] == "public"
        assert categories["department_store"]["is_free"] is True
        assert categories["starbucks"]["is_free"] is False


# ============================================================
# Formatting
# ============================================================


class TestResponseFormatter:
    def test_plain_error(self):
        text = ResponseFormatter.error("boom", suggestion="retry", example="x()", tool_name="search_restrooms")
        assert text.splitlines() == [
            "❌ **Error** in search_restrooms: boom",
            "💡 **Suggestion**: retry",
            "📝 **Example**: `x()`",
        ]

    def test_no_results(self):
        assert ResponseFormatter.no_results("Nothing", ["a", "b"]) == "🔍 Nothing\n- a\n- b"

    def test_walk_minutes_follow_speed(self):
        entry = make_entry("Cafe Namu", distance=750)
        assert entry_to_dict(entry)["walk_minutes"] == 10
        assert entry_to_dict(entry, walking_speed_kmh=9.0)["walk_minutes"] == 5
        assert "~5 min walk" in format_entry(1, entry, walking_speed_kmh=9.0)
