"""
Restroom Search MCP Tools

✅ Search (1):
- search_restrooms: main entry, merges public facilities and venues

✅ Catalogs (2):
- list_urgency_profiles, list_venue_categories

Usage:
    from .tools import register_all_tools
    register_all_tools(mcp, orchestrator)
"""

from mcp.server.fastmcp import FastMCP

from restroom_search.application.search import SearchOrchestrator

from .search import register_search_tools


def register_all_tools(mcp: FastMCP, orchestrator: SearchOrchestrator) -> dict[str, int]:
    """Register every tool; returns tool counts per category."""
    register_search_tools(mcp, orchestrator)
    return {"search": 1, "catalogs": 2}


__all__ = ["register_all_tools", "register_search_tools"]
