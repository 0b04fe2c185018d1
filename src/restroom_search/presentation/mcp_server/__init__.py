"""
Restroom Search MCP Server

Usage as standalone server:
    python -m restroom_search.presentation.mcp_server

Or in mcp.json:
    {
        "servers": {
            "restroom-search": {
                "type": "stdio",
                "command": "python",
                "args": ["-m", "restroom_search.presentation.mcp_server"],
                "env": {"SEOUL_API_KEY": "...", "GOOGLE_PLACES_API_KEY": "..."}
            }
        }
    }

Usage for integration:
    from restroom_search.presentation.mcp_server import create_server, register_all_tools

    server = create_server(seoul_api_key="...", google_places_api_key="...")
    server.run()
"""

from __future__ import annotations

from .server import create_server, main
from .tools import register_all_tools

__all__ = ["create_server", "main", "register_all_tools"]
