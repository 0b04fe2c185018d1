"""
Restroom Search MCP Server

A Model Context Protocol server that finds nearby restrooms by merging the
Seoul public toilet registry with nearby commercial venues.

Architecture:
- instructions.py: SERVER_INSTRUCTIONS for AI agents
- tools/: tool implementations and output formatting
- container: DI container (dependency-injector) for adapter lifecycle
"""

from __future__ import annotations

import logging
import os
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import TYPE_CHECKING, Any, cast

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from restroom_search.config import http_timeout_from_env
from restroom_search.container import ApplicationContainer

from .instructions import SERVER_INSTRUCTIONS
from .tools import register_all_tools

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from restroom_search.application.search import SearchOrchestrator

logger = logging.getLogger(__name__)

# ── Module-level DI container ──────────────────────────────────────────────
_container: ApplicationContainer | None = None


def get_container() -> ApplicationContainer:
    """Get the application DI container.

    Raises:
        RuntimeError: If ``create_server()`` has not been called yet.
    """
    if _container is None:
        msg = "Container not initialized. Call create_server() first."
        raise RuntimeError(msg)
    return _container


def _make_lifespan(
    container: ApplicationContainer,
) -> Callable[[FastMCP[Any]], AbstractAsyncContextManager[ApplicationContainer]]:
    """Create a FastMCP lifespan handler bound to *container*."""

    @asynccontextmanager
    async def _lifespan(server: FastMCP[Any]) -> AsyncIterator[ApplicationContainer]:
        """Application lifecycle: startup → yield → shutdown."""
        logger.info("Lifecycle: startup, adapters ready")
        try:
            yield container
        finally:
            orchestrator = cast("SearchOrchestrator", container.orchestrator())
            await orchestrator.close()
            logger.info("Lifecycle: shutdown, adapter HTTP clients closed")

    return _lifespan


def create_server(
    seoul_api_key: str | None = None,
    google_places_api_key: str | None = None,
    http_timeout: float | None = None,
    name: str = "restroom-search",
    disable_security: bool = False,
    json_response: bool = False,
    stateless_http: bool = False,
) -> FastMCP:
    """
    Create and configure the Restroom Search MCP server.

    Args:
        seoul_api_key: Seoul Open Data API key (public toilet registry).
        google_places_api_key: Google Places API key (venue directory).
        http_timeout: Per-request adapter timeout in seconds. Default: RESTROOM_HTTP_TIMEOUT or 10.
        name: Server name.
        disable_security: Disable DNS rebinding protection (needed for remote access).
        json_response: Use JSON responses instead of SSE.
        stateless_http: Use stateless HTTP mode (no session management).

    Returns:
        Configured FastMCP server instance.
    """
    global _container
    logger.info("Initializing Restroom Search MCP Server...")

    # ── DI container ────────────────────────────────────────────────────
    _container = ApplicationContainer()
    _container.config.from_dict(
        {
            "seoul_api_key": seoul_api_key,
            "google_places_api_key": google_places_api_key,
            "http_timeout": http_timeout or http_timeout_from_env(),
        }
    )

    orchestrator = cast("SearchOrchestrator", _container.orchestrator())
    logger.info(f"Sources: {[a.source.value for a in orchestrator.adapters]}")

    # ── Transport security ──────────────────────────────────────────────
    if disable_security:
        transport_security = TransportSecuritySettings(enable_dns_rebinding_protection=False)
        logger.info("DNS rebinding protection disabled for remote access")
    else:
        transport_security = None

    # ── Create MCP server with lifespan ─────────────────────────────────
    mcp = FastMCP(
        name,
        instructions=SERVER_INSTRUCTIONS,
        transport_security=transport_security,
        json_response=json_response,
        stateless_http=stateless_http,
        lifespan=_make_lifespan(_container),
    )

    stats = register_all_tools(mcp, orchestrator)
    logger.info("Tool registration complete: %s", stats)

    logger.info("Restroom Search MCP Server initialized successfully")
    return mcp


def main():
    """Run the MCP server (stdio)."""

    # Configure logging
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    seoul_api_key = os.environ.get("SEOUL_API_KEY", "").strip() or None
    google_places_api_key = os.environ.get("GOOGLE_PLACES_API_KEY", "").strip() or None

    server = create_server(
        seoul_api_key=seoul_api_key,
        google_places_api_key=google_places_api_key,
    )
    server.run()


if __name__ == "__main__":
    main()
