#!/usr/bin/env python3
"""
Restroom Search MCP Server - HTTP Mode

This script runs the Restroom Search MCP server in HTTP mode (SSE or streamable-http),
allowing remote clients from other machines to connect. A small JSON API is
mounted next to the MCP endpoints for non-MCP callers.

Usage:
    # Run with SSE transport (default, more compatible)
    python run_server.py --transport sse --port 8765

    # Run with streamable-http transport
    python run_server.py --transport streamable-http --port 8765

Environment Variables:
    SEOUL_API_KEY: Seoul Open Data API key (public toilet registry)
    GOOGLE_PLACES_API_KEY: Google Places API key (venue directory)
    MCP_PORT: Server port (default: 8765)
    MCP_HOST: Server host (default: 0.0.0.0)
"""

import argparse
import logging
import os

import uvicorn
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route

from restroom_search import __version__
from restroom_search.domain.entities import FilterSet
from restroom_search.presentation.mcp_server.server import create_server, get_container
from restroom_search.presentation.mcp_server.tools.formatting import entry_to_dict
from restroom_search.shared.exceptions import RestroomSearchError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _bool_param(request: Request, name: str, default: bool) -> bool:
    raw = request.query_params.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


async def api_search(request: Request) -> JSONResponse:
    """
    GET /api/search?lat=..&lng=..&urgency=..&radius=..&only_free=..&min_quality=..

    Returns the result envelope as JSON. 400 for invalid input; a total
    upstream failure is still a 200 with ``success: false`` and sample entries.
    """
    params = request.query_params
    try:
        latitude = float(params["lat"])
        longitude = float(params["lng"])
        radius = float(params["radius"]) if "radius" in params else None
        max_distance = float(params.get("max_distance", 1000))
        min_quality = int(params.get("min_quality", 1))
    except (KeyError, ValueError) as e:
        return JSONResponse({"error": f"Invalid or missing parameter: {e}"}, status_code=400)

    categories = params.get("categories")
    filters = FilterSet(
        include_public=_bool_param(request, "include_public", True),
        include_commercial=_bool_param(request, "include_commercial", True),
        only_free=_bool_param(request, "only_free", False),
        min_quality=min_quality,
        max_distance=max_distance,
    )

    orchestrator = get_container().orchestrator()
    try:
        envelope = await orchestrator.search(
            latitude,
            longitude,
            urgency=params.get("urgency", "moderate"),
            radius_meters=radius,
            filters=filters,
            categories=categories.split(",") if categories is not None else None,
        )
    except RestroomSearchError as e:
        return JSONResponse(e.to_dict(), status_code=400)

    data = envelope.to_dict()
    data["entries"] = [entry_to_dict(e, orchestrator.settings.walking_speed_kmh) for e in envelope.entries]
    return JSONResponse(data)


def main():
    parser = argparse.ArgumentParser(description="Run Restroom Search MCP Server in HTTP mode")
    parser.add_argument(
        "--seoul-api-key",
        default=os.environ.get("SEOUL_API_KEY"),
        help="Seoul Open Data API key",
    )
    parser.add_argument(
        "--google-places-api-key",
        default=os.environ.get("GOOGLE_PLACES_API_KEY"),
        help="Google Places API key",
    )
    parser.add_argument(
        "--transport",
        choices=["sse", "streamable-http"],
        default="sse",
        help="Transport protocol (default: sse)",
    )
    parser.add_argument(
        "--host",
        default=os.environ.get("MCP_HOST", "0.0.0.0"),
        help="Server host (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("MCP_PORT", "8765")),
        help="Server port (default: 8765)",
    )
    parser.add_argument(
        "--no-security",
        action="store_true",
        default=True,
        help="Disable DNS rebinding protection (default: True for remote access)",
    )

    args = parser.parse_args()

    logger.info("Creating Restroom Search MCP Server...")
    logger.info(f"  Seoul API Key: {'Set' if args.seoul_api_key else 'Not set'}")
    logger.info(f"  Google Places API Key: {'Set' if args.google_places_api_key else 'Not set'}")
    logger.info(f"  Transport: {args.transport}")
    logger.info(f"  Host: {args.host}")
    logger.info(f"  Port: {args.port}")

    server = create_server(
        seoul_api_key=args.seoul_api_key,
        google_places_api_key=args.google_places_api_key,
        disable_security=args.no_security,
    )

    if args.transport == "sse":
        mcp_app = server.sse_app()
        logger.info("SSE endpoint: /sse")
    else:
        mcp_app = server.streamable_http_app()
        logger.info("Streamable HTTP endpoint: /mcp")

    async def health(request):
        return JSONResponse({"status": "ok", "service": "restroom-search-mcp"})

    async def info(request):
        return JSONResponse(
            {
                "service": "Restroom Search MCP Server",
                "version": __version__,
                "transport": args.transport,
                "endpoints": {
                    "mcp": "/sse" if args.transport == "sse" else "/mcp",
                    "search": "/api/search?lat=37.5665&lng=126.9780&urgency=emergency",
                    "health": "/health",
                },
            }
        )

    routes = [
        Route("/", info),
        Route("/health", health),
        Route("/api/search", api_search),
        Mount("/", app=mcp_app),
    ]
    app = Starlette(routes=routes)

    logger.info(f"Starting server at http://{args.host}:{args.port}")
    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        proxy_headers=True,
        forwarded_allow_ips="*",
        server_header=False,
    )


if __name__ == "__main__":
    main()
