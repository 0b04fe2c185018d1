"""
Search Tools - find nearby restrooms.

Tools:
- search_restrooms: ranked, deduplicated restrooms around a coordinate
- list_urgency_profiles: available urgency profiles and their weights
- list_venue_categories: venue categories accepted by ``categories``
"""

from __future__ import annotations

import json
import logging
from typing import Literal

from mcp.server.fastmcp import FastMCP

from restroom_search.application.search import (
    CATEGORY_CATALOG,
    URGENCY_PROFILES,
    SearchOrchestrator,
    get_profile,
)
from restroom_search.domain.entities import FilterSet
from restroom_search.shared.exceptions import RestroomSearchError

from .formatting import ResponseFormatter, envelope_to_json, format_envelope

logger = logging.getLogger(__name__)


def register_search_tools(mcp: FastMCP, orchestrator: SearchOrchestrator) -> None:
    """Register restroom search tools on *mcp*."""

    @mcp.tool()
    async def search_restrooms(
        latitude: float,
        longitude: float,
        urgency: str = "moderate",
        radius_meters: float | None = None,
        only_free: bool = False,
        min_quality: int = 1,
        max_distance: float | None = 1000,
        include_public: bool = True,
        include_commercial: bool = True,
        categories: list[str] | None = None,
        output_format: Literal["text", "json"] = "text",
    ) -> str:
        """
        Find restrooms near a coordinate, merged from public facilities and
        commercial venues (cafés, department stores), ranked by urgency.

        Urgency profiles:
            emergency → nearest first (distance 90% / quality 10%, 300m)
            moderate  → balanced (60% / 40%, 500m)
            relaxed   → cleaner places further away (30% / 70%, 1000m)

        Args:
            latitude: WGS84 latitude of the user (e.g. 37.5665)
            longitude: WGS84 longitude of the user (e.g. 126.9780)
            urgency: "emergency", "moderate" or "relaxed" (unknown → moderate)
            radius_meters: Search radius. Default: profile radius capped by max_distance
            only_free: Only restrooms usable without a purchase
            min_quality: Minimum quality score 1-5
            max_distance: Drop results further than this (meters). None disables
            include_public: Include public restrooms
            include_commercial: Include cafés and department stores
            categories: Venue category keys (see list_venue_categories).
                        Default: the profile's categories. [] disables venue search.
            output_format: "text" (Markdown) or "json"

        Returns:
            Ranked restroom list. On total upstream failure, sample locations
            with an explanatory message; on no matches, a "nothing nearby" hint.
        """
        filters = FilterSet(
            include_public=include_public,
            include_commercial=include_commercial,
            only_free=only_free,
            min_quality=min_quality,
            max_distance=max_distance,
        )
        profile = get_profile(urgency)

        try:
            query = orchestrator.build_query(
                latitude,
                longitude,
                urgency=urgency,
                radius_meters=radius_meters,
                filters=filters,
                categories=categories,
            )
            envelope = await orchestrator.run(query)
        except RestroomSearchError as e:
            logger.warning(f"search_restrooms rejected: {e}")
            return ResponseFormatter.error(e, tool_name="search_restrooms")
        except Exception as e:
            logger.exception(f"search_restrooms failed: {e}")
            return ResponseFormatter.error(
                e,
                suggestion="Check the coordinate and try again",
                example="search_restrooms(latitude=37.5665, longitude=126.9780, urgency='emergency')",
                tool_name="search_restrooms",
            )

        walking_speed = orchestrator.settings.walking_speed_kmh
        if output_format == "json":
            return envelope_to_json(envelope, profile, walking_speed)
        return format_envelope(envelope, profile, query.radius_meters, walking_speed)

    @mcp.tool()
    def list_urgency_profiles() -> str:
        """
        List urgency profiles with their distance/quality weights, default
        radius and default venue categories.

        Returns:
            JSON list of profiles
        """
        return json.dumps([p.to_dict() for p in URGENCY_PROFILES.values()], ensure_ascii=False, indent=2)

    @mcp.tool()
    def list_venue_categories() -> str:
        """
        List venue categories with kind, base quality and whether the
        restroom is usable without a purchase. Commercial keys can be passed
        to search_restrooms(categories=[...]).

        Returns:
            JSON list of categories
        """
        return json.dumps([c.to_dict() for c in CATEGORY_CATALOG.values()], ensure_ascii=False, indent=2)
