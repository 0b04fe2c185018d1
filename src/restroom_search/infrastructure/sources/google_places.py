"""
Google Places - Nearby Search

Provides the commercial-venue directory (café chains, generic cafés,
department stores).

API Documentation: https://developers.google.com/maps/documentation/places/web-service/search-nearby

One Nearby Search request is issued per enabled venue category, using the
category's search keyword. Brand categories keep only results whose name
matches one of the brand keywords (a "Starbucks" keyword search also
returns unrelated cafés). Every kept result is tagged with the category
key so the normalizer can look up its configuration.

Status handling:
    OK                → results
    ZERO_RESULTS      → empty list
    OVER_QUERY_LIMIT  → RateLimitError
    REQUEST_DENIED    → UpstreamResponseError (bad or unauthorized key)
    INVALID_REQUEST   → UpstreamResponseError
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from restroom_search.application.search.categories import get_category
from restroom_search.domain.entities import DataSource, EntryKind
from restroom_search.shared.async_utils import gather_settled
from restroom_search.shared.exceptions import (
    ConfigurationError,
    InvalidParameterError,
    RateLimitError,
    UpstreamResponseError,
)

from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)

PLACES_API_BASE = "https://maps.googleapis.com/maps/api/place"
NEARBY_SEARCH_PATH = "/nearbysearch/json"

# Nearby Search rejects radii above 50 km
MAX_RADIUS_METERS = 50_000


class GooglePlacesClient(BaseAPIClient):
    """
    Commercial venue directory adapter.

    Usage:
        client = GooglePlacesClient(api_key="...", language="ko")
        places = await client.search_near(37.4979, 127.0276, 500, ["starbucks", "cafe"])
    """

    _service_name = "Google Places"

    source = DataSource.GOOGLE_PLACES
    kind = EntryKind.COMMERCIAL_VENUE

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 10.0,
        language: str = "ko",
        client: httpx.AsyncClient | None = None,
    ):
        self._api_key = (api_key or "").strip()
        self._language = language
        super().__init__(
            base_url=PLACES_API_BASE,
            timeout=timeout,
            min_interval=0.05,
            headers={"Accept": "application/json"},
            client=client,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def search_near(
        self,
        latitude: float,
        longitude: float,
        radius_meters: float,
        category_filter: Sequence[str] | None = None,
    ) -> list[dict[str, Any]]:
        """
        Raw Places results for the enabled categories, in category order.

        Raises:
            ConfigurationError: No API key configured
            InvalidParameterError: A category key is not a commercial category
            AdapterError: Every category request failed
        """
        if not self.is_configured:
            raise ConfigurationError("GOOGLE_PLACES_API_KEY is not set; the venue directory is unavailable")

        categories = list(category_filter or [])
        for key in categories:
            config = get_category(key)
            if config is None or config.kind is not EntryKind.COMMERCIAL_VENUE:
                raise InvalidParameterError("category_filter", key, "a commercial venue category key")
        if not categories:
            return []

        radius = int(min(max(radius_meters, 1), MAX_RADIUS_METERS))
        results = await gather_settled(*(self.search_category(latitude, longitude, radius, key) for key in categories))

        places: list[dict[str, Any]] = []
        errors: list[Exception] = []
        for key, result in zip(categories, results, strict=True):
            if isinstance(result, Exception):
                logger.warning(f"{self._service_name}: category '{key}' failed: {result}")
                errors.append(result)
                continue
            places.extend(result)

        if len(errors) == len(categories):
            raise errors[0]
        return places

    async def search_category(
        self,
        latitude: float,
        longitude: float,
        radius: int,
        category_key: str,
    ) -> list[dict[str, Any]]:
        """Nearby Search for one category, brand-filtered and tagged with ``category``."""
        config = get_category(category_key)
        if config is None:
            raise InvalidParameterError("category", category_key, "a known venue category key")

        params = {
            "location": f"{latitude},{longitude}",
            "radius": radius,
            "keyword": config.keyword or config.label,
            "language": self._language,
            "key": self._api_key,
        }
        data = await self._make_request(NEARBY_SEARCH_PATH, params=params)
        raw_results = self._check_status(data)

        tagged = []
        for place in raw_results:
            if not isinstance(place, dict):
                continue
            if not config.matches_brand(str(place.get("name") or "")):
                continue
            tagged.append({**place, "category": category_key})

        logger.debug(f"{self._service_name}: '{category_key}' {len(tagged)} of {len(raw_results)} results kept")
        return tagged

    def _check_status(self, data: Any) -> list[Any]:
        if not isinstance(data, dict):
            raise UpstreamResponseError(f"{self._service_name}: unexpected response shape", source=self._service_name)

        status = data.get("status")
        if status == "ZERO_RESULTS":
            return []
        if status == "OVER_QUERY_LIMIT":
            raise RateLimitError(
                f"{self._service_name}: query limit exceeded",
                source=self._service_name,
                retry_after=60.0,
            )
        if status != "OK":
            detail = data.get("error_message") or "no details"
            raise UpstreamResponseError(
                f"{self._service_name}: {status or 'UNKNOWN'} ({detail})",
                source=self._service_name,
                status=status,
            )

        results = data.get("results")
        if not isinstance(results, list):
            raise UpstreamResponseError(f"{self._service_name}: 'results' is not a list", source=self._service_name)
        return results
