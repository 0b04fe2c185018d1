"""
Seoul Open Data - Public Toilet POI Service

Provides the public-facility registry: every public restroom in Seoul,
including private-operated facilities opened to the public (민간개방화장실).

API Documentation: https://data.seoul.go.kr/ (SearchPublicToiletPOIService)

Request shape:
    http://openapi.seoul.go.kr:8088/{KEY}/json/SearchPublicToiletPOIService/{START}/{END}/

Response shape:
    {
        "SearchPublicToiletPOIService": {
            "list_total_count": 4938,
            "RESULT": {"CODE": "INFO-000", "MESSAGE": "정상 처리되었습니다"},
            "row": [{"POI_ID": "...", "FNAME": "...", "ANAME": "...",
                     "X_WGS84": 126.97, "Y_WGS84": 37.56}, ...]
        }
    }

The service has no spatial query, so the adapter pages the registry and
keeps rows within the requested radius. Rows with unusable coordinates are
passed through untouched for the normalizer to reject.
"""

from __future__ import annotations

import itertools
import logging
import math
from collections.abc import Sequence
from typing import Any

import httpx

from restroom_search.application.search.geo import distance_meters
from restroom_search.domain.entities import DataSource, EntryKind
from restroom_search.shared.exceptions import ConfigurationError, UpstreamResponseError

from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)

SEOUL_API_BASE = "http://openapi.seoul.go.kr:8088"
SERVICE_NAME = "SearchPublicToiletPOIService"

RESULT_OK = "INFO-000"
# "해당하는 데이터가 없습니다" - a valid, empty answer
RESULT_NO_DATA = "INFO-200"

DEFAULT_PAGE_SIZE = 1000
# Pause between registry pages
DEFAULT_PAGE_INTERVAL = 0.1


class SeoulPublicToiletClient(BaseAPIClient):
    """
    Public toilet registry adapter.

    Usage:
        client = SeoulPublicToiletClient(api_key="...")
        rows = await client.search_near(37.5665, 126.9780, 500)
    """

    _service_name = "Seoul Open Data"

    source = DataSource.SEOUL_PUBLIC
    kind = EntryKind.PUBLIC_FACILITY

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 10.0,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int | None = None,
        min_interval: float = DEFAULT_PAGE_INTERVAL,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Args:
            api_key: Seoul Open Data API key (SEOUL_API_KEY)
            timeout: Request timeout in seconds
            page_size: Rows per request (the service caps a page at 1000)
            max_pages: Upper bound on pages scanned; None walks the whole
                registry up to list_total_count
            min_interval: Minimum seconds between page requests
            client: Pre-built httpx client, mainly for tests
        """
        self._api_key = (api_key or "").strip()
        self._page_size = page_size
        self._max_pages = max_pages
        super().__init__(
            base_url=SEOUL_API_BASE,
            timeout=timeout,
            min_interval=min_interval,
            headers={"Accept": "application/json", "User-Agent": "restroom-search-mcp/1.0"},
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
        Raw registry rows within ``radius_meters`` of the point.

        ``category_filter`` is ignored: the registry has a single category.

        Raises:
            ConfigurationError: No API key configured
            AdapterError: Transport failure or an error result code
        """
        if not self.is_configured:
            raise ConfigurationError("SEOUL_API_KEY is not set; the public toilet registry is unavailable")

        rows: list[dict[str, Any]] = []
        total: int | None = None
        pages = itertools.count() if self._max_pages is None else range(self._max_pages)
        for page in pages:
            start = page * self._page_size + 1
            end = start + self._page_size - 1
            page_rows, total = await self._fetch_page(start, end)
            rows.extend(page_rows)
            if total is None or end >= total or not page_rows:
                break

        nearby = [row for row in rows if _within(row, latitude, longitude, radius_meters)]
        logger.debug(f"{self._service_name}: {len(nearby)} of {len(rows)} rows within {radius_meters:.0f}m")
        return nearby

    async def _fetch_page(self, start: int, end: int) -> tuple[list[dict[str, Any]], int | None]:
        data = await self._make_request(f"/{self._api_key}/json/{SERVICE_NAME}/{start}/{end}/")
        if not isinstance(data, dict):
            raise UpstreamResponseError(f"{self._service_name}: unexpected response shape", source=self._service_name)

        payload = data.get(SERVICE_NAME)
        # Errors come back as a top-level RESULT without the service wrapper
        result = (payload or data).get("RESULT") or {}
        code = result.get("CODE")

        if code == RESULT_NO_DATA:
            return [], 0
        if code != RESULT_OK or not isinstance(payload, dict):
            message = result.get("MESSAGE", "missing result code")
            raise UpstreamResponseError(
                f"{self._service_name}: {code or 'error'} {message}",
                source=self._service_name,
                status=code,
            )

        rows = payload.get("row")
        if not isinstance(rows, list):
            raise UpstreamResponseError(f"{self._service_name}: 'row' is not a list", source=self._service_name)

        total = payload.get("list_total_count")
        return rows, int(total) if isinstance(total, int | float) else None


def _within(row: Any, latitude: float, longitude: float, radius_meters: float) -> bool:
    """True if the row is inside the radius; rows without parseable coordinates are kept."""
    if not isinstance(row, dict):
        return True
    try:
        lat = float(row.get("Y_WGS84"))
        lng = float(row.get("X_WGS84"))
    except (TypeError, ValueError):
        return True
    if not (math.isfinite(lat) and math.isfinite(lng)) or lat == 0.0 or lng == 0.0:
        return True
    return distance_meters(latitude, longitude, lat, lng) <= radius_meters
