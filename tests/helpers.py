"""Builders shared across the test suites: entries, raw records and a fake adapter."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from restroom_search.application.search.geo import EARTH_RADIUS_METERS
from restroom_search.application.search.quality import urgency_bucket
from restroom_search.domain.entities import (
    Coordinates,
    DataSource,
    Entry,
    EntryKind,
)

# Seoul City Hall
ORIGIN = Coordinates(37.5665, 126.9780)

METERS_PER_DEGREE_LAT = EARTH_RADIUS_METERS * 3.141592653589793 / 180


def north_of(origin: Coordinates, meters: float) -> Coordinates:
    """Point ``meters`` due north of ``origin``."""
    return Coordinates(origin.latitude + meters / METERS_PER_DEGREE_LAT, origin.longitude)


def make_entry(
    name: str,
    *,
    distance: float = 100.0,
    kind: EntryKind = EntryKind.COMMERCIAL_VENUE,
    quality: int = 1,
    source: DataSource | None = None,
    category: str | None = None,
    is_free: bool | None = None,
    coordinates: Coordinates | None = None,
    entry_id: str | None = None,
    **extra: Any,
) -> Entry:
    """Build an Entry with sensible defaults for ranking / filter tests."""
    if source is None:
        source = DataSource.SEOUL_PUBLIC if kind is EntryKind.PUBLIC_FACILITY else DataSource.GOOGLE_PLACES
    if category is None:
        category = "public" if kind is EntryKind.PUBLIC_FACILITY else "cafe"
    if is_free is None:
        is_free = kind is EntryKind.PUBLIC_FACILITY
    return Entry(
        id=entry_id or f"{source.value}:{name}",
        name=name,
        kind=kind,
        coordinates=coordinates or north_of(ORIGIN, distance),
        address="Address unavailable",
        is_free=is_free,
        distance_meters=distance,
        urgency_bucket=urgency_bucket(distance),
        source=source,
        category=category,
        quality_score=quality,
        quality_precise=float(quality),
        **extra,
    )


class FakeAdapter:
    """In-memory SourceAdapter returning fixed records or raising."""

    def __init__(
        self,
        source: DataSource,
        kind: EntryKind,
        records: list[dict[str, Any]] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.source = source
        self.kind = kind
        self.records = records or []
        self.error = error
        self.calls: list[tuple[float, float, float, list[str] | None]] = []
        self.closed = False

    async def search_near(
        self,
        latitude: float,
        longitude: float,
        radius_meters: float,
        category_filter: Sequence[str] | None = None,
    ) -> list[dict[str, Any]]:
        self.calls.append((latitude, longitude, radius_meters, list(category_filter) if category_filter else None))
        if self.error is not None:
            raise self.error
        return list(self.records)

    async def close(self) -> None:
        self.closed = True


def seoul_row(poi_id: str, name: str, at: Coordinates, aname: str = "중구") -> dict[str, Any]:
    return {
        "POI_ID": poi_id,
        "FNAME": name,
        "ANAME": aname,
        "X_WGS84": at.longitude,
        "Y_WGS84": at.latitude,
    }


def place_result(place_id: str, name: str, at: Coordinates, category: str = "cafe", **extra: Any) -> dict[str, Any]:
    return {
        "place_id": place_id,
        "name": name,
        "geometry": {"location": {"lat": at.latitude, "lng": at.longitude}},
        "vicinity": "Seoul",
        "category": category,
        **extra,
    }
