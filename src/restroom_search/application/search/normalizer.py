"""
Normalizer - provider records → canonical Entry.

Each data source has exactly one record normalizer that knows that
provider's field names. The mapping from DataSource to normalizer is the
single seam where loosely-typed upstream payloads are interpreted; a record
that lacks a usable name or coordinate raises MalformedRecordError here and
is skipped, never crashing the pipeline.

Supported sources:
    - Seoul Open Data SearchPublicToiletPOIService rows
      (POI_ID, FNAME, ANAME, X_WGS84, Y_WGS84)
    - Google Places Nearby Search results, tagged with a ``category`` key
      by the adapter
    - Built-in sample records (fallback list shown on total failure)
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any, Protocol

from restroom_search.config import DEFAULT_SETTINGS, SearchSettings
from restroom_search.domain.entities import (
    Coordinates,
    DataSource,
    Entry,
    EntryKind,
    Facilities,
)
from restroom_search.shared.exceptions import MalformedRecordError

from .categories import PUBLIC_CATEGORY, PUBLIC_PRIVATE_CATEGORY, CategoryConfig, get_category
from .geo import distance_meters, is_valid_coordinate
from .quality import urgency_bucket

logger = logging.getLogger(__name__)

ADDRESS_PLACEHOLDER = "Address unavailable"
HOURS_UNKNOWN = "Hours unknown"
PUBLIC_HOURS = "24시간 (24h)"

# Marker in ANAME for facilities run by a private operator and opened to the public
PRIVATE_OPERATED_MARKER = "민간"


class RecordNormalizer(Protocol):
    """Maps one provider's raw record to an Entry."""

    source: DataSource

    def normalize(self, raw: Mapping[str, Any], origin: Coordinates, settings: SearchSettings) -> Entry: ...


# =============================================================================
# Field helpers
# =============================================================================


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _require_name(raw: Mapping[str, Any], key: str, source: DataSource) -> str:
    name = _text(raw.get(key))
    if name is None:
        raise MalformedRecordError("missing name", source=source.value, record=raw)
    return name


def _require_coordinates(lat: Any, lng: Any, source: DataSource, raw: Any) -> Coordinates:
    try:
        latitude = float(lat)
        longitude = float(lng)
    except (TypeError, ValueError) as e:
        raise MalformedRecordError(f"unusable coordinates ({lat!r}, {lng!r})", source=source.value, record=raw) from e

    # Upstream registries encode "unknown" as 0
    if latitude == 0.0 or longitude == 0.0 or not is_valid_coordinate(latitude, longitude):
        raise MalformedRecordError(f"unusable coordinates ({lat!r}, {lng!r})", source=source.value, record=raw)
    return Coordinates(latitude, longitude)


def _optional_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _optional_int(value: Any) -> int | None:
    number = _optional_float(value)
    return int(number) if number is not None else None


def stable_id(source: DataSource, provider_id: Any, name: str, coordinates: Coordinates) -> str:
    """``source:providerId``; falls back to name + rounded coordinates when the provider has no id."""
    pid = _text(provider_id)
    if pid is None:
        pid = f"{name.lower()}@{coordinates.latitude:.6f},{coordinates.longitude:.6f}"
    return f"{source.value}:{pid}"


def _place(
    *,
    source: DataSource,
    provider_id: Any,
    name: str,
    config: CategoryConfig,
    coordinates: Coordinates,
    origin: Coordinates,
    settings: SearchSettings,
    **metadata: Any,
) -> Entry:
    distance = distance_meters(
        origin.latitude,
        origin.longitude,
        coordinates.latitude,
        coordinates.longitude,
    )
    return Entry(
        id=stable_id(source, provider_id, name, coordinates),
        name=name,
        kind=config.kind,
        coordinates=coordinates,
        is_free=config.is_free,
        distance_meters=distance,
        urgency_bucket=urgency_bucket(distance, settings),
        source=source,
        category=config.key,
        **metadata,
    )


# =============================================================================
# Per-source normalizers
# =============================================================================


class SeoulToiletNormalizer:
    """Seoul Open Data public toilet rows."""

    source = DataSource.SEOUL_PUBLIC

    def normalize(self, raw: Mapping[str, Any], origin: Coordinates, settings: SearchSettings) -> Entry:
        name = _require_name(raw, "FNAME", self.source)
        coordinates = _require_coordinates(raw.get("Y_WGS84"), raw.get("X_WGS84"), self.source, raw)

        area = _text(raw.get("ANAME")) or ""
        category_key = PUBLIC_PRIVATE_CATEGORY if PRIVATE_OPERATED_MARKER in area else PUBLIC_CATEGORY
        config = get_category(category_key)
        if config is None:
            raise MalformedRecordError(f"unknown category {category_key!r}", source=self.source.value, record=raw)

        return _place(
            source=self.source,
            provider_id=raw.get("POI_ID"),
            name=name,
            config=config,
            coordinates=coordinates,
            origin=origin,
            settings=settings,
            address=ADDRESS_PLACEHOLDER,
            hours=PUBLIC_HOURS,
            facilities=Facilities(disabled_access=True, baby_changing=False, separate_gender=True),
        )


class GooglePlaceNormalizer:
    """Google Places Nearby Search results tagged with a catalog ``category``."""

    source = DataSource.GOOGLE_PLACES

    def normalize(self, raw: Mapping[str, Any], origin: Coordinates, settings: SearchSettings) -> Entry:
        name = _require_name(raw, "name", self.source)

        geometry = raw.get("geometry")
        location = geometry.get("location") if isinstance(geometry, Mapping) else None
        if not isinstance(location, Mapping):
            raise MalformedRecordError("missing geometry.location", source=self.source.value, record=raw)
        coordinates = _require_coordinates(location.get("lat"), location.get("lng"), self.source, raw)

        category_key = _text(raw.get("category")) or "cafe"
        config = get_category(category_key)
        if config is None or config.kind is not EntryKind.COMMERCIAL_VENUE:
            raise MalformedRecordError(f"unknown venue category {category_key!r}", source=self.source.value, record=raw)

        opening_hours = raw.get("opening_hours")
        weekday_text = opening_hours.get("weekday_text") if isinstance(opening_hours, Mapping) else None
        hours = ", ".join(weekday_text) if weekday_text else (_text(raw.get("business_status")) or HOURS_UNKNOWN)

        wheelchair = raw.get("wheelchair_accessible_entrance")

        return _place(
            source=self.source,
            provider_id=raw.get("place_id"),
            name=name,
            config=config,
            coordinates=coordinates,
            origin=origin,
            settings=settings,
            address=_text(raw.get("formatted_address")) or _text(raw.get("vicinity")) or ADDRESS_PLACEHOLDER,
            rating=_optional_float(raw.get("rating")),
            price_tier=_optional_int(raw.get("price_level")),
            hours=hours,
            phone=_text(raw.get("formatted_phone_number")),
            facilities=Facilities(
                disabled_access=wheelchair if isinstance(wheelchair, bool) else None,
                separate_gender=True,
            ),
        )


class SampleNormalizer:
    """Built-in sample records: ``id, name, category, lat, lng`` plus optional metadata."""

    source = DataSource.SAMPLE

    def normalize(self, raw: Mapping[str, Any], origin: Coordinates, settings: SearchSettings) -> Entry:
        name = _require_name(raw, "name", self.source)
        coordinates = _require_coordinates(raw.get("lat"), raw.get("lng"), self.source, raw)

        category_key = _text(raw.get("category")) or PUBLIC_CATEGORY
        config = get_category(category_key)
        if config is None:
            raise MalformedRecordError(f"unknown category {category_key!r}", source=self.source.value, record=raw)

        return _place(
            source=self.source,
            provider_id=raw.get("id"),
            name=name,
            config=config,
            coordinates=coordinates,
            origin=origin,
            settings=settings,
            address=_text(raw.get("address")) or ADDRESS_PLACEHOLDER,
            rating=_optional_float(raw.get("rating")),
            price_tier=_optional_int(raw.get("price_level")),
            hours=_text(raw.get("hours")),
            facilities=Facilities(
                disabled_access=bool(raw.get("disabled_access", False)),
                baby_changing=bool(raw.get("baby_changing", False)),
                separate_gender=True,
            ),
        )


DEFAULT_NORMALIZERS: dict[DataSource, RecordNormalizer] = {
    DataSource.SEOUL_PUBLIC: SeoulToiletNormalizer(),
    DataSource.GOOGLE_PLACES: GooglePlaceNormalizer(),
    DataSource.SAMPLE: SampleNormalizer(),
}


class Normalizer:
    """
    Dispatches raw records to the normalizer registered for their source.

    Usage:
        normalizer = Normalizer()
        entries = normalizer.normalize_batch(DataSource.SEOUL_PUBLIC, rows, origin)
    """

    def __init__(
        self,
        normalizers: Mapping[DataSource, RecordNormalizer] | None = None,
        settings: SearchSettings = DEFAULT_SETTINGS,
    ) -> None:
        self._normalizers = dict(normalizers or DEFAULT_NORMALIZERS)
        self._settings = settings

    def supports(self, source: DataSource) -> bool:
        return source in self._normalizers

    def normalize(self, source: DataSource, raw: Mapping[str, Any], origin: Coordinates) -> Entry | None:
        """Normalize one record; returns None (and logs the reason) for malformed records."""
        normalizer = self._normalizers.get(source)
        if normalizer is None:
            raise KeyError(f"No normalizer registered for source {source.value!r}")

        if not isinstance(raw, Mapping):
            logger.debug(f"Skipping non-mapping record from {source.value}: {raw!r}")
            return None

        try:
            return normalizer.normalize(raw, origin, self._settings)
        except MalformedRecordError as e:
            logger.debug(f"Skipping record: {e}")
            return None

    def normalize_batch(
        self,
        source: DataSource,
        records: Iterable[Mapping[str, Any]],
        origin: Coordinates,
    ) -> list[Entry]:
        entries: list[Entry] = []
        skipped = 0
        for raw in records:
            entry = self.normalize(source, raw, origin)
            if entry is None:
                skipped += 1
                continue
            entries.append(entry)

        if skipped:
            logger.debug(f"{source.value}: skipped {skipped} malformed records")
        return entries
