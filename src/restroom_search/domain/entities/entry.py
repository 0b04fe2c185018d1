"""
Entry - Canonical Restroom Location Model

One discoverable restroom-providing location, normalized from either the
public-facility registry or the commercial-venue directory.

Lifecycle:
    Entries are created fresh for every search from raw provider data,
    refined stage by stage with ``dataclasses.replace`` (scoring, ranking)
    and discarded when the search completes. They are frozen: nothing
    mutates an Entry after it leaves the ranker.

Example:
    >>> entry = Entry(
    ...     id="seoul_public_toilets:POI-1",
    ...     name="Seoul City Hall Restroom",
    ...     kind=EntryKind.PUBLIC_FACILITY,
    ...     coordinates=Coordinates(37.5665, 126.9780),
    ...     address="Address unavailable",
    ...     is_free=True,
    ...     distance_meters=120.0,
    ...     urgency_bucket=UrgencyBucket.HIGH,
    ...     source=DataSource.SEOUL_PUBLIC,
    ...     category="public",
    ... )
    >>> entry.is_public
    True
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class EntryKind(Enum):
    """What kind of place provides the restroom."""

    PUBLIC_FACILITY = "public"
    COMMERCIAL_VENUE = "commercial"

    @property
    def priority(self) -> int:
        """Ordering used for source priority: public before commercial."""
        return 0 if self is EntryKind.PUBLIC_FACILITY else 1


class DataSource(Enum):
    """Originating adapter of an Entry."""

    SEOUL_PUBLIC = "seoul_public_toilets"
    GOOGLE_PLACES = "google_places"
    SAMPLE = "sample"


class UrgencyBucket(Enum):
    """Coarse distance label, independent of the active urgency profile."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True, slots=True)
class Coordinates:
    """WGS84 latitude/longitude pair in degrees."""

    latitude: float
    longitude: float

    def as_tuple(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(frozen=True, slots=True)
class Facilities:
    """Accessibility flags. ``None`` means the source does not say."""

    disabled_access: bool | None = None
    baby_changing: bool | None = None
    separate_gender: bool | None = None

    def to_dict(self) -> dict[str, bool | None]:
        return {
            "disabled_access": self.disabled_access,
            "baby_changing": self.baby_changing,
            "separate_gender": self.separate_gender,
        }


@dataclass(frozen=True, slots=True)
class Entry:
    """
    One normalized, rankable restroom-providing location.

    ``quality_score`` is the public 1-5 integer; ``quality_precise`` keeps the
    clamped fractional value the scorer computed, used only to break ties.
    ``urgency_score`` depends on the active urgency profile and is never
    carried across queries.
    """

    id: str
    name: str
    kind: EntryKind
    coordinates: Coordinates
    address: str
    is_free: bool
    distance_meters: float
    urgency_bucket: UrgencyBucket
    source: DataSource
    category: str
    quality_score: int = 1
    quality_precise: float = 1.0
    urgency_score: float = 0.0
    rating: float | None = None
    price_tier: int | None = None
    hours: str | None = None
    phone: str | None = None
    facilities: Facilities | None = None

    @property
    def is_public(self) -> bool:
        return self.kind is EntryKind.PUBLIC_FACILITY

    @property
    def is_commercial(self) -> bool:
        return self.kind is EntryKind.COMMERCIAL_VENUE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind.value,
            "category": self.category,
            "coordinates": {
                "lat": self.coordinates.latitude,
                "lng": self.coordinates.longitude,
            },
            "address": self.address,
            "is_free": self.is_free,
            "quality_score": self.quality_score,
            "distance_meters": round(self.distance_meters, 1),
            "urgency_bucket": self.urgency_bucket.value,
            "urgency_score": round(self.urgency_score, 2),
            "source": self.source.value,
            "rating": self.rating,
            "price_tier": self.price_tier,
            "hours": self.hours,
            "phone": self.phone,
            "facilities": self.facilities.to_dict() if self.facilities else None,
        }
