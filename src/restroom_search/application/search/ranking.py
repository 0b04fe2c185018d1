"""
Urgency Ranker - profile-weighted composite score and final ordering.

    score = max(0, ceiling - distance) * distance_weight
          + (quality_score * 100) * quality_weight

The ceiling is 1000 m by default. Ordering is descending by score; ties
are broken by ascending distance, then public before commercial, then by
the fractional quality, then by name, so the order is fully deterministic.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Any

from restroom_search.config import DEFAULT_SETTINGS, SearchSettings
from restroom_search.domain.entities import Entry

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_KEY = "moderate"


@dataclass(frozen=True)
class UrgencyProfile:
    """Named (distance, quality) weighting with a default search radius."""

    key: str
    label: str
    description: str
    distance_weight: float
    quality_weight: float
    radius: float
    default_categories: tuple[str, ...]

    def __post_init__(self) -> None:
        if not math.isclose(self.distance_weight + self.quality_weight, 1.0):
            raise ValueError(f"Profile {self.key!r} weights must sum to 1.0")

    def effective_radius(self, max_distance: float | None) -> float:
        """Default search radius, capped by the user's max distance filter."""
        if max_distance is None:
            return self.radius
        return min(self.radius, max_distance)

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "description": self.description,
            "distance_weight": self.distance_weight,
            "quality_weight": self.quality_weight,
            "radius": self.radius,
            "default_categories": list(self.default_categories),
        }


URGENCY_PROFILES: dict[str, UrgencyProfile] = {
    "emergency": UrgencyProfile(
        key="emergency",
        label="Emergency",
        description="Nearest restroom first, quality barely matters",
        distance_weight=0.9,
        quality_weight=0.1,
        radius=300,
        default_categories=("starbucks", "twosome", "ediya"),
    ),
    "moderate": UrgencyProfile(
        key="moderate",
        label="Moderate",
        description="Balance distance and quality",
        distance_weight=0.6,
        quality_weight=0.4,
        radius=500,
        default_categories=("starbucks", "twosome", "ediya", "cafe"),
    ),
    "relaxed": UrgencyProfile(
        key="relaxed",
        label="Relaxed",
        description="Willing to walk further for a cleaner restroom",
        distance_weight=0.3,
        quality_weight=0.7,
        radius=1000,
        default_categories=("starbucks", "twosome", "ediya", "cafe", "department_store"),
    ),
}


def get_profile(key: str | None) -> UrgencyProfile:
    """Look up a profile; unknown keys fall back to ``moderate``."""
    profile = URGENCY_PROFILES.get((key or "").strip().lower())
    if profile is None:
        logger.debug(f"Unknown urgency profile {key!r}, using {DEFAULT_PROFILE_KEY}")
        return URGENCY_PROFILES[DEFAULT_PROFILE_KEY]
    return profile


def urgency_score(
    distance: float,
    quality_score: int,
    profile: UrgencyProfile,
    ceiling: float = DEFAULT_SETTINGS.distance_score_ceiling,
) -> float:
    distance_part = max(0.0, ceiling - distance) * profile.distance_weight
    quality_part = (quality_score * 100) * profile.quality_weight
    return distance_part + quality_part


def _sort_key(entry: Entry) -> tuple[float, float, int, float, str, str]:
    return (
        -entry.urgency_score,
        entry.distance_meters,
        entry.kind.priority,
        -entry.quality_precise,
        entry.name.lower(),
        entry.id,
    )


class UrgencyRanker:
    """Scores entries under a profile and sorts them."""

    def __init__(self, settings: SearchSettings = DEFAULT_SETTINGS) -> None:
        self._settings = settings

    def score(self, entry: Entry, profile: UrgencyProfile) -> Entry:
        value = urgency_score(
            entry.distance_meters,
            entry.quality_score,
            profile,
            ceiling=self._settings.distance_score_ceiling,
        )
        return replace(entry, urgency_score=value)

    def rank(self, entries: list[Entry], profile: UrgencyProfile) -> list[Entry]:
        scored = [self.score(e, profile) for e in entries]
        scored.sort(key=_sort_key)
        return scored
