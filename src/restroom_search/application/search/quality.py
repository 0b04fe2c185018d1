"""
Quality Scorer - 1-5 quality score per entry.

Score = category base score, adjusted by source signals:

    rating >= 4.5       → +0.5   (commercial venues only)
    rating >= 4.0       → +0.3
    rating <  3.0       → -0.3
    price tier <= 2     → +0.2   (cheaper is a lower barrier to use the restroom)

The result is clamped to [1, 5]. The clamped fractional value is kept for
tie-breaking; the public score is that value rounded half up.

Missing signals are skipped, not treated as zero.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace

from restroom_search.config import DEFAULT_SETTINGS, SearchSettings
from restroom_search.domain.entities import Entry, EntryKind, UrgencyBucket

from .categories import get_category

logger = logging.getLogger(__name__)

MIN_QUALITY = 1.0
MAX_QUALITY = 5.0
DEFAULT_BASE_QUALITY = 1.0


def urgency_bucket(distance: float, settings: SearchSettings = DEFAULT_SETTINGS) -> UrgencyBucket:
    """High below 300 m, Medium below 600 m, Low otherwise (thresholds from settings)."""
    if distance < settings.bucket_high_meters:
        return UrgencyBucket.HIGH
    if distance < settings.bucket_medium_meters:
        return UrgencyBucket.MEDIUM
    return UrgencyBucket.LOW


def clamp_quality(score: float) -> float:
    if math.isnan(score):
        return MIN_QUALITY
    return min(MAX_QUALITY, max(MIN_QUALITY, score))


def public_quality(precise: float) -> int:
    """Round a clamped fractional score half up to the public integer score."""
    return int(math.floor(clamp_quality(precise) + 0.5))


def compute_quality(
    base: float,
    kind: EntryKind,
    rating: float | None = None,
    price_tier: int | None = None,
) -> float:
    """Fractional quality in [1, 5] from a base score and source signals."""
    score = float(base)

    if kind is EntryKind.COMMERCIAL_VENUE and rating is not None:
        if rating >= 4.5:
            score += 0.5
        elif rating >= 4.0:
            score += 0.3
        elif rating < 3.0:
            score -= 0.3

    if price_tier is not None and price_tier <= 2:
        score += 0.2

    return clamp_quality(score)


class QualityScorer:
    """Assigns ``quality_score`` / ``quality_precise`` from the category catalog."""

    def base_score(self, entry: Entry) -> float:
        config = get_category(entry.category)
        if config is None:
            logger.debug(f"Unknown category {entry.category!r} for {entry.name!r}, using base {DEFAULT_BASE_QUALITY}")
            return DEFAULT_BASE_QUALITY
        return config.base_quality

    def score(self, entry: Entry) -> Entry:
        precise = compute_quality(
            self.base_score(entry),
            entry.kind,
            rating=entry.rating,
            price_tier=entry.price_tier,
        )
        return replace(entry, quality_precise=precise, quality_score=public_quality(precise))

    def score_all(self, entries: list[Entry]) -> list[Entry]:
        return [self.score(e) for e in entries]
