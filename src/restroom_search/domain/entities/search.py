"""
Search value objects: query input, filter set and result envelope.

SearchQuery and FilterSet are immutable for the duration of one
orchestration call. ResultEnvelope is the only externally visible output
of the engine.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .entry import Coordinates, Entry


class SearchState(Enum):
    """Orchestration state machine: Idle → Fetching → Normalizing → Ranking → Done | Failed."""

    IDLE = "idle"
    FETCHING = "fetching"
    NORMALIZING = "normalizing"
    RANKING = "ranking"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class FilterSet:
    """
    User inclusion rules. Every rule is an independent predicate, so the
    order they are applied in does not change the result.
    """

    include_public: bool = True
    include_commercial: bool = True
    only_free: bool = False
    min_quality: int = 1
    max_distance: float | None = 1000.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "include_public": self.include_public,
            "include_commercial": self.include_commercial,
            "only_free": self.only_free,
            "min_quality": self.min_quality,
            "max_distance": self.max_distance,
        }


@dataclass(frozen=True)
class SearchQuery:
    """Ephemeral search input."""

    coordinates: Coordinates
    urgency: str = "moderate"
    radius_meters: float = 500.0
    filters: FilterSet = field(default_factory=FilterSet)
    categories: tuple[str, ...] = ()

    @property
    def latitude(self) -> float:
        return self.coordinates.latitude

    @property
    def longitude(self) -> float:
        return self.coordinates.longitude


@dataclass(frozen=True)
class SourceCounts:
    """Per-kind counts taken at the normalizer output, before filtering."""

    public_count: int = 0
    commercial_count: int = 0

    @property
    def total(self) -> int:
        return self.public_count + self.commercial_count

    def to_dict(self) -> dict[str, int]:
        return {"public": self.public_count, "commercial": self.commercial_count}


@dataclass(frozen=True)
class SearchStats:
    """Summary statistics over a result list."""

    total: int = 0
    by_kind: dict[str, int] = field(default_factory=dict)
    by_urgency: dict[str, int] = field(default_factory=lambda: {"high": 0, "medium": 0, "low": 0})
    by_source: dict[str, int] = field(default_factory=dict)
    average_distance: int = 0
    quality_distribution: dict[str, int] = field(default_factory=lambda: {"high": 0, "medium": 0, "low": 0})

    @classmethod
    def from_entries(cls, entries: list[Entry] | tuple[Entry, ...]) -> SearchStats:
        if not entries:
            return cls()

        by_urgency = {"high": 0, "medium": 0, "low": 0}
        quality = {"high": 0, "medium": 0, "low": 0}
        for entry in entries:
            by_urgency[entry.urgency_bucket.value] += 1
            if entry.quality_score >= 3:
                quality["high"] += 1
            elif entry.quality_score >= 2:
                quality["medium"] += 1
            else:
                quality["low"] += 1

        return cls(
            total=len(entries),
            by_kind=dict(Counter(e.kind.value for e in entries)),
            by_urgency=by_urgency,
            by_source=dict(Counter(e.source.value for e in entries)),
            average_distance=round(sum(e.distance_meters for e in entries) / len(entries)),
            quality_distribution=quality,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "by_kind": self.by_kind,
            "by_urgency": self.by_urgency,
            "by_source": self.by_source,
            "average_distance": self.average_distance,
            "quality_distribution": self.quality_distribution,
        }


EMPTY_RESULT_MESSAGE = "Nothing nearby, try widening your search."


@dataclass(frozen=True)
class ResultEnvelope:
    """
    Outcome of one search.

    - Done: ``success=True``; ``entries`` may be empty (EmptyResult, not an error).
    - Failed: ``success=False`` with ``error_message`` and a non-empty
      built-in fallback list in ``entries`` (``is_fallback=True``).
    """

    success: bool
    entries: tuple[Entry, ...]
    source_counts: SourceCounts
    state: SearchState
    error_message: str | None = None
    is_fallback: bool = False
    failed_sources: tuple[str, ...] = ()
    stats: SearchStats = field(default_factory=SearchStats)

    @property
    def is_empty(self) -> bool:
        """True for a successful search that found nothing after filtering."""
        return self.success and not self.entries

    @property
    def message(self) -> str:
        """User-visible summary, distinct for EmptyResult and TotalFailure."""
        if not self.success:
            return f"Search failed: {self.error_message}. Showing sample locations instead."
        if not self.entries:
            return EMPTY_RESULT_MESSAGE
        return (
            f"Found {len(self.entries)} restrooms "
            f"(public {self.source_counts.public_count}, commercial {self.source_counts.commercial_count})."
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "success": self.success,
            "state": self.state.value,
            "message": self.message,
            "entries": [e.to_dict() for e in self.entries],
            "source_counts": self.source_counts.to_dict(),
            "stats": self.stats.to_dict(),
        }
        if self.failed_sources:
            result["failed_sources"] = list(self.failed_sources)
        if not self.success:
            result["error_message"] = self.error_message
            result["is_fallback"] = self.is_fallback
        return result
