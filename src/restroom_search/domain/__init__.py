"""
Domain layer - entities and value objects, free of I/O.
"""

from .entities import (
    Coordinates,
    DataSource,
    Entry,
    EntryKind,
    Facilities,
    FilterSet,
    ResultEnvelope,
    SearchQuery,
    SearchState,
    SearchStats,
    SourceCounts,
    UrgencyBucket,
)

__all__ = [
    "Coordinates",
    "DataSource",
    "Entry",
    "EntryKind",
    "Facilities",
    "FilterSet",
    "ResultEnvelope",
    "SearchQuery",
    "SearchState",
    "SearchStats",
    "SourceCounts",
    "UrgencyBucket",
]
