"""Domain entities for restroom search."""

from .entry import Coordinates, DataSource, Entry, EntryKind, Facilities, UrgencyBucket
from .search import (
    EMPTY_RESULT_MESSAGE,
    FilterSet,
    ResultEnvelope,
    SearchQuery,
    SearchState,
    SearchStats,
    SourceCounts,
)

__all__ = [
    "Coordinates",
    "DataSource",
    "Entry",
    "EntryKind",
    "Facilities",
    "UrgencyBucket",
    "EMPTY_RESULT_MESSAGE",
    "FilterSet",
    "ResultEnvelope",
    "SearchQuery",
    "SearchState",
    "SearchStats",
    "SourceCounts",
]
