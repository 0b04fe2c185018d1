"""
Filter Pipeline - user inclusion rules.

Every rule is an independent predicate over a single entry, so the
predicates commute: any application order yields the same set, and
applying them all at once preserves the ranked order of the input.
Filtering never raises; an empty output is a valid EmptyResult.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from restroom_search.domain.entities import Entry, EntryKind, FilterSet

logger = logging.getLogger(__name__)

Predicate = Callable[[Entry], bool]


def kind_predicate(filters: FilterSet) -> Predicate:
    excluded: set[EntryKind] = set()
    if not filters.include_public:
        excluded.add(EntryKind.PUBLIC_FACILITY)
    if not filters.include_commercial:
        excluded.add(EntryKind.COMMERCIAL_VENUE)
    return lambda entry: entry.kind not in excluded


def free_predicate(filters: FilterSet) -> Predicate:
    return lambda entry: entry.is_free or not filters.only_free


def quality_predicate(filters: FilterSet) -> Predicate:
    return lambda entry: entry.quality_score >= filters.min_quality


def distance_predicate(filters: FilterSet) -> Predicate:
    if filters.max_distance is None:
        return lambda entry: True
    limit = filters.max_distance
    return lambda entry: entry.distance_meters <= limit


class FilterPipeline:
    """
    Applies a FilterSet to a ranked list.

    Usage:
        pipeline = FilterPipeline()
        visible = pipeline.apply(ranked, FilterSet(only_free=True, min_quality=2))
    """

    def predicates(self, filters: FilterSet) -> list[Predicate]:
        return [
            kind_predicate(filters),
            free_predicate(filters),
            quality_predicate(filters),
            distance_predicate(filters),
        ]

    def apply(self, entries: list[Entry], filters: FilterSet) -> list[Entry]:
        predicates = self.predicates(filters)
        kept = [e for e in entries if all(p(e) for p in predicates)]
        if len(kept) != len(entries):
            logger.debug(f"Filters dropped {len(entries) - len(kept)} of {len(entries)} entries")
        return kept
