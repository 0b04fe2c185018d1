"""
Deduplicator - collapse near-identical entries across and within sources.

A candidate is rejected when, against any already-accepted entry:
    1. its trimmed, lower-cased name is identical, or
    2. it lies strictly within the proximity threshold (50 m by default)
       and its first whitespace-delimited name token occurs in the
       accepted entry's lower-cased name.

First-seen wins, so the result depends on input order. The orchestrator
feeds public facilities first, then commercial venues in adapter order.

Known false-positive risk: rule 2 merges unrelated venues that share a
common first word (two different "Central ..." shops next to each other).
The heuristic is kept as-is pending product guidance.
"""

from __future__ import annotations

import logging

from restroom_search.config import DEFAULT_SETTINGS, SearchSettings
from restroom_search.domain.entities import Entry

from .geo import distance_meters

logger = logging.getLogger(__name__)


def normalized_name(name: str) -> str:
    return name.strip().lower()


def first_token(name: str) -> str:
    tokens = name.strip().lower().split()
    return tokens[0] if tokens else ""


class Deduplicator:
    """First-seen-wins duplicate removal. Idempotent: ``dedup(dedup(L)) == dedup(L)``."""

    def __init__(self, settings: SearchSettings = DEFAULT_SETTINGS) -> None:
        self._proximity = settings.dedup_proximity_meters

    def is_duplicate(self, candidate: Entry, accepted: Entry) -> bool:
        if normalized_name(candidate.name) == normalized_name(accepted.name):
            return True

        token = first_token(candidate.name)
        if not token or token not in normalized_name(accepted.name):
            return False

        gap = distance_meters(
            candidate.coordinates.latitude,
            candidate.coordinates.longitude,
            accepted.coordinates.latitude,
            accepted.coordinates.longitude,
        )
        return gap < self._proximity

    def deduplicate(self, entries: list[Entry]) -> list[Entry]:
        accepted: list[Entry] = []
        seen_names: set[str] = set()

        for candidate in entries:
            key = normalized_name(candidate.name)
            if key in seen_names:
                logger.debug(f"Duplicate dropped (same name): {candidate.id} {candidate.name!r}")
                continue

            match = next((a for a in accepted if self.is_duplicate(candidate, a)), None)
            if match is not None:
                logger.debug(f"Duplicate dropped (near {match.id}): {candidate.id} {candidate.name!r}")
                continue

            accepted.append(candidate)
            seen_names.add(key)

        if len(accepted) != len(entries):
            logger.debug(f"Deduplicated {len(entries)} → {len(accepted)} entries")
        return accepted
