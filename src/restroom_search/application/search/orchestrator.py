"""
Search Orchestrator - entry point of the aggregation engine.

    search(latitude, longitude, urgency, radius, filters, categories)
        → ResultEnvelope

State machine per invocation:

    IDLE → FETCHING → NORMALIZING → RANKING → DONE
                                            ↘ FAILED

FETCHING issues one call per enabled adapter concurrently and waits for
all of them to settle; one adapter failing never aborts the others.
Results are joined in canonical source order (public adapters first,
then commercial, each group in the order the adapters were given) before
deduplication, so first-seen-wins is deterministic.

Everything after FETCHING is synchronous:
    Normalizer → Deduplicator → Quality Scorer → Urgency Ranker → Filter Pipeline

FAILED is only reached when every issued adapter failed, or when an
unexpected exception escapes the synchronous stages. The envelope then
carries a built-in sample list so callers always have something to show.

Each invocation is stateless: no entry, distance or score is cached
between searches. Invalid input (bad coordinate, negative radius) is a
caller error and raises a ValidationError instead of producing an envelope.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from restroom_search.config import DEFAULT_SETTINGS, SearchSettings
from restroom_search.domain.entities import (
    Coordinates,
    DataSource,
    Entry,
    EntryKind,
    FilterSet,
    ResultEnvelope,
    SearchQuery,
    SearchState,
    SearchStats,
    SourceCounts,
)
from restroom_search.shared.async_utils import gather_settled
from restroom_search.shared.exceptions import (
    AdapterError,
    InvalidCoordinateError,
    InvalidParameterError,
)

from .categories import get_category
from .deduplicator import Deduplicator
from .filters import FilterPipeline
from .geo import is_valid_coordinate
from .normalizer import Normalizer
from .quality import MAX_QUALITY, MIN_QUALITY, QualityScorer
from .ranking import UrgencyRanker, get_profile
from .samples import sample_records

logger = logging.getLogger(__name__)


@runtime_checkable
class SourceAdapter(Protocol):
    """
    Collaborator contract for one upstream provider.

    ``search_near`` returns raw provider records, or raises. It must never
    return partial garbage; individually malformed records inside an
    otherwise good response are the normalizer's problem.
    """

    source: DataSource
    kind: EntryKind

    async def search_near(
        self,
        latitude: float,
        longitude: float,
        radius_meters: float,
        category_filter: Sequence[str] | None = None,
    ) -> list[dict[str, Any]]: ...

    async def close(self) -> None: ...


@dataclass(frozen=True)
class _Batch:
    """Settled result of one adapter call."""

    adapter: SourceAdapter
    records: list[dict[str, Any]] | None = None
    error: Exception | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class SearchOrchestrator:
    """
    Fans out to source adapters and runs the ranking pipeline.

    Usage:
        orchestrator = SearchOrchestrator([seoul_client, places_client])
        envelope = await orchestrator.search(37.4979, 127.0276, urgency="emergency")
        for entry in envelope.entries:
            print(entry.name, entry.distance_meters)
    """

    def __init__(
        self,
        adapters: Sequence[SourceAdapter],
        *,
        settings: SearchSettings = DEFAULT_SETTINGS,
        normalizer: Normalizer | None = None,
        deduplicator: Deduplicator | None = None,
        scorer: QualityScorer | None = None,
        ranker: UrgencyRanker | None = None,
        filters: FilterPipeline | None = None,
    ) -> None:
        # Stable sort: public before commercial, declaration order within a kind
        self._adapters = sorted(adapters, key=lambda a: a.kind.priority)
        self._settings = settings
        self._normalizer = normalizer or Normalizer(settings=settings)
        self._deduplicator = deduplicator or Deduplicator(settings)
        self._scorer = scorer or QualityScorer()
        self._ranker = ranker or UrgencyRanker(settings)
        self._filters = filters or FilterPipeline()

    @property
    def adapters(self) -> list[SourceAdapter]:
        """Adapters in canonical join order."""
        return list(self._adapters)

    @property
    def settings(self) -> SearchSettings:
        return self._settings

    # =========================================================================
    # Public API
    # =========================================================================

    def build_query(
        self,
        latitude: float,
        longitude: float,
        urgency: str = "moderate",
        radius_meters: float | None = None,
        filters: FilterSet | None = None,
        categories: Sequence[str] | None = None,
    ) -> SearchQuery:
        """
        Validate raw input into a SearchQuery.

        ``radius_meters=None`` means the profile's default radius capped by
        ``filters.max_distance``; ``categories=None`` means the profile's
        default commercial categories. An explicit empty list disables the
        commercial search.

        Raises:
            InvalidCoordinateError: Coordinate is non-finite or out of range
            InvalidParameterError: Radius, filter threshold or category is invalid
        """
        if not is_valid_coordinate(latitude, longitude):
            raise InvalidCoordinateError(latitude, longitude)

        filters = filters or FilterSet()
        _validate_filters(filters)

        profile = get_profile(urgency)
        if radius_meters is None:
            radius_meters = profile.effective_radius(filters.max_distance)
        if not _is_positive(radius_meters):
            raise InvalidParameterError("radius_meters", radius_meters, "a positive number of meters")

        if categories is None:
            enabled = profile.default_categories
        else:
            enabled = tuple(dict.fromkeys(c.strip().lower() for c in categories if c and c.strip()))
            for key in enabled:
                config = get_category(key)
                if config is None or config.kind is not EntryKind.COMMERCIAL_VENUE:
                    raise InvalidParameterError("categories", key, "a commercial venue category key")

        return SearchQuery(
            coordinates=Coordinates(float(latitude), float(longitude)),
            urgency=profile.key,
            radius_meters=float(radius_meters),
            filters=filters,
            categories=enabled,
        )

    async def search(
        self,
        latitude: float,
        longitude: float,
        urgency: str = "moderate",
        radius_meters: float | None = None,
        filters: FilterSet | None = None,
        categories: Sequence[str] | None = None,
    ) -> ResultEnvelope:
        """Validate input and run one search."""
        query = self.build_query(latitude, longitude, urgency, radius_meters, filters, categories)
        return await self.run(query)

    async def run(self, query: SearchQuery) -> ResultEnvelope:
        """Run one search for an already-validated query."""
        state = SearchState.IDLE
        adapters = self._enabled_adapters(query)
        logger.info(
            f"Searching near ({query.latitude:.5f}, {query.longitude:.5f}) "
            f"profile={query.urgency} radius={query.radius_meters:.0f}m "
            f"sources={[a.source.value for a in adapters]}"
        )

        state = _advance(state, SearchState.FETCHING)
        batches = await self._fetch(query, adapters)
        failed = [b for b in batches if b.failed]
        failed_sources = tuple(b.adapter.source.value for b in failed)

        if batches and len(failed) == len(batches):
            reasons = "; ".join(f"{b.adapter.source.value} ({b.error})" for b in failed)
            logger.error(f"All sources failed: {reasons}")
            return self.fallback(query, f"All sources failed: {reasons}", failed_sources)

        try:
            state = _advance(state, SearchState.NORMALIZING)
            entries, counts = self._normalize(query, batches)
            entries = self._deduplicator.deduplicate(entries)
            entries = self._scorer.score_all(entries)

            state = _advance(state, SearchState.RANKING)
            ranked = self._ranker.rank(entries, get_profile(query.urgency))
            visible = self._filters.apply(ranked, query.filters)
        except Exception as e:
            logger.error(f"Search failed while {state.value}: {e}", exc_info=True)
            return self.fallback(query, f"Unexpected error while {state.value}: {e}", failed_sources)

        state = _advance(state, SearchState.DONE)
        logger.info(
            f"Search done: public={counts.public_count} commercial={counts.commercial_count} "
            f"returned={len(visible)} failed={list(failed_sources)}"
        )
        return ResultEnvelope(
            success=True,
            entries=tuple(visible),
            source_counts=counts,
            state=state,
            failed_sources=failed_sources,
            stats=SearchStats.from_entries(visible),
        )

    def fallback(
        self,
        query: SearchQuery,
        error_message: str,
        failed_sources: tuple[str, ...] = (),
    ) -> ResultEnvelope:
        """Failed envelope carrying the built-in sample list around the query point."""
        records = sample_records(query.coordinates, self._settings.fallback_sample_size)
        samples = self._normalizer.normalize_batch(DataSource.SAMPLE, records, query.coordinates)
        samples = self._scorer.score_all(samples)
        samples = self._ranker.rank(samples, get_profile(query.urgency))

        return ResultEnvelope(
            success=False,
            entries=tuple(samples),
            source_counts=SourceCounts(),
            state=SearchState.FAILED,
            error_message=error_message,
            is_fallback=True,
            failed_sources=failed_sources,
            stats=SearchStats.from_entries(samples),
        )

    async def close(self) -> None:
        """Close every adapter's HTTP resources; one failing close does not stop the rest."""
        for adapter in self._adapters:
            try:
                await adapter.close()
            except Exception as e:
                logger.warning(f"Failed to close {adapter.source.value}: {e}")

    # =========================================================================
    # Stages
    # =========================================================================

    def _enabled_adapters(self, query: SearchQuery) -> list[SourceAdapter]:
        enabled = []
        for adapter in self._adapters:
            if adapter.kind is EntryKind.COMMERCIAL_VENUE:
                if not query.filters.include_commercial:
                    logger.debug(f"Skipping {adapter.source.value}: commercial venues excluded")
                    continue
                if not query.categories:
                    logger.debug(f"Skipping {adapter.source.value}: no venue categories enabled")
                    continue
            enabled.append(adapter)
        return enabled

    async def _fetch(self, query: SearchQuery, adapters: list[SourceAdapter]) -> list[_Batch]:
        results = await gather_settled(
            *(
                adapter.search_near(
                    query.latitude,
                    query.longitude,
                    query.radius_meters,
                    list(query.categories) if adapter.kind is EntryKind.COMMERCIAL_VENUE else None,
                )
                for adapter in adapters
            )
        )

        batches = []
        for adapter, result in zip(adapters, results, strict=True):
            if isinstance(result, Exception):
                if isinstance(result, AdapterError):
                    logger.warning(f"{adapter.source.value} failed: {result}")
                else:
                    logger.error(f"{adapter.source.value} failed unexpectedly: {result!r}")
                batches.append(_Batch(adapter, error=result))
            else:
                batches.append(_Batch(adapter, records=list(result or [])))
        return batches

    def _normalize(self, query: SearchQuery, batches: list[_Batch]) -> tuple[list[Entry], SourceCounts]:
        entries: list[Entry] = []
        for batch in batches:
            if batch.failed:
                continue
            normalized = self._normalizer.normalize_batch(batch.adapter.source, batch.records or [], query.coordinates)
            logger.info(f"{batch.adapter.source.value}: {len(normalized)} of {len(batch.records or [])} records usable")
            entries.extend(normalized)

        counts = SourceCounts(
            public_count=sum(1 for e in entries if e.kind is EntryKind.PUBLIC_FACILITY),
            commercial_count=sum(1 for e in entries if e.kind is EntryKind.COMMERCIAL_VENUE),
        )
        return entries, counts


def _advance(current: SearchState, target: SearchState) -> SearchState:
    logger.debug(f"Search state {current.value} → {target.value}")
    return target


def _is_positive(value: Any) -> bool:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(number) and number > 0


def _validate_filters(filters: FilterSet) -> None:
    if not MIN_QUALITY <= filters.min_quality <= MAX_QUALITY:
        raise InvalidParameterError("min_quality", filters.min_quality, "an integer between 1 and 5")
    if filters.max_distance is not None and not _is_positive(filters.max_distance):
        raise InvalidParameterError("max_distance", filters.max_distance, "a positive number of meters or None")
