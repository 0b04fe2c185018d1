"""
Search Aggregation Engine

Merges the public-facility registry and the commercial-venue directory
into one ranked, deduplicated result list.

Architecture:
    SearchQuery
        │
        ▼
    ┌──────────────────────┐
    │  SearchOrchestrator  │  ← validates, fans out, all-settled join
    └──────────┬───────────┘
               │
        ┌──────┴──────┐
        ▼             ▼
    Seoul toilets  Google Places   ← parallel, fail independently
        │             │
        └──────┬──────┘
               ▼
    Normalizer → Deduplicator → QualityScorer → UrgencyRanker → FilterPipeline
               │
               ▼
    ResultEnvelope
"""

from __future__ import annotations

from .categories import CATEGORY_CATALOG, CategoryConfig, commercial_categories, get_category, quality_description
from .deduplicator import Deduplicator
from .filters import FilterPipeline
from .geo import distance_meters, is_valid_coordinate, walk_minutes
from .normalizer import Normalizer
from .orchestrator import SearchOrchestrator, SourceAdapter
from .quality import QualityScorer, compute_quality, urgency_bucket
from .ranking import URGENCY_PROFILES, UrgencyProfile, UrgencyRanker, get_profile, urgency_score

__all__ = [
    # Orchestration
    "SearchOrchestrator",
    "SourceAdapter",
    # Pipeline stages
    "Normalizer",
    "Deduplicator",
    "QualityScorer",
    "UrgencyRanker",
    "FilterPipeline",
    # Catalogs
    "CATEGORY_CATALOG",
    "CategoryConfig",
    "URGENCY_PROFILES",
    "UrgencyProfile",
    "commercial_categories",
    "get_category",
    "get_profile",
    "quality_description",
    # Pure functions
    "distance_meters",
    "walk_minutes",
    "is_valid_coordinate",
    "compute_quality",
    "urgency_bucket",
    "urgency_score",
]
