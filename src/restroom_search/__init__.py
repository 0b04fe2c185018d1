"""
Restroom Search - nearby restroom aggregation and ranking.

Merges a public-facility registry and a commercial-venue directory into a
single ranked, deduplicated result list tailored to how urgently the user
needs a restroom.

Usage:
    from restroom_search import SearchOrchestrator
    from restroom_search.infrastructure import GooglePlacesClient, SeoulPublicToiletClient

    orchestrator = SearchOrchestrator([
        SeoulPublicToiletClient(api_key="..."),
        GooglePlacesClient(api_key="..."),
    ])
    envelope = await orchestrator.search(37.4979, 127.0276, urgency="emergency")

    for entry in envelope.entries:
        print(f"{entry.name}: {entry.distance_meters:.0f}m")
"""

from .application.search import SearchOrchestrator
from .config import SearchSettings
from .domain.entities import Entry, FilterSet, ResultEnvelope, SearchQuery

__version__ = "0.1.0"

__all__ = [
    "SearchOrchestrator",
    "SearchSettings",
    "Entry",
    "FilterSet",
    "ResultEnvelope",
    "SearchQuery",
]
