"""
Application DI Container (dependency-injector).

Builds the settings, source adapters and orchestrator once per process.
Adapters receive their credentials and HTTP configuration here, at
construction time; nothing else in the package holds a module-level client.

Usage::

    from restroom_search.container import ApplicationContainer

    container = ApplicationContainer()
    container.config.from_dict({
        "seoul_api_key": "...",
        "google_places_api_key": "...",
        "http_timeout": 10.0,
        "seoul_max_pages": None,  # None scans the whole registry
    })

    orchestrator = container.orchestrator()

    # In tests, override any provider:
    container.seoul_client.override(providers.Object(fake_registry))
"""

from __future__ import annotations

import logging

from dependency_injector import containers, providers

from restroom_search.config import SearchSettings

logger = logging.getLogger(__name__)


def _create_seoul_client(api_key: str | None, timeout: float | None, max_pages: int | None = None) -> object:
    """Lazy factory for the public toilet registry adapter."""
    from restroom_search.infrastructure.sources import SeoulPublicToiletClient

    if not api_key:
        logger.warning("SEOUL_API_KEY not configured; public facility search will fail over to other sources")
    return SeoulPublicToiletClient(api_key=api_key, timeout=timeout or 10.0, max_pages=max_pages)


def _create_places_client(api_key: str | None, timeout: float | None) -> object:
    """Lazy factory for the commercial venue directory adapter."""
    from restroom_search.infrastructure.sources import GooglePlacesClient

    if not api_key:
        logger.warning("GOOGLE_PLACES_API_KEY not configured; commercial venue search will fail over to other sources")
    return GooglePlacesClient(api_key=api_key, timeout=timeout or 10.0)


def _create_orchestrator(seoul_client: object, places_client: object, settings: SearchSettings) -> object:
    """Lazy factory for SearchOrchestrator; adapters are listed public first."""
    from restroom_search.application.search import SearchOrchestrator

    return SearchOrchestrator([seoul_client, places_client], settings=settings)  # type: ignore[list-item]


class ApplicationContainer(containers.DeclarativeContainer):
    """Central DI container for the Restroom Search MCP application.

    Manages creation and lifecycle of:
    - ``settings``: tunable thresholds (``SearchSettings.from_env``)
    - ``seoul_client``: public-facility registry adapter
    - ``places_client``: commercial-venue directory adapter
    - ``orchestrator``: the search aggregation engine
    """

    config = providers.Configuration()

    settings = providers.Singleton(SearchSettings.from_env)

    seoul_client = providers.Singleton(
        _create_seoul_client,
        api_key=config.seoul_api_key,
        timeout=config.http_timeout,
        max_pages=config.seoul_max_pages,
    )

    places_client = providers.Singleton(
        _create_places_client,
        api_key=config.google_places_api_key,
        timeout=config.http_timeout,
    )

    orchestrator = providers.Singleton(
        _create_orchestrator,
        seoul_client=seoul_client,
        places_client=places_client,
        settings=settings,
    )


__all__ = ["ApplicationContainer"]
