"""
Infrastructure Layer - External Systems Integration

Contains:
- sources: upstream data providers (Seoul Open Data, Google Places)
"""

from .sources import BaseAPIClient, GooglePlacesClient, SeoulPublicToiletClient

__all__ = [
    "BaseAPIClient",
    "GooglePlacesClient",
    "SeoulPublicToiletClient",
]
