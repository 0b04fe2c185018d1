"""
Source Adapters

One adapter per upstream provider. Each returns raw provider records for
the normalizer or raises an AdapterError subclass; none of them return
partial results on failure.

- SeoulPublicToiletClient: public-facility registry (Seoul Open Data)
- GooglePlacesClient: commercial-venue directory (Places Nearby Search)
"""

from .base_client import BaseAPIClient
from .google_places import GooglePlacesClient
from .seoul_toilets import SeoulPublicToiletClient

__all__ = [
    "BaseAPIClient",
    "GooglePlacesClient",
    "SeoulPublicToiletClient",
]
