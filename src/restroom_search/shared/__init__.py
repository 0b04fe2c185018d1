"""
Shared kernel for Restroom Search.

Provides:
- Unified exception hierarchy
- Async utilities for concurrent adapter calls
"""

from .async_utils import CircuitBreaker, gather_settled
from .exceptions import (
    AdapterError,
    ConfigurationError,
    DataError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    InvalidCoordinateError,
    InvalidParameterError,
    MalformedRecordError,
    NetworkError,
    RateLimitError,
    RestroomSearchError,
    ServiceUnavailableError,
    UpstreamResponseError,
    ValidationError,
)

__all__ = [
    # Exceptions
    "RestroomSearchError",
    "ErrorContext",
    "ErrorSeverity",
    "ErrorCategory",
    "AdapterError",
    "RateLimitError",
    "NetworkError",
    "ServiceUnavailableError",
    "UpstreamResponseError",
    "ValidationError",
    "InvalidCoordinateError",
    "InvalidParameterError",
    "DataError",
    "MalformedRecordError",
    "ConfigurationError",
    # Async utilities
    "gather_settled",
    "CircuitBreaker",
]
