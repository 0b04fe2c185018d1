"""
Unified Exception Hierarchy for Restroom Search.

Exception Hierarchy:
    RestroomSearchError (base)
    ├── AdapterError
    │   ├── RateLimitError
    │   ├── NetworkError
    │   ├── ServiceUnavailableError
    │   └── UpstreamResponseError
    ├── ValidationError
    │   ├── InvalidCoordinateError
    │   └── InvalidParameterError
    ├── DataError
    │   └── MalformedRecordError
    └── ConfigurationError

AdapterError covers a single source failing (network, auth, quota). The
orchestrator recovers from it by dropping that source's contribution.
MalformedRecordError never leaves the normalizer.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Any


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    WARNING = auto()  # Recoverable, can continue
    ERROR = auto()  # Failed but can retry
    CRITICAL = auto()  # Cannot continue
    TRANSIENT = auto()  # Temporary, should retry automatically


class ErrorCategory(Enum):
    """Categories for error classification."""

    ADAPTER = "adapter"
    VALIDATION = "validation"
    DATA = "data"
    CONFIGURATION = "config"
    NETWORK = "network"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Rich context for error messages."""

    source: str | None = None
    operation: str | None = None
    input_value: Any = None
    suggestion: str | None = None
    example: str | None = None
    retry_after: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class RestroomSearchError(Exception):
    """
    Base exception for all Restroom Search errors.

    Provides:
    - Structured error context
    - Severity classification
    - Retry guidance
    - Agent-friendly formatting
    """

    __slots__ = ("context", "severity", "category", "retryable")

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        category: ErrorCategory = ErrorCategory.ADAPTER,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.context = context or ErrorContext()
        self.severity = severity
        self.category = category
        self.retryable = retryable

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "error": str(self),
            "category": self.category.value,
            "severity": self.severity.name.lower(),
            "retryable": self.retryable,
        }
        if self.context.source:
            result["source"] = self.context.source
        if self.context.suggestion:
            result["suggestion"] = self.context.suggestion
        if self.context.example:
            result["example"] = self.context.example
        if self.context.retry_after:
            result["retry_after_seconds"] = self.context.retry_after
        return result

    def to_agent_message(self) -> str:
        """Format for Agent consumption (Markdown)."""
        parts = [f"❌ **Error**: {self}"]

        if self.context.suggestion:
            parts.append(f"💡 **Suggestion**: {self.context.suggestion}")
        if self.context.example:
            parts.append(f"📝 **Example**: `{self.context.example}`")
        if self.retryable:
            if self.context.retry_after:
                parts.append(f"🔄 Retry after {self.context.retry_after:.1f} seconds")
            else:
                parts.append("🔄 This error is retryable")

        return "\n".join(parts)


# =============================================================================
# Adapter Errors
# =============================================================================


class AdapterError(RestroomSearchError):
    """A single source adapter failed. Recovered by excluding that source."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        context: ErrorContext | None = None,
        retryable: bool = True,
    ) -> None:
        ctx = context or ErrorContext()
        if source and not ctx.source:
            ctx = replace(ctx, source=source)
        super().__init__(
            message,
            context=ctx,
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.ADAPTER,
            retryable=retryable,
        )

    @property
    def source(self) -> str | None:
        return self.context.source


class RateLimitError(AdapterError):
    """Raised when an upstream quota or rate limit is exceeded."""

    def __init__(
        self,
        message: str = "API rate limit exceeded",
        *,
        source: str | None = None,
        retry_after: float = 1.0,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext()
        ctx = replace(
            ctx,
            suggestion=ctx.suggestion or "Wait and retry the request",
            retry_after=retry_after,
        )
        super().__init__(message, source=source, context=ctx, retryable=True)
        self.severity = ErrorSeverity.TRANSIENT


class NetworkError(AdapterError):
    """Raised for network connectivity issues and timeouts."""

    def __init__(
        self,
        message: str = "Network connection failed",
        *,
        source: str | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message, source=source, context=context, retryable=True)
        self.category = ErrorCategory.NETWORK


class ServiceUnavailableError(AdapterError):
    """Raised when the upstream service is temporarily unavailable."""

    def __init__(
        self,
        message: str = "Service temporarily unavailable",
        *,
        source: str | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(f"{source or 'upstream'}: {message}", source=source, context=context, retryable=True)
        self.severity = ErrorSeverity.TRANSIENT


class UpstreamResponseError(AdapterError):
    """Raised when the upstream answers with an error payload or an unusable shape."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        status: str | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext()
        if status:
            ctx = replace(ctx, metadata={**ctx.metadata, "status": status})
        super().__init__(message, source=source, context=ctx, retryable=False)


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(RestroomSearchError):
    """Base class for validation errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.WARNING,
            category=ErrorCategory.VALIDATION,
            retryable=False,
        )


class InvalidCoordinateError(ValidationError):
    """Raised when a latitude/longitude pair is non-finite or out of range."""

    def __init__(
        self,
        latitude: Any,
        longitude: Any,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext()
        ctx = replace(
            ctx,
            input_value=(latitude, longitude),
            suggestion="Latitude must be within [-90, 90] and longitude within [-180, 180]",
            example="search_restrooms(latitude=37.5665, longitude=126.9780)",
        )
        super().__init__(f"Invalid coordinate: ({latitude!r}, {longitude!r})", context=ctx)


class InvalidParameterError(ValidationError):
    """Raised when a parameter value is invalid."""

    def __init__(
        self,
        param_name: str,
        value: Any,
        expected: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext()
        ctx = replace(ctx, input_value=value, suggestion=f"Expected {expected}")
        super().__init__(
            f"Invalid parameter '{param_name}': {value!r} (expected {expected})",
            context=ctx,
        )


# =============================================================================
# Data Errors
# =============================================================================


class DataError(RestroomSearchError):
    """Base class for data-related errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.DATA,
            retryable=False,
        )


class MalformedRecordError(DataError):
    """An individual upstream record lacks a usable name or coordinate."""

    def __init__(
        self,
        reason: str,
        *,
        source: str | None = None,
        record: Any = None,
    ) -> None:
        full_msg = f"Malformed record: {reason}"
        if source:
            full_msg = f"Malformed record ({source}): {reason}"
        super().__init__(full_msg, context=ErrorContext(source=source, input_value=record))
        self.reason = reason


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(RestroomSearchError):
    """Raised for configuration-related errors (missing API keys, bad settings)."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.CONFIGURATION,
            retryable=False,
        )
