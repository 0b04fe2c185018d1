"""Tests for exceptions.py: hierarchy, context and agent-facing formatting."""

import pytest

from restroom_search.shared.exceptions import (
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


class TestRestroomSearchError:
    def test_basic_creation(self):
        e = RestroomSearchError("test error")
        assert str(e) == "test error"
        assert e.severity == ErrorSeverity.ERROR
        assert e.category == ErrorCategory.ADAPTER
        assert e.retryable is False

    def test_to_dict(self):
        ctx = ErrorContext(source="Google Places", suggestion="s", example="e", retry_after=5.0)
        d = RestroomSearchError("fail", context=ctx, retryable=True).to_dict()
        assert d == {
            "error": "fail",
            "category": "adapter",
            "severity": "error",
            "retryable": True,
            "source": "Google Places",
            "suggestion": "s",
            "example": "e",
            "retry_after_seconds": 5.0,
        }

    def test_to_dict_minimal(self):
        d = RestroomSearchError("fail").to_dict()
        assert "source" not in d
        assert "suggestion" not in d

    def test_to_agent_message(self):
        ctx = ErrorContext(suggestion="fix it", example="do_it()")
        msg = RestroomSearchError("fail", context=ctx, retryable=True).to_agent_message()
        assert "❌ **Error**: fail" in msg
        assert "fix it" in msg
        assert "`do_it()`" in msg
        assert "🔄" in msg

    def test_to_agent_message_retry_after(self):
        ctx = ErrorContext(retry_after=3.0)
        msg = RestroomSearchError("fail", context=ctx, retryable=True).to_agent_message()
        assert "Retry after 3.0 seconds" in msg


class TestAdapterErrors:
    @pytest.mark.parametrize(
        "error",
        [
            RateLimitError(source="Google Places"),
            NetworkError("timeout", source="Seoul Open Data"),
            ServiceUnavailableError(source="Seoul Open Data"),
            UpstreamResponseError("REQUEST_DENIED", source="Google Places"),
        ],
    )
    def test_all_are_adapter_errors(self, error):
        assert isinstance(error, AdapterError)
        assert isinstance(error, RestroomSearchError)
        assert error.source is not None

    def test_rate_limit(self):
        e = RateLimitError(retry_after=60.0)
        assert e.retryable is True
        assert e.severity == ErrorSeverity.TRANSIENT
        assert e.context.retry_after == 60.0
        assert e.context.suggestion

    def test_network_category(self):
        assert NetworkError().category == ErrorCategory.NETWORK

    def test_service_unavailable_message_names_source(self):
        assert str(ServiceUnavailableError("HTTP 503", source="Seoul Open Data")) == "Seoul Open Data: HTTP 503"

    def test_upstream_status_in_metadata(self):
        e = UpstreamResponseError("bad", status="INFO-100")
        assert e.retryable is False
        assert e.context.metadata == {"status": "INFO-100"}

    def test_source_does_not_override_context(self):
        e = AdapterError("x", source="b", context=ErrorContext(source="a"))
        assert e.source == "a"


class TestValidationErrors:
    def test_invalid_coordinate(self):
        e = InvalidCoordinateError(91, 0)
        assert isinstance(e, ValidationError)
        assert e.category == ErrorCategory.VALIDATION
        assert e.context.input_value == (91, 0)
        assert "search_restrooms" in e.context.example

    def test_invalid_parameter(self):
        e = InvalidParameterError("radius_meters", -5, "a positive number of meters")
        assert "radius_meters" in str(e)
        assert e.context.suggestion == "Expected a positive number of meters"
        assert e.retryable is False


class TestOtherErrors:
    def test_malformed_record(self):
        e = MalformedRecordError("missing name", source="google_places", record={"a": 1})
        assert isinstance(e, DataError)
        assert str(e) == "Malformed record (google_places): missing name"
        assert e.reason == "missing name"
        assert e.context.input_value == {"a": 1}

    def test_malformed_record_without_source(self):
        assert str(MalformedRecordError("bad")) == "Malformed record: bad"

    def test_configuration(self):
        e = ConfigurationError("SEOUL_API_KEY is not set")
        assert e.severity == ErrorSeverity.CRITICAL
        assert e.category == ErrorCategory.CONFIGURATION
