"""
Base API Client - Common HTTP request pattern with retry, rate limiting, and circuit breaker.

Shared by the source adapters:
- Automatic retry on 429 (rate limit) with Retry-After support
- Rate limiting (configurable interval between requests)
- Circuit breaker for fault tolerance
- Transport and HTTP failures raised as AdapterError subclasses

Adapters must fail rather than hand back partial data, so unlike a
best-effort client nothing here returns None on error.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import httpx
from typing_extensions import Self

from restroom_search.shared.async_utils import CircuitBreaker
from restroom_search.shared.exceptions import (
    NetworkError,
    RateLimitError,
    ServiceUnavailableError,
    UpstreamResponseError,
)

logger = logging.getLogger(__name__)


class BaseAPIClient:
    """
    Base class for upstream API clients.

    Provides common infrastructure:
    - httpx.AsyncClient management (injectable for tests)
    - Rate limiting with configurable interval
    - Retry on 429 and transport errors with backoff
    - Circuit breaker for fault tolerance

    Subclasses set ``_service_name`` and can override ``_parse_response()``.

    Example:
        class MyClient(BaseAPIClient):
            _service_name = "MyAPI"

            def __init__(self):
                super().__init__(base_url="https://api.example.com", min_interval=0.1)

            async def get_item(self, item_id: str) -> dict:
                return await self._make_request(f"/items/{item_id}")
    """

    _service_name: str = "API"
    _MAX_RETRIES: int = 2

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 10.0,
        min_interval: float = 0.0,
        headers: dict[str, str] | None = None,
        circuit_breaker: CircuitBreaker | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize base client.

        Args:
            base_url: Base URL for the API (optional, can pass full URLs)
            timeout: Request timeout in seconds
            min_interval: Minimum seconds between requests (rate limiting)
            headers: Default headers for all requests
            circuit_breaker: Optional circuit breaker. If None, a default one
                             is created (threshold=5, recovery=30s).
            client: Pre-built httpx client, mainly for tests
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._min_interval = min_interval
        self._last_request_time = 0.0
        self._client = client or httpx.AsyncClient(
            timeout=self._timeout,
            headers=headers or {},
            limits=httpx.Limits(
                max_connections=20,
                max_keepalive_connections=10,
                keepalive_expiry=30.0,
            ),
        )
        self._circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=5,
            recovery_timeout=30.0,
            name=self._service_name,
        )

    async def _rate_limit(self) -> None:
        """Enforce minimum interval between requests."""
        elapsed = time.monotonic() - self._last_request_time
        if elapsed < self._min_interval:
            await asyncio.sleep(self._min_interval - elapsed)
        self._last_request_time = time.monotonic()

    def _build_url(self, url: str) -> str:
        """Build full URL from path or full URL."""
        if url.startswith(("http://", "https://")):
            return url
        return f"{self._base_url}{url}"

    async def _make_request(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """
        GET a JSON document with retry on 429 and circuit breaker protection.

        Returns:
            Parsed JSON body

        Raises:
            RateLimitError: 429 after retries, or the circuit breaker is open
            ServiceUnavailableError: 5xx response
            UpstreamResponseError: other non-2xx response or a non-JSON body
            NetworkError: transport error or timeout after retries
        """
        full_url = self._build_url(url)

        for attempt in range(self._MAX_RETRIES + 1):
            await self._rate_limit()
            try:
                async with self._circuit_breaker:
                    response = await self._client.get(full_url, params=params)

                    if response.status_code == 429:
                        retry_after = self._get_retry_after(response, attempt)
                        if attempt < self._MAX_RETRIES:
                            logger.warning(
                                f"{self._service_name}: Rate limited (429), "
                                f"retry {attempt + 1}/{self._MAX_RETRIES} in {retry_after:.1f}s"
                            )
                            await asyncio.sleep(retry_after)
                            continue
                        raise RateLimitError(
                            f"{self._service_name}: rate limit exceeded after retries",
                            source=self._service_name,
                            retry_after=retry_after,
                        )

                    if response.status_code >= 500:
                        raise ServiceUnavailableError(
                            f"HTTP {response.status_code} {response.reason_phrase}",
                            source=self._service_name,
                        )
                    if response.status_code >= 400:
                        raise UpstreamResponseError(
                            f"{self._service_name}: HTTP {response.status_code} {response.reason_phrase}",
                            source=self._service_name,
                            status=str(response.status_code),
                        )

                    return self._parse_response(response)

            except httpx.RequestError as e:
                if attempt < self._MAX_RETRIES:
                    logger.warning(f"{self._service_name} request error (attempt {attempt + 1}): {e}")
                    await asyncio.sleep(0.5 * 2**attempt)
                    continue
                raise NetworkError(
                    f"{self._service_name} request failed: {type(e).__name__}: {e}",
                    source=self._service_name,
                ) from e

        raise NetworkError(f"{self._service_name}: no response after retries", source=self._service_name)

    def _parse_response(self, response: httpx.Response) -> Any:
        """Parse response body. Override for custom extraction logic."""
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamResponseError(
                f"{self._service_name}: response is not valid JSON",
                source=self._service_name,
            ) from e

    @staticmethod
    def _get_retry_after(response: httpx.Response, attempt: int) -> float:
        """Extract Retry-After from response headers, with exponential backoff fallback."""
        try:
            return float(response.headers.get("Retry-After", 2 ** (attempt + 1)))
        except (ValueError, TypeError):
            return float(2 ** (attempt + 1))

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
