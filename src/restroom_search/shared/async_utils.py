"""
Async Utilities for Source Adapter Calls.

Provides:
- All-settled parallel execution that keeps declaration order
- Circuit breaker for upstream fault tolerance
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Any

from .exceptions import RateLimitError

logger = logging.getLogger(__name__)


# =============================================================================
# All-settled Parallel Execution (Python 3.11+ TaskGroup)
# =============================================================================


async def gather_settled[T](*coros: Awaitable[T]) -> list[T | Exception]:
    """
    Run coroutines concurrently and wait for every one of them to settle.

    Unlike a fail-fast gather, one coroutine raising never cancels the
    others. Results are returned in the order the coroutines were passed,
    not in completion order, with the raised exception in place of a
    result for every coroutine that failed.

    Example:
        public, commercial = await gather_settled(
            registry.search_near(lat, lng, 500),
            directory.search_near(lat, lng, 500),
        )
        if isinstance(public, Exception):
            ...
    """
    results: list[T | Exception | None] = [None] * len(coros)

    async def settle(coro: Awaitable[T], index: int) -> None:
        try:
            results[index] = await coro
        except Exception as e:
            results[index] = e

    async with asyncio.TaskGroup() as tg:
        for i, coro in enumerate(coros):
            tg.create_task(settle(coro, i))

    return results  # type: ignore[return-value]


# =============================================================================
# Circuit Breaker Pattern
# =============================================================================


@dataclass
class CircuitBreaker:
    """
    Circuit breaker for fault tolerance.

    States:
    - CLOSED: Normal operation
    - OPEN: Failing, reject requests immediately
    - HALF_OPEN: Testing if service recovered

    Example:
        breaker = CircuitBreaker(failure_threshold=5)

        async with breaker:
            result = await risky_api_call()
    """

    failure_threshold: int = 5
    recovery_timeout: float = 30.0
    half_open_max_calls: int = 3
    name: str = "upstream"

    _failure_count: int = field(init=False, default=0)
    _last_failure_time: float | None = field(init=False, default=None)
    _state: str = field(init=False, default="closed")
    _half_open_calls: int = field(init=False, default=0)
    _lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)

    @property
    def state(self) -> str:
        return self._state

    @property
    def is_open(self) -> bool:
        """Check if circuit is open (rejecting requests)."""
        if self._state == "open":
            if self._last_failure_time:
                if time.monotonic() - self._last_failure_time > self.recovery_timeout:
                    return False  # Move to half-open
            return True
        return False

    async def __aenter__(self) -> CircuitBreaker:
        async with self._lock:
            if self.is_open:
                raise RateLimitError(
                    "Circuit breaker is open",
                    source=self.name,
                    retry_after=self.recovery_timeout,
                )

            if self._state == "open":
                self._state = "half_open"
                self._half_open_calls = 0

            if self._state == "half_open":
                if self._half_open_calls >= self.half_open_max_calls:
                    raise RateLimitError(
                        "Circuit breaker is half-open (max calls reached)",
                        source=self.name,
                        retry_after=self.recovery_timeout / 2,
                    )
                self._half_open_calls += 1

        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        async with self._lock:
            if exc_val is not None:
                self._failure_count += 1
                self._last_failure_time = time.monotonic()

                if self._failure_count >= self.failure_threshold:
                    self._state = "open"
                    logger.warning(f"Circuit breaker for {self.name} opened after {self._failure_count} failures")
            else:
                if self._state == "half_open":
                    self._state = "closed"
                    self._failure_count = 0
                    logger.info(f"Circuit breaker for {self.name} closed (recovered)")
                elif self._state == "closed":
                    self._failure_count = max(0, self._failure_count - 1)

