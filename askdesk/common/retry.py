"""Retry policy with pluggable backoff and retryable-error predicate."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, TypeVar

from .errors import RetriesExhausted

logger = logging.getLogger("askdesk.common.retry")

T = TypeVar("T")


def linear_backoff(base_seconds: float = 1.0) -> Callable[[int], float]:
    """Backoff of ``attempt * base_seconds`` (1s, 2s, 3s, ... by default)."""

    def _backoff(attempt: int) -> float:
        return attempt * base_seconds

    return _backoff


def is_rate_limit_error(error: BaseException) -> bool:
    """True for HTTP 429 / RESOURCE_EXHAUSTED style errors from any SDK."""
    for attr in ("code", "status_code", "status"):
        value = getattr(error, attr, None)
        if value == 429 or value == "RESOURCE_EXHAUSTED":
            return True
    message = str(error)
    return "429" in message or "RESOURCE_EXHAUSTED" in message


@dataclass
class RetryPolicy:
    """
    Runs an async operation up to ``max_attempts`` times.

    Only errors accepted by ``is_retryable`` are retried; anything else
    propagates from the attempt that raised it. When the last attempt
    fails with a retryable error, ``RetriesExhausted`` is raised with the
    last error chained.
    """

    max_attempts: int = 3
    backoff: Callable[[int], float] = field(default_factory=linear_backoff)
    is_retryable: Callable[[BaseException], bool] = is_rate_limit_error
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()
            except Exception as e:
                if not self.is_retryable(e):
                    raise
                if attempt == self.max_attempts:
                    raise RetriesExhausted(
                        f"Gave up after {attempt} attempts: {e}"
                    ) from e
                delay = self.backoff(attempt)
                logger.warning(
                    "Retry %d/%d in %.1fs due to rate limit: %s",
                    attempt, self.max_attempts, delay, e,
                )
                await self.sleep(delay)

        raise RetriesExhausted("Max retries reached")
