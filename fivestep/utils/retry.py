"""Retry - Bounded retry with configurable backoff.

Provides the retry loop used around external capability calls:
- Fixed or exponential delay between attempts
- Optional jitter
- A predicate deciding which failures are worth another attempt
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from fivestep.observability.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_attempts: int = 3
    initial_delay_s: float = 0.5
    max_delay_s: float = 10.0
    backoff_factor: float = 2.0
    jitter: bool = True


class RetryExhausted(Exception):
    """All retry attempts failed."""

    def __init__(self, attempts: int, last_error: Exception | None = None):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Operation failed after {attempts} attempts")


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    config: RetryConfig | None = None,
    operation_name: str = "operation",
    session_id: str | None = None,
    retry_on: Callable[[Exception], bool] | None = None,
) -> T:
    """Execute an async operation with bounded retry.

    Args:
        operation: Zero-argument async callable
        config: Retry configuration
        operation_name: Name for logging
        session_id: Session ID for logging
        retry_on: Predicate selecting retryable failures (default: all).
            A failure it rejects is re-raised immediately.

    Returns:
        Result of operation

    Raises:
        RetryExhausted: If every attempt failed with a retryable error

    Example:
        audio = await with_retry(
            lambda: gateway.synthesize(text),
            config=RetryConfig(max_attempts=2, initial_delay_s=1.5, jitter=False),
            operation_name="synthesize",
            retry_on=lambda e: isinstance(e, QuotaExceededError),
        )
    """
    if config is None:
        config = RetryConfig()

    delay = config.initial_delay_s

    for attempt in range(1, config.max_attempts + 1):
        try:
            result = await operation()
            if attempt > 1:
                logger.info(
                    f"{operation_name}_recovered",
                    session_id=session_id,
                    attempt=attempt,
                )
            return result

        except asyncio.CancelledError:
            raise

        except Exception as e:
            if retry_on is not None and not retry_on(e):
                raise

            if attempt == config.max_attempts:
                logger.error(
                    f"{operation_name}_retry_exhausted",
                    session_id=session_id,
                    attempts=attempt,
                    error=str(e),
                )
                raise RetryExhausted(attempt, e) from e

            actual_delay = delay
            if config.jitter:
                actual_delay = delay * (0.5 + random.random())

            logger.warning(
                f"{operation_name}_retry",
                session_id=session_id,
                attempt=attempt,
                max_attempts=config.max_attempts,
                delay_s=actual_delay,
                error=str(e),
            )

            await asyncio.sleep(actual_delay)

            delay = min(delay * config.backoff_factor, config.max_delay_s)

    # max_attempts < 1
    raise RetryExhausted(0)
