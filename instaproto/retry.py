"""
Retry Configuration
===================
Pluggable retry policy for transport failures.

Default is a single attempt: signed requests carry one-time tokens
and may trigger server-side actions, so nothing is retried unless
the caller opts in.
"""

import asyncio
import random
from dataclasses import dataclass, field
from typing import Set, Type

from curl_cffi import CurlError


@dataclass
class RetryConfig:
    """
    Retry/backoff settings for transport failures.

    Args:
        max_attempts: Total attempts including the first one (default: 1)
        delay: Delay before the first retry in seconds (default: 0.2)
        backoff_factor: Exponential base (default: 2.0)
        backoff_max: Maximum delay ceiling in seconds (default: 30.0)
        jitter: Add random ±30% jitter to delay (default: False)
        retry_on: Set of exception types to retry on

    Usage:
        retry = RetryConfig(max_attempts=3, jitter=True)
        delay = retry.calculate_delay(attempt=1)  # ~0.4s ±30%
    """

    max_attempts: int = 1
    delay: float = 0.2
    backoff_factor: float = 2.0
    backoff_max: float = 30.0
    jitter: bool = False
    retry_on: Set[Type[Exception]] = field(default_factory=lambda: {
        CurlError,
        OSError,
        asyncio.TimeoutError,
    })

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    def calculate_delay(self, attempt: int) -> float:
        """
        Delay before retry number `attempt` (0 = first retry).

        Formula: min(delay * backoff_factor ^ attempt, backoff_max) * jitter
        """
        delay = min(self.delay * self.backoff_factor ** attempt, self.backoff_max)

        if self.jitter:
            delay *= 1.0 + random.uniform(-0.3, 0.3)

        return max(0.0, delay)

    def should_retry(self, exception: Exception, attempt: int) -> bool:
        """Retry `exception` raised by attempt number `attempt` (1-indexed)?"""
        if attempt >= self.max_attempts:
            return False
        return any(isinstance(exception, exc_type) for exc_type in self.retry_on)

    def __repr__(self) -> str:
        return (
            f"RetryConfig(max_attempts={self.max_attempts}, "
            f"delay={self.delay}, "
            f"backoff_factor={self.backoff_factor}, "
            f"backoff_max={self.backoff_max}, "
            f"jitter={self.jitter})"
        )
