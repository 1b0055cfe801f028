"""Exponential backoff for delivery retries."""

import random
from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff schedule for a job's delivery attempts.

    The wait before retry ``n`` (0-based) is ``base_delay * 2**n`` seconds:
    1s, 2s and 4s for the default three retries. Jitter, when enabled, adds
    up to ``jitter_ratio`` of the delay.
    """

    base_delay: float = 1.0
    jitter: bool = False
    jitter_ratio: float = 0.1

    def should_retry(self, retry_count: int, max_retries: int) -> bool:
        return retry_count < max_retries

    def delay_for(self, retry_count: int) -> float:
        delay = self.base_delay * (2**retry_count)
        if self.jitter:
            delay += random.uniform(0, delay * self.jitter_ratio)
        return delay
