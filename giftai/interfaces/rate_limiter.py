# interfaces/rate_limiter.py
"""
Pacing for sequential upstream calls.
Business code only calls `await limiter.acquire()` before each external call.
"""

import asyncio
import time
from typing import Optional
from loguru import logger


class RateLimiter:
    """Interface: wait until the next upstream call may be issued"""

    async def acquire(self) -> None:
        raise NotImplementedError


class NoopRateLimiter(RateLimiter):
    """Never waits. Used by tests and local runs without upstream quotas."""

    async def acquire(self) -> None:
        return None


class FixedIntervalRateLimiter(RateLimiter):
    """
    Guarantees at least `interval_seconds` between consecutive acquisitions.
    The first call passes immediately.
    """

    def __init__(self, interval_seconds: float = 0.5):
        self.interval_seconds = max(interval_seconds, 0.0)
        self._last_call: Optional[float] = None
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        async with self._lock:
            now = time.monotonic()
            if self._last_call is not None:
                wait = self.interval_seconds - (now - self._last_call)
                if wait > 0:
                    logger.debug(f"RateLimiter: pausing {wait:.2f}s")
                    await asyncio.sleep(wait)
            self._last_call = time.monotonic()
