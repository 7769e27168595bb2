"""Rate limiting helpers used by the HTTP layer."""

from __future__ import annotations

import asyncio
import math
import time
from collections.abc import Callable

from fastapi import HTTPException, Request
from loguru import logger

from src.bookshelf.runtime.config.config_data import RateLimiterConfig


class TokenBucketRateLimiter:
    """Process-wide token bucket shared by every throttled request.

    The bucket holds at most ``burst`` tokens and refills at ``rate`` tokens
    per second. Each admitted request takes one token.
    """

    def __init__(
        self,
        rate: float,
        burst: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if rate <= 0:
            raise ValueError("rate must be positive")
        if burst < 1:
            raise ValueError("burst must be at least 1")
        self._rate = rate
        self._burst = burst
        self._clock = clock
        self._tokens = float(burst)
        self._updated = clock()
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: RateLimiterConfig) -> TokenBucketRateLimiter:
        return cls(rate=config.rate, burst=config.burst)

    @property
    def rate(self) -> float:
        return self._rate

    @property
    def burst(self) -> int:
        return self._burst

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(now - self._updated, 0.0)
        self._tokens = min(self._burst, self._tokens + elapsed * self._rate)
        self._updated = now

    async def try_acquire(self) -> bool:
        """Take one token if available."""
        async with self._lock:
            self._refill()
            if self._tokens >= 1:
                self._tokens -= 1
                return True
            return False

    async def retry_after(self) -> int:
        """Seconds until the next token is available, rounded up."""
        async with self._lock:
            self._refill()
            missing = max(1 - self._tokens, 0.0)
            return max(1, math.ceil(missing / self._rate))

    async def __call__(self, request: Request) -> None:
        if await self.try_acquire():
            return

        retry_after = await self.retry_after()
        logger.bind(
            path=request.url.path,
            client_ip=request.client.host if request.client else "unknown",
            user_agent=request.headers.get("user-agent", "unknown"),
        ).warning("Rate limit exceeded")
        raise HTTPException(
            status_code=429,
            detail="Rate limit exceeded",
            headers={"Retry-After": str(retry_after)},
        )

    async def reset(self) -> None:
        """Refill the bucket completely."""
        async with self._lock:
            self._tokens = float(self._burst)
            self._updated = self._clock()
            logger.debug("Rate limiter bucket reset")
