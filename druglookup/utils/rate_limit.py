from __future__ import annotations
import asyncio, time
from typing import Optional


class TokenBucket:
    """Token bucket used to throttle outbound requests from one event loop."""

    def __init__(self, rate_per_sec: float, capacity: Optional[int] = None):
        self.rate_per_sec = max(rate_per_sec, 1e-6)
        self.capacity = capacity if capacity is not None else max(1, int(self.rate_per_sec * 5))
        self.tokens = float(self.capacity)
        self.timestamp = time.monotonic()

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self.timestamp
        if elapsed > 0:
            self.tokens = min(self.capacity, self.tokens + elapsed * self.rate_per_sec)
        self.timestamp = now

    async def take(self, tokens: int = 1) -> None:
        tokens = max(1, tokens)
        self._refill()
        # reserve before sleeping so concurrent callers queue behind us
        self.tokens -= tokens
        if self.tokens < 0:
            await asyncio.sleep(-self.tokens / self.rate_per_sec)
