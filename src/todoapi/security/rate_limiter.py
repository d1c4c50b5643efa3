"""In-memory token-bucket rate limiter for outbound key-set fetches.

The JWKS client owns one limiter and keys it by key-set URL, so a flood of
tokens carrying unknown ``kid`` values cannot turn into a flood of requests
against the identity provider.

No external dependencies, pure stdlib.
"""

from __future__ import annotations

import math
import time

__all__ = ["RateLimiter"]


class _Bucket:
    """A single token bucket for one key."""

    __slots__ = ("tokens", "last_refill")

    def __init__(self, capacity: float, now: float):
        self.tokens: float = capacity
        self.last_refill: float = now


class RateLimiter:
    """Token-bucket rate limiter keyed by an arbitrary string.

    Parameters
    ----------
    rate : float
        Tokens added per second.
    capacity : int
        Maximum burst size (bucket capacity).
    """

    def __init__(self, rate: float, capacity: int):
        self.rate = rate
        self.capacity = capacity
        self._buckets: dict[str, _Bucket] = {}

    @classmethod
    def per_minute(cls, requests: int) -> RateLimiter:
        """Allow ``requests`` calls per minute, all of them usable as a burst."""
        return cls(rate=requests / 60.0, capacity=requests)

    def _refill(self, key: str) -> _Bucket:
        now = time.monotonic()
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = self._buckets[key] = _Bucket(self.capacity, now)
            return bucket

        elapsed = now - bucket.last_refill
        bucket.tokens = min(self.capacity, bucket.tokens + elapsed * self.rate)
        bucket.last_refill = now
        return bucket

    def allow(self, key: str) -> bool:
        """Return True if the call is allowed, consuming one token."""
        bucket = self._refill(key)
        if bucket.tokens >= 1.0:
            bucket.tokens -= 1.0
            return True
        return False

    def retry_after(self, key: str) -> int:
        """Seconds until the next call for ``key`` would be allowed."""
        bucket = self._refill(key)
        if bucket.tokens >= 1.0:
            return 0
        return math.ceil((1.0 - bucket.tokens) / self.rate)
