"""
In-memory request rate limiting.

A RateLimiter is created by the application lifespan and stored on
app.state; it owns its buckets and its cleanup task.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RatePolicy:
    tokens_per_interval: int
    interval_seconds: float
    error_message: str = "Too many requests. Please try again later."


DEFAULT_POLICIES: dict[str, RatePolicy] = {
    "default": RatePolicy(20, 60),
}


class RateLimitExceeded(Exception):
    """Raised when a key has no tokens left."""

    def __init__(self, message: str, retry_after: int):
        super().__init__(message)
        self.retry_after = retry_after


@dataclass
class _Bucket:
    tokens: float
    updated_at: float
    last_checked: float


class RateLimiter:
    """Token buckets keyed by "<policy>:<user or ip>"."""

    def __init__(
        self,
        policies: dict[str, RatePolicy] | None = None,
        idle_ttl: float = 2 * 60 * 60,
        cleanup_interval: float = 30 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.policies = dict(policies or DEFAULT_POLICIES)
        if "default" not in self.policies:
            raise ValueError("RateLimiter needs a 'default' policy")
        self.idle_ttl = idle_ttl
        self.cleanup_interval = cleanup_interval
        self._clock = clock
        self._buckets: dict[str, _Bucket] = {}
        self._cleanup_task: asyncio.Task | None = None

    def _policy(self, policy_name: str) -> RatePolicy:
        return self.policies.get(policy_name, self.policies["default"])

    def check(self, policy_name: str, identity: str) -> float:
        """
        Take one token for the identity under the named policy.

        Returns the tokens left. Raises RateLimitExceeded when none are left.
        """
        policy = self._policy(policy_name)
        key = f"{policy_name}:{identity}"
        now = self._clock()

        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = _Bucket(tokens=float(policy.tokens_per_interval), updated_at=now, last_checked=now)
            self._buckets[key] = bucket
        else:
            elapsed = max(now - bucket.updated_at, 0.0)
            refill = elapsed * policy.tokens_per_interval / policy.interval_seconds
            bucket.tokens = min(float(policy.tokens_per_interval), bucket.tokens + refill)
            bucket.updated_at = now
        bucket.last_checked = now

        if bucket.tokens < 1:
            missing = 1 - bucket.tokens
            retry_after = math.ceil(missing * policy.interval_seconds / policy.tokens_per_interval)
            logger.warning("Rate limit exceeded | key=%s retry_after=%s", key, retry_after)
            raise RateLimitExceeded(policy.error_message, retry_after=retry_after)

        bucket.tokens -= 1
        return bucket.tokens

    def cleanup(self) -> int:
        """Drop buckets that have not been used for idle_ttl seconds."""
        now = self._clock()
        stale = [key for key, bucket in self._buckets.items() if now - bucket.last_checked > self.idle_ttl]
        for key in stale:
            del self._buckets[key]
        if stale:
            logger.debug("Removed idle rate limit buckets | count=%s", len(stale))
        return len(stale)

    def __len__(self) -> int:
        return len(self._buckets)

    async def _cleanup_loop(self) -> None:
        while True:
            await asyncio.sleep(self.cleanup_interval)
            self.cleanup()

    def start(self) -> None:
        if self._cleanup_task is None or self._cleanup_task.done():
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())

    async def stop(self) -> None:
        task = self._cleanup_task
        self._cleanup_task = None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    @property
    def running(self) -> bool:
        return self._cleanup_task is not None and not self._cleanup_task.done()
