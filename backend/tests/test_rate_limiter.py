"""
Tests for the injectable rate limiter service.
"""

import asyncio

import pytest

from adclip.services.rate_limiter import RateLimiter, RateLimitExceeded, RatePolicy


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def make_limiter(clock, tokens=2, interval=60.0, **kwargs):
    return RateLimiter(
        policies={"default": RatePolicy(tokens, interval), "video": RatePolicy(1, interval, "Slow down")},
        clock=clock,
        **kwargs,
    )


class TestRateLimiter:
    def test_allows_up_to_limit_then_rejects(self):
        limiter = make_limiter(FakeClock())

        limiter.check("default", "user-1")
        limiter.check("default", "user-1")
        with pytest.raises(RateLimitExceeded) as exc_info:
            limiter.check("default", "user-1")

        assert exc_info.value.retry_after == 30

    def test_keys_are_independent(self):
        limiter = make_limiter(FakeClock())

        limiter.check("video", "user-1")
        limiter.check("video", "user-2")
        limiter.check("default", "user-1")

        with pytest.raises(RateLimitExceeded, match="Slow down"):
            limiter.check("video", "user-1")

    def test_unknown_policy_uses_default(self):
        limiter = make_limiter(FakeClock(), tokens=1)

        limiter.check("something-else", "user-1")
        with pytest.raises(RateLimitExceeded):
            limiter.check("something-else", "user-1")

    def test_tokens_refill_over_time(self):
        clock = FakeClock()
        limiter = make_limiter(clock, tokens=2, interval=60.0)
        limiter.check("default", "user-1")
        limiter.check("default", "user-1")

        clock.now += 30
        limiter.check("default", "user-1")

    def test_requires_default_policy(self):
        with pytest.raises(ValueError):
            RateLimiter(policies={"auth": RatePolicy(5, 60)})

    def test_cleanup_removes_idle_buckets(self):
        clock = FakeClock()
        limiter = make_limiter(clock, idle_ttl=100)
        limiter.check("default", "old")
        clock.now += 60
        limiter.check("default", "recent")

        clock.now += 50
        removed = limiter.cleanup()

        assert removed == 1
        assert len(limiter) == 1

    def test_instances_do_not_share_state(self):
        clock = FakeClock()
        first = make_limiter(clock, tokens=1)
        second = make_limiter(clock, tokens=1)

        first.check("default", "user-1")
        second.check("default", "user-1")


class TestRateLimiterLifecycle:
    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        limiter = RateLimiter(cleanup_interval=0.01)

        limiter.start()
        assert limiter.running
        await asyncio.sleep(0.03)
        await limiter.stop()

        assert not limiter.running

    @pytest.mark.asyncio
    async def test_cleanup_task_runs(self):
        clock = FakeClock()
        limiter = make_limiter(clock, idle_ttl=10, cleanup_interval=0.01)
        limiter.check("default", "user-1")
        clock.now += 60

        limiter.start()
        await asyncio.sleep(0.05)
        await limiter.stop()

        assert len(limiter) == 0

    @pytest.mark.asyncio
    async def test_stop_without_start(self):
        await RateLimiter().stop()
