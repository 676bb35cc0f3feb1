from __future__ import annotations

import pytest

from wellnest.application.services.rate_limiter import RateLimiter
from wellnest.infrastructure.ratelimit import InMemoryCounterStore
from wellnest.tests.fakes import FailingCounterStore, FakeClock


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(1000.0)


@pytest.fixture()
def limiter(clock: FakeClock) -> RateLimiter:
    return RateLimiter(InMemoryCounterStore(clock=clock, shards=4))


def test_limit_admits_exactly_limit_requests(limiter: RateLimiter) -> None:
    decisions = [limiter.check_and_increment("k", 5, 60) for _ in range(6)]

    assert [d.allowed for d in decisions] == [True] * 5 + [False]
    assert [d.remaining for d in decisions] == [4, 3, 2, 1, 0, 0]
    assert all(d.limit == 5 for d in decisions)
    assert not any(d.degraded for d in decisions)


def test_next_window_restores_quota(limiter: RateLimiter, clock: FakeClock) -> None:
    for _ in range(6):
        limiter.check_and_increment("k", 5, 60)

    clock.advance(60)
    decision = limiter.check_and_increment("k", 5, 60)

    assert decision.allowed
    assert decision.remaining == 4


def test_reset_in_counts_down_within_window(limiter: RateLimiter, clock: FakeClock) -> None:
    assert limiter.check_and_increment("k", 5, 60).reset_in == 60

    clock.advance(20.5)

    assert limiter.check_and_increment("k", 5, 60).reset_in == 40


def test_new_window_starts_fresh(limiter: RateLimiter, clock: FakeClock) -> None:
    for _ in range(3):
        limiter.check_and_increment("k", 2, 60)
    assert not limiter.check_and_increment("k", 2, 60).allowed

    clock.advance(60)
    decision = limiter.check_and_increment("k", 2, 60)

    assert decision.allowed
    assert decision.remaining == 1


def test_keys_are_counted_independently(limiter: RateLimiter) -> None:
    for _ in range(3):
        limiter.check_and_increment("a", 3, 60)

    assert not limiter.check_and_increment("a", 3, 60).allowed
    assert limiter.check_and_increment("b", 3, 60).remaining == 2


def test_store_failure_fails_open() -> None:
    store = FailingCounterStore()
    limiter = RateLimiter(store)

    decisions = [limiter.check_and_increment("k", 1, 60) for _ in range(10)]

    assert store.calls == 10
    for decision in decisions:
        assert decision.allowed
        assert decision.degraded
        assert decision.remaining == 1
        assert decision.reset_in == 60


def test_status_and_reset(limiter: RateLimiter, clock: FakeClock) -> None:
    for _ in range(3):
        limiter.check_and_increment("k", 10, 60)
    clock.advance(15)

    assert limiter.status("k", 10) == {"count": 3, "limit": 10, "remaining": 7, "reset_in": 45}

    limiter.reset("k")

    assert limiter.status("k", 10)["count"] == 0
    assert limiter.check_and_increment("k", 10, 60).remaining == 9
