"""Tests for the sliding-window rate limiter."""

import threading

import pytest

from freedomwall.errors import RateLimitError
from freedomwall.ratelimit import DEFAULT_RULES, RateLimitRule, SlidingWindowRateLimiter
from freedomwall.ratelimit.limiter import IDLE_EVICTION_SECONDS


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _limiter(max_requests=3, window=60, clock=None):
    clock = clock or FakeClock()
    rules = {"post": RateLimitRule(max_requests, window, "Too many posts.")}
    return SlidingWindowRateLimiter(rules, clock=clock), clock


def test_limit_plus_one_is_rejected():
    limiter, _ = _limiter(max_requests=3)
    decisions = [limiter.allow("post", "k") for _ in range(4)]
    assert [d.permitted for d in decisions] == [True, True, True, False]
    assert [d.remaining for d in decisions[:3]] == [2, 1, 0]


def test_requests_spread_over_the_window_never_trip():
    limiter, clock = _limiter(max_requests=3, window=60)
    for _ in range(12):
        assert limiter.allow("post", "k").permitted
        clock.advance(21)


def test_retry_after_counts_down_from_oldest_request():
    limiter, clock = _limiter(max_requests=2, window=60)
    limiter.allow("post", "k")
    clock.advance(10)
    limiter.allow("post", "k")
    clock.advance(5)

    decision = limiter.allow("post", "k")
    assert not decision.permitted
    assert decision.retry_after == 45
    assert decision.reset_at == 1_060.0

    clock.advance(45)
    assert limiter.allow("post", "k").permitted


def test_keys_and_classes_are_independent():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(
        {"post": RateLimitRule(1, 60), "like": RateLimitRule(1, 60)},
        clock=clock,
    )
    assert limiter.allow("post", "a").permitted
    assert not limiter.allow("post", "a").permitted
    assert limiter.allow("post", "b").permitted
    assert limiter.allow("like", "a").permitted


def test_unknown_class_is_never_limited():
    limiter, _ = _limiter()
    for _ in range(100):
        decision = limiter.allow("contact", "k")
        assert decision.permitted
        assert decision.limit == 0


def test_check_raises_with_retry_after():
    limiter, _ = _limiter(max_requests=1, window=30)
    limiter.check("post", "k")
    with pytest.raises(RateLimitError) as exc:
        limiter.check("post", "k")
    assert exc.value.retry_after == 30
    assert exc.value.status_code == 429
    assert exc.value.message == "Too many posts. Try again in 30 seconds."
    assert exc.value.to_dict()["retryAfter"] == 30


def test_idle_keys_are_swept():
    limiter, clock = _limiter()
    limiter.allow("post", "a")
    limiter.allow("post", "b")
    assert len(limiter) == 2

    clock.advance(IDLE_EVICTION_SECONDS)
    limiter.allow("post", "c")  # triggers the lazy sweep
    assert len(limiter) == 1

    clock.advance(IDLE_EVICTION_SECONDS)
    assert limiter.sweep() == 1
    assert len(limiter) == 0


def test_sweep_keeps_keys_whose_window_is_still_open():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter({"contact": RateLimitRule(1, 60 * 60)}, clock=clock)
    assert limiter.allow("contact", "a").permitted

    clock.advance(IDLE_EVICTION_SECONDS)
    assert limiter.sweep() == 0
    assert not limiter.allow("contact", "a").permitted

    clock.advance(60 * 60)
    assert limiter.sweep() == 1
    assert limiter.allow("contact", "a").permitted


def test_concurrent_callers_share_one_budget():
    limiter = SlidingWindowRateLimiter({"post": RateLimitRule(50, 60)})
    permitted = []

    def worker():
        for _ in range(20):
            permitted.append(limiter.allow("post", "shared").permitted)

    threads = [threading.Thread(target=worker) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert permitted.count(True) == 50


def test_default_rules_cover_every_action_class():
    assert {"post", "comment", "like", "report", "contact", "read", "vote"} <= set(DEFAULT_RULES)
    assert DEFAULT_RULES["contact"].window_seconds == 3600
