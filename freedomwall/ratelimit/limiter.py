"""Sliding-window rate limiter keyed by ``(action_class, key)``.

Each pair keeps the timestamps of its recent requests.  A check drops the
timestamps that fell out of the window and permits the request while fewer
than ``max_requests`` remain.  State lives in memory and is guarded by a
single lock; a periodic sweep evicts keys nobody has touched for a while.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from freedomwall.errors import RateLimitError

logger = logging.getLogger(__name__)

SWEEP_INTERVAL_SECONDS = 5 * 60
IDLE_EVICTION_SECONDS = 5 * 60


@dataclass
class RateLimitRule:
    """Ceiling and window for one action class."""

    max_requests: int
    window_seconds: float
    message: str = "Rate limit exceeded."


@dataclass
class RateLimitDecision:
    """Outcome of a single ``allow`` check."""

    permitted: bool
    limit: int
    remaining: int
    retry_after: int = 0
    reset_at: float = 0.0  # epoch seconds


@dataclass
class _Bucket:
    requests: list[float] = field(default_factory=list)
    last_seen: float = 0.0


DEFAULT_RULES: dict[str, RateLimitRule] = {
    "post": RateLimitRule(5, 60, "Too many posts. Please wait before posting again."),
    "comment": RateLimitRule(10, 60, "Too many comments. Please wait before commenting again."),
    "like": RateLimitRule(30, 60, "Too many likes. Please slow down."),
    "report": RateLimitRule(10, 60, "Too many reports. Please wait before reporting again."),
    "contact": RateLimitRule(5, 60 * 60, "Too many contact messages. Please try again later."),
    "read": RateLimitRule(100, 60, "Too many requests. Please slow down."),
    "vote": RateLimitRule(30, 60, "Too many votes. Please slow down."),
}


class SlidingWindowRateLimiter:
    """Thread-safe in-memory sliding-window limiter.

    Parameters
    ----------
    rules:
        Mapping of action class to :class:`RateLimitRule`.  Classes that are
        not configured are never throttled.
    clock:
        Returns the current time in seconds.  Injected for tests.
    """

    def __init__(
        self,
        rules: Optional[dict[str, RateLimitRule]] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._rules = dict(DEFAULT_RULES if rules is None else rules)
        self._clock = clock
        self._buckets: dict[str, _Bucket] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    @property
    def rules(self) -> dict[str, RateLimitRule]:
        return dict(self._rules)

    def rule_for(self, action_class: str) -> Optional[RateLimitRule]:
        return self._rules.get(action_class)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def allow(self, action_class: str, key: str) -> RateLimitDecision:
        """Record a request for *key* under *action_class* if it is permitted."""
        rule = self._rules.get(action_class)
        if rule is None:
            return RateLimitDecision(permitted=True, limit=0, remaining=0)

        window = rule.window_seconds
        bucket_key = f"{action_class}:{key}"

        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= SWEEP_INTERVAL_SECONDS:
                self._sweep_locked(now)

            bucket = self._buckets.setdefault(bucket_key, _Bucket())
            bucket.last_seen = now
            bucket.requests = [t for t in bucket.requests if now - t < window]

            if len(bucket.requests) >= rule.max_requests:
                oldest = bucket.requests[0]
                retry_after = math.ceil(window - (now - oldest))
                return RateLimitDecision(
                    permitted=False,
                    limit=rule.max_requests,
                    remaining=0,
                    retry_after=retry_after,
                    reset_at=oldest + window,
                )

            bucket.requests.append(now)
            return RateLimitDecision(
                permitted=True,
                limit=rule.max_requests,
                remaining=max(0, rule.max_requests - len(bucket.requests)),
                reset_at=now + window,
            )

    def check(self, action_class: str, key: str) -> RateLimitDecision:
        """Like :meth:`allow` but raises :class:`RateLimitError` on rejection."""
        decision = self.allow(action_class, key)
        if not decision.permitted:
            rule = self._rules[action_class]
            logger.info(
                "Rate limit exceeded for %s (class=%s, retry in %ss)",
                key, action_class, decision.retry_after,
            )
            raise RateLimitError(
                f"{rule.message} Try again in {decision.retry_after} seconds.",
                retry_after=decision.retry_after,
            )
        return decision

    def sweep(self) -> int:
        """Evict idle keys now.  Returns the number of keys removed."""
        with self._lock:
            return self._sweep_locked(self._clock())

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    # ------------------------------------------------------------------

    def _idle_limit(self, bucket_key: str) -> float:
        """Idle time after which a key may go.  Never shorter than its window."""
        rule = self._rules.get(bucket_key.partition(":")[0])
        window = rule.window_seconds if rule else 0
        return max(IDLE_EVICTION_SECONDS, window)

    def _sweep_locked(self, now: float) -> int:
        stale = [k for k, b in self._buckets.items() if now - b.last_seen >= self._idle_limit(k)]
        for k in stale:
            del self._buckets[k]
        self._last_sweep = now
        if stale:
            logger.debug("Evicted %d idle rate-limit keys", len(stale))
        return len(stale)
