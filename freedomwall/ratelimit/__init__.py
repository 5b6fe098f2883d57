"""Per-action sliding-window rate limiting."""

from freedomwall.ratelimit.limiter import (
    DEFAULT_RULES,
    RateLimitDecision,
    RateLimitRule,
    SlidingWindowRateLimiter,
)

__all__ = [
    "DEFAULT_RULES",
    "RateLimitDecision",
    "RateLimitRule",
    "SlidingWindowRateLimiter",
]
