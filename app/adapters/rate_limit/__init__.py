"""Rate limiting adapters.

This package provides a small abstraction layer so the API can start with an
in-memory limiter and later migrate to Redis or another shared store without
changing the route handlers.
"""

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitDecision
from app.adapters.rate_limit.headers import get_rate_limit_headers
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "InMemoryFixedWindowRateLimiter",
    "RateLimitDecision",
    "get_rate_limit_headers",
]
