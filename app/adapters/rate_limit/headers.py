"""Projection of rate limit decisions into advisory response headers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from app.adapters.rate_limit.base import RateLimitDecision

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# 9999-12-31T23:59:59.999Z, the last instant datetime can represent
MAX_RESET_TIME_MS = (datetime.max.replace(tzinfo=timezone.utc) - _EPOCH) // timedelta(milliseconds=1)


def format_reset_time(reset_time_ms: int) -> str:
    """Format epoch milliseconds as ISO-8601 UTC, e.g. ``2024-05-01T08:00:00.000Z``.

    Values outside ``[0, MAX_RESET_TIME_MS]`` are clamped to that range, so
    an oversized window still yields a valid header instead of an error.
    """
    clamped = min(max(reset_time_ms, 0), MAX_RESET_TIME_MS)
    instant = _EPOCH + timedelta(milliseconds=clamped)
    return instant.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def get_rate_limit_headers(decision: RateLimitDecision) -> dict[str, str]:
    """Build ``X-RateLimit-Remaining`` and ``X-RateLimit-Reset`` headers.

    Args:
        decision: Result of a limiter check.

    Returns:
        Header name to value mapping.
    """
    return {
        "X-RateLimit-Remaining": str(decision.remaining_requests),
        "X-RateLimit-Reset": format_reset_time(decision.reset_time),
    }
