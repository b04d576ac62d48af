"""Rate limiting dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

- The limiter instance is created by the app factory and lives on
  ``app.state.rate_limiter``; routes reach it through the request, so every
  app (and every test client) owns its own counters.
- Quotas are per action and per client address: the identifier is
  ``"{action}_{client_ip}"``, e.g. ``update_203.0.113.7``.
- Rejections short-circuit with HTTP 429 before authentication runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from fastapi import HTTPException, Request, Response, status

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitDecision
from app.adapters.rate_limit.headers import get_rate_limit_headers
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from app.core.auth import fingerprint
from app.core.config import settings

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


@dataclass(frozen=True)
class RateLimitPolicy:
    max_requests: int
    window_ms: int


def create_rate_limiter() -> AbstractRateLimiter:
    """Build the limiter used by one application instance."""
    return InMemoryFixedWindowRateLimiter(
        sweep_interval_ms=settings.app.rate_limit_sweep_interval_ms,
    )


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    """Return the limiter owned by the application serving ``request``."""
    return request.app.state.rate_limiter


def policy_for(action: str) -> RateLimitPolicy:
    """Resolve the quota for an action from current settings."""
    cfg = settings.app
    max_requests = {
        "update": cfg.rate_limit_update_requests,
        "delete": cfg.rate_limit_delete_requests,
    }.get(action, cfg.rate_limit_default_requests)
    return RateLimitPolicy(max_requests=max_requests, window_ms=cfg.rate_limit_window_ms)


def client_address(request: Request) -> str:
    """Best-effort client address: X-Forwarded-For, X-Real-IP, then the peer."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = request.headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip

    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT


def _rejection_headers(decision: RateLimitDecision) -> dict[str, str]:
    headers = get_rate_limit_headers(decision)
    headers["X-RateLimit-Limit"] = str(decision.limit)
    headers["Retry-After"] = str(decision.retry_after_seconds or 0)
    return headers


def enforce_rate_limit(action: str) -> Callable[..., Awaitable[RateLimitDecision | None]]:
    """Build a dependency that consumes one unit of ``action`` quota.

    Usage:
        @router.put("/beats/{beat_id}", dependencies=[Depends(enforce_rate_limit("update"))])

    Args:
        action: Quota bucket name ("update", "delete", ...).

    Returns:
        Async FastAPI dependency. It returns the decision (None when rate
        limiting is disabled) and raises HTTP 429 when the client is over quota.
    """

    async def dependency(request: Request, response: Response) -> RateLimitDecision | None:
        if not settings.app.rate_limit_enabled:
            return None

        policy = policy_for(action)
        identifier = f"{action}_{client_address(request)}"
        decision = get_rate_limiter(request).check(
            identifier,
            max_requests=policy.max_requests,
            window_ms=policy.window_ms,
        )
        log_extra = {
            "action": action,
            "key_hash": fingerprint(identifier),
            "limit": decision.limit,
            "remaining": decision.remaining_requests,
            "window_ms": policy.window_ms,
        }

        if not decision.allowed:
            logger.warning("rate_limit.exceeded", extra=log_extra)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Rate limit exceeded. Please try again later.",
                headers=_rejection_headers(decision) if settings.app.rate_limit_include_headers else None,
            )

        logger.info("rate_limit.allowed", extra=log_extra)
        if settings.app.rate_limit_include_headers:
            for name, value in get_rate_limit_headers(decision).items():
                response.headers[name] = value
        return decision

    dependency.__name__ = f"enforce_{action}_rate_limit"
    return dependency
