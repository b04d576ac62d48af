"""Rate limiter interfaces.

Route handlers depend on this abstraction (not the concrete implementation)
so the in-memory store can later be swapped for a shared backend (e.g., Redis)
when the API runs as more than one instance.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

DEFAULT_MAX_REQUESTS = 10
DEFAULT_WINDOW_MS = 60_000


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single rate limit check.

    Attributes:
        allowed: Whether the request may proceed.
        remaining_requests: Requests still admissible in the current window
            (0 when blocked or exhausted).
        reset_time: Epoch milliseconds at which the current window expires.
        limit: Max requests per window used for this decision.
        retry_after_seconds: Whole seconds until the window resets, measured
            with the limiter's own clock; None when the request was allowed.
    """

    allowed: bool
    remaining_requests: int
    reset_time: int
    limit: int
    retry_after_seconds: int | None = None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def check(
        self,
        identifier: str,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_ms: int = DEFAULT_WINDOW_MS,
    ) -> RateLimitDecision:
        """Admit or reject one request for ``identifier``.

        Args:
            identifier: Caller key (e.g., ``update_203.0.113.7``).
            max_requests: Quota per window.
            window_ms: Window length in milliseconds.

        Returns:
            RateLimitDecision describing whether it was allowed.
        """
        raise NotImplementedError
