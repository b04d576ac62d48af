"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit,
  and a restart resets every quota.
- Thread-safe: one lock guards the whole identifier map, so the
  read/check/increment sequence is atomic per identifier.
- Expired windows are evicted by a sweep over the map. With
  ``sweep_interval_ms=0`` the sweep runs on every check (O(tracked
  identifiers)); a positive interval runs it at most once per interval.
  Lookups always treat an expired window as absent.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.rate_limit.base import (
    DEFAULT_MAX_REQUESTS,
    DEFAULT_WINDOW_MS,
    AbstractRateLimiter,
    RateLimitDecision,
)


@dataclass
class _RateWindow:
    count: int
    reset_time: int


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter using a fixed time window per identifier.

    A window opens on the first request from an identifier and lasts
    ``window_ms``. Exactly ``max_requests`` requests are admitted inside it;
    rejected requests neither consume quota nor extend the window.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.time,
        sweep_interval_ms: int = 0,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            clock: Time source returning UNIX time in seconds.
            sweep_interval_ms: Minimum delay between two eviction sweeps;
                0 sweeps on every check.

        Raises:
            ValueError: If sweep_interval_ms is negative.
        """
        if sweep_interval_ms < 0:
            raise ValueError("sweep_interval_ms must be >= 0")

        self._clock = clock
        self._sweep_interval_ms = sweep_interval_ms
        self._last_sweep_ms: int | None = None
        self._lock = threading.Lock()
        self._windows: dict[str, _RateWindow] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _sweep(self, now: int) -> None:
        """Evict every window whose reset time has passed. Caller holds the lock."""
        if (
            self._sweep_interval_ms
            and self._last_sweep_ms is not None
            and now - self._last_sweep_ms < self._sweep_interval_ms
        ):
            return

        expired = [key for key, window in self._windows.items() if window.reset_time < now]
        for key in expired:
            del self._windows[key]
        self._last_sweep_ms = now

    def check(
        self,
        identifier: str,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_ms: int = DEFAULT_WINDOW_MS,
    ) -> RateLimitDecision:
        """Admit or reject one request for ``identifier``.

        Args:
            identifier: Non-empty caller key.
            max_requests: Quota per window (>= 1).
            window_ms: Window length in milliseconds (>= 1).

        Returns:
            RateLimitDecision with the allowance and remaining quota.

        Raises:
            ValueError: If identifier is empty or the quota/window is not positive.
        """
        if not identifier:
            raise ValueError("identifier must be a non-empty string")
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")

        with self._lock:
            now = self._now_ms()
            self._sweep(now)

            window = self._windows.get(identifier)
            if window is None or window.reset_time < now:
                window = _RateWindow(count=1, reset_time=now + window_ms)
                self._windows[identifier] = window
                return RateLimitDecision(
                    allowed=True,
                    remaining_requests=max_requests - 1,
                    reset_time=window.reset_time,
                    limit=max_requests,
                )

            if window.count >= max_requests:
                return RateLimitDecision(
                    allowed=False,
                    remaining_requests=0,
                    reset_time=window.reset_time,
                    limit=max_requests,
                    retry_after_seconds=max(0, math.ceil((window.reset_time - now) / 1000)),
                )

            window.count += 1
            return RateLimitDecision(
                allowed=True,
                remaining_requests=max_requests - window.count,
                reset_time=window.reset_time,
                limit=max_requests,
            )
