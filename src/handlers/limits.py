"""Sliding-window rate limiting for client messages and session starts."""

from __future__ import annotations

import time
import collections
from collections.abc import Callable

from src.errors import RateLimitError

TimeFn = Callable[[], float]


class SlidingWindowRateLimiter:
    """Admit at most ``limit`` events per rolling ``window_seconds``.

    Disabled if limit <= 0 or window_seconds <= 0.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        now_fn: TimeFn | None = None,
    ) -> None:
        self.limit = max(0, int(limit))
        self.window_seconds = max(0.0, float(window_seconds))
        self._now = now_fn or time.monotonic
        self._events: collections.deque[float] = collections.deque()
        self._enabled = self.limit > 0 and self.window_seconds > 0

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        events = self._events
        while events and events[0] <= cutoff:
            events.popleft()

    def remaining(self) -> int:
        if not self._enabled:
            return -1
        self._prune(self._now())
        return max(0, self.limit - len(self._events))

    def consume(self) -> None:
        """Record one event or raise ``RateLimitError`` with the time until a slot frees up."""
        if not self._enabled:
            return

        now = self._now()
        self._prune(now)

        if len(self._events) >= self.limit:
            raise RateLimitError(
                retry_in=max(0.0, (self._events[0] + self.window_seconds) - now),
                limit=self.limit,
                window_seconds=self.window_seconds,
            )
        self._events.append(now)


__all__ = ["SlidingWindowRateLimiter"]
