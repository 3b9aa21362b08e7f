from __future__ import annotations

import pytest

from src.errors import RateLimitError
from src.handlers.limits import SlidingWindowRateLimiter


def test_rate_limiter_allows_within_limit() -> None:
    t = 0.0

    def now() -> float:
        return t

    limiter = SlidingWindowRateLimiter(limit=2, window_seconds=10, now_fn=now)
    limiter.consume()
    limiter.consume()


def test_rate_limiter_rejects_when_saturated() -> None:
    t = 0.0

    def now() -> float:
        return t

    limiter = SlidingWindowRateLimiter(limit=2, window_seconds=10, now_fn=now)
    limiter.consume()
    limiter.consume()

    with pytest.raises(RateLimitError) as exc:
        limiter.consume()
    assert exc.value.limit == 2
    assert exc.value.window_seconds == 10


def test_rate_limiter_frees_slots_after_window() -> None:
    clock = {"t": 0.0}

    limiter = SlidingWindowRateLimiter(limit=1, window_seconds=5, now_fn=lambda: clock["t"])
    limiter.consume()
    assert limiter.remaining() == 0

    clock["t"] = 2.0
    with pytest.raises(RateLimitError) as exc:
        limiter.consume()
    assert exc.value.retry_in == pytest.approx(3.0)

    clock["t"] = 5.0
    assert limiter.remaining() == 1
    limiter.consume()


def test_rate_limiter_disabled() -> None:
    limiter = SlidingWindowRateLimiter(limit=0, window_seconds=10)
    assert limiter.enabled is False
    for _ in range(100):
        limiter.consume()
