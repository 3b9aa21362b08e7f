"""Rate limiting utilities for WebSocket message handling."""

from __future__ import annotations

import math
from typing import Any

from fastapi import WebSocket

from src.errors import RateLimitError
from src.handlers.limits import SlidingWindowRateLimiter
from src.config.websocket import (
    WS_TYPE_END,
    WS_TYPE_PING,
    WS_TYPE_PONG,
    WS_ERROR_RATE_LIMITED,
    WS_TYPE_START_SESSION,
)

from .errors import send_error

_UNLIMITED_TYPES = frozenset({WS_TYPE_PING, WS_TYPE_PONG, WS_TYPE_END})


def select_rate_limiter(
    msg_type: str,
    message_limiter: SlidingWindowRateLimiter,
    session_start_limiter: SlidingWindowRateLimiter,
) -> tuple[SlidingWindowRateLimiter | None, str]:
    if msg_type == WS_TYPE_START_SESSION:
        return session_start_limiter, "session_start"
    if msg_type in _UNLIMITED_TYPES:
        return None, ""
    return message_limiter, "message"


async def consume_limiter(ws: WebSocket, limiter: SlidingWindowRateLimiter, label: str) -> bool:
    try:
        limiter.consume()
    except RateLimitError as exc:
        retry_in = getattr(exc, "retry_in", 1.0)
        retry_in_s = int(max(1, math.ceil(float(retry_in)))) if retry_in else 1
        details: dict[str, Any] = {
            "retry_in": retry_in_s,
            "limit": limiter.limit,
            "window_seconds": int(limiter.window_seconds),
            "kind": label,
        }
        await send_error(
            ws,
            error_code=WS_ERROR_RATE_LIMITED,
            message=(
                f"{label} rate limit: at most {limiter.limit} per {int(limiter.window_seconds)} seconds; "
                f"retry in {retry_in_s} seconds"
            ),
            details=details,
            reason_code=f"{label}_rate_limited",
        )
        return False
    return True


__all__ = ["consume_limiter", "select_rate_limiter"]
