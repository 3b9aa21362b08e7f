"""Shared error types for the voice relay."""

from __future__ import annotations

from dataclasses import dataclass


class RelayError(Exception):
    """Base class for relay failures."""


class UpstreamConnectionError(RelayError):
    """Opening the upstream session failed. Fatal to that session; never retried here."""


class SendError(RelayError):
    """A single frame could not be handed to the upstream session. The session continues."""


class FrameFormatError(SendError):
    """A frame does not match the audio format declared for its session."""


class UpstreamError(RelayError):
    """The upstream endpoint reported an error mid-session."""


class DeviceError(RelayError):
    """A capture or playback device failed."""


class SessionStateError(RelayError):
    """An operation was called in a state that does not allow it (programming error)."""


class NotFoundError(RelayError):
    """Raised when an operation references an unknown session or connection id."""

    def __init__(self, kind: str, key: str) -> None:
        super().__init__(f"{kind} not found: {key}")
        self.kind = kind
        self.key = key


@dataclass(frozen=True, slots=True)
class RateLimitError(Exception):
    """Raised when a sliding-window rate limiter is saturated."""

    retry_in: float
    limit: int
    window_seconds: float


__all__ = [
    "DeviceError",
    "FrameFormatError",
    "NotFoundError",
    "RateLimitError",
    "RelayError",
    "SendError",
    "SessionStateError",
    "UpstreamConnectionError",
    "UpstreamError",
]
