"""Typed events produced by an upstream session, in upstream order."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ConnectedEvent:
    pass


@dataclass(frozen=True, slots=True)
class AudioChunkEvent:
    data: bytes
    mime_type: str = "audio/pcm"


@dataclass(frozen=True, slots=True)
class TurnCompleteEvent:
    pass


@dataclass(frozen=True, slots=True)
class UsageEvent:
    total_tokens: int


@dataclass(frozen=True, slots=True)
class ErrorEvent:
    cause: BaseException

    @property
    def message(self) -> str:
        return str(self.cause) or type(self.cause).__name__


@dataclass(frozen=True, slots=True)
class ClosedEvent:
    reason: str = ""


UpstreamEvent = ConnectedEvent | AudioChunkEvent | TurnCompleteEvent | UsageEvent | ErrorEvent | ClosedEvent

__all__ = [
    "AudioChunkEvent",
    "ClosedEvent",
    "ConnectedEvent",
    "ErrorEvent",
    "TurnCompleteEvent",
    "UpstreamEvent",
    "UsageEvent",
]
