from .bridge import UpstreamBridge
from .adapter import UpstreamSession
from .turn import TurnEffect
from .events import (
    ClosedEvent,
    ErrorEvent,
    UsageEvent,
    UpstreamEvent,
    ConnectedEvent,
    AudioChunkEvent,
    TurnCompleteEvent,
)

__all__ = [
    "AudioChunkEvent",
    "ClosedEvent",
    "ConnectedEvent",
    "ErrorEvent",
    "TurnCompleteEvent",
    "TurnEffect",
    "UpstreamBridge",
    "UpstreamEvent",
    "UpstreamSession",
    "UsageEvent",
]
