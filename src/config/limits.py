"""Admission control and rate limit configuration (env-resolved constants only)."""

from __future__ import annotations

import os

_DISABLED_VALUES = {"0", "none", "null", "disabled", "disable", "off"}

# Upper bound on the decoded size of a single client audio-data message. A 16kHz
# PCM16 stream is 32000 bytes/s, so the default allows ~2s per message.
_MAX_AUDIO_MESSAGE_BYTES_RAW = (os.getenv("MAX_AUDIO_MESSAGE_BYTES") or "").strip()
if _MAX_AUDIO_MESSAGE_BYTES_RAW.lower() in _DISABLED_VALUES:
    MAX_AUDIO_MESSAGE_BYTES: int = 0
else:
    try:
        MAX_AUDIO_MESSAGE_BYTES = int(_MAX_AUDIO_MESSAGE_BYTES_RAW) if _MAX_AUDIO_MESSAGE_BYTES_RAW else 64 * 1024
    except Exception:
        MAX_AUDIO_MESSAGE_BYTES = 64 * 1024
    if MAX_AUDIO_MESSAGE_BYTES < 0:
        MAX_AUDIO_MESSAGE_BYTES = 0

_MAX_CONCURRENT_CONNECTIONS_RAW = (os.getenv("MAX_CONCURRENT_CONNECTIONS") or "").strip()
try:
    MAX_CONCURRENT_CONNECTIONS: int = int(_MAX_CONCURRENT_CONNECTIONS_RAW) if _MAX_CONCURRENT_CONNECTIONS_RAW else 100
except Exception:
    MAX_CONCURRENT_CONNECTIONS = 100
MAX_CONCURRENT_CONNECTIONS = max(1, int(MAX_CONCURRENT_CONNECTIONS))

_WS_MESSAGE_WINDOW_SECONDS_RAW = (os.getenv("WS_MESSAGE_WINDOW_SECONDS") or "").strip()
try:
    WS_MESSAGE_WINDOW_SECONDS: float = float(_WS_MESSAGE_WINDOW_SECONDS_RAW) if _WS_MESSAGE_WINDOW_SECONDS_RAW else 60.0
except Exception:
    WS_MESSAGE_WINDOW_SECONDS = 60.0
if WS_MESSAGE_WINDOW_SECONDS <= 0:
    WS_MESSAGE_WINDOW_SECONDS = 60.0

# Browser clients typically push 4096-sample blocks (~4 msgs/s); 20ms chunking
# is ~3000/min. Default leaves headroom for both.
_WS_MAX_MESSAGES_PER_WINDOW_RAW = (os.getenv("WS_MAX_MESSAGES_PER_WINDOW") or "").strip()
try:
    WS_MAX_MESSAGES_PER_WINDOW: int = int(_WS_MAX_MESSAGES_PER_WINDOW_RAW) if _WS_MAX_MESSAGES_PER_WINDOW_RAW else 5000
except Exception:
    WS_MAX_MESSAGES_PER_WINDOW = 5000
WS_MAX_MESSAGES_PER_WINDOW = max(1, int(WS_MAX_MESSAGES_PER_WINDOW))

# Each session start opens a new upstream connection, so it gets its own budget.
_WS_SESSION_START_WINDOW_SECONDS_RAW = (os.getenv("WS_SESSION_START_WINDOW_SECONDS") or "").strip()
try:
    WS_SESSION_START_WINDOW_SECONDS: float = (
        float(_WS_SESSION_START_WINDOW_SECONDS_RAW) if _WS_SESSION_START_WINDOW_SECONDS_RAW else 0.0
    )
except Exception:
    WS_SESSION_START_WINDOW_SECONDS = 0.0
if WS_SESSION_START_WINDOW_SECONDS <= 0:
    WS_SESSION_START_WINDOW_SECONDS = float(WS_MESSAGE_WINDOW_SECONDS)

_WS_MAX_SESSION_STARTS_PER_WINDOW_RAW = (os.getenv("WS_MAX_SESSION_STARTS_PER_WINDOW") or "").strip()
try:
    WS_MAX_SESSION_STARTS_PER_WINDOW: int = (
        int(_WS_MAX_SESSION_STARTS_PER_WINDOW_RAW) if _WS_MAX_SESSION_STARTS_PER_WINDOW_RAW else 10
    )
except Exception:
    WS_MAX_SESSION_STARTS_PER_WINDOW = 10
WS_MAX_SESSION_STARTS_PER_WINDOW = max(0, int(WS_MAX_SESSION_STARTS_PER_WINDOW))

__all__ = [
    "MAX_AUDIO_MESSAGE_BYTES",
    "MAX_CONCURRENT_CONNECTIONS",
    "WS_MAX_MESSAGES_PER_WINDOW",
    "WS_MAX_SESSION_STARTS_PER_WINDOW",
    "WS_MESSAGE_WINDOW_SECONDS",
    "WS_SESSION_START_WINDOW_SECONDS",
]
