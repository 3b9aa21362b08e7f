"""Audio format configuration (env-resolved constants only)."""

from __future__ import annotations

import os

# Capture side: what the upstream endpoint expects as input (PCM16 mono @ 16kHz).
MIC_SAMPLE_RATE_HZ: int = 16000
MIC_CHANNELS: int = 1
MIC_BIT_DEPTH: int = 16

# Playback side: native output rate of the endpoint's speech synthesis.
SPEAKER_SAMPLE_RATE_HZ: int = 24000
SPEAKER_CHANNELS: int = 1
SPEAKER_BIT_DEPTH: int = 16

# Frames per capture block handed to the relay (1024 frames ~= 64ms at 16kHz).
_CAPTURE_BLOCK_FRAMES_RAW = (os.getenv("CAPTURE_BLOCK_FRAMES") or "").strip()
try:
    CAPTURE_BLOCK_FRAMES: int = int(_CAPTURE_BLOCK_FRAMES_RAW) if _CAPTURE_BLOCK_FRAMES_RAW else 1024
except Exception:
    CAPTURE_BLOCK_FRAMES = 1024
CAPTURE_BLOCK_FRAMES = max(64, int(CAPTURE_BLOCK_FRAMES))

# Capture blocks waiting for the relay; oldest blocks are dropped past this.
_CAPTURE_QUEUE_MAX_RAW = (os.getenv("CAPTURE_QUEUE_MAX") or "").strip()
try:
    CAPTURE_QUEUE_MAX: int = int(_CAPTURE_QUEUE_MAX_RAW) if _CAPTURE_QUEUE_MAX_RAW else 64
except Exception:
    CAPTURE_QUEUE_MAX = 64
CAPTURE_QUEUE_MAX = max(1, int(CAPTURE_QUEUE_MAX))

__all__ = [
    "CAPTURE_BLOCK_FRAMES",
    "CAPTURE_QUEUE_MAX",
    "MIC_BIT_DEPTH",
    "MIC_CHANNELS",
    "MIC_SAMPLE_RATE_HZ",
    "SPEAKER_BIT_DEPTH",
    "SPEAKER_CHANNELS",
    "SPEAKER_SAMPLE_RATE_HZ",
]
