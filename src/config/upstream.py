"""Upstream (Gemini Live) endpoint configuration (env-resolved constants only)."""

from __future__ import annotations

import os


def _get_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return float(default)
    try:
        return float(raw)
    except Exception:
        return float(default)


GEMINI_WS_HOST: str = (os.getenv("GEMINI_WS_HOST") or "").strip() or "generativelanguage.googleapis.com"
GEMINI_WS_PATH: str = "/ws/google.ai.generativelanguage.v1beta.GenerativeService.BidiGenerateContent"

GEMINI_MODEL: str = (os.getenv("GEMINI_MODEL") or "").strip() or "gemini-2.5-flash-preview-native-audio-dialog"
GEMINI_VOICE: str = (os.getenv("GEMINI_VOICE") or "").strip() or "Kore"

# Only audio responses are relayed.
RESPONSE_MODALITY_AUDIO: str = "AUDIO"

# Connect covers the socket handshake plus the setupComplete round trip.
UPSTREAM_CONNECT_TIMEOUT_S: float = max(0.1, _get_float("UPSTREAM_CONNECT_TIMEOUT_S", 10.0))

# Bounds each of end-of-input and close during stop(); local teardown proceeds regardless.
UPSTREAM_CLOSE_TIMEOUT_S: float = max(0.05, _get_float("UPSTREAM_CLOSE_TIMEOUT_S", 2.0))

# Outbound frames waiting for the socket. send() fails fast once this is full.
_SEND_QUEUE_MAX_RAW = (os.getenv("UPSTREAM_SEND_QUEUE_MAX") or "").strip()
try:
    UPSTREAM_SEND_QUEUE_MAX: int = int(_SEND_QUEUE_MAX_RAW) if _SEND_QUEUE_MAX_RAW else 32
except Exception:
    UPSTREAM_SEND_QUEUE_MAX = 32
UPSTREAM_SEND_QUEUE_MAX = max(1, int(UPSTREAM_SEND_QUEUE_MAX))

__all__ = [
    "GEMINI_MODEL",
    "GEMINI_VOICE",
    "GEMINI_WS_HOST",
    "GEMINI_WS_PATH",
    "RESPONSE_MODALITY_AUDIO",
    "UPSTREAM_CLOSE_TIMEOUT_S",
    "UPSTREAM_CONNECT_TIMEOUT_S",
    "UPSTREAM_SEND_QUEUE_MAX",
]
