"""Transport encoding for audio frames (base64 over JSON)."""

from __future__ import annotations

import base64
import binascii

from .frames import MIC_FORMAT, AudioFormat, AudioFrame


def estimate_b64_decoded_bytes(s: str) -> int:
    """Estimate decoded byte length of a base64 string without decoding it."""
    s = (s or "").strip()
    if not s:
        return 0

    padding = 0
    if s.endswith("=="):
        padding = 2
    elif s.endswith("="):
        padding = 1

    # base64 expands 3 bytes -> 4 chars
    return max(0, (len(s) * 3) // 4 - padding)


def encode_b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def decode_b64(s: str) -> bytes:
    try:
        return base64.b64decode(s, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"invalid base64 audio: {exc}") from exc


def frame_from_b64(s: str, fmt: AudioFormat = MIC_FORMAT) -> AudioFrame:
    return AudioFrame(data=decode_b64(s), format=fmt)


__all__ = ["decode_b64", "encode_b64", "estimate_b64_decoded_bytes", "frame_from_b64"]
