"""Upstream session configuration (dataclasses only)."""

from __future__ import annotations

from dataclasses import dataclass

from src.audio.frames import MIC_FORMAT, AudioFormat
from src.config.upstream import GEMINI_MODEL, GEMINI_VOICE, RESPONSE_MODALITY_AUDIO


@dataclass(frozen=True, slots=True)
class UpstreamConfig:
    system_instruction: str
    model: str = GEMINI_MODEL
    voice: str = GEMINI_VOICE
    response_modality: str = RESPONSE_MODALITY_AUDIO
    input_format: AudioFormat = MIC_FORMAT


__all__ = ["UpstreamConfig"]
