"""Audio frame value types."""

from __future__ import annotations

from dataclasses import dataclass

from src.errors import FrameFormatError
from src.config.audio import (
    MIC_CHANNELS,
    MIC_BIT_DEPTH,
    SPEAKER_CHANNELS,
    SPEAKER_BIT_DEPTH,
    MIC_SAMPLE_RATE_HZ,
    SPEAKER_SAMPLE_RATE_HZ,
)


@dataclass(frozen=True, slots=True)
class AudioFormat:
    """Raw little-endian signed PCM layout, declared once per session."""

    sample_rate: int
    channels: int = 1
    bit_depth: int = 16

    def __post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise ValueError("sample_rate must be positive")
        if self.channels <= 0:
            raise ValueError("channels must be positive")
        if self.bit_depth <= 0 or self.bit_depth % 8 != 0:
            raise ValueError("bit_depth must be a positive multiple of 8")

    @property
    def bytes_per_frame(self) -> int:
        # One "frame" in the PCM sense: one sample for every channel.
        return self.channels * (self.bit_depth // 8)

    @property
    def bytes_per_second(self) -> int:
        return self.sample_rate * self.bytes_per_frame

    @property
    def mime_type(self) -> str:
        return f"audio/pcm;rate={self.sample_rate}"


MIC_FORMAT = AudioFormat(sample_rate=MIC_SAMPLE_RATE_HZ, channels=MIC_CHANNELS, bit_depth=MIC_BIT_DEPTH)
SPEAKER_FORMAT = AudioFormat(
    sample_rate=SPEAKER_SAMPLE_RATE_HZ,
    channels=SPEAKER_CHANNELS,
    bit_depth=SPEAKER_BIT_DEPTH,
)


@dataclass(frozen=True, slots=True)
class AudioFrame:
    data: bytes
    format: AudioFormat = MIC_FORMAT

    def __post_init__(self) -> None:
        if len(self.data) % self.format.bytes_per_frame != 0:
            raise FrameFormatError(
                f"frame of {len(self.data)} bytes is not a whole number of "
                f"{self.format.bytes_per_frame}-byte samples"
            )

    @property
    def duration_s(self) -> float:
        return len(self.data) / float(self.format.bytes_per_second)

    def ensure_format(self, expected: AudioFormat) -> AudioFrame:
        if self.format != expected:
            raise FrameFormatError(f"frame format {self.format} does not match session format {expected}")
        return self


__all__ = ["MIC_FORMAT", "SPEAKER_FORMAT", "AudioFormat", "AudioFrame"]
