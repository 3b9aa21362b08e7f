"""Configuration module exports (env-resolved constants only)."""

from .limits import (
    MAX_CONCURRENT_CONNECTIONS,
)
from .audio import (
    MIC_SAMPLE_RATE_HZ,
    SPEAKER_SAMPLE_RATE_HZ,
)

__all__ = [
    "MAX_CONCURRENT_CONNECTIONS",
    "MIC_SAMPLE_RATE_HZ",
    "SPEAKER_SAMPLE_RATE_HZ",
]
