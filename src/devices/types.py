"""
Audio device protocols for the relay.

These abstract away where audio comes from and goes to (desktop mic and
speakers, a remote client socket, a file in tests) so the session manager
never depends on physical hardware.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable
from collections.abc import AsyncIterator

from src.audio.frames import AudioFrame


@runtime_checkable
class CaptureDevice(Protocol):
    """Produces a live sequence of fixed-format frames until stopped."""

    async def start(self) -> None: ...

    def pause(self) -> None:
        """Stop producing frames; anything captured while paused is discarded."""
        ...

    def resume(self) -> None: ...

    async def stop(self) -> None: ...

    def frames(self) -> AsyncIterator[AudioFrame]:
        """Frames in capture order. Ends after ``stop()``."""
        ...


@runtime_checkable
class PlaybackDevice(Protocol):
    """Plays frames in submission order."""

    async def start(self) -> None: ...

    async def write(self, frame: AudioFrame) -> None: ...

    def pause(self) -> None: ...

    def resume(self) -> None: ...

    async def stop(self) -> None: ...


__all__ = ["CaptureDevice", "PlaybackDevice"]
