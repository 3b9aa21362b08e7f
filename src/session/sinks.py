"""Where a session's output goes: the local speaker or a remote client."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from src.errors import FrameFormatError
from src.audio.frames import SPEAKER_FORMAT, AudioFormat, AudioFrame
from src.devices.types import PlaybackDevice
from src.realtime.events import AudioChunkEvent

logger = logging.getLogger(__name__)


@runtime_checkable
class SessionSink(Protocol):
    """Receives a session's lifecycle notices and AI audio, in upstream order."""

    async def open(self) -> None: ...

    async def connected(self) -> None: ...

    async def speaking_started(self) -> None: ...

    async def audio(self, chunk: AudioChunkEvent) -> None: ...

    async def speaking_ended(self) -> None: ...

    async def usage(self, total_tokens: int) -> None: ...

    async def error(self, message: str) -> None: ...

    async def disconnected(self, *, remote: bool, reason: str) -> None: ...

    async def close(self) -> None: ...


class PlaybackSink:
    """Plays AI audio on a local device and reports session notices to the log."""

    def __init__(self, playback: PlaybackDevice, fmt: AudioFormat = SPEAKER_FORMAT) -> None:
        self._playback = playback
        self._format = fmt
        self._opened = False

    async def open(self) -> None:
        await self._playback.start()
        self._opened = True

    async def connected(self) -> None:
        logger.info("connected; start speaking")

    async def speaking_started(self) -> None:
        logger.info("AI speaking; microphone muted")

    async def audio(self, chunk: AudioChunkEvent) -> None:
        try:
            frame = AudioFrame(data=chunk.data, format=self._format)
        except FrameFormatError:
            logger.warning("dropping malformed audio chunk (%s bytes)", len(chunk.data))
            return
        await self._playback.write(frame)

    async def speaking_ended(self) -> None:
        logger.info("AI finished; microphone live")

    async def usage(self, total_tokens: int) -> None:
        logger.info("total tokens used: %s", total_tokens)

    async def error(self, message: str) -> None:
        logger.error("session error: %s", message)

    async def disconnected(self, *, remote: bool, reason: str) -> None:
        if remote:
            logger.warning("remote closed the session: %s", reason)
        else:
            logger.info("session closed")

    async def close(self) -> None:
        if not self._opened:
            return
        self._opened = False
        await self._playback.stop()


__all__ = ["PlaybackSink", "SessionSink"]
