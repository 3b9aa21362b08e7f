"""
Capture and playback devices backed by sounddevice (PortAudio).
"""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import Any
from collections import deque
from collections.abc import AsyncIterator

import sounddevice as sd

from src.errors import DeviceError
from src.audio.frames import MIC_FORMAT, SPEAKER_FORMAT, AudioFormat, AudioFrame
from src.config.audio import CAPTURE_QUEUE_MAX, CAPTURE_BLOCK_FRAMES

logger = logging.getLogger(__name__)

_DTYPES = {16: "int16", 32: "int32"}


def _dtype_for(fmt: AudioFormat) -> str:
    try:
        return _DTYPES[fmt.bit_depth]
    except KeyError as exc:
        raise DeviceError(f"unsupported bit depth for sounddevice: {fmt.bit_depth}") from exc


class SoundDeviceCapture:
    """Records from the default (or given) input device.

    PortAudio invokes the callback on its own thread; blocks are handed to the
    event loop with ``call_soon_threadsafe``. While paused, blocks are dropped
    at the source rather than buffered.
    """

    def __init__(
        self,
        fmt: AudioFormat = MIC_FORMAT,
        *,
        block_frames: int = CAPTURE_BLOCK_FRAMES,
        queue_max: int = CAPTURE_QUEUE_MAX,
        device: Any = None,
    ) -> None:
        self._format = fmt
        self._block_frames = int(block_frames)
        self._queue_max = int(queue_max)
        self._device = device
        self._stream: sd.RawInputStream | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._queue: asyncio.Queue[AudioFrame | None] | None = None
        self._paused = False
        self._stopped = False
        self.overflow_drops = 0

    async def start(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue(maxsize=self._queue_max)
        try:
            self._stream = sd.RawInputStream(
                samplerate=self._format.sample_rate,
                channels=self._format.channels,
                dtype=_dtype_for(self._format),
                blocksize=self._block_frames,
                device=self._device,
                callback=self._callback,
            )
            self._stream.start()
        except sd.PortAudioError as exc:
            raise DeviceError(f"failed to open capture device: {exc}") from exc
        logger.info("capture started at %sHz", self._format.sample_rate)

    def _callback(self, indata: Any, frames: int, time_info: Any, status: sd.CallbackFlags) -> None:
        if status:
            logger.warning("capture status: %s", status)
        if self._paused or self._stopped or self._loop is None:
            return
        data = bytes(indata)
        with contextlib.suppress(RuntimeError):
            # Loop already closed during shutdown.
            self._loop.call_soon_threadsafe(self._enqueue, data)

    def _enqueue(self, data: bytes) -> None:
        if self._paused or self._stopped or self._queue is None:
            return
        if self._queue.full():
            # Stay live: drop the oldest block.
            with contextlib.suppress(asyncio.QueueEmpty):
                self._queue.get_nowait()
            self.overflow_drops += 1
        self._queue.put_nowait(AudioFrame(data=data, format=self._format))

    def pause(self) -> None:
        self._paused = True
        if self._queue is None:
            return
        while not self._queue.empty():
            self._queue.get_nowait()

    def resume(self) -> None:
        self._paused = False

    async def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        stream, self._stream = self._stream, None
        if stream is not None:
            try:
                stream.stop()
                stream.close()
            except sd.PortAudioError as exc:
                raise DeviceError(f"failed to stop capture device: {exc}") from exc
        if self._queue is not None:
            while not self._queue.empty():
                self._queue.get_nowait()
            self._queue.put_nowait(None)
        logger.info("capture stopped")

    async def frames(self) -> AsyncIterator[AudioFrame]:
        if self._queue is None:
            raise DeviceError("capture device not started")
        while True:
            frame = await self._queue.get()
            if frame is None:
                return
            yield frame


class SoundDevicePlayback:
    """Plays PCM through the default (or given) output device.

    ``write`` blocks in a worker thread until PortAudio accepts the block, so
    the caller's ordering is the playback ordering. While paused, frames are
    held; ``resume`` flushes them in a worker thread and the next ``write``
    waits for that flush.
    """

    def __init__(self, fmt: AudioFormat = SPEAKER_FORMAT, *, device: Any = None) -> None:
        self._format = fmt
        self._device = device
        self._stream: sd.RawOutputStream | None = None
        self._paused = False
        self._held: deque[AudioFrame] = deque()
        self._flush_task: asyncio.Task | None = None

    async def start(self) -> None:
        try:
            self._stream = sd.RawOutputStream(
                samplerate=self._format.sample_rate,
                channels=self._format.channels,
                dtype=_dtype_for(self._format),
                device=self._device,
            )
            self._stream.start()
        except sd.PortAudioError as exc:
            raise DeviceError(f"failed to open playback device: {exc}") from exc
        logger.info("playback ready at %sHz", self._format.sample_rate)

    async def write(self, frame: AudioFrame) -> None:
        if self._stream is None:
            raise DeviceError("playback device not started")
        if self._paused:
            self._held.append(frame)
            return
        flush = self._flush_task
        if flush is not None:
            await flush
        await self._write(frame.data)

    async def _write(self, data: bytes) -> None:
        stream = self._stream
        if stream is None:
            return
        try:
            await asyncio.to_thread(stream.write, data)
        except sd.PortAudioError as exc:
            raise DeviceError(f"playback write failed: {exc}") from exc

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False
        if self._held and self._flush_task is None:
            self._flush_task = asyncio.get_running_loop().create_task(self._flush())

    async def _flush(self) -> None:
        try:
            while self._held and not self._paused:
                await self._write(self._held.popleft().data)
        except DeviceError as exc:
            logger.error("dropping %s held frame(s): %s", len(self._held), exc)
            self._held.clear()
        finally:
            self._flush_task = None

    async def stop(self) -> None:
        flush, self._flush_task = self._flush_task, None
        if flush is not None:
            flush.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await flush
        stream, self._stream = self._stream, None
        self._held.clear()
        if stream is None:
            return
        try:
            # Let queued audio drain before closing.
            await asyncio.to_thread(stream.stop)
            stream.close()
        except sd.PortAudioError as exc:
            raise DeviceError(f"failed to stop playback device: {exc}") from exc
        logger.info("playback stopped")


__all__ = ["SoundDeviceCapture", "SoundDevicePlayback"]
