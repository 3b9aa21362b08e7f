from __future__ import annotations

import asyncio
import threading

import pytest

try:
    from src.devices.sounddevice_io import SoundDevicePlayback
except OSError:  # PortAudio library missing on this host
    pytest.skip("PortAudio is not available", allow_module_level=True)

from src.audio.frames import SPEAKER_FORMAT, AudioFrame


class _FakeOutputStream:
    def __init__(self) -> None:
        self.written: list[bytes] = []
        self.threads: set[int] = set()
        self.stopped = False
        self.closed = False

    def write(self, data: bytes) -> None:
        self.threads.add(threading.get_ident())
        self.written.append(data)

    def stop(self) -> None:
        self.stopped = True

    def close(self) -> None:
        self.closed = True


def _frame(tag: int) -> AudioFrame:
    return AudioFrame(data=bytes([tag, 0]) * 4, format=SPEAKER_FORMAT)


def _playback() -> tuple[SoundDevicePlayback, _FakeOutputStream]:
    playback = SoundDevicePlayback()
    stream = _FakeOutputStream()
    playback._stream = stream
    return playback, stream


@pytest.mark.asyncio
async def test_resume_flushes_held_frames_off_the_event_loop_in_order() -> None:
    playback, stream = _playback()

    playback.pause()
    await playback.write(_frame(1))
    await playback.write(_frame(2))
    assert stream.written == []

    playback.resume()
    await playback.write(_frame(3))

    assert stream.written == [_frame(1).data, _frame(2).data, _frame(3).data]
    assert threading.get_ident() not in stream.threads


@pytest.mark.asyncio
async def test_stop_drops_held_frames_and_closes_stream() -> None:
    playback, stream = _playback()

    playback.pause()
    await playback.write(_frame(1))
    await asyncio.wait_for(playback.stop(), timeout=1.0)

    assert stream.written == []
    assert stream.stopped
    assert stream.closed
