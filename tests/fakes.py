"""In-memory stand-ins for the upstream socket, upstream session, devices and sinks."""

from __future__ import annotations

import asyncio
from typing import Any
from collections.abc import AsyncIterator

import orjson

from src.audio.frames import AudioFrame
from src.state.settings import UpstreamSettings
from src.state.upstream import UpstreamConfig
from src.realtime.events import ClosedEvent, UpstreamEvent, ConnectedEvent, AudioChunkEvent
from src.errors import SendError, UpstreamConnectionError

_EOF = object()


def make_upstream_settings(**overrides: Any) -> UpstreamSettings:
    values: dict[str, Any] = {
        "api_key": "test-key",
        "host": "upstream.test",
        "path": "/ws",
        "model": "models-test",
        "voice": "Kore",
        "connect_timeout_s": 1.0,
        "close_timeout_s": 0.2,
        "send_queue_max": 8,
    }
    values.update(overrides)
    return UpstreamSettings(**values)


class FakeUpstreamSocket:
    """Scripted server side of the upstream WebSocket."""

    def __init__(self, *, setup_reply: dict[str, Any] | None = None) -> None:
        self.sent: list[dict[str, Any]] = []
        self.closed = False
        self.close_reason: str | None = None
        self._inbox: asyncio.Queue[Any] = asyncio.Queue()
        self._inbox.put_nowait(orjson.dumps(setup_reply if setup_reply is not None else {"setupComplete": {}}))

    def push(self, message: dict[str, Any] | str) -> None:
        self._inbox.put_nowait(message if isinstance(message, str) else orjson.dumps(message))

    def fail(self, exc: BaseException) -> None:
        self._inbox.put_nowait(exc)

    def finish(self, reason: str = "") -> None:
        self.close_reason = reason
        self._inbox.put_nowait(_EOF)

    async def send(self, message: str) -> None:
        if self.closed:
            raise RuntimeError("socket closed")
        self.sent.append(orjson.loads(message))

    async def recv(self) -> Any:
        item = await self._inbox.get()
        if item is _EOF:
            raise RuntimeError("socket closed before setup")
        if isinstance(item, BaseException):
            raise item
        return item

    def __aiter__(self) -> FakeUpstreamSocket:
        return self

    async def __anext__(self) -> Any:
        item = await self._inbox.get()
        if item is _EOF:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True


class FakeUpstreamSession:
    """Upstream session double driven directly with typed events."""

    def __init__(self, *, fail_connect: bool = False, fail_send: bool = False) -> None:
        self.fail_connect = fail_connect
        self.fail_send = fail_send
        self.config: UpstreamConfig | None = None
        self.sent: list[AudioFrame] = []
        self.end_of_input_calls = 0
        self.close_calls = 0
        self._connected = False
        self._closed = False
        self._events: asyncio.Queue[UpstreamEvent] = asyncio.Queue()

    @property
    def is_connected(self) -> bool:
        return self._connected and not self._closed

    async def connect(self, config: UpstreamConfig) -> None:
        self.config = config
        if self.fail_connect:
            raise UpstreamConnectionError("upstream refused connection")
        self._connected = True
        self.push(ConnectedEvent())

    def push(self, event: UpstreamEvent) -> None:
        self._events.put_nowait(event)

    def send(self, frame: AudioFrame) -> None:
        if not self.is_connected:
            raise SendError("upstream session is not connected")
        if self.fail_send:
            raise SendError("upstream send queue full")
        self.sent.append(frame)

    async def signal_end_of_input(self) -> None:
        if not self.is_connected:
            raise SendError("upstream session is not connected")
        self.end_of_input_calls += 1

    async def close(self) -> None:
        self.close_calls += 1
        if self._closed:
            return
        self._closed = True
        self.push(ClosedEvent(reason="closed by client"))

    async def events(self) -> AsyncIterator[UpstreamEvent]:
        while True:
            event = await self._events.get()
            yield event
            if isinstance(event, ClosedEvent):
                return


class FakeBridge:
    def __init__(self, *sessions: FakeUpstreamSession, **setting_overrides: Any) -> None:
        self.settings = make_upstream_settings(**setting_overrides)
        self._sessions = list(sessions)
        self.created: list[FakeUpstreamSession] = []

    def new_session(self) -> FakeUpstreamSession:
        session = self._sessions.pop(0) if self._sessions else FakeUpstreamSession()
        self.created.append(session)
        return session


class FakeCapture:
    def __init__(self) -> None:
        self.started = False
        self.stopped = False
        self.paused = False
        self.pause_calls = 0
        self.resume_calls = 0
        self._queue: asyncio.Queue[AudioFrame | None] = asyncio.Queue()

    async def start(self) -> None:
        self.started = True

    def pause(self) -> None:
        self.paused = True
        self.pause_calls += 1

    def resume(self) -> None:
        self.paused = False
        self.resume_calls += 1

    async def stop(self) -> None:
        self.stopped = True
        self._queue.put_nowait(None)

    def push(self, frame: AudioFrame) -> None:
        self._queue.put_nowait(frame)

    async def frames(self) -> AsyncIterator[AudioFrame]:
        while True:
            frame = await self._queue.get()
            if frame is None:
                return
            yield frame


class FakePlayback:
    def __init__(self) -> None:
        self.started = False
        self.stopped = False
        self.written: list[AudioFrame] = []

    async def start(self) -> None:
        self.started = True

    async def write(self, frame: AudioFrame) -> None:
        self.written.append(frame)

    def pause(self) -> None:
        pass

    def resume(self) -> None:
        pass

    async def stop(self) -> None:
        self.stopped = True


class RecordingSink:
    """Records every sink call as ``(name, value)`` in arrival order."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def open(self) -> None:
        self.calls.append(("open", None))

    async def connected(self) -> None:
        self.calls.append(("connected", None))

    async def speaking_started(self) -> None:
        self.calls.append(("speaking_started", None))

    async def audio(self, chunk: AudioChunkEvent) -> None:
        self.calls.append(("audio", chunk.data))

    async def speaking_ended(self) -> None:
        self.calls.append(("speaking_ended", None))

    async def usage(self, total_tokens: int) -> None:
        self.calls.append(("usage", total_tokens))

    async def error(self, message: str) -> None:
        self.calls.append(("error", message))

    async def disconnected(self, *, remote: bool, reason: str) -> None:
        self.calls.append(("disconnected", remote))

    async def close(self) -> None:
        self.calls.append(("close", None))


async def settle(rounds: int = 5) -> None:
    """Let queued tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


async def eventually(predicate, timeout: float = 1.0) -> None:
    """Poll until ``predicate()`` is true or fail the test."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() >= deadline:
            raise AssertionError("condition not met within timeout")
        await asyncio.sleep(0.005)


__all__ = [
    "FakeBridge",
    "FakeCapture",
    "FakePlayback",
    "FakeUpstreamSession",
    "FakeUpstreamSocket",
    "RecordingSink",
    "make_upstream_settings",
    "eventually",
    "settle",
]
