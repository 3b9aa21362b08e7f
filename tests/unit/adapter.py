from __future__ import annotations

import asyncio

import pytest
from websockets.exceptions import ConnectionClosedError

from src.audio.frames import SPEAKER_FORMAT, AudioFrame
from src.state.upstream import UpstreamConfig
from src.realtime.adapter import UpstreamSession
from src.errors import SendError, FrameFormatError, SessionStateError, UpstreamConnectionError
from src.realtime.events import (
    ClosedEvent,
    ErrorEvent,
    UsageEvent,
    ConnectedEvent,
    AudioChunkEvent,
    TurnCompleteEvent,
)
from src.audio.codec import encode_b64
from tests.fakes import FakeUpstreamSocket, eventually

CONFIG = UpstreamConfig(system_instruction="ctx", model="gemini-test", voice="Kore")


def _session(socket: FakeUpstreamSocket | None = None, **kwargs) -> tuple[UpstreamSession, FakeUpstreamSocket]:
    socket = socket or FakeUpstreamSocket()

    async def connect_fn(url: str) -> FakeUpstreamSocket:
        return socket

    params = {
        "url": "wss://upstream.test/ws?key=k",
        "connect_timeout_s": 1.0,
        "close_timeout_s": 0.2,
        "send_queue_max": 8,
    }
    params.update(kwargs)
    return UpstreamSession(connect_fn=connect_fn, **params), socket


async def _collect(session: UpstreamSession) -> list:
    events = []

    async def run() -> None:
        async for event in session.events():
            events.append(event)

    await asyncio.wait_for(run(), timeout=1.0)
    return events


@pytest.mark.asyncio
async def test_connect_sends_setup_and_reports_connected() -> None:
    session, socket = _session()
    await session.connect(CONFIG)

    assert session.is_connected
    assert socket.sent[0]["setup"]["model"] == "models/gemini-test"
    assert socket.sent[0]["setup"]["systemInstruction"]["parts"][0]["text"] == "ctx"

    await session.close()
    events = await _collect(session)
    assert isinstance(events[0], ConnectedEvent)
    assert events[-1] == ClosedEvent(reason="closed by client")
    assert sum(isinstance(e, ClosedEvent) for e in events) == 1


@pytest.mark.asyncio
async def test_frames_are_sent_in_submission_order() -> None:
    session, socket = _session()
    await session.connect(CONFIG)

    session.send(AudioFrame(data=b"AA"))
    session.send(AudioFrame(data=b"BB"))
    await session.signal_end_of_input()

    audio = [m["realtimeInput"]["audio"]["data"] for m in socket.sent[1:] if "audio" in m.get("realtimeInput", {})]
    assert audio == [encode_b64(b"AA"), encode_b64(b"BB")]
    assert socket.sent[-1] == {"realtimeInput": {"audioStreamEnd": True}}
    await session.close()


@pytest.mark.asyncio
async def test_connect_failure_raises_connection_error() -> None:
    async def refuse(url: str) -> FakeUpstreamSocket:
        raise OSError("connection refused")

    session = UpstreamSession(
        url="wss://upstream.test", connect_timeout_s=1.0, close_timeout_s=0.2, send_queue_max=4, connect_fn=refuse
    )
    with pytest.raises(UpstreamConnectionError):
        await session.connect(CONFIG)
    assert not session.is_connected
    with pytest.raises(SendError):
        session.send(AudioFrame(data=b"AA"))


@pytest.mark.asyncio
async def test_rejected_setup_raises_connection_error() -> None:
    session, socket = _session(FakeUpstreamSocket(setup_reply={"error": {"message": "bad model"}}))
    with pytest.raises(UpstreamConnectionError, match="bad model"):
        await session.connect(CONFIG)
    assert socket.closed


@pytest.mark.asyncio
async def test_connect_times_out() -> None:
    async def hang(url: str) -> FakeUpstreamSocket:
        await asyncio.sleep(10)
        raise AssertionError("unreachable")

    session = UpstreamSession(
        url="wss://upstream.test", connect_timeout_s=0.05, close_timeout_s=0.2, send_queue_max=4, connect_fn=hang
    )
    with pytest.raises(UpstreamConnectionError):
        await session.connect(CONFIG)


@pytest.mark.asyncio
async def test_connect_twice_is_a_state_error() -> None:
    session, _ = _session()
    await session.connect(CONFIG)
    with pytest.raises(SessionStateError):
        await session.connect(CONFIG)
    await session.close()


@pytest.mark.asyncio
async def test_send_validates_state_and_format() -> None:
    session, _ = _session()
    with pytest.raises(SendError):
        session.send(AudioFrame(data=b"AA"))

    await session.connect(CONFIG)
    with pytest.raises(FrameFormatError):
        session.send(AudioFrame(data=b"AA", format=SPEAKER_FORMAT))
    await session.close()

    with pytest.raises(SendError):
        session.send(AudioFrame(data=b"AA"))
    with pytest.raises(SendError):
        await session.signal_end_of_input()


@pytest.mark.asyncio
async def test_send_fails_fast_when_queue_full() -> None:
    session, _ = _session(send_queue_max=1)
    await session.connect(CONFIG)

    # The writer task has not run yet, so the queue holds the first frame.
    session.send(AudioFrame(data=b"AA"))
    with pytest.raises(SendError):
        session.send(AudioFrame(data=b"BB"))
    assert session.pending_frames == 1
    await session.close()


@pytest.mark.asyncio
async def test_server_events_are_yielded_in_order() -> None:
    session, socket = _session()
    await session.connect(CONFIG)

    socket.push("garbage")
    socket.push(
        {
            "serverContent": {"modelTurn": {"parts": [{"inlineData": {"data": encode_b64(b"A1")}}]}},
        }
    )
    socket.push({"serverContent": {"turnComplete": True}, "usageMetadata": {"totalTokenCount": 7}})
    socket.finish("server done")

    events = await _collect(session)
    assert events == [
        ConnectedEvent(),
        AudioChunkEvent(data=b"A1"),
        TurnCompleteEvent(),
        UsageEvent(total_tokens=7),
        ClosedEvent(reason="server done"),
    ]
    assert not session.is_connected
    await session.close()


@pytest.mark.asyncio
async def test_connection_loss_reports_error_then_closed() -> None:
    session, socket = _session()
    await session.connect(CONFIG)

    socket.fail(ConnectionClosedError(None, None))
    events = await _collect(session)

    assert isinstance(events[-2], ErrorEvent)
    assert "connection lost" in events[-2].message
    assert isinstance(events[-1], ClosedEvent)
    await session.close()


@pytest.mark.asyncio
async def test_close_is_idempotent_and_stream_not_restartable() -> None:
    session, socket = _session()
    await session.connect(CONFIG)
    await session.close()
    await session.close()

    assert socket.closed
    events = await _collect(session)
    assert sum(isinstance(e, ClosedEvent) for e in events) == 1
    with pytest.raises(SessionStateError):
        session.events()


@pytest.mark.asyncio
async def test_upstream_error_message_does_not_close_stream() -> None:
    session, socket = _session()
    await session.connect(CONFIG)
    socket.push({"error": {"message": "transient"}})

    seen = []

    async def run() -> None:
        async for event in session.events():
            seen.append(event)

    task = asyncio.create_task(run())
    await eventually(lambda: any(isinstance(e, ErrorEvent) for e in seen))
    assert session.is_connected

    await session.close()
    await asyncio.wait_for(task, timeout=1.0)
    assert isinstance(seen[-1], ClosedEvent)
