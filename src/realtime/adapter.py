"""Adapter owning one bidirectional WebSocket session with the Gemini Live endpoint."""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import Any
from collections.abc import Callable, Awaitable, AsyncIterator

from websockets.asyncio.client import connect as websocket_connect
from websockets.exceptions import ConnectionClosed, ConnectionClosedError

from src.audio.frames import AudioFrame
from src.state.upstream import UpstreamConfig
from src.errors import SendError, UpstreamError, SessionStateError, UpstreamConnectionError

from .events import ClosedEvent, ErrorEvent, UpstreamEvent, ConnectedEvent
from .protocol import (
    dumps,
    build_audio_message,
    build_setup_message,
    parse_server_message,
    build_audio_stream_end_message,
)

logger = logging.getLogger(__name__)

ConnectFn = Callable[[str], Awaitable[Any]]


async def _default_connect(url: str) -> Any:
    # Server audio chunks can exceed the 1 MiB default frame limit.
    return await websocket_connect(url, max_size=None)


def _describe(exc: BaseException) -> str:
    text = str(exc)
    return f"{type(exc).__name__}: {text}" if text else type(exc).__name__


class UpstreamSession:
    """One live upstream connection.

    Outbound frames go through a bounded queue drained by a writer task;
    ``send`` never waits and fails fast with ``SendError`` once the queue is
    full. Inbound messages are parsed by a reader task into typed events that
    ``events()`` yields in arrival order, ending with exactly one
    ``ClosedEvent``.
    """

    def __init__(
        self,
        *,
        url: str,
        connect_timeout_s: float,
        close_timeout_s: float,
        send_queue_max: int,
        connect_fn: ConnectFn | None = None,
    ) -> None:
        self._url = url
        self._connect_timeout_s = float(connect_timeout_s)
        self._close_timeout_s = float(close_timeout_s)
        self._connect_fn = connect_fn or _default_connect

        self._ws: Any = None
        self._config: UpstreamConfig | None = None
        self._connect_called: bool = False
        self._connected: bool = False
        self._closed: bool = False
        self._closed_emitted: bool = False
        self._iterated: bool = False

        self._send_queue: asyncio.Queue[str] = asyncio.Queue(maxsize=max(1, int(send_queue_max)))
        self._events: asyncio.Queue[UpstreamEvent] = asyncio.Queue()
        self._reader_task: asyncio.Task | None = None
        self._writer_task: asyncio.Task | None = None

    @property
    def is_connected(self) -> bool:
        return self._connected and not self._closed

    @property
    def pending_frames(self) -> int:
        return self._send_queue.qsize()

    async def connect(self, config: UpstreamConfig) -> None:
        if self._connect_called:
            raise SessionStateError("connect() called twice on the same upstream session")
        self._connect_called = True
        self._config = config

        try:
            await asyncio.wait_for(self._open(config), timeout=self._connect_timeout_s)
        except UpstreamConnectionError:
            await self._abort()
            raise
        except Exception as exc:
            await self._abort()
            raise UpstreamConnectionError(f"upstream connect failed: {_describe(exc)}") from exc

        self._connected = True
        self._emit(ConnectedEvent())
        self._reader_task = asyncio.create_task(self._reader_loop())
        self._writer_task = asyncio.create_task(self._writer_loop())

    async def _open(self, config: UpstreamConfig) -> None:
        self._ws = await self._connect_fn(self._url)
        await self._ws.send(dumps(build_setup_message(config)))

        # Wait for setupComplete; nothing else is expected before it.
        while True:
            raw = await self._ws.recv()
            for event in parse_server_message(raw):
                if isinstance(event, ConnectedEvent):
                    return
                if isinstance(event, ErrorEvent):
                    raise UpstreamConnectionError(f"upstream rejected setup: {event.message}")
                self._emit(event)

    async def _abort(self) -> None:
        self._closed = True
        self._closed_emitted = True
        if self._ws is not None:
            with contextlib.suppress(Exception):
                await self._ws.close()

    def send(self, frame: AudioFrame) -> None:
        if not self.is_connected or self._config is None:
            raise SendError("upstream session is not connected")
        frame.ensure_format(self._config.input_format)
        try:
            self._send_queue.put_nowait(dumps(build_audio_message(frame)))
        except asyncio.QueueFull as exc:
            raise SendError(
                f"upstream send queue full ({self._send_queue.maxsize} frames); frame dropped"
            ) from exc

    async def signal_end_of_input(self) -> None:
        if not self.is_connected:
            raise SendError("upstream session is not connected")
        await self._send_queue.put(dumps(build_audio_stream_end_message()))
        await self._send_queue.join()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._connected = False

        for task in (self._writer_task, self._reader_task):
            if task is not None and not task.done():
                task.cancel()
        pending = [task for task in (self._writer_task, self._reader_task) if task is not None]
        if pending:
            # A task cancelled before it ever ran finishes with CancelledError.
            await asyncio.gather(*pending, return_exceptions=True)
        self._writer_task = None
        self._reader_task = None

        if self._ws is not None:
            try:
                await asyncio.wait_for(self._ws.close(), timeout=self._close_timeout_s)
            except Exception:
                logger.debug("upstream socket close failed", exc_info=True)
        self._emit_closed("closed by client")

    def events(self) -> AsyncIterator[UpstreamEvent]:
        """Return the session's event stream. It is finite and can only be consumed once."""
        if self._iterated:
            raise SessionStateError("upstream event stream is not restartable")
        self._iterated = True
        return self._iter_events()

    async def _iter_events(self) -> AsyncIterator[UpstreamEvent]:
        while True:
            event = await self._events.get()
            yield event
            if isinstance(event, ClosedEvent):
                return

    def _emit(self, event: UpstreamEvent) -> None:
        if self._closed_emitted:
            return
        self._events.put_nowait(event)

    def _emit_closed(self, reason: str) -> None:
        if self._closed_emitted:
            return
        self._events.put_nowait(ClosedEvent(reason=reason))
        self._closed_emitted = True

    def _close_reason(self) -> str:
        reason = getattr(self._ws, "close_reason", None)
        return str(reason) if reason else "closed by upstream"

    async def _reader_loop(self) -> None:
        try:
            async for raw in self._ws:
                try:
                    events = parse_server_message(raw)
                except ValueError:
                    logger.warning("dropping malformed upstream message", exc_info=True)
                    continue
                for event in events:
                    if isinstance(event, ConnectedEvent):
                        continue
                    self._emit(event)
        except asyncio.CancelledError:
            return
        except ConnectionClosedError as exc:
            self._emit(ErrorEvent(cause=UpstreamError(f"upstream connection lost: {_describe(exc)}")))
        except Exception as exc:
            logger.exception("upstream reader failed")
            self._emit(ErrorEvent(cause=exc))
        self._connected = False
        self._emit_closed(self._close_reason())

    async def _writer_loop(self) -> None:
        while True:
            try:
                message = await self._send_queue.get()
            except asyncio.CancelledError:
                return
            try:
                await self._ws.send(message)
            except asyncio.CancelledError:
                self._send_queue.task_done()
                return
            except ConnectionClosed:
                # The reader observes the same close and reports it.
                self._send_queue.task_done()
                self._connected = False
                return
            except Exception as exc:
                self._send_queue.task_done()
                self._connected = False
                self._emit(ErrorEvent(cause=UpstreamError(f"upstream send failed: {_describe(exc)}")))
                return
            self._send_queue.task_done()


__all__ = ["UpstreamSession"]
