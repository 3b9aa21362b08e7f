"""Session manager: one relay session from start to teardown.

Owns the ``SessionState`` and wires capture -> turn gate -> upstream and
upstream events -> turn update -> sink. A single event task folds upstream
events into state in arrival order; an optional capture task pumps frames
through ``submit``. Every way a session can end (client stop, disconnect,
signal, upstream error, device failure) goes through the same teardown.
"""

from __future__ import annotations

import uuid
import asyncio
import logging
import contextlib
from collections.abc import AsyncIterator

from src.realtime import turn
from src.audio.frames import MIC_FORMAT, AudioFormat, AudioFrame
from src.devices.types import CaptureDevice
from src.state.session import SessionState, ConnectionStatus
from src.state.upstream import UpstreamConfig
from src.realtime.turn import TurnEffect
from src.realtime.bridge import UpstreamBridge
from src.realtime.events import (
    ClosedEvent,
    ErrorEvent,
    UsageEvent,
    UpstreamEvent,
    AudioChunkEvent,
    ConnectedEvent,
    TurnCompleteEvent,
)
from src.realtime.adapter import UpstreamSession
from src.errors import (
    SendError,
    RelayError,
    DeviceError,
    UpstreamError,
    SessionStateError,
    UpstreamConnectionError,
)

from .sinks import SessionSink
from .context import SessionContext, build_system_instruction

logger = logging.getLogger(__name__)


class SessionManager:
    def __init__(
        self,
        bridge: UpstreamBridge,
        sink: SessionSink,
        *,
        capture: CaptureDevice | None = None,
        session_id: str | None = None,
        input_format: AudioFormat = MIC_FORMAT,
    ) -> None:
        self._bridge = bridge
        self._sink = sink
        self._capture = capture
        self._session_id = session_id or str(uuid.uuid4())
        self._input_format = input_format
        self._close_timeout_s = float(bridge.settings.close_timeout_s)

        self._state: SessionState | None = None
        self._upstream: UpstreamSession | None = None
        self._event_task: asyncio.Task | None = None
        self._capture_task: asyncio.Task | None = None
        self._stop_lock = asyncio.Lock()
        self._closed = asyncio.Event()
        self._failure: BaseException | None = None

        self.forwarded_frames = 0
        self.dropped_frames = 0

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def state(self) -> SessionState | None:
        return self._state

    @property
    def failure(self) -> BaseException | None:
        """The error that ended the session, or None for a clean stop."""
        return self._failure

    @property
    def is_active(self) -> bool:
        state = self._state
        return state is not None and not state.is_terminal

    async def start(self, context: SessionContext) -> SessionState:
        if self._state is not None:
            raise SessionStateError("session already started")

        instruction = build_system_instruction(context)
        state = SessionState(session_id=self._session_id, system_context=instruction)
        state.connection_status = ConnectionStatus.CONNECTING
        self._state = state
        logger.info(
            "session %s: connecting (agent_type=%s documents=%s instruction_chars=%s)",
            self._session_id,
            context.agent_type,
            len(context.documents),
            len(instruction),
        )

        config = UpstreamConfig(
            system_instruction=instruction,
            model=self._bridge.settings.model,
            voice=self._bridge.settings.voice,
            input_format=self._input_format,
        )
        try:
            await self._sink.open()
            upstream = self._bridge.new_session()
            self._upstream = upstream
            await upstream.connect(config)
        except (UpstreamConnectionError, DeviceError) as exc:
            logger.error("session %s: failed to start: %s", self._session_id, exc)
            self._failure = exc
            state.connection_status = ConnectionStatus.CLOSED
            state.closed_reason = str(exc)
            with contextlib.suppress(Exception):
                await self._sink.error(str(exc))
            with contextlib.suppress(Exception):
                await self._sink.close()
            self._closed.set()
            raise

        if state.close_requested:
            # stop() arrived while connecting.
            state.connection_status = ConnectionStatus.CONNECTED
            await self._shutdown("stopped during connect", local=True, end_input=False)
            return state

        state.connection_status = ConnectionStatus.CONNECTED
        logger.info("session %s: connected", self._session_id)
        self._event_task = asyncio.create_task(self._event_loop(upstream.events()))

        if self._capture is not None:
            try:
                await self._capture.start()
            except DeviceError as exc:
                await self._fail(exc)
                raise
            self._capture_task = asyncio.create_task(self._capture_loop(self._capture))
        return state

    def submit(self, frame: AudioFrame) -> bool:
        """Forward one captured frame upstream if the turn gate allows it."""
        state = self._state
        upstream = self._upstream
        if state is None or upstream is None or not turn.may_forward(state):
            self.dropped_frames += 1
            return False
        try:
            upstream.send(frame)
        except SendError as exc:
            self.dropped_frames += 1
            logger.warning("session %s: dropping frame: %s", self._session_id, exc)
            return False
        self.forwarded_frames += 1
        return True

    async def stop(self) -> None:
        """Orderly local shutdown. Safe to call any number of times from any path."""
        state = self._state
        if state is None or state.is_terminal:
            return
        if state.connection_status is ConnectionStatus.CONNECTING:
            state.close_requested = True
            return
        await self._shutdown("stopped", local=True, end_input=True)

    async def wait_closed(self) -> None:
        await self._closed.wait()

    async def _event_loop(self, events: AsyncIterator[UpstreamEvent]) -> None:
        try:
            async for event in events:
                if not await self._handle_event(event):
                    return
        except asyncio.CancelledError:
            return
        except DeviceError as exc:
            await self._fail(exc)
        except Exception as exc:
            logger.exception("session %s: event handling failed", self._session_id)
            await self._fail(exc)

    async def _handle_event(self, event: UpstreamEvent) -> bool:
        state = self._state
        if state is None:
            return False

        if isinstance(event, ConnectedEvent):
            await self._sink.connected()
        elif isinstance(event, AudioChunkEvent):
            if state.is_terminal:
                return True
            await self._apply(turn.on_audio_chunk(state))
            await self._sink.audio(event)
        elif isinstance(event, TurnCompleteEvent):
            await self._apply(turn.on_turn_complete(state))
        elif isinstance(event, UsageEvent):
            state.total_tokens = event.total_tokens
            await self._sink.usage(event.total_tokens)
        elif isinstance(event, ErrorEvent):
            cause = event.cause
            await self._fail(cause if isinstance(cause, RelayError) else UpstreamError(event.message))
            return False
        elif isinstance(event, ClosedEvent):
            await self._shutdown(event.reason or "closed", local=False, end_input=False)
            return False
        return True

    async def _apply(self, effect: TurnEffect) -> None:
        if effect is TurnEffect.MUTE:
            if self._capture is not None:
                self._capture.pause()
            await self._sink.speaking_started()
        elif effect is TurnEffect.UNMUTE:
            if self._capture is not None:
                self._capture.resume()
            await self._sink.speaking_ended()

    async def _capture_loop(self, capture: CaptureDevice) -> None:
        try:
            async for frame in capture.frames():
                self.submit(frame)
        except asyncio.CancelledError:
            return
        except DeviceError as exc:
            await self._fail(exc)
        except Exception as exc:
            logger.exception("session %s: capture failed", self._session_id)
            await self._fail(DeviceError(f"capture failed: {exc}"))

    async def _fail(self, exc: BaseException) -> None:
        state = self._state
        if state is None or state.is_terminal:
            return
        logger.error("session %s: %s", self._session_id, exc)
        if self._failure is None:
            self._failure = exc
        with contextlib.suppress(Exception):
            await self._sink.error(str(exc) or type(exc).__name__)
        await self._shutdown(str(exc) or type(exc).__name__, local=False, end_input=False)

    async def _shutdown(self, reason: str, *, local: bool, end_input: bool) -> None:
        async with self._stop_lock:
            state = self._state
            if state is None or state.is_terminal:
                return
            state.connection_status = ConnectionStatus.CLOSING
            if local:
                state.close_requested = True
            current = asyncio.current_task()

            effect = turn.reset(state)
            if effect is TurnEffect.UNMUTE:
                if self._capture is not None:
                    self._capture.resume()
                with contextlib.suppress(Exception):
                    await self._sink.speaking_ended()

            if self._capture_task is not None and self._capture_task is not current:
                self._capture_task.cancel()

            upstream = self._upstream
            if upstream is not None:
                if end_input and upstream.is_connected:
                    try:
                        await asyncio.wait_for(upstream.signal_end_of_input(), timeout=self._close_timeout_s)
                    except asyncio.TimeoutError:
                        logger.warning("session %s: end-of-input timed out", self._session_id)
                    except Exception as exc:
                        logger.warning("session %s: end-of-input failed: %s", self._session_id, exc)
                try:
                    await asyncio.wait_for(upstream.close(), timeout=self._close_timeout_s)
                except asyncio.TimeoutError:
                    logger.warning("session %s: upstream close timed out", self._session_id)
                except Exception as exc:
                    logger.warning("session %s: upstream close failed: %s", self._session_id, exc)

            if self._capture is not None:
                try:
                    await self._capture.stop()
                except Exception as exc:
                    logger.warning("session %s: capture stop failed: %s", self._session_id, exc)

            if self._event_task is not None and self._event_task is not current:
                self._event_task.cancel()

            state.connection_status = ConnectionStatus.CLOSED
            state.closed_reason = reason
            with contextlib.suppress(Exception):
                await self._sink.disconnected(remote=not state.close_requested, reason=reason)
            try:
                await self._sink.close()
            except Exception as exc:
                logger.warning("session %s: sink close failed: %s", self._session_id, exc)

            logger.info(
                "session %s: closed (%s) forwarded=%s dropped=%s",
                self._session_id,
                reason,
                self.forwarded_frames,
                self.dropped_frames,
            )
            self._closed.set()


__all__ = ["SessionManager"]
