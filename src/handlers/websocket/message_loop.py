"""WebSocket message loop and dispatch for the voice relay (/ws)."""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import Any
from typing import Literal
from collections.abc import Callable, Awaitable

from fastapi import WebSocket, WebSocketDisconnect

from src.state import RuntimeDeps
from src.errors import NotFoundError, FrameFormatError, UpstreamConnectionError
from src.audio.codec import frame_from_b64, estimate_b64_decoded_bytes
from src.handlers.limits import SlidingWindowRateLimiter
from src.config.websocket import (
    WS_TYPE_END,
    WS_TYPE_PING,
    WS_TYPE_PONG,
    WS_ERROR_NOT_FOUND,
    WS_TYPE_AUDIO_DATA,
    WS_TYPE_SESSION_END,
    WS_TYPE_STOP_SESSION,
    WS_TYPE_START_SESSION,
    WS_ERROR_INVALID_MESSAGE,
    WS_ERROR_INVALID_PAYLOAD,
    WS_CLOSE_CLIENT_REQUEST_CODE,
    WS_ERROR_UPSTREAM_UNAVAILABLE,
)

from .parser import parse_client_message
from .lifecycle import WebSocketLifecycle
from .errors import send_error, safe_send_envelope
from .limits import consume_limiter, select_rate_limiter

logger = logging.getLogger(__name__)

HandlerFn = Callable[[WebSocket, RuntimeDeps, str, dict[str, Any]], Awaitable[None]]


async def _recv_text_with_watchdog(ws: WebSocket, lifecycle: WebSocketLifecycle) -> tuple[str | None, bool]:
    try:
        message = await asyncio.wait_for(
            ws.receive_text(),
            timeout=lifecycle.watchdog_tick_s * 2,
        )
        return message, False
    except asyncio.TimeoutError:
        return None, lifecycle.should_close()


async def _handle_control_message(ws: WebSocket, msg_type: str) -> Literal["none", "continue", "close"]:
    if msg_type == WS_TYPE_PING:
        await safe_send_envelope(ws, msg_type=WS_TYPE_PONG)
        return "continue"
    if msg_type == WS_TYPE_PONG:
        return "continue"
    if msg_type == WS_TYPE_END:
        await safe_send_envelope(ws, msg_type=WS_TYPE_SESSION_END)
        with contextlib.suppress(Exception):
            await ws.close(code=WS_CLOSE_CLIENT_REQUEST_CODE)
        return "close"
    return "none"


async def _parse_or_send_error(ws: WebSocket, raw: str) -> dict[str, Any] | None:
    try:
        return parse_client_message(raw)
    except ValueError as exc:
        await send_error(
            ws,
            error_code=WS_ERROR_INVALID_MESSAGE,
            message=str(exc),
            reason_code="invalid_message",
        )
        return None


async def _handle_start_session(
    ws: WebSocket,
    runtime_deps: RuntimeDeps,
    connection_id: str,
    payload: dict[str, Any],
) -> None:
    session_id = payload.get("sessionId")
    if not isinstance(session_id, str) or not session_id.strip():
        await send_error(
            ws,
            error_code=WS_ERROR_INVALID_PAYLOAD,
            message="payload.sessionId is required",
            reason_code="missing_session_id",
        )
        return
    session_id = session_id.strip()

    context = await runtime_deps.contexts.get(session_id)
    if context is None:
        await send_error(
            ws,
            error_code=WS_ERROR_NOT_FOUND,
            message="Session not found",
            reason_code="unknown_session",
            details={"sessionId": session_id},
        )
        return

    try:
        await runtime_deps.fanout.on_client_start_session(connection_id, context, session_id=session_id)
    except UpstreamConnectionError as exc:
        # The session's emitter has already reported voice-error.
        logger.warning("client %s: session %s failed to start: %s", connection_id, session_id, exc)
        await send_error(
            ws,
            error_code=WS_ERROR_UPSTREAM_UNAVAILABLE,
            message="voice session could not be started",
            reason_code="upstream_connect_failed",
        )


async def _handle_audio(
    ws: WebSocket,
    runtime_deps: RuntimeDeps,
    connection_id: str,
    payload: dict[str, Any],
) -> None:
    audio = payload.get("audio")
    if not isinstance(audio, str) or not audio.strip():
        await send_error(
            ws,
            error_code=WS_ERROR_INVALID_PAYLOAD,
            message="payload.audio (base64 pcm16) is required",
            reason_code="missing_audio",
        )
        return

    max_bytes = runtime_deps.settings.limits.max_audio_message_bytes
    if max_bytes > 0 and estimate_b64_decoded_bytes(audio) > max_bytes:
        await send_error(
            ws,
            error_code=WS_ERROR_INVALID_PAYLOAD,
            message="audio message too large",
            reason_code="audio_too_large",
            details={"max_audio_bytes": int(max_bytes)},
        )
        return

    try:
        frame = frame_from_b64(audio)
    except (ValueError, FrameFormatError) as exc:
        await send_error(
            ws,
            error_code=WS_ERROR_INVALID_PAYLOAD,
            message=str(exc),
            reason_code="invalid_audio",
        )
        return

    # Dropped frames (no session, AI speaking, queue full) are not reported per frame.
    runtime_deps.fanout.on_client_audio(connection_id, frame)


async def _handle_stop_session(
    ws: WebSocket,
    runtime_deps: RuntimeDeps,
    connection_id: str,
    payload: dict[str, Any],
) -> None:
    await runtime_deps.fanout.on_client_stop(connection_id)


HANDLERS: dict[str, HandlerFn] = {
    WS_TYPE_START_SESSION: _handle_start_session,
    WS_TYPE_AUDIO_DATA: _handle_audio,
    WS_TYPE_STOP_SESSION: _handle_stop_session,
}


async def run_message_loop(
    ws: WebSocket,
    connection_id: str,
    lifecycle: WebSocketLifecycle,
    message_limiter: SlidingWindowRateLimiter,
    session_start_limiter: SlidingWindowRateLimiter,
    runtime_deps: RuntimeDeps,
) -> None:
    await runtime_deps.fanout.on_client_connect(connection_id, ws)
    try:
        while True:
            raw, should_exit = await _recv_text_with_watchdog(ws, lifecycle)
            if should_exit:
                return
            if raw is None:
                continue

            lifecycle.touch()

            msg = await _parse_or_send_error(ws, raw)
            if msg is None:
                continue

            msg_type = msg["type"]
            payload = msg["payload"] or {}

            limiter, label = select_rate_limiter(msg_type, message_limiter, session_start_limiter)
            if limiter is not None and not await consume_limiter(ws, limiter, label):
                continue

            control = await _handle_control_message(ws, msg_type)
            if control == "close":
                return
            if control == "continue":
                continue

            handler = HANDLERS.get(msg_type)
            if handler is not None:
                try:
                    await handler(ws, runtime_deps, connection_id, payload)
                except NotFoundError as exc:
                    await send_error(ws, error_code=WS_ERROR_NOT_FOUND, message=str(exc), reason_code=exc.kind)
                continue

            await send_error(
                ws,
                error_code=WS_ERROR_INVALID_MESSAGE,
                message=f"message type '{msg_type}' is not supported",
                reason_code="unknown_message_type",
            )
    except WebSocketDisconnect:
        return
    finally:
        with contextlib.suppress(Exception):
            await runtime_deps.fanout.on_client_disconnect(connection_id)


__all__ = ["run_message_loop"]
