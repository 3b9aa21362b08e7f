"""Load runtime settings.

Configuration values are resolved from the environment in `src/config/*` and
exposed here as structured dataclasses for the rest of the relay.
"""

from __future__ import annotations

from src.config.secrets import get_relay_api_key, get_gemini_api_key
from src.config.websocket import (
    WS_IDLE_TIMEOUT_S,
    WS_WATCHDOG_TICK_S,
    WS_MAX_CONNECTION_DURATION_S,
)
from src.state.settings import (
    AppSettings,
    AuthSettings,
    LimitsSettings,
    UpstreamSettings,
    WebSocketSettings,
)
from src.config.limits import (
    MAX_AUDIO_MESSAGE_BYTES,
    MAX_CONCURRENT_CONNECTIONS,
    WS_MESSAGE_WINDOW_SECONDS,
    WS_MAX_MESSAGES_PER_WINDOW,
    WS_SESSION_START_WINDOW_SECONDS,
    WS_MAX_SESSION_STARTS_PER_WINDOW,
)
from src.config.upstream import (
    GEMINI_MODEL,
    GEMINI_VOICE,
    GEMINI_WS_HOST,
    GEMINI_WS_PATH,
    UPSTREAM_SEND_QUEUE_MAX,
    UPSTREAM_CLOSE_TIMEOUT_S,
    UPSTREAM_CONNECT_TIMEOUT_S,
)


def load_upstream_settings(*, model: str | None = None, voice: str | None = None) -> UpstreamSettings:
    return UpstreamSettings(
        api_key=get_gemini_api_key(),
        host=GEMINI_WS_HOST,
        path=GEMINI_WS_PATH,
        model=(model or "").strip() or GEMINI_MODEL,
        voice=(voice or "").strip() or GEMINI_VOICE,
        connect_timeout_s=UPSTREAM_CONNECT_TIMEOUT_S,
        close_timeout_s=UPSTREAM_CLOSE_TIMEOUT_S,
        send_queue_max=UPSTREAM_SEND_QUEUE_MAX,
    )


def load_settings() -> AppSettings:
    return AppSettings(
        auth=AuthSettings(api_key=get_relay_api_key()),
        limits=LimitsSettings(
            max_concurrent_connections=MAX_CONCURRENT_CONNECTIONS,
            max_audio_message_bytes=MAX_AUDIO_MESSAGE_BYTES,
            ws_message_window_seconds=WS_MESSAGE_WINDOW_SECONDS,
            ws_max_messages_per_window=WS_MAX_MESSAGES_PER_WINDOW,
            ws_session_start_window_seconds=WS_SESSION_START_WINDOW_SECONDS,
            ws_max_session_starts_per_window=WS_MAX_SESSION_STARTS_PER_WINDOW,
        ),
        websocket=WebSocketSettings(
            idle_timeout_s=WS_IDLE_TIMEOUT_S,
            watchdog_tick_s=WS_WATCHDOG_TICK_S,
            max_connection_duration_s=WS_MAX_CONNECTION_DURATION_S,
        ),
        upstream=load_upstream_settings(),
    )


__all__ = ["load_settings", "load_upstream_settings"]
