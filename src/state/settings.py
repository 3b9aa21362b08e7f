"""Runtime settings (dataclasses only)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AuthSettings:
    # Empty means client authentication is disabled.
    api_key: str


@dataclass(frozen=True, slots=True)
class LimitsSettings:
    max_concurrent_connections: int
    max_audio_message_bytes: int
    ws_message_window_seconds: float
    ws_max_messages_per_window: int
    ws_session_start_window_seconds: float
    ws_max_session_starts_per_window: int


@dataclass(frozen=True, slots=True)
class WebSocketSettings:
    idle_timeout_s: float
    watchdog_tick_s: float
    max_connection_duration_s: float


@dataclass(frozen=True, slots=True)
class UpstreamSettings:
    api_key: str
    host: str
    path: str
    model: str
    voice: str
    connect_timeout_s: float
    close_timeout_s: float
    send_queue_max: int

    @property
    def url(self) -> str:
        return f"wss://{self.host}{self.path}?key={self.api_key}"


@dataclass(frozen=True, slots=True)
class AppSettings:
    auth: AuthSettings
    limits: LimitsSettings
    websocket: WebSocketSettings
    upstream: UpstreamSettings


__all__ = [
    "AppSettings",
    "AuthSettings",
    "LimitsSettings",
    "UpstreamSettings",
    "WebSocketSettings",
]
