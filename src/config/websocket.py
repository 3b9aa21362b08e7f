"""WebSocket protocol configuration and constants."""

from __future__ import annotations

import os

WS_ENDPOINT_PATH = "/ws"

# Envelope keys
WS_KEY_TYPE = "type"
WS_KEY_PAYLOAD = "payload"

# Inbound message types (client -> relay)
WS_TYPE_START_SESSION = "start-voice-session"
WS_TYPE_AUDIO_DATA = "audio-data"
WS_TYPE_STOP_SESSION = "stop-voice-session"
WS_TYPE_PING = "ping"
WS_TYPE_PONG = "pong"
WS_TYPE_END = "end"

# Outbound message types (relay -> client)
WS_TYPE_SESSION_STARTED = "voice-session-started"
WS_TYPE_VOICE_CONNECTED = "voice-connected"
WS_TYPE_SPEAKING_START = "ai-speaking-start"
WS_TYPE_AUDIO_RESPONSE = "audio-response"
WS_TYPE_SPEAKING_END = "ai-speaking-end"
WS_TYPE_TOKEN_USAGE = "token-usage"
WS_TYPE_VOICE_ERROR = "voice-error"
WS_TYPE_VOICE_DISCONNECTED = "voice-disconnected"
WS_TYPE_ERROR = "error"
WS_TYPE_SESSION_END = "session_end"

# Close codes
WS_CLOSE_CLIENT_REQUEST_CODE = 1000
WS_CLOSE_IDLE_CODE = 4000
WS_CLOSE_UNAUTHORIZED_CODE = 4001
WS_CLOSE_BUSY_CODE = 4002
WS_CLOSE_MAX_DURATION_CODE = 4003

WS_CLOSE_IDLE_REASON = "idle timeout"
WS_CLOSE_MAX_DURATION_REASON = "max connection duration reached"

# Idle watchdog
ENV_WS_IDLE_TIMEOUT_S = "WS_IDLE_TIMEOUT_S"
ENV_WS_WATCHDOG_TICK_S = "WS_WATCHDOG_TICK_S"
ENV_WS_MAX_CONNECTION_DURATION_S = "WS_MAX_CONNECTION_DURATION_S"

DEFAULT_WS_IDLE_TIMEOUT_S = 150.0
DEFAULT_WS_WATCHDOG_TICK_S = 5.0
DEFAULT_WS_MAX_CONNECTION_DURATION_S = 60.0 * 60.0

WS_IDLE_TIMEOUT_S = float(os.getenv(ENV_WS_IDLE_TIMEOUT_S, str(DEFAULT_WS_IDLE_TIMEOUT_S)))
WS_WATCHDOG_TICK_S = float(os.getenv(ENV_WS_WATCHDOG_TICK_S, str(DEFAULT_WS_WATCHDOG_TICK_S)))
WS_MAX_CONNECTION_DURATION_S = float(
    os.getenv(ENV_WS_MAX_CONNECTION_DURATION_S, str(DEFAULT_WS_MAX_CONNECTION_DURATION_S))
)

# Errors (payload.code values)
WS_ERROR_AUTH_FAILED = "authentication_failed"
WS_ERROR_SERVER_AT_CAPACITY = "server_at_capacity"
WS_ERROR_INVALID_MESSAGE = "invalid_message"
WS_ERROR_INVALID_PAYLOAD = "invalid_payload"
WS_ERROR_RATE_LIMITED = "rate_limited"
WS_ERROR_NOT_FOUND = "not_found"
WS_ERROR_UPSTREAM_UNAVAILABLE = "upstream_unavailable"
WS_ERROR_INTERNAL = "internal_error"

__all__ = [
    "WS_ENDPOINT_PATH",
    "WS_KEY_TYPE",
    "WS_KEY_PAYLOAD",
    "WS_TYPE_START_SESSION",
    "WS_TYPE_AUDIO_DATA",
    "WS_TYPE_STOP_SESSION",
    "WS_TYPE_PING",
    "WS_TYPE_PONG",
    "WS_TYPE_END",
    "WS_TYPE_SESSION_STARTED",
    "WS_TYPE_VOICE_CONNECTED",
    "WS_TYPE_SPEAKING_START",
    "WS_TYPE_AUDIO_RESPONSE",
    "WS_TYPE_SPEAKING_END",
    "WS_TYPE_TOKEN_USAGE",
    "WS_TYPE_VOICE_ERROR",
    "WS_TYPE_VOICE_DISCONNECTED",
    "WS_TYPE_ERROR",
    "WS_TYPE_SESSION_END",
    "WS_CLOSE_CLIENT_REQUEST_CODE",
    "WS_CLOSE_IDLE_CODE",
    "WS_CLOSE_UNAUTHORIZED_CODE",
    "WS_CLOSE_BUSY_CODE",
    "WS_CLOSE_MAX_DURATION_CODE",
    "WS_CLOSE_IDLE_REASON",
    "WS_CLOSE_MAX_DURATION_REASON",
    "WS_IDLE_TIMEOUT_S",
    "WS_WATCHDOG_TICK_S",
    "WS_MAX_CONNECTION_DURATION_S",
    "WS_ERROR_AUTH_FAILED",
    "WS_ERROR_SERVER_AT_CAPACITY",
    "WS_ERROR_INVALID_MESSAGE",
    "WS_ERROR_INVALID_PAYLOAD",
    "WS_ERROR_RATE_LIMITED",
    "WS_ERROR_NOT_FOUND",
    "WS_ERROR_UPSTREAM_UNAVAILABLE",
    "WS_ERROR_INTERNAL",
]
