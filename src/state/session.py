"""Per-session relay state (dataclasses and enums only)."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class ConnectionStatus(enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSING = "closing"
    CLOSED = "closed"


class TurnStatus(enum.Enum):
    IDLE = "idle"
    AI_RESPONDING = "ai_responding"


@dataclass(slots=True)
class SessionState:
    """Mutable state of one relay session.

    Owned by the session manager; the turn state machine and the upstream
    adapter only report events that the manager folds in here.
    """

    session_id: str
    system_context: str = ""
    connection_status: ConnectionStatus = ConnectionStatus.DISCONNECTED
    turn_status: TurnStatus = TurnStatus.IDLE
    close_requested: bool = False
    closed_reason: str | None = None
    total_tokens: int | None = None

    @property
    def is_connected(self) -> bool:
        return self.connection_status is ConnectionStatus.CONNECTED

    @property
    def is_terminal(self) -> bool:
        return self.connection_status in (ConnectionStatus.CLOSING, ConnectionStatus.CLOSED)


__all__ = ["ConnectionStatus", "SessionState", "TurnStatus"]
