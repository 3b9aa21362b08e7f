from .runtime import RuntimeDeps
from .settings import AppSettings
from .session import TurnStatus, SessionState, ConnectionStatus
from .upstream import UpstreamConfig

__all__ = ["AppSettings", "ConnectionStatus", "RuntimeDeps", "SessionState", "TurnStatus", "UpstreamConfig"]
