"""Session orchestration: one relay session per capture source or client."""

from .context import Document, SessionContext, build_system_instruction
from .manager import SessionManager
from .sinks import PlaybackSink, SessionSink
from .store import ContextStore

__all__ = [
    "ContextStore",
    "Document",
    "PlaybackSink",
    "SessionContext",
    "SessionManager",
    "SessionSink",
    "build_system_instruction",
]
