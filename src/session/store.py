"""In-memory store of per-session agent type and documents.

Filled over HTTP before a client sends ``start-voice-session``. Nothing is
persisted; entries live until the process exits.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import field, dataclass

from .context import DEFAULT_AGENT_TYPE, Document, SessionContext

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Entry:
    agent_type: str = DEFAULT_AGENT_TYPE
    documents: list[Document] = field(default_factory=list)


class ContextStore:
    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}
        self._lock = asyncio.Lock()

    async def set_documents(self, session_id: str, documents: list[Document]) -> SessionContext:
        async with self._lock:
            entry = self._entries.setdefault(session_id, _Entry())
            entry.documents = list(documents)
            logger.info("session %s: stored %s document(s)", session_id, len(documents))
            return self._snapshot(entry)

    async def set_agent_type(self, session_id: str, agent_type: str) -> SessionContext:
        async with self._lock:
            entry = self._entries.setdefault(session_id, _Entry())
            entry.agent_type = agent_type
            logger.info("session %s: agent type set to %s", session_id, agent_type)
            return self._snapshot(entry)

    async def get(self, session_id: str) -> SessionContext | None:
        async with self._lock:
            entry = self._entries.get(session_id)
            return self._snapshot(entry) if entry is not None else None

    @staticmethod
    def _snapshot(entry: _Entry) -> SessionContext:
        return SessionContext(agent_type=entry.agent_type, documents=tuple(entry.documents))


__all__ = ["ContextStore"]
