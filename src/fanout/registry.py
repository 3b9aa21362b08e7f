"""Registry of connected clients and their active sessions."""

from __future__ import annotations

import asyncio
from typing import Any
from dataclasses import dataclass

from src.session.manager import SessionManager


@dataclass(slots=True)
class ClientEntry:
    connection_id: str
    ws: Any
    manager: SessionManager | None = None


class ClientRegistry:
    def __init__(self) -> None:
        self._entries: dict[str, ClientEntry] = {}
        self._lock = asyncio.Lock()

    async def add(self, connection_id: str, ws: Any) -> ClientEntry:
        async with self._lock:
            entry = ClientEntry(connection_id=connection_id, ws=ws)
            self._entries[connection_id] = entry
            return entry

    async def get(self, connection_id: str) -> ClientEntry | None:
        async with self._lock:
            return self._entries.get(connection_id)

    async def swap_manager(self, connection_id: str, manager: SessionManager | None) -> SessionManager | None:
        """Install ``manager`` on the entry and return the one it replaces."""
        async with self._lock:
            entry = self._entries.get(connection_id)
            if entry is None:
                return None
            previous, entry.manager = entry.manager, manager
            return previous

    async def install_manager(
        self, connection_id: str, manager: SessionManager
    ) -> tuple[bool, SessionManager | None]:
        """Attach ``manager`` if the connection is still registered.

        Returns whether it was installed and the manager it displaced, if a
        concurrent start got there first.
        """
        async with self._lock:
            entry = self._entries.get(connection_id)
            if entry is None:
                return False, None
            previous, entry.manager = entry.manager, manager
            return True, previous

    async def release_manager(self, connection_id: str, manager: SessionManager) -> bool:
        """Detach ``manager`` if it is still the one installed; a newer session is left alone."""
        async with self._lock:
            entry = self._entries.get(connection_id)
            if entry is None or entry.manager is not manager:
                return False
            entry.manager = None
            return True

    async def remove(self, connection_id: str) -> ClientEntry | None:
        async with self._lock:
            return self._entries.pop(connection_id, None)

    async def drain(self) -> list[ClientEntry]:
        async with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()
            return entries

    def peek(self, connection_id: str) -> ClientEntry | None:
        """Unlocked read for the per-frame audio path."""
        return self._entries.get(connection_id)

    def __len__(self) -> int:
        return len(self._entries)

    def active_sessions(self) -> int:
        return sum(1 for entry in self._entries.values() if entry.manager is not None and entry.manager.is_active)


__all__ = ["ClientEntry", "ClientRegistry"]
