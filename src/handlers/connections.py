"""WebSocket connection admission control."""

from __future__ import annotations

import asyncio


class ConnectionManager:
    """Caps concurrent client connections; each one may own an upstream session."""

    def __init__(self, *, max_connections: int) -> None:
        self._max = max(1, int(max_connections))
        self._lock = asyncio.Lock()
        self._active: set[str] = set()

    @property
    def max_connections(self) -> int:
        return self._max

    async def connect(self, connection_id: str) -> bool:
        """Attempt to admit a connection (before accepting the websocket)."""
        async with self._lock:
            if connection_id in self._active:
                return True
            if len(self._active) >= self._max:
                return False
            self._active.add(connection_id)
            return True

    async def disconnect(self, connection_id: str) -> None:
        async with self._lock:
            self._active.discard(connection_id)

    def get_connection_count(self) -> int:
        return len(self._active)


__all__ = ["ConnectionManager"]
