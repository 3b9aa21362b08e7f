"""Client fan-out: routes client events to per-client session managers."""

from __future__ import annotations

import logging
from typing import Any
from collections.abc import Callable

from src.errors import NotFoundError
from src.audio.frames import AudioFrame
from src.session.sinks import SessionSink
from src.state.session import SessionState
from src.session.manager import SessionManager
from src.session.context import SessionContext
from src.realtime.bridge import UpstreamBridge

from .emitter import ClientEmitter
from .registry import ClientRegistry

logger = logging.getLogger(__name__)

EmitterFactory = Callable[[Any, str], SessionSink]


def _default_emitter(ws: Any, session_id: str) -> SessionSink:
    return ClientEmitter(ws, session_id=session_id)


class ClientFanout:
    """Owns the client registry. Sessions never share tasks or state.

    Failures in one client's session are contained to that session; the
    emitter swallows transport errors so a dead client cannot break the loop.
    """

    def __init__(
        self,
        bridge: UpstreamBridge,
        *,
        registry: ClientRegistry | None = None,
        emitter_factory: EmitterFactory | None = None,
    ) -> None:
        self._bridge = bridge
        self._registry = registry or ClientRegistry()
        self._emitter_factory = emitter_factory or _default_emitter

    @property
    def registry(self) -> ClientRegistry:
        return self._registry

    async def on_client_connect(self, connection_id: str, ws: Any) -> None:
        await self._registry.add(connection_id, ws)
        logger.info("client %s connected (clients=%s)", connection_id, len(self._registry))

    async def on_client_start_session(
        self,
        connection_id: str,
        context: SessionContext,
        *,
        session_id: str | None = None,
    ) -> SessionState:
        entry = await self._registry.get(connection_id)
        if entry is None:
            raise NotFoundError("connection", connection_id)

        previous = await self._registry.swap_manager(connection_id, None)
        if previous is not None:
            logger.info("client %s: replacing session %s", connection_id, previous.session_id)
            await previous.stop()

        manager_session_id = session_id or connection_id
        manager = SessionManager(
            self._bridge,
            self._emitter_factory(entry.ws, manager_session_id),
            session_id=manager_session_id,
        )
        # The client may have gone away while the previous session was stopping.
        installed, displaced = await self._registry.install_manager(connection_id, manager)
        if not installed:
            raise NotFoundError("connection", connection_id)
        if displaced is not None:
            logger.info("client %s: replacing session %s", connection_id, displaced.session_id)
            await displaced.stop()
        try:
            return await manager.start(context)
        except Exception:
            await self._registry.release_manager(connection_id, manager)
            raise

    def on_client_audio(self, connection_id: str, frame: AudioFrame) -> bool:
        try:
            manager = self._require_manager(connection_id)
        except NotFoundError as exc:
            logger.debug("dropping client audio: %s", exc)
            return False
        return manager.submit(frame)

    async def on_client_stop(self, connection_id: str) -> None:
        manager = await self._registry.swap_manager(connection_id, None)
        if manager is None:
            return
        await manager.stop()

    async def on_client_disconnect(self, connection_id: str) -> None:
        entry = await self._registry.remove(connection_id)
        if entry is None:
            return
        if entry.manager is not None:
            await entry.manager.stop()
        logger.info("client %s disconnected (clients=%s)", connection_id, len(self._registry))

    def has_active_session(self, connection_id: str) -> bool:
        entry = self._registry.peek(connection_id)
        return entry is not None and entry.manager is not None and entry.manager.is_active

    async def shutdown(self) -> None:
        entries = await self._registry.drain()
        for entry in entries:
            if entry.manager is None:
                continue
            try:
                await entry.manager.stop()
            except Exception:
                logger.exception("failed to stop session for client %s", entry.connection_id)

    def _require_manager(self, connection_id: str) -> SessionManager:
        entry = self._registry.peek(connection_id)
        if entry is None:
            raise NotFoundError("connection", connection_id)
        manager = entry.manager
        if manager is None or not manager.is_active:
            raise NotFoundError("session", connection_id)
        return manager


__all__ = ["ClientFanout"]
