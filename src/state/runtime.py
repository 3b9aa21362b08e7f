"""Typed runtime state objects for dependency wiring."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from src.fanout import ClientFanout
    from src.session.store import ContextStore
    from src.state.settings import AppSettings
    from src.realtime.bridge import UpstreamBridge
    from src.handlers.connections import ConnectionManager


@dataclass(slots=True)
class RuntimeDeps:
    connections: ConnectionManager
    fanout: ClientFanout
    contexts: ContextStore
    bridge: UpstreamBridge
    settings: AppSettings

    async def shutdown(self) -> None:
        try:
            await self.fanout.shutdown()
        except Exception:
            logger.exception("runtime shutdown failed")


__all__ = ["RuntimeDeps"]
