"""Runtime dependency construction (upstream bridge, fan-out, admission control)."""

from __future__ import annotations

import logging

from src.state import RuntimeDeps
from src.fanout import ClientFanout
from src.session.store import ContextStore
from src.state.settings import AppSettings
from src.realtime.adapter import ConnectFn
from src.realtime.bridge import UpstreamBridge
from src.handlers.connections import ConnectionManager
from src.config.secrets import ENV_RELAY_API_KEY, ENV_GEMINI_API_KEY

from .settings import load_settings

logger = logging.getLogger(__name__)


async def build_runtime_deps(
    settings: AppSettings | None = None,
    *,
    connect_fn: ConnectFn | None = None,
) -> RuntimeDeps:
    settings = settings or load_settings()

    if not settings.upstream.api_key:
        # Not fatal at boot: health checks and the context API still work.
        logger.warning("%s is not set; voice sessions will fail to start", ENV_GEMINI_API_KEY)
    if not settings.auth.api_key:
        logger.warning("%s is not set; WebSocket clients are not authenticated", ENV_RELAY_API_KEY)

    bridge = UpstreamBridge(settings.upstream, connect_fn=connect_fn)
    connections = ConnectionManager(max_connections=settings.limits.max_concurrent_connections)

    return RuntimeDeps(
        connections=connections,
        fanout=ClientFanout(bridge),
        contexts=ContextStore(),
        bridge=bridge,
        settings=settings,
    )


__all__ = ["RuntimeDeps", "build_runtime_deps"]
