"""Factory for upstream sessions bound to the configured endpoint."""

from __future__ import annotations

from src.errors import UpstreamConnectionError
from src.state.settings import UpstreamSettings
from src.config.secrets import ENV_GEMINI_API_KEY

from .adapter import ConnectFn, UpstreamSession


class UpstreamBridge:
    def __init__(self, settings: UpstreamSettings, *, connect_fn: ConnectFn | None = None) -> None:
        self._settings = settings
        self._connect_fn = connect_fn

    @property
    def settings(self) -> UpstreamSettings:
        return self._settings

    def new_session(self) -> UpstreamSession:
        if not self._settings.api_key:
            raise UpstreamConnectionError(f"{ENV_GEMINI_API_KEY} is not set")
        return UpstreamSession(
            url=self._settings.url,
            connect_timeout_s=self._settings.connect_timeout_s,
            close_timeout_s=self._settings.close_timeout_s,
            send_queue_max=self._settings.send_queue_max,
            connect_fn=self._connect_fn,
        )


__all__ = ["UpstreamBridge"]
