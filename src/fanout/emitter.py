"""Session sink that forwards a session's output to one WebSocket client."""

from __future__ import annotations

import logging
from typing import Any

from src.audio.codec import encode_b64
from src.realtime.events import AudioChunkEvent
from src.handlers.websocket.errors import safe_send_envelope
from src.config.websocket import (
    WS_TYPE_VOICE_ERROR,
    WS_TYPE_TOKEN_USAGE,
    WS_TYPE_SPEAKING_END,
    WS_TYPE_AUDIO_RESPONSE,
    WS_TYPE_SPEAKING_START,
    WS_TYPE_SESSION_STARTED,
    WS_TYPE_VOICE_CONNECTED,
    WS_TYPE_VOICE_DISCONNECTED,
)

logger = logging.getLogger(__name__)


class ClientEmitter:
    """Sends envelopes to a client; transport failures are swallowed.

    A dead client only loses its own notices. ``failed_sends`` counts them.
    """

    def __init__(self, ws: Any, *, session_id: str) -> None:
        self._ws = ws
        self._session_id = session_id
        self.failed_sends = 0

    async def _emit(self, msg_type: str, payload: dict[str, Any] | None = None) -> None:
        if not await safe_send_envelope(self._ws, msg_type=msg_type, payload=payload):
            self.failed_sends += 1

    async def open(self) -> None:
        await self._emit(WS_TYPE_SESSION_STARTED, {"sessionId": self._session_id})

    async def connected(self) -> None:
        await self._emit(WS_TYPE_VOICE_CONNECTED)

    async def speaking_started(self) -> None:
        await self._emit(WS_TYPE_SPEAKING_START)

    async def audio(self, chunk: AudioChunkEvent) -> None:
        await self._emit(
            WS_TYPE_AUDIO_RESPONSE,
            {"audioData": encode_b64(chunk.data), "mimeType": chunk.mime_type},
        )

    async def speaking_ended(self) -> None:
        await self._emit(WS_TYPE_SPEAKING_END)

    async def usage(self, total_tokens: int) -> None:
        await self._emit(WS_TYPE_TOKEN_USAGE, {"totalTokens": total_tokens})

    async def error(self, message: str) -> None:
        await self._emit(WS_TYPE_VOICE_ERROR, {"message": message})

    async def disconnected(self, *, remote: bool, reason: str) -> None:
        await self._emit(WS_TYPE_VOICE_DISCONNECTED, {"remote": remote, "reason": reason})

    async def close(self) -> None:
        if self.failed_sends:
            logger.debug("session %s: %s envelope(s) not delivered", self._session_id, self.failed_sends)


__all__ = ["ClientEmitter"]
