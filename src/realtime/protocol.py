"""Gemini Live (BidiGenerateContent) JSON wire codec."""

from __future__ import annotations

import logging
from typing import Any

import orjson

from src.errors import UpstreamError
from src.audio.frames import AudioFrame
from src.audio.codec import decode_b64, encode_b64
from src.state.upstream import UpstreamConfig

from .events import (
    ErrorEvent,
    UsageEvent,
    UpstreamEvent,
    ConnectedEvent,
    AudioChunkEvent,
    TurnCompleteEvent,
)

logger = logging.getLogger(__name__)

DEFAULT_AUDIO_MIME_TYPE = "audio/pcm"


def build_setup_message(config: UpstreamConfig) -> dict[str, Any]:
    model = config.model if config.model.startswith("models/") else f"models/{config.model}"
    setup: dict[str, Any] = {
        "model": model,
        "generationConfig": {
            "responseModalities": [config.response_modality],
            "speechConfig": {
                "voiceConfig": {"prebuiltVoiceConfig": {"voiceName": config.voice}},
            },
        },
    }
    if config.system_instruction:
        setup["systemInstruction"] = {"parts": [{"text": config.system_instruction}]}
    return {"setup": setup}


def build_audio_message(frame: AudioFrame) -> dict[str, Any]:
    return {
        "realtimeInput": {
            "audio": {"data": encode_b64(frame.data), "mimeType": frame.format.mime_type},
        }
    }


def build_audio_stream_end_message() -> dict[str, Any]:
    return {"realtimeInput": {"audioStreamEnd": True}}


def dumps(message: dict[str, Any]) -> str:
    return orjson.dumps(message).decode("utf-8")


def _parse_model_turn(model_turn: dict[str, Any]) -> list[UpstreamEvent]:
    events: list[UpstreamEvent] = []
    for part in model_turn.get("parts") or []:
        if not isinstance(part, dict):
            continue
        inline = part.get("inlineData")
        if not isinstance(inline, dict):
            continue
        data = inline.get("data")
        if not isinstance(data, str) or not data:
            continue
        mime_type = inline.get("mimeType") or DEFAULT_AUDIO_MIME_TYPE
        events.append(AudioChunkEvent(data=decode_b64(data), mime_type=str(mime_type)))
    return events


def parse_server_message(raw: str | bytes) -> list[UpstreamEvent]:
    """Translate one server message into zero or more events, preserving part order."""
    try:
        msg = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise ValueError(f"invalid JSON from upstream: {exc}") from exc
    if not isinstance(msg, dict):
        raise ValueError("upstream message must be a JSON object")

    events: list[UpstreamEvent] = []

    if "setupComplete" in msg:
        events.append(ConnectedEvent())

    error = msg.get("error")
    if isinstance(error, dict):
        message = error.get("message") or error.get("status") or "upstream error"
        events.append(ErrorEvent(cause=UpstreamError(str(message))))

    server_content = msg.get("serverContent")
    if isinstance(server_content, dict):
        model_turn = server_content.get("modelTurn")
        if isinstance(model_turn, dict):
            events.extend(_parse_model_turn(model_turn))
        if server_content.get("turnComplete"):
            events.append(TurnCompleteEvent())

    usage = msg.get("usageMetadata")
    if isinstance(usage, dict):
        total = usage.get("totalTokenCount")
        if isinstance(total, int):
            events.append(UsageEvent(total_tokens=total))

    if "goAway" in msg:
        # The endpoint closes the socket shortly after; the close itself ends the stream.
        logger.info("upstream announced shutdown: %s", msg.get("goAway"))

    return events


__all__ = [
    "build_audio_message",
    "build_audio_stream_end_message",
    "build_setup_message",
    "dumps",
    "parse_server_message",
]
