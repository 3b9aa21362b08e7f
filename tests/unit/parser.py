from __future__ import annotations

import json

import pytest

from src.handlers.websocket.parser import parse_client_message


def test_parse_client_message_ok() -> None:
    raw = json.dumps({"type": " start-voice-session ", "payload": {"sessionId": "s1"}})
    msg = parse_client_message(raw)
    assert msg["type"] == "start-voice-session"
    assert msg["payload"]["sessionId"] == "s1"


def test_parse_client_message_payload_optional() -> None:
    assert parse_client_message(json.dumps({"type": "ping"}))["payload"] == {}
    assert parse_client_message(json.dumps({"type": "ping", "payload": None}))["payload"] == {}


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        json.dumps([]),
        json.dumps({"payload": {}}),
        json.dumps({"type": "   ", "payload": {}}),
        json.dumps({"type": 3}),
        json.dumps({"type": "audio-data", "payload": []}),
    ],
)
def test_parse_client_message_invalid(raw: str) -> None:
    with pytest.raises(ValueError):
        parse_client_message(raw)
