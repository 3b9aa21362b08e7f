from __future__ import annotations

import pytest

from src.handlers.websocket.auth import validate_api_key, authenticate_websocket


class _FakeWebSocket:
    def __init__(self, *, query: dict[str, str] | None = None, headers: dict[str, str] | None = None) -> None:
        self.query_params = query or {}
        self.headers = headers or {}


def test_validate_api_key_disabled_when_unset() -> None:
    assert validate_api_key("anything", "") is True
    assert validate_api_key("", "") is True


def test_validate_api_key_matches() -> None:
    assert validate_api_key("secret", "secret") is True
    assert validate_api_key("wrong", "secret") is False
    assert validate_api_key("", "secret") is False


@pytest.mark.asyncio
async def test_authenticate_websocket_reads_query_then_header() -> None:
    assert await authenticate_websocket(_FakeWebSocket(query={"api_key": "secret"}), expected_api_key="secret")
    assert await authenticate_websocket(_FakeWebSocket(headers={"x-api-key": "secret"}), expected_api_key="secret")
    assert not await authenticate_websocket(_FakeWebSocket(), expected_api_key="secret")
