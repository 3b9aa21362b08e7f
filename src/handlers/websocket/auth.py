"""WebSocket authentication helpers."""

from __future__ import annotations

from fastapi import WebSocket


def get_api_key(ws: WebSocket) -> str:
    # Query param is easiest for browser WS clients.
    key = (ws.query_params.get("api_key") or "").strip()
    if key:
        return key
    return (ws.headers.get("x-api-key") or "").strip()


def validate_api_key(api_key: str, expected: str) -> bool:
    if not expected:
        # No relay key configured: clients are not authenticated.
        return True
    return api_key == expected


async def authenticate_websocket(ws: WebSocket, *, expected_api_key: str) -> bool:
    return validate_api_key(get_api_key(ws), expected_api_key)


__all__ = ["authenticate_websocket", "get_api_key", "validate_api_key"]
