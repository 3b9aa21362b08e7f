"""HTTP server bind configuration (env-resolved constants only)."""

from __future__ import annotations

import os

SERVER_HOST: str = (os.getenv("HOST") or "").strip() or "0.0.0.0"

_PORT_RAW = (os.getenv("PORT") or "").strip()
try:
    SERVER_PORT: int = int(_PORT_RAW) if _PORT_RAW else 3001
except Exception:
    SERVER_PORT = 3001
if not 0 < SERVER_PORT < 65536:
    SERVER_PORT = 3001

__all__ = ["SERVER_HOST", "SERVER_PORT"]
