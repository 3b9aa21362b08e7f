"""Secrets and authentication configuration."""

from __future__ import annotations

import os

ENV_GEMINI_API_KEY = "GEMINI_API_KEY"
ENV_RELAY_API_KEY = "RELAY_API_KEY"


def get_gemini_api_key() -> str:
    return (os.getenv(ENV_GEMINI_API_KEY) or "").strip()


def get_relay_api_key() -> str:
    return (os.getenv(ENV_RELAY_API_KEY) or "").strip()


__all__ = ["ENV_GEMINI_API_KEY", "ENV_RELAY_API_KEY", "get_gemini_api_key", "get_relay_api_key"]
