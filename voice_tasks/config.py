"""Configuration helpers for the Voice Tasks application."""
from __future__ import annotations

import os

_DEFAULT_PROVIDER = "logic"
_DEFAULT_TIMEOUT_MS = 10_000
_DEFAULT_MAX_CHARS = 2000
_DEFAULT_RATE_LIMIT = 60
_DEFAULT_RATE_WINDOW_S = 60
_DEFAULT_OPENAI_MODEL = "gpt-4o-mini"


def _read_int(name: str, default: int) -> int:
    """Return a positive integer configuration value from the environment."""

    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        value = int(raw_value)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def get_provider() -> str:
    """Return the configured extraction provider identifier.

    Without an explicit choice the model provider is used only when an
    OpenAI API key is available.
    """

    provider = os.getenv("VOICE_TASKS_PROVIDER", "").strip().lower()
    if provider:
        return provider
    if os.getenv("OPENAI_API_KEY", "").strip():
        return "openai"
    return _DEFAULT_PROVIDER


def get_timeout_ms() -> int:
    """Return the request timeout in milliseconds for model providers."""

    return _read_int("VOICE_TASKS_TIMEOUT_MS", _DEFAULT_TIMEOUT_MS)


def get_max_chars() -> int:
    """Return the maximum accepted transcript length in characters."""

    return _read_int("VOICE_TASKS_MAX_CHARS", _DEFAULT_MAX_CHARS)


def get_rate_limit() -> int:
    return _read_int("VOICE_TASKS_RATE_LIMIT", _DEFAULT_RATE_LIMIT)


def get_rate_window_s() -> int:
    return _read_int("VOICE_TASKS_RATE_WINDOW_S", _DEFAULT_RATE_WINDOW_S)


def get_openai_model() -> str:
    """Return the configured OpenAI model identifier."""

    model = os.getenv("OPENAI_MODEL", "").strip()
    return model or _DEFAULT_OPENAI_MODEL
