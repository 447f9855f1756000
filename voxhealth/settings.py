"""Project-wide settings and shared interview constants.

All environment-dependent values are read **lazily** on first access
(not at import time) and cached via ``functools.lru_cache``.  Call
``reset()`` in tests to clear the cache after changing env vars —
no ``importlib.reload`` required.
"""

from __future__ import annotations

import functools
import os
from typing import TYPE_CHECKING, Final


def _float_env(name: str, default: float) -> float:
    """Parse float environment values with a safe fallback."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    """Parse positive integer environment values with a safe fallback."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


# ── Constants (never change at runtime) ──────────────────────────────────
# Assumed average interview depth, used only for the cosmetic progress bar.
EXPECTED_INTERVIEW_DEPTH: Final[int] = 5

SUPPORTED_LANGUAGES: Final[tuple[str, ...]] = ("en", "hi", "ta", "bn", "mr", "pa", "gu")


# ── Lazy settings cache ──────────────────────────────────────────────────

@functools.lru_cache(maxsize=1)
def _load_settings() -> dict[str, object]:
    """Read env-dependent settings once and cache the result."""
    return {
        "LLM_MODEL_NAME": os.getenv("OPENAI_AUDIO_MODEL", "gpt-4o-audio-preview"),
        "REQUEST_TIMEOUT": _float_env("VOX_REQUEST_TIMEOUT", 60.0),
        "HISTORY_LIMIT": _int_env("VOX_HISTORY_LIMIT", 20),
        "MAX_INTERVIEW_STEPS": _int_env("VOX_MAX_INTERVIEW_STEPS", 25),
    }


def reset() -> None:
    """Clear the cached settings — call from tests after monkeypatching env vars."""
    _load_settings.cache_clear()


# Type declarations for static analysis (not set at runtime so
# ``__getattr__`` is invoked on attribute access).
if TYPE_CHECKING:
    LLM_MODEL_NAME: str
    REQUEST_TIMEOUT: float
    HISTORY_LIMIT: int
    MAX_INTERVIEW_STEPS: int


def __getattr__(name: str) -> object:
    """PEP 562 module-level ``__getattr__`` — provides lazy env reads."""
    settings = _load_settings()
    if name in settings:
        return settings[name]
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


# ── Public helpers ────────────────────────────────────────────────────────


def normalize_language(code: str | None) -> str:
    """Map an arbitrary language code onto a supported one (``en`` fallback)."""
    if not code:
        return "en"
    normalized = code.strip().lower()
    return normalized if normalized in SUPPORTED_LANGUAGES else "en"
