"""
Runtime configuration for shortlink
===================================

Simple settings module that reads from environment variables (only here),
and exposes a stable `settings` object for the rest of the codebase.
Avoid reading env vars anywhere else; import from this module instead.

Link service
------------
- SHORTLINK_MAX_GEN_ATTEMPTS   : create-loop attempt bound (default 3)
- SHORTLINK_MIN_SHORT_CODE_LEN : minimum accepted short-code length (default 5)

Non-positive values are passed through; LinkService applies its own defaults for them.

HTTP
----
- SHORTLINK_REQUEST_TIMEOUT : per-request deadline in seconds (default 5.0; 0 or less disables it)

Storage
-------
- SHORTLINK_STORAGE_BACKEND : "memory" (default; the only backend shipped)

Visit tracking
--------------
- SHORTLINK_TRACKER_WORKERS : worker threads for background visit increments (default 4)

Logging
-------
- SHORTLINK_LOG_LEVEL : standard logging level name (default "INFO"; unknown names fall back to it)
"""

import logging
import os
from typing import Optional

DEFAULT_MAX_GEN_ATTEMPTS = 3
DEFAULT_MIN_SHORT_CODE_LEN = 5
DEFAULT_TRACKER_WORKERS = 4
DEFAULT_REQUEST_TIMEOUT = 5.0
DEFAULT_LOG_LEVEL = "INFO"


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name, str(default))
    try:
        return float(raw)
    except (TypeError, ValueError):
        return default


def _get_log_level(name: str, default: str) -> str:
    raw = os.getenv(name, default).strip().upper()
    # getLevelName maps registered names to ints and anything else to "Level <name>"
    if isinstance(logging.getLevelName(raw), int):
        return raw
    return default


class _Settings:
    """Snapshot of the environment taken at construction time."""

    def __init__(self):
        # -------- Link service --------
        self.MAX_GEN_ATTEMPTS: int = _get_int("SHORTLINK_MAX_GEN_ATTEMPTS", DEFAULT_MAX_GEN_ATTEMPTS)
        self.MIN_SHORT_CODE_LEN: int = _get_int("SHORTLINK_MIN_SHORT_CODE_LEN", DEFAULT_MIN_SHORT_CODE_LEN)

        # -------- HTTP --------
        timeout = _get_float("SHORTLINK_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)
        self.REQUEST_TIMEOUT: Optional[float] = timeout if timeout > 0 else None

        # -------- Storage --------
        self.STORAGE_BACKEND: str = os.getenv("SHORTLINK_STORAGE_BACKEND", "memory").strip().lower()

        # -------- Visit tracking --------
        self.TRACKER_WORKERS: int = max(1, _get_int("SHORTLINK_TRACKER_WORKERS", DEFAULT_TRACKER_WORKERS))

        # -------- Logging --------
        self.LOG_LEVEL: str = _get_log_level("SHORTLINK_LOG_LEVEL", DEFAULT_LOG_LEVEL)

    def __repr__(self) -> str:
        return (
            f"Settings(max_gen_attempts={self.MAX_GEN_ATTEMPTS}, "
            f"min_short_code_len={self.MIN_SHORT_CODE_LEN}, "
            f"request_timeout={self.REQUEST_TIMEOUT}, "
            f"storage_backend={self.STORAGE_BACKEND!r}, "
            f"tracker_workers={self.TRACKER_WORKERS}, log_level={self.LOG_LEVEL!r})"
        )


def load_settings() -> _Settings:
    """Re-read the environment. Tests use this after monkeypatching env vars."""
    return _Settings()


settings = load_settings()
