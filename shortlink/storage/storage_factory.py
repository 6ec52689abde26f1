"""
Storage factory – switch storage backend from config (lazy env version)
======================================================================

This module centralizes selection of the storage backend so the rest of the
app can stay ignorant of where data lives.

- Reads environment **at call time** to avoid stale values in tests.
- Only the in-memory backend ships; a persistent backend would be registered
  here behind the same BaseStorage contract.

Environment variables
---------------------
- SHORTLINK_STORAGE_BACKEND: "memory" (default)
"""

import logging
import os
from typing import Optional

from .base import BaseStorage
from .memory_storage import MemoryStorage

log = logging.getLogger(__name__)


def get_storage(backend: Optional[str] = None) -> BaseStorage:
    """
    Return a storage backend based on configuration.

    Parameters
    ----------
    backend : str, optional
        "memory" (default). If omitted, reads SHORTLINK_STORAGE_BACKEND.

    Raises
    ------
    ValueError
        For an unknown backend name.
    """
    # Read env **now** to avoid capturing stale values at import time
    be = (backend or os.getenv("SHORTLINK_STORAGE_BACKEND", "memory")).strip().lower()

    log.info("Selected storage backend: %r", be)

    if be == "memory":
        return MemoryStorage()

    raise ValueError(f"Unknown storage backend: {be!r}")
