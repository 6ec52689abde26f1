"""
Storage module for shortlink (in-memory implementation).

Responsibilities:
    - Save links under a unique short code (first writer wins)
    - Return immutable snapshots by code
    - Track visit counts with serialized increments

Design:
    - A single `threading.Lock` guards the whole dict. Lookups, inserts and the
      counter read-modify-write all happen inside it, so concurrent saves on the
      same code yield exactly one winner and concurrent increments are never lost.
    - Records are frozen `Link` dataclasses. An increment swaps in a new snapshot,
      so a Link handed out earlier keeps the count it was read with.
    - After close() the dict is dropped and every data call raises StoreClosedError.
"""

import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Optional

from ..context import RequestContext
from ..errors import CodeExistsError, NotFoundError, StoreClosedError
from .base import BaseStorage
from .models import Link


class MemoryStorage(BaseStorage):
    def __init__(self):
        """
        Initialize empty storage.

        Internal schema:
            self._links = {short_code: Link(...)}
        """
        self._links: Dict[str, Link] = {}
        self._lock = threading.Lock()
        self._closed = False

    def _ensure_open(self) -> None:
        # caller holds self._lock
        if self._closed:
            raise StoreClosedError("storage: store is closed")

    @property
    def closed(self) -> bool:
        return self._closed

    def save(self, link: Link, ctx: Optional[RequestContext] = None) -> None:
        """
        Insert `link` if its short code is free.

        Raises:
            CodeExistsError: The code is already stored.
            StoreClosedError: close() has been called.
        """
        if ctx is not None:
            ctx.check()
        with self._lock:
            self._ensure_open()
            if link.short_code in self._links:
                raise CodeExistsError(link.short_code)
            self._links[link.short_code] = replace(link, created_at=datetime.now(timezone.utc))

    def find_by_short_code(self, short_code: str, ctx: Optional[RequestContext] = None) -> Link:
        if ctx is not None:
            ctx.check()
        with self._lock:
            self._ensure_open()
            link = self._links.get(short_code)
        if link is None:
            raise NotFoundError(short_code)
        return link

    def increment_visit_count(self, short_code: str, ctx: Optional[RequestContext] = None) -> None:
        if ctx is not None:
            ctx.check()
        with self._lock:
            self._ensure_open()
            link = self._links.get(short_code)
            if link is None:
                raise NotFoundError(short_code)
            self._links[short_code] = link.with_visit()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._links.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._links)
