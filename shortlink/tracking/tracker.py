"""
Visit tracking for shortlink.

Responsibilities:
    - Run visit-count increments off the resolve path
    - Keep task lifetime explicit: a bounded ThreadPoolExecutor owns the workers
    - Make failures visible in the log without ever surfacing them to the resolver

Design:
    - Each increment runs with RequestContext.background(), which cannot be cancelled,
      so a client disconnecting mid-redirect does not abort the counter update.
    - Pending futures are kept in a set so drain() can wait for in-flight work
      (used by shutdown paths and tests).
    - The pool bounds threads, not queued work. There is no admission control.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait as wait_futures
from typing import Optional, Set

from ..context import RequestContext
from ..storage.base import BaseStorage
from .base import BaseTracker

DEFAULT_MAX_WORKERS = 4


class VisitTracker(BaseTracker):
    def __init__(
        self,
        storage: BaseStorage,
        max_workers: int = DEFAULT_MAX_WORKERS,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            storage (BaseStorage): Store whose counters are incremented.
            max_workers (int): Worker thread bound for the pool.
            logger (Optional[logging.Logger]): Defaults to this module's logger.
        """
        if max_workers <= 0:
            raise ValueError("max_workers must be positive")
        self.storage = storage
        self.logger = logger or logging.getLogger(__name__)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="visit-tracker")
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()
        self._shutdown = False

    def _increment(self, short_code: str) -> None:
        self.storage.increment_visit_count(short_code, ctx=RequestContext.background())

    def _on_done(self, short_code: str, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
        exc = future.exception()
        if exc is not None:
            self.logger.error(
                "Failed to increment visit count (async). short_code=%s error=%r", short_code, exc
            )
        else:
            self.logger.debug("Visit count incremented. short_code=%s", short_code)

    def track(self, short_code: str) -> None:
        """
        Schedule one visit-count increment and return immediately.

        Increments submitted after shutdown() are dropped with a warning.
        """
        with self._lock:
            if self._shutdown:
                self.logger.warning("Tracker is shut down; dropping visit. short_code=%s", short_code)
                return
            future = self._executor.submit(self._increment, short_code)
            self._pending.add(future)
        future.add_done_callback(lambda f: self._on_done(short_code, f))

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def drain(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for increments pending at call time.

        Returns:
            bool: True if all of them finished within `timeout`.
        """
        with self._lock:
            snapshot = set(self._pending)
        if not snapshot:
            return True
        _, not_done = wait_futures(snapshot, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            if self._shutdown:
                return
            self._shutdown = True
        self._executor.shutdown(wait=wait)
        self.logger.debug("Visit tracker shut down (wait=%s)", wait)
