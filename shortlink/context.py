"""
Request context for shortlink operations.

Every generator and storage call takes an optional ``ctx``. The in-memory backend
never blocks on I/O, but a networked backend may, so the context carries:

    - a cancellation flag (set by the transport when the client goes away)
    - an optional deadline (monotonic clock)

Callers poll with ``ctx.check()`` at their suspension points.

The fire-and-forget visit increment uses ``RequestContext.background()``: it cannot be
cancelled and has no deadline, so a disconnecting client does not abort the counter
update.

Example
-------
>>> ctx = RequestContext(timeout=2.0)
>>> ctx.check()          # fine
>>> ctx.cancel()
>>> ctx.check()
Traceback (most recent call last):
    ...
shortlink.errors.ContextCancelledError: context cancelled
"""

import threading
import time
from typing import Optional

from .errors import ContextCancelledError, DeadlineExceededError


class RequestContext:
    def __init__(self, timeout: Optional[float] = None, cancellable: bool = True):
        """
        Args:
            timeout (Optional[float]): Seconds from now until the deadline. None means no deadline.
            cancellable (bool): If False, cancel() is a no-op.
        """
        self._cancelled = threading.Event()
        self._cancellable = cancellable
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    @classmethod
    def background(cls) -> "RequestContext":
        """Non-cancellable context without a deadline."""
        return cls(timeout=None, cancellable=False)

    @property
    def cancellable(self) -> bool:
        return self._cancellable

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def cancel(self) -> None:
        if self._cancellable:
            self._cancelled.set()

    def remaining(self) -> Optional[float]:
        """Seconds left until the deadline (never negative), or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self) -> None:
        """
        Raise if the context is no longer usable.

        Raises:
            ContextCancelledError: cancel() was called.
            DeadlineExceededError: the deadline has passed.
        """
        if self.cancelled:
            raise ContextCancelledError("context cancelled")
        if self.expired:
            raise DeadlineExceededError("context deadline exceeded")

    def __repr__(self) -> str:
        return (
            f"RequestContext(cancellable={self._cancellable}, "
            f"cancelled={self.cancelled}, remaining={self.remaining()})"
        )


def ensure_context(ctx: Optional[RequestContext]) -> RequestContext:
    """Return ``ctx`` or a fresh default context when None."""
    return ctx if ctx is not None else RequestContext()
