"""
Base storage interface for shortlink.

Purpose:
    Define a small, stable contract that multiple storage backends
    (in-memory today, a networked/persistent store later) can implement
    without requiring changes to the Link Service.

Contract:
    - Every method is safe to call concurrently from multiple threads.
    - Every data method accepts an optional RequestContext; a backend that may
      block checks it and raises ContextError on cancellation or deadline.
    - Conflicts and misses are signalled with CodeExistsError / NotFoundError.
      Anything else a backend raises should be a StorageError subclass.

Testing & Coverage:
    These are abstract methods and are not executed directly in tests.
    We annotate them with `# pragma: no cover` so coverage tools don't
    penalize the project for un-runnable abstract declarations.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..context import RequestContext
from .models import Link


class BaseStorage(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod  # pragma: no cover
    def save(self, link: Link, ctx: Optional[RequestContext] = None) -> None:
        """
        Insert a new link keyed by its short code (insert-if-absent).

        The backend sets created_at to the current UTC time, overriding any
        caller-supplied value. visit_count is stored as given.

        Raises:
            CodeExistsError: The code is taken; the existing record is untouched.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def find_by_short_code(self, short_code: str, ctx: Optional[RequestContext] = None) -> Link:
        """
        Return an immutable snapshot of the record.

        Raises:
            NotFoundError: No record for this code.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def increment_visit_count(self, short_code: str, ctx: Optional[RequestContext] = None) -> None:
        """
        Atomically add one to the record's visit_count. Never creates a record.

        Raises:
            NotFoundError: No record for this code.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def close(self) -> None:
        """
        Release held resources. Idempotent: later calls are no-ops and do not raise.
        """
        raise NotImplementedError
