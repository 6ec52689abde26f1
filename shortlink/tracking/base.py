"""
Abstract Base Class for visit trackers.

Responsibilities:
    - Accept a visit for a short code without blocking the caller
    - Support easy substitution (thread pool today; a queue/event sink later)
"""

from abc import ABC, abstractmethod

__all__ = ["BaseTracker"]


class BaseTracker(ABC):
    """Abstract base for pluggable visit trackers."""

    @abstractmethod
    def track(self, short_code: str) -> None:  # pragma: no cover
        """
        Record one visit for `short_code`, fire-and-forget.

        Must return promptly and must never raise because the visit could not be recorded.
        """
        raise NotImplementedError

    @abstractmethod
    def shutdown(self, wait: bool = True) -> None:  # pragma: no cover
        """Stop accepting visits. Idempotent."""
        raise NotImplementedError
