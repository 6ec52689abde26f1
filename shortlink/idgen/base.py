"""
Abstract base for short-code generators.

A generator turns a long URL into a *candidate* code. It makes no uniqueness promise:
the store enforces uniqueness and the Link Service retries on conflict, so repeated calls
with the same input must be able to return different candidates.

Testing & Coverage:
    Abstract declarations are annotated with `# pragma: no cover`.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..context import RequestContext

__all__ = ["BaseGenerator"]


class BaseGenerator(ABC):
    """Abstract base for code generation."""

    @abstractmethod  # pragma: no cover
    def generate_short_code(self, long_url: str, ctx: Optional[RequestContext] = None) -> str:
        """
        Produce a candidate short code for the given input.

        Raises:
            EmptyInputError: If input is blank.
            ContextError: If ``ctx`` is cancelled or past its deadline.
        """
        raise NotImplementedError
