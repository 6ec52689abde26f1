"""
Error taxonomy for the shortlink package.

Three families live here:

    - ShortlinkError: what the Link Service raises to its callers (transport adapters
      map these to status codes).
    - IdGenError: what a code generator raises.
    - StorageError: what a storage backend raises.

The service translates generator and storage errors into ShortlinkError subclasses,
chaining the original with ``raise ... from exc`` so the cause stays inspectable.

Mapping used by the HTTP layer:
    InvalidLongURLError, ShortCodeTooShortError -> 400
    LinkNotFoundError                           -> 404
    any other ShortlinkError                    -> 500
"""

__all__ = [
    "ShortlinkError",
    "InvalidLongURLError",
    "ShortCodeTooShortError",
    "GenerationFailedError",
    "LinkNotFoundError",
    "AttemptsExhaustedError",
    "StoreUnavailableError",
    "ContextError",
    "ContextCancelledError",
    "DeadlineExceededError",
    "IdGenError",
    "EmptyInputError",
    "StorageError",
    "CodeExistsError",
    "NotFoundError",
    "StoreClosedError",
]


# ---------------------------------------------------------------------------
# Service-level errors
# ---------------------------------------------------------------------------
class ShortlinkError(Exception):
    """Base class for errors surfaced by the Link Service."""


class InvalidLongURLError(ShortlinkError, ValueError):
    """Long URL is empty or whitespace-only."""


class ShortCodeTooShortError(ShortlinkError, ValueError):
    """Short code is below the configured minimum length."""


class GenerationFailedError(ShortlinkError):
    """The code generator itself raised."""


class LinkNotFoundError(ShortlinkError, LookupError):
    """No link is stored under the requested short code."""


class AttemptsExhaustedError(ShortlinkError):
    """The create loop ran out of generation attempts."""


class StoreUnavailableError(ShortlinkError):
    """Storage failed with something other than a conflict or a miss."""


class ContextError(ShortlinkError):
    """Base for request-context failures (cancellation, deadline)."""


class ContextCancelledError(ContextError):
    """The request context was cancelled before the operation finished."""


class DeadlineExceededError(ContextError):
    """The request context's deadline passed before the operation finished."""


# ---------------------------------------------------------------------------
# Generator errors
# ---------------------------------------------------------------------------
class IdGenError(Exception):
    """Base class for code generator errors."""


class EmptyInputError(IdGenError, ValueError):
    """Generator input is blank."""


# ---------------------------------------------------------------------------
# Storage errors
# ---------------------------------------------------------------------------
class StorageError(Exception):
    """Base class for storage backend errors."""


class CodeExistsError(StorageError):
    """Short code is already taken (first writer wins)."""

    def __init__(self, short_code: str):
        super().__init__(f"storage: short code already exists: {short_code!r}")
        self.short_code = short_code


class NotFoundError(StorageError, LookupError):
    """Short code is not present in the store."""

    def __init__(self, short_code: str):
        super().__init__(f"storage: link not found: {short_code!r}")
        self.short_code = short_code


class StoreClosedError(StorageError):
    """Operation attempted on a closed store."""
