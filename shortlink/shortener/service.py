"""
LinkService module for shortlink.

Responsibilities:
    - Create short links: generate a candidate, insert it, retry on collision
    - Resolve short links and record the visit without delaying the caller
    - Translate generator/storage errors into the service error taxonomy

Design notes:
    - Storage, generator, tracker and logger are injected; nothing here is a
      process-wide singleton.
    - Uniqueness is the store's job (insert-if-absent). The service only retries,
      bounded by max_gen_attempts, so persistent collisions cannot loop forever.
    - Only CodeExistsError is retried. Any other storage failure surfaces at once
      as StoreUnavailableError; context errors propagate unchanged.
    - Resolve hands the increment to a tracker (thread pool) and returns. A crash
      between lookup and increment loses that one count.
"""

import logging
from typing import Optional

from ..config import DEFAULT_MAX_GEN_ATTEMPTS, DEFAULT_MIN_SHORT_CODE_LEN
from ..context import RequestContext, ensure_context
from ..errors import (
    AttemptsExhaustedError,
    CodeExistsError,
    GenerationFailedError,
    IdGenError,
    InvalidLongURLError,
    LinkNotFoundError,
    NotFoundError,
    ShortCodeTooShortError,
    StorageError,
    StoreUnavailableError,
)
from ..idgen.base import BaseGenerator
from ..storage.base import BaseStorage
from ..storage.models import Link
from ..tracking.base import BaseTracker
from ..tracking.tracker import VisitTracker


class LinkService:
    """
    Coordinates creation and lookup rules for short links.
    """

    def __init__(
        self,
        storage: BaseStorage,
        generator: BaseGenerator,
        tracker: Optional[BaseTracker] = None,
        logger: Optional[logging.Logger] = None,
        max_gen_attempts: int = 0,
        min_short_code_len: int = 0,
    ):
        """
        Initialize LinkService with its collaborators.

        Args:
            storage (BaseStorage): Backend storage instance.
            generator (BaseGenerator): Candidate code generator.
            tracker (Optional[BaseTracker]): Visit tracker. When omitted the service builds a
                VisitTracker over `storage` and shuts it down in close().
            logger (Optional[logging.Logger]): Defaults to this module's logger.
            max_gen_attempts (int): Create-loop bound; non-positive means 3.
            min_short_code_len (int): Minimum code length; non-positive means 5.

        Raises:
            ValueError: If storage or generator is missing.
        """
        if storage is None or generator is None:
            raise ValueError("storage and generator are required")
        self.storage = storage
        self.generator = generator
        self.logger = logger or logging.getLogger(__name__)
        self.max_gen_attempts = max_gen_attempts if max_gen_attempts > 0 else DEFAULT_MAX_GEN_ATTEMPTS
        self.min_short_code_len = min_short_code_len if min_short_code_len > 0 else DEFAULT_MIN_SHORT_CODE_LEN

        self._owns_tracker = tracker is None
        self.tracker = tracker if tracker is not None else VisitTracker(storage, logger=self.logger)

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    def create_short_link(self, long_url: str, ctx: Optional[RequestContext] = None) -> str:
        """
        Create a short link for `long_url`.

        Rules:
            - Blank URL -> InvalidLongURLError (nothing generated, nothing stored).
            - Up to max_gen_attempts candidates:
                * generator error        -> GenerationFailedError
                * candidate too short    -> retry with a fresh candidate
                * code already stored    -> retry, or on the final attempt
                                            AttemptsExhaustedError chained to the conflict
                * other storage error    -> StoreUnavailableError (no retry)
            - Out of attempts -> AttemptsExhaustedError.

        Returns:
            str: The stored short code.
        """
        if not long_url or not long_url.strip():
            raise InvalidLongURLError("shortener: long URL is invalid or empty")
        ctx = ensure_context(ctx)

        for attempt in range(1, self.max_gen_attempts + 1):
            ctx.check()
            self.logger.debug("Generating short code. attempt=%d long_url=%s", attempt, long_url)
            try:
                code = self.generator.generate_short_code(long_url, ctx=ctx)
            except IdGenError as exc:
                raise GenerationFailedError(
                    f"attempt {attempt}: failed to generate short code for {long_url!r}: {exc}"
                ) from exc

            if len(code) < self.min_short_code_len:
                self.logger.warning(
                    "Generated short code too short, retrying. code=%s attempt=%d", code, attempt
                )
                continue

            try:
                self.storage.save(Link(short_code=code, long_url=long_url, visit_count=0), ctx=ctx)
            except CodeExistsError as exc:
                if attempt < self.max_gen_attempts:
                    self.logger.warning("Short code collision, retrying. code=%s attempt=%d", code, attempt)
                    continue
                raise AttemptsExhaustedError(
                    f"attempt {attempt}: short code {code!r} collided on the final attempt"
                ) from exc
            except StorageError as exc:
                raise StoreUnavailableError(
                    f"attempt {attempt}: failed to save short link {code!r}: {exc}"
                ) from exc

            self.logger.info("Created short link. code=%s long_url=%s", code, long_url)
            return code

        raise AttemptsExhaustedError(
            f"failed to generate short code after {self.max_gen_attempts} attempts"
        )

    def get_link(self, short_code: str, ctx: Optional[RequestContext] = None) -> Link:
        """
        Return the stored record for `short_code` without recording a visit.

        Raises:
            ShortCodeTooShortError: Code is below the minimum length; the store is not touched.
            LinkNotFoundError: No such code.
            StoreUnavailableError: Any other storage failure.
        """
        if short_code is None or len(short_code) < self.min_short_code_len:
            raise ShortCodeTooShortError(
                f"shortener: short code {short_code!r} is shorter than {self.min_short_code_len}"
            )
        ctx = ensure_context(ctx)
        try:
            return self.storage.find_by_short_code(short_code, ctx=ctx)
        except NotFoundError as exc:
            self.logger.info("Short code not found in store. short_code=%s", short_code)
            raise LinkNotFoundError(f"for code {short_code!r}: link not found") from exc
        except StorageError as exc:
            raise StoreUnavailableError(f"failed to look up {short_code!r}: {exc}") from exc

    def get_and_track_long_url(self, short_code: str, ctx: Optional[RequestContext] = None) -> str:
        """
        Resolve `short_code` to its long URL and record the visit in the background.

        A failed lookup short-circuits: no increment is scheduled. The increment itself
        is fire-and-forget; its failure is logged by the tracker and never reaches here.
        """
        link = self.get_link(short_code, ctx=ctx)
        self.tracker.track(link.short_code)
        return link.long_url

    def close(self, wait: bool = True) -> None:
        """Shut down the tracker if this service created it. The store is left open."""
        if self._owns_tracker:
            self.tracker.shutdown(wait=wait)
