"""
Hash-based short-code generator.

Algorithm:
    SHA-256(long_url | UTC timestamp (ISO-8601, microseconds) | random 63-bit int)
      -> URL-safe Base64
      -> truncate to `length` (default 7)

Mixing the timestamp and a random value into the digest means two calls with the same
URL produce different candidates, which is what lets the service's collision retry make
progress. The alphabet is the URL-safe Base64 one: A-Z a-z 0-9 - _ (a 32-byte digest
encodes to 44 chars, so truncation always applies for sane lengths).

The random source and the clock are injected; nothing seeds the global `random` module.
"""

import base64
import hashlib
import random
from datetime import datetime, timezone
from typing import Callable, Optional

from ..context import RequestContext
from ..errors import EmptyInputError
from .base import BaseGenerator

DEFAULT_CODE_LENGTH = 7

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Generator(BaseGenerator):
    def __init__(
        self,
        length: int = DEFAULT_CODE_LENGTH,
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Args:
            length (int): Target code length. Codes are truncated to it.
            rng (Optional[random.Random]): Entropy source; defaults to random.SystemRandom().
            clock (Optional[Clock]): Returns the current time; defaults to UTC now.
        """
        if length <= 0:
            raise ValueError("length must be positive")
        self.length = length
        self._rng = rng if rng is not None else random.SystemRandom()
        self._clock = clock if clock is not None else _utc_now

    def generate_short_code(self, long_url: str, ctx: Optional[RequestContext] = None) -> str:
        """
        Derive a candidate code from the URL plus time and randomness.

        Returns:
            str: URL-safe token of at most `length` characters.

        Raises:
            EmptyInputError: If `long_url` is empty or whitespace-only.
        """
        if ctx is not None:
            ctx.check()
        if not long_url or not long_url.strip():
            raise EmptyInputError("idgen: long URL cannot be empty for code generation")

        hasher = hashlib.sha256()
        hasher.update(long_url.encode("utf-8"))
        hasher.update(self._clock().isoformat(timespec="microseconds").encode("ascii"))
        hasher.update(str(self._rng.getrandbits(63)).encode("ascii"))

        encoded = base64.urlsafe_b64encode(hasher.digest()).decode("ascii")
        if len(encoded) < self.length:
            return encoded
        return encoded[: self.length]

    def __repr__(self) -> str:
        return f"Generator(length={self.length})"
