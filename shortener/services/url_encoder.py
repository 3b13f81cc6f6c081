"""
Short Code Generator

Turns an original URL into a fixed-length code drawn from a 62-symbol
alphabet.

Algorithm:
- salt the URL with the current time in milliseconds, bumped past the
  previous salt when the clock has not advanced
- SHA-256 over the salted input
- one digest byte per output character, byte % len(alphabet) picks the symbol

Why time-salted?
- The same URL yields a different code on every retry, so a collision is
  resolved by generating again instead of by waiting
- Codes are not guessable from the URL alone

The hash does not make codes unique. 62^7 is about 3.5e12 codes, so a
collision per call is unlikely but possible; uniqueness is enforced by
the store.
"""

import hashlib
import time
from typing import Callable, Optional

from shortener.core.setting import BASE62_ALPHABET, MAX_SHORT_CODE_LENGTH

DEFAULT_CODE_LENGTH = 7


def current_millis() -> int:
    return time.time_ns() // 1_000_000


class ShortCodeGenerator:
    """
    Generates candidate short codes.

    Besides its configuration it only remembers the last salt it used. The
    clock is injectable so tests can pin it.
    """

    def __init__(
        self,
        length: int = DEFAULT_CODE_LENGTH,
        alphabet: str = BASE62_ALPHABET,
        clock: Optional[Callable[[], int]] = None,
    ):
        """
        Args:
            length: Number of characters per code (1-32)
            alphabet: Symbols in mapping order, no duplicates
            clock: Returns the salt as integer milliseconds (default: wall clock)

        Raises:
            ValueError: If length or alphabet cannot produce valid codes
        """
        if not 1 <= length <= MAX_SHORT_CODE_LENGTH:
            raise ValueError(
                f"Code length must be between 1 and {MAX_SHORT_CODE_LENGTH}, got {length}"
            )
        if len(alphabet) < 2 or len(set(alphabet)) != len(alphabet):
            raise ValueError("Alphabet needs at least two distinct, non-repeated symbols")

        self.length = length
        self.alphabet = alphabet
        self.clock = clock or current_millis
        self._last_salt: Optional[int] = None

    def _next_salt(self) -> int:
        """Current millis, strictly greater than any salt handed out before."""
        salt = self.clock()
        if self._last_salt is not None and salt <= self._last_salt:
            salt = self._last_salt + 1
        self._last_salt = salt
        return salt

    def generate(self, original_url: str) -> str:
        """
        Generate a candidate code for a URL.

        Args:
            original_url: The long URL being shortened

        Returns:
            A code of exactly `length` symbols from `alphabet`
        """
        salted = f"{original_url}{self._next_salt()}"
        digest = hashlib.sha256(salted.encode("utf-8")).digest()
        base = len(self.alphabet)
        return "".join(self.alphabet[byte % base] for byte in digest[:self.length])
