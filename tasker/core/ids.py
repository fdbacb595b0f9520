"""
FILE: tasker/core/ids.py
PURPOSE: Sortable, collision-resistant record identifiers (ULIDs)
EXPORTS:
  - IdGenerator: monotonic ULID generator bound to a clock
  - encode_crockford(value, length) -> str
  - is_id_alphabet(text) -> bool
DEPENDENCIES:
  - os (randomness)
  - tasker.core.constants (ID_ALPHABET)
NOTES:
  - 48-bit millisecond timestamp + 80 random bits, 26 Crockford base32 chars
  - Within one generator, ids are strictly increasing even when the clock
    does not advance: the random part is incremented instead of redrawn
  - Entity prefixes (tsk_, idea_, prj_) are added by callers
"""

import os
from typing import Optional

from .constants import ID_ALPHABET
from ..utils import Clock, utc_now

_RANDOM_BITS = 80
_RANDOM_MAX = (1 << _RANDOM_BITS) - 1
_ULID_LENGTH = 26


def encode_crockford(value: int, length: int) -> str:
    chars = []
    for _ in range(length):
        chars.append(ID_ALPHABET[value & 0x1F])
        value >>= 5
    return "".join(reversed(chars))


def is_id_alphabet(text: str) -> bool:
    """True when every character (uppercased) belongs to the id alphabet."""
    return bool(text) and all(ch in ID_ALPHABET for ch in text.upper())


class IdGenerator:
    """Monotonic ULID source."""

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or utc_now
        self._last_ms = -1
        self._last_random = 0

    def _millis(self) -> int:
        return int(self._clock().timestamp() * 1000)

    def new_id(self) -> str:
        ms = max(self._millis(), self._last_ms)
        if ms == self._last_ms:
            random_part = self._last_random + 1
            if random_part > _RANDOM_MAX:
                # Random space for this millisecond exhausted; borrow the next one.
                ms += 1
                random_part = int.from_bytes(os.urandom(10), "big") >> 1
        else:
            random_part = int.from_bytes(os.urandom(10), "big")
        self._last_ms = ms
        self._last_random = random_part
        return encode_crockford((ms << _RANDOM_BITS) | random_part, _ULID_LENGTH)
