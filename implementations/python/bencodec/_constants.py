"""Bencode constants — token bytes, integer range, and default limits."""

from __future__ import annotations

# ── Token bytes ──────────────────────────────────────────────
# Stored as ints because the readers hand back single bytes as ints.
DICT_OPEN: int = 0x64    # 'd'
LIST_OPEN: int = 0x6C    # 'l'
INT_OPEN: int = 0x69     # 'i'
END: int = 0x65          # 'e', closes ints, lists and dicts
COLON: int = 0x3A        # ':', separates string length from payload
MINUS: int = 0x2D        # '-'
DIGIT_ZERO: int = 0x30   # '0'
DIGIT_NINE: int = 0x39   # '9'

# ── Signed 64-bit integer range ──────────────────────────────
# Python ints are arbitrary-precision, so both directions range-check
# explicitly instead of wrapping.
INT64_MIN: int = -(2**63)
INT64_MAX: int = 2**63 - 1

# ── Safety limits ────────────────────────────────────────────
# Nesting ceiling for lists and dicts on both decode and encode.  Each level
# costs several Python frames, so this must stay well under the
# interpreter recursion limit (1000 by default).
DEFAULT_MAX_DEPTH: int = 64


def is_digit(ch: int) -> bool:
    return DIGIT_ZERO <= ch <= DIGIT_NINE
