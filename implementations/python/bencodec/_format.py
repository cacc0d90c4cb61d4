"""Token formatting.  Pure functions, no state."""

from __future__ import annotations

DICT_OPEN = b"d"
LIST_OPEN = b"l"
END = b"e"
EMPTY_LIST = LIST_OPEN + END
EMPTY_DICT = DICT_OPEN + END


def int_token(value: int) -> bytes:
    """``i<decimal>e``.  Sign only for negatives; range is the caller's job."""
    return b"i%de" % value


def str_token(value: str) -> bytes:
    """``<byte length>:<utf-8 bytes>``."""
    raw = value.encode("utf-8")
    return b"%d:" % len(raw) + raw


def split_str_token(token: bytes) -> bytes:
    """Return the payload of a rendered string token.

    Raises ValueError when ``token`` is not a single string token.
    """
    head, sep, payload = token.partition(b":")
    if not sep or not head.isdigit() or int(head) != len(payload):
        raise ValueError("not a string token: {!r}".format(token[:32]))
    return payload
