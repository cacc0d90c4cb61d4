"""Bencode error codes and exception classes.

Every failure is reported as a ``BencodeError`` subclass whose ``.code`` is
one of the ERR_* strings below.  The subclass says which stage failed:

    BencodeSyntaxError  malformed input while decoding (has .position)
    BencodeUtf8Error    a string payload that is not valid UTF-8
    BencodeSerError     a value the encoder cannot represent
    BencodeIOError      the byte source or sink raised OSError

Errors are fatal to the call that raised them.  Positions are byte offsets
into the source and only meant for diagnostics.
"""

from __future__ import annotations

from typing import Optional

# ── Error codes ──────────────────────────────────────────────

ERR_UNEXPECTED_TOKEN: str = "ERR_UNEXPECTED_TOKEN"                  # byte not allowed here
ERR_UNEXPECTED_EOF: str = "ERR_UNEXPECTED_EOF"                      # input ended mid-value
ERR_UNEXPECTED_TRAILING_CHARS: str = "ERR_UNEXPECTED_TRAILING_CHARS"  # junk after root
ERR_NUMBER_OUT_OF_RANGE: str = "ERR_NUMBER_OUT_OF_RANGE"            # outside int64
ERR_LIMIT_DEPTH: str = "ERR_LIMIT_DEPTH"                            # nesting too deep
ERR_UTF8: str = "ERR_UTF8"                                          # invalid UTF-8 text
ERR_UNSUPPORTED_TYPE: str = "ERR_UNSUPPORTED_TYPE"                  # bool, set, object...
ERR_KEY_MUST_BE_STRING: str = "ERR_KEY_MUST_BE_STRING"              # dict key not text
ERR_EMPTY_VALUE: str = "ERR_EMPTY_VALUE"                            # None as list element
ERR_INVALID_TYPE: str = "ERR_INVALID_TYPE"                          # visitor refused shape
ERR_IO: str = "ERR_IO"                                              # source/sink failure
ERR_CUSTOM: str = "ERR_CUSTOM"                                      # misuse of the encoder


class BencodeError(Exception):
    """Base exception for bencode processing errors.

    The `.code` attribute is one of the ERR_* strings above and is what
    the conformance suite compares against.
    """

    def __init__(self, code: str, msg: str = "") -> None:
        super().__init__(msg or code)
        self.code = code


class BencodeSyntaxError(BencodeError):
    """Malformed input, reported with the reader position at failure."""

    def __init__(self, code: str, position: int, msg: str = "") -> None:
        self.position = position
        self.detail = msg or code
        super().__init__(code, "At position {}: {}".format(position, self.detail))


class BencodeUtf8Error(BencodeError):
    def __init__(self, msg: str = "", position: Optional[int] = None) -> None:
        self.position = position
        if position is not None:
            msg = "At position {}: {}".format(position, msg or "invalid utf-8")
        super().__init__(ERR_UTF8, msg)


class BencodeSerError(BencodeError):
    """Raised while encoding."""


class BencodeIOError(BencodeError):
    """Wraps an OSError from the byte source or sink.

    The underlying OSError is chained as ``__cause__``.
    """

    def __init__(self, msg: str = "") -> None:
        super().__init__(ERR_IO, msg)
