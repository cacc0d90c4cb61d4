"""Bencode decoder — recursive descent over a byte source.

Grammar (one production per call, nested values recurse):

    value   ::= string | integer | list | dict
    string  ::= len ":" bytes        len = "0" | [1-9][0-9]*
    integer ::= "i" "-"? digits "e"  digits = "0" | [1-9][0-9]*, no "-0"
    list    ::= "l" value* "e"
    dict    ::= "d" (string value)* "e"

The decoder never builds values itself.  It recognizes tokens and drives a
visitor (see ``_visitor``), which decides what a string, integer, list or
dict turns into.  Dict key order and uniqueness are not checked here; the
encoder is the side that canonicalizes.
"""

from __future__ import annotations

import logging
from typing import Any, BinaryIO, Iterable, Optional

from ._constants import (
    COLON,
    DEFAULT_MAX_DEPTH,
    DICT_OPEN,
    DIGIT_ZERO,
    END as END_TOKEN,
    INT64_MAX,
    INT_OPEN,
    LIST_OPEN,
    MINUS,
    is_digit,
)
from ._errors import (
    ERR_CUSTOM,
    ERR_LIMIT_DEPTH,
    ERR_NUMBER_OUT_OF_RANGE,
    ERR_UNEXPECTED_EOF,
    ERR_UNEXPECTED_TOKEN,
    ERR_UNEXPECTED_TRAILING_CHARS,
    BencodeError,
    BencodeSyntaxError,
    BencodeUtf8Error,
)
from ._read import IteratorRead, Read, SliceRead, StringRead, iter_reader
from ._visitor import END, StrVisitor, ValueVisitor, Visitor

logger = logging.getLogger(__name__)


class Decoder:
    """Decodes values from a ``Read``, one ``parse_next`` call per value."""

    def __init__(self, reader: Read, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self._reader = reader
        self.max_depth = max_depth
        self._depth = 0

    @property
    def position(self) -> int:
        return self._reader.position

    # ── Errors ────────────────────────────────────────────────

    def _syntax_error(self, code: str, msg: str = "") -> BencodeSyntaxError:
        return BencodeSyntaxError(code, self._reader.position, msg)

    def _unexpected_token(self, ch: int) -> BencodeSyntaxError:
        return self._syntax_error(ERR_UNEXPECTED_TOKEN,
                                  "unexpected token {!r}".format(bytes([ch])))

    def _unexpected_eof(self) -> BencodeSyntaxError:
        return self._syntax_error(ERR_UNEXPECTED_EOF, "unexpected end of input")

    # ── Reader wrappers ───────────────────────────────────────

    def _next_char(self) -> int:
        ch = self._reader.next_char()
        if ch is None:
            raise self._unexpected_eof()
        return ch

    def _peek_char(self) -> Optional[int]:
        return self._reader.peek_char()

    # ── Productions ───────────────────────────────────────────

    def parse_next(self, visitor: Visitor) -> Any:
        """Decode exactly one value and hand it to ``visitor``."""
        ch = self._next_char()
        if ch == DICT_OPEN:
            return self._parse_container(visitor.visit_dict, DictAccess(self))
        if ch == LIST_OPEN:
            return self._parse_container(visitor.visit_list, ListAccess(self))
        if ch == INT_OPEN:
            return self._parse_int(visitor)
        if is_digit(ch):
            return self._parse_string(ch, visitor)
        raise self._unexpected_token(ch)

    def _parse_string(self, first_digit: int, visitor: Visitor) -> Any:
        if first_digit == DIGIT_ZERO:
            colon = self._next_char()
            if colon != COLON:
                raise self._unexpected_token(colon)
            return visitor.visit_str("")

        length = self._read_digits_to(COLON, first_digit, INT64_MAX)
        start = self._reader.position
        raw = self._reader.read_exact(length)
        if len(raw) < length:
            raise self._unexpected_eof()
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise BencodeUtf8Error("invalid utf-8 in string: {}".format(e.reason),
                                   position=start + e.start) from e
        return visitor.visit_str(text)

    def _parse_int(self, visitor: Visitor) -> Any:
        ch = self._next_char()
        negative = ch == MINUS
        if negative:
            ch = self._next_char()

        # Zero is only ever "i0e": no sign, no further digits.
        if ch == DIGIT_ZERO:
            if negative:
                raise self._unexpected_token(ch)
            end = self._next_char()
            if end != END_TOKEN:
                raise self._unexpected_token(end)
            return visitor.visit_int(0)

        if not is_digit(ch):
            raise self._unexpected_token(ch)
        limit = INT64_MAX + 1 if negative else INT64_MAX
        magnitude = self._read_digits_to(END_TOKEN, ch, limit)
        return visitor.visit_int(-magnitude if negative else magnitude)

    def _read_digits_to(self, delim: int, first_digit: int, limit: int) -> int:
        acc = first_digit - DIGIT_ZERO
        while True:
            ch = self._next_char()
            if ch == delim:
                return acc
            if not is_digit(ch):
                raise self._unexpected_token(ch)
            acc = acc * 10 + (ch - DIGIT_ZERO)
            if acc > limit:
                raise self._syntax_error(ERR_NUMBER_OUT_OF_RANGE,
                                         "number does not fit in 64 bits")

    def _parse_container(self, visit: Any, access: "_Access") -> Any:
        if self._depth + 1 > self.max_depth:
            raise self._syntax_error(ERR_LIMIT_DEPTH,
                                     "nesting exceeds max_depth={}".format(self.max_depth))
        self._depth += 1
        value = visit(access)
        # The visitor may stop early; whatever it left must be the closer.
        if not access.done:
            ch = self._next_char()
            if ch != END_TOKEN:
                raise self._unexpected_token(ch)
            access.done = True
        self._depth -= 1
        return value

    def end(self) -> None:
        """Check that nothing meaningful follows the root value.

        A stray closing ``e`` or end of input is accepted; any other byte is
        trailing garbage.
        """
        ch = self._peek_char()
        if ch is None or ch == END_TOKEN:
            return
        raise self._syntax_error(ERR_UNEXPECTED_TRAILING_CHARS,
                                 "unexpected trailing characters")


# ── Container accesses ────────────────────────────────────────

class _Access:
    def __init__(self, de: Decoder) -> None:
        self._de = de
        self.done = False

    def _at_end(self) -> bool:
        """Peek for the closer, consuming it if present."""
        de = self._de
        ch = de._peek_char()
        if ch is None:
            raise de._unexpected_eof()
        if ch == END_TOKEN:
            de._next_char()
            self.done = True
            return True
        return False


class ListAccess(_Access):
    """Pulls list elements until the closing ``e``."""

    def next_element(self, visitor: Optional[Visitor] = None) -> Any:
        if self.done or self._at_end():
            return END
        return self._de.parse_next(visitor or ValueVisitor())

    def __iter__(self):
        while True:
            item = self.next_element()
            if item is END:
                return
            yield item


class DictAccess(_Access):
    """Pulls alternating keys and values until the closing ``e``."""

    def __init__(self, de: Decoder) -> None:
        super().__init__(de)
        self._want_value = False

    def next_key(self, visitor: Optional[Visitor] = None) -> Any:
        if self._want_value:
            raise BencodeError(ERR_CUSTOM, "next_key() called before next_value()")
        if self.done or self._at_end():
            return END
        ch = self._de._peek_char()
        if not is_digit(ch):
            raise self._de._unexpected_token(ch)
        key = self._de.parse_next(visitor or StrVisitor())
        self._want_value = True
        return key

    def next_value(self, visitor: Optional[Visitor] = None) -> Any:
        if not self._want_value:
            raise BencodeError(ERR_CUSTOM, "next_value() called without a key")
        self._want_value = False
        return self._de.parse_next(visitor or ValueVisitor())

    def __iter__(self):
        while True:
            key = self.next_key()
            if key is END:
                return
            yield key, self.next_value()


# ── Entry points ──────────────────────────────────────────────

def from_read(reader: Read, visitor: Optional[Visitor] = None, *,
              max_depth: int = DEFAULT_MAX_DEPTH) -> Any:
    """Decode one root value from ``reader`` and check for trailing bytes."""
    de = Decoder(reader, max_depth=max_depth)
    try:
        value = de.parse_next(visitor or ValueVisitor())
        de.end()
    except RecursionError as e:
        # max_depth above what the interpreter stack can hold
        logger.debug("decode ran out of stack after %d bytes", de.position)
        raise BencodeSyntaxError(ERR_LIMIT_DEPTH, de.position,
                                 "nesting too deep for the interpreter stack") from e
    except BencodeError as e:
        logger.debug("decode failed after %d bytes: %s", de.position, e)
        raise
    return value


def from_slice(data: bytes, visitor: Optional[Visitor] = None, *,
               max_depth: int = DEFAULT_MAX_DEPTH) -> Any:
    if isinstance(data, str):
        raise TypeError("from_slice() needs bytes; use from_string() for str")
    return from_read(SliceRead(data), visitor, max_depth=max_depth)


def from_string(text: str, visitor: Optional[Visitor] = None, *,
                max_depth: int = DEFAULT_MAX_DEPTH) -> Any:
    return from_read(StringRead(text), visitor, max_depth=max_depth)


def from_iter(source: Iterable[int], visitor: Optional[Visitor] = None, *,
              max_depth: int = DEFAULT_MAX_DEPTH) -> Any:
    return from_read(IteratorRead(source), visitor, max_depth=max_depth)


def from_reader(fileobj: BinaryIO, visitor: Optional[Visitor] = None, *,
                max_depth: int = DEFAULT_MAX_DEPTH) -> Any:
    """Decode from a binary file object.

    The trailing-bytes check may read one chunk beyond the root value.
    """
    return from_iter(iter_reader(fileobj), visitor, max_depth=max_depth)
