"""bencodec — Bencode codec for the BitTorrent wire format.

Translates between native Python values and bencode:

    >>> from bencodec import to_bytes, from_slice
    >>> to_bytes({"spam": ["a", 1], "cow": "moo"})
    b'd3:cow3:moo4:spaml1:ai1eee'
    >>> from_slice(b'd3:cow3:moo4:spaml1:ai1eee')
    {'cow': 'moo', 'spam': ['a', 1]}

Strings are text: every decoded string must be valid UTF-8, and ``bytes``
values encode as lists of integers.  Dict keys are always written in
ascending byte order, whatever order the source dict has.  Booleans have
no bencode form and are rejected.
"""

from __future__ import annotations

from ._constants import DEFAULT_MAX_DEPTH, INT64_MAX, INT64_MIN
from ._decode import (
    Decoder,
    DictAccess,
    ListAccess,
    from_iter,
    from_read,
    from_reader,
    from_slice,
    from_string,
)
from ._encode import DictBuffer, Encoder, ListState, to_bytes, to_string, to_writer
from ._errors import (
    ERR_CUSTOM,
    ERR_EMPTY_VALUE,
    ERR_INVALID_TYPE,
    ERR_IO,
    ERR_KEY_MUST_BE_STRING,
    ERR_LIMIT_DEPTH,
    ERR_NUMBER_OUT_OF_RANGE,
    ERR_UNEXPECTED_EOF,
    ERR_UNEXPECTED_TOKEN,
    ERR_UNEXPECTED_TRAILING_CHARS,
    ERR_UNSUPPORTED_TYPE,
    ERR_UTF8,
    BencodeError,
    BencodeIOError,
    BencodeSerError,
    BencodeSyntaxError,
    BencodeUtf8Error,
)
from ._produce import produce
from ._read import IteratorRead, Read, SliceRead, StringRead, iter_reader
from ._visitor import END, IntVisitor, StrVisitor, ValueVisitor, Visitor

__version__ = "0.1.0"

__all__ = [
    # Decoding
    "from_slice",
    "from_string",
    "from_iter",
    "from_reader",
    "from_read",
    "Decoder",
    "ListAccess",
    "DictAccess",
    # Visitors
    "Visitor",
    "ValueVisitor",
    "StrVisitor",
    "IntVisitor",
    "END",
    # Byte sources
    "Read",
    "SliceRead",
    "StringRead",
    "IteratorRead",
    "iter_reader",
    # Encoding
    "to_writer",
    "to_bytes",
    "to_string",
    "Encoder",
    "ListState",
    "DictBuffer",
    "produce",
    # Limits
    "DEFAULT_MAX_DEPTH",
    "INT64_MIN",
    "INT64_MAX",
    # Exceptions
    "BencodeError",
    "BencodeSyntaxError",
    "BencodeUtf8Error",
    "BencodeSerError",
    "BencodeIOError",
    # Error codes
    "ERR_UNEXPECTED_TOKEN",
    "ERR_UNEXPECTED_EOF",
    "ERR_UNEXPECTED_TRAILING_CHARS",
    "ERR_NUMBER_OUT_OF_RANGE",
    "ERR_LIMIT_DEPTH",
    "ERR_UTF8",
    "ERR_UNSUPPORTED_TYPE",
    "ERR_KEY_MUST_BE_STRING",
    "ERR_EMPTY_VALUE",
    "ERR_INVALID_TYPE",
    "ERR_IO",
    "ERR_CUSTOM",
]
