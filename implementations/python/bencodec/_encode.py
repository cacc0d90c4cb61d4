"""Bencode encoder — streaming writer with canonical dict ordering.

A producer (see ``_produce``) walks a value depth-first and calls the
``Encoder`` once per scalar, or begin/element*/end per container.  Scalars
and lists stream straight to the sink.

Dicts cannot stream: bencode requires keys in ascending byte order, and the
producer may hand them over in any order.  Each dict therefore gets its own
``DictBuffer``.  Every key and every value is rendered by a separate encoder
pass into owned bytes, stored under the raw key bytes, and the whole dict is
sorted and written in one piece when it closes.  The buffer lives exactly as
long as that one dict, so memory is bounded by the widest dict rather than
the whole document.

Absent values (``None``, zero-field units) render as zero bytes:

    at the root       nothing is written
    as a dict value   the entry is left out of the dict
    as a list element ERR_EMPTY_VALUE, since "le" grammar needs a value
"""

from __future__ import annotations

import io
import logging
from typing import Any, BinaryIO, Dict, Iterable, Mapping, Optional, Tuple

from ._constants import DEFAULT_MAX_DEPTH, INT64_MAX, INT64_MIN
from ._errors import (
    ERR_CUSTOM,
    ERR_EMPTY_VALUE,
    ERR_KEY_MUST_BE_STRING,
    ERR_LIMIT_DEPTH,
    ERR_NUMBER_OUT_OF_RANGE,
    ERR_UNSUPPORTED_TYPE,
    BencodeError,
    BencodeIOError,
    BencodeSerError,
    BencodeUtf8Error,
)
from ._format import DICT_OPEN, END, LIST_OPEN, int_token, split_str_token, str_token
from ._produce import produce

logger = logging.getLogger(__name__)


class ListState:
    """Open-list handle returned by ``begin_list``."""
    __slots__ = ("empty",)

    def __init__(self, empty: bool) -> None:
        # Declared empty: "le" is already written and nothing may follow.
        self.empty = empty


class DictBuffer:
    """Canonicalization buffer for a single dict.

    Maps raw key bytes to (rendered key, rendered value).  A repeated key
    replaces the earlier entry.
    """

    def __init__(self) -> None:
        self._entries: Dict[bytes, Tuple[bytes, bytes]] = {}
        self._pending: Optional[Tuple[bytes, bytes]] = None

    def __len__(self) -> int:
        return len(self._entries)

    def add_key(self, key_token: bytes) -> None:
        if self._pending is not None:
            raise BencodeSerError(ERR_CUSTOM, "dict key given twice without a value")
        try:
            raw = split_str_token(key_token)
        except ValueError:
            raise BencodeSerError(ERR_KEY_MUST_BE_STRING,
                                  "dict key must encode as a string, got {!r}".format(key_token[:32]))
        self._pending = (raw, key_token)

    def add_value(self, value_token: bytes) -> None:
        if self._pending is None:
            raise BencodeSerError(ERR_CUSTOM, "dict value given without a key")
        raw, key_token = self._pending
        self._pending = None
        if not value_token:
            self._entries.pop(raw, None)
            return
        self._entries[raw] = (key_token, value_token)

    def render(self) -> bytes:
        if self._pending is not None:
            raise BencodeSerError(ERR_CUSTOM, "dict closed with a dangling key")
        # bytes compare as unsigned octets, which is exactly the canonical order
        parts = [DICT_OPEN]
        for raw in sorted(self._entries):
            key_token, value_token = self._entries[raw]
            parts.append(key_token)
            parts.append(value_token)
        parts.append(END)
        return b"".join(parts)


class Encoder:
    """Writes bencode for producer calls to ``sink`` (anything with ``write``)."""

    def __init__(self, sink: BinaryIO, max_depth: int = DEFAULT_MAX_DEPTH, *,
                 depth: int = 0) -> None:
        self._sink = sink
        self.max_depth = max_depth
        self._depth = depth
        self.written = 0

    # ── Plumbing ──────────────────────────────────────────────

    def _write(self, data: bytes) -> None:
        try:
            self._sink.write(data)
        except OSError as e:
            raise BencodeIOError("write failed: {}".format(e)) from e
        self.written += len(data)

    def _enter(self) -> None:
        if self._depth + 1 > self.max_depth:
            raise BencodeSerError(ERR_LIMIT_DEPTH,
                                  "nesting exceeds max_depth={}".format(self.max_depth))
        self._depth += 1

    def _leave(self) -> None:
        self._depth -= 1

    def _render(self, value: Any) -> bytes:
        """Encode ``value`` in its own pass and return the bytes."""
        buf = io.BytesIO()
        Encoder(buf, self.max_depth, depth=self._depth).produce(value)
        return buf.getvalue()

    def produce(self, value: Any) -> None:
        produce(value, self)

    # ── Scalars ───────────────────────────────────────────────

    def emit_bool(self, value: bool) -> None:
        raise BencodeSerError(ERR_UNSUPPORTED_TYPE, "cannot serialize type bool")

    def emit_int(self, value: int) -> None:
        if value < INT64_MIN or value > INT64_MAX:
            raise BencodeSerError(ERR_NUMBER_OUT_OF_RANGE,
                                  "number {} out of range".format(value))
        self._write(int_token(value))

    def emit_uint(self, value: int) -> None:
        if value < 0 or value > INT64_MAX:
            raise BencodeSerError(ERR_NUMBER_OUT_OF_RANGE,
                                  "number {} out of range".format(value))
        self._write(int_token(value))

    def emit_float(self, value: float) -> None:
        # Truncates toward zero.
        try:
            truncated = int(value)
        except (OverflowError, ValueError) as e:
            raise BencodeSerError(ERR_NUMBER_OUT_OF_RANGE,
                                  "float {!r} has no integer form".format(value)) from e
        self.emit_int(truncated)

    def emit_str(self, value: str) -> None:
        try:
            token = str_token(value)
        except UnicodeEncodeError as e:
            raise BencodeUtf8Error("string is not valid utf-8 text: {}".format(e.reason)) from e
        self._write(token)

    def emit_bytes(self, value: bytes) -> None:
        """Bytes become a list of per-byte integers; strings are text only."""
        data = bytes(value)
        state = self.begin_list(len(data))
        for byte in data:
            self.list_element(state, byte)
        self.end_list(state)

    def emit_none(self) -> None:
        pass

    def emit_unit(self) -> None:
        pass

    # ── Lists ─────────────────────────────────────────────────

    def begin_list(self, length: Optional[int] = None) -> ListState:
        self._enter()
        self._write(LIST_OPEN)
        state = ListState(empty=length == 0)
        if state.empty:
            self._write(END)
            self._leave()
        return state

    def list_element(self, state: ListState, value: Any) -> None:
        if state.empty:
            raise BencodeSerError(ERR_CUSTOM, "element added to a list declared empty")
        before = self.written
        self.produce(value)
        if self.written == before:
            raise BencodeSerError(ERR_EMPTY_VALUE,
                                  "list element {!r} encodes to nothing".format(value))

    def end_list(self, state: ListState) -> None:
        if state.empty:
            return
        self._write(END)
        self._leave()

    def emit_seq(self, items: Iterable[Any], length: Optional[int] = None) -> None:
        state = self.begin_list(length)
        for item in items:
            self.list_element(state, item)
        self.end_list(state)

    # ── Dicts and structs ─────────────────────────────────────

    def begin_dict(self) -> DictBuffer:
        self._enter()
        return DictBuffer()

    def dict_key(self, state: DictBuffer, key: Any) -> None:
        state.add_key(self._render(key))

    def dict_value(self, state: DictBuffer, value: Any) -> None:
        state.add_value(self._render(value))

    def dict_entry(self, state: DictBuffer, key: Any, value: Any) -> None:
        self.dict_key(state, key)
        self.dict_value(state, value)

    def end_dict(self, state: DictBuffer) -> None:
        self._write(state.render())
        self._leave()

    def emit_mapping(self, items: Iterable[Tuple[Any, Any]]) -> None:
        state = self.begin_dict()
        for key, value in items:
            self.dict_entry(state, key, value)
        self.end_dict(state)

    def begin_struct(self, name: str, length: Optional[int] = None) -> DictBuffer:
        return self.begin_dict()

    def struct_field(self, state: DictBuffer, name: str, value: Any) -> None:
        self.dict_entry(state, name, value)

    def end_struct(self, state: DictBuffer) -> None:
        self.end_dict(state)

    # ── Enum-like variants ────────────────────────────────────
    # unit     -> "name"
    # newtype  -> {name: value}
    # tuple    -> {name: [f0, f1, ...]}
    # struct   -> {name: {field: value, ...}}

    def unit_variant(self, name: str) -> None:
        self.emit_str(name)

    def newtype_variant(self, name: str, value: Any) -> None:
        state = self.begin_dict()
        self.dict_entry(state, name, value)
        self.end_dict(state)

    def begin_tuple_variant(self, name: str, length: Optional[int] = None) -> ListState:
        # One key only, so the outer dict can stream without a buffer.
        self._enter()
        self._write(DICT_OPEN)
        self.emit_str(name)
        return self.begin_list(length)

    def end_tuple_variant(self, state: ListState) -> None:
        self.end_list(state)
        self._write(END)
        self._leave()

    def tuple_variant(self, name: str, fields: Iterable[Any]) -> None:
        fields = list(fields)
        state = self.begin_tuple_variant(name, len(fields))
        for value in fields:
            self.list_element(state, value)
        self.end_tuple_variant(state)

    def begin_struct_variant(self, name: str, length: Optional[int] = None) -> DictBuffer:
        self._enter()
        self._write(DICT_OPEN)
        self.emit_str(name)
        return self.begin_dict()

    def end_struct_variant(self, state: DictBuffer) -> None:
        self.end_dict(state)
        self._write(END)
        self._leave()

    def struct_variant(self, name: str, fields: Mapping[str, Any]) -> None:
        state = self.begin_struct_variant(name, len(fields))
        for field, value in fields.items():
            self.struct_field(state, field, value)
        self.end_struct_variant(state)


# ── Entry points ──────────────────────────────────────────────

def to_writer(value: Any, sink: BinaryIO, *, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
    """Encode ``value`` to ``sink``.  On error the sink may hold a prefix."""
    enc = Encoder(sink, max_depth)
    try:
        enc.produce(value)
    except RecursionError as e:
        # max_depth above what the interpreter stack can hold
        logger.debug("encode ran out of stack after %d bytes", enc.written)
        raise BencodeSerError(ERR_LIMIT_DEPTH,
                              "nesting too deep for the interpreter stack") from e
    except BencodeError as e:
        logger.debug("encode failed after %d bytes: %s", enc.written, e)
        raise


def to_bytes(value: Any, *, max_depth: int = DEFAULT_MAX_DEPTH) -> bytes:
    buf = io.BytesIO()
    to_writer(value, buf, max_depth=max_depth)
    return buf.getvalue()


def to_string(value: Any, *, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    data = to_bytes(value, max_depth=max_depth)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise BencodeUtf8Error("encoded output is not utf-8 text: {}".format(e.reason)) from e
