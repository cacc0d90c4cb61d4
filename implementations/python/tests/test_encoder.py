"""Tests for the Encoder's producer-facing calls.

These drive the Encoder directly (or through ``__bencode__`` hooks) the way
a type-binding layer would, covering variants, declared-empty lists and
the per-dict canonicalization buffer.
"""

from __future__ import annotations

import io
import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from bencodec import (
    BencodeSerError,
    DictBuffer,
    ERR_CUSTOM,
    ERR_LIMIT_DEPTH,
    ERR_NUMBER_OUT_OF_RANGE,
    Encoder,
    from_slice,
    to_bytes,
)


def _encoder():
    buf = io.BytesIO()
    return Encoder(buf), buf


# ── Enum-like variants via __bencode__ ────────────────────────

class Ident:
    def __init__(self, n):
        self.n = n

    def __bencode__(self, encoder):
        encoder.newtype_variant("Id", self.n)


class Pair:
    def __init__(self, *fields):
        self.fields = fields

    def __bencode__(self, encoder):
        encoder.tuple_variant("Pair", self.fields)


class Rect:
    def __init__(self, w, h):
        self.w, self.h = w, h

    def __bencode__(self, encoder):
        encoder.struct_variant("Rect", {"w": self.w, "h": self.h})


class Quit:
    def __bencode__(self, encoder):
        encoder.unit_variant("Quit")


class TestVariants(unittest.TestCase):
    def test_unit_variant(self):
        self.assertEqual(to_bytes(Quit()), b"4:Quit")

    def test_newtype_variant(self):
        self.assertEqual(to_bytes(Ident(7)), b"d2:Idi7ee")

    def test_tuple_variant(self):
        self.assertEqual(to_bytes(Pair(1, "a")), b"d4:Pairli1e1:aee")

    def test_empty_tuple_variant(self):
        self.assertEqual(to_bytes(Pair()), b"d4:Pairlee")

    def test_struct_variant_fields_sorted(self):
        self.assertEqual(to_bytes(Rect(3, 4)), b"d4:Rectd1:hi4e1:wi3eee")

    def test_variants_nested(self):
        got = to_bytes({"shapes": [Rect(1, 2), Quit()], "id": Ident(9)})
        self.assertEqual(got, b"d2:idd2:Idi9ee6:shapesld4:Rectd1:hi2e1:wi1eee4:Quitee")

    def test_variant_decodes_as_one_entry_dict(self):
        self.assertEqual(from_slice(to_bytes(Pair(1, 2))), {"Pair": [1, 2]})

    def test_tuple_variant_depth(self):
        """The wrapper dict and the list each take a level."""
        with self.assertRaises(BencodeSerError) as ctx:
            to_bytes(Pair(1), max_depth=1)
        self.assertEqual(ctx.exception.code, ERR_LIMIT_DEPTH)
        self.assertEqual(to_bytes(Pair(1), max_depth=2), b"d4:Pairli1eee")


# ── Lists ─────────────────────────────────────────────────────

class TestListCalls(unittest.TestCase):
    def test_declared_empty_written_immediately(self):
        enc, buf = _encoder()
        state = enc.begin_list(0)
        self.assertEqual(buf.getvalue(), b"le")
        enc.end_list(state)
        self.assertEqual(buf.getvalue(), b"le")

    def test_declared_empty_rejects_elements(self):
        enc, _buf = _encoder()
        state = enc.begin_list(0)
        with self.assertRaises(BencodeSerError) as ctx:
            enc.list_element(state, 1)
        self.assertEqual(ctx.exception.code, ERR_CUSTOM)

    def test_unknown_length_streams(self):
        enc, buf = _encoder()
        state = enc.begin_list()
        enc.list_element(state, 1)
        self.assertEqual(buf.getvalue(), b"li1e")
        enc.list_element(state, "x")
        enc.end_list(state)
        self.assertEqual(buf.getvalue(), b"li1e1:xe")

    def test_generator_elements(self):
        enc, buf = _encoder()
        enc.emit_seq(i * i for i in range(3))
        self.assertEqual(buf.getvalue(), b"li0ei1ei4ee")


# ── Dicts and the canonicalization buffer ─────────────────────

class TestDictCalls(unittest.TestCase):
    def test_nothing_written_until_close(self):
        enc, buf = _encoder()
        state = enc.begin_dict()
        enc.dict_entry(state, "b", 1)
        enc.dict_entry(state, "a", 2)
        self.assertEqual(buf.getvalue(), b"")
        enc.end_dict(state)
        self.assertEqual(buf.getvalue(), b"d1:ai2e1:bi1ee")

    def test_duplicate_key_last_write_wins(self):
        enc, buf = _encoder()
        state = enc.begin_dict()
        enc.dict_entry(state, "a", 1)
        enc.dict_entry(state, "a", 2)
        self.assertEqual(len(state), 1)
        enc.end_dict(state)
        self.assertEqual(buf.getvalue(), b"d1:ai2ee")

    def test_struct_calls(self):
        enc, buf = _encoder()
        state = enc.begin_struct("Point", 2)
        enc.struct_field(state, "y", 2)
        enc.struct_field(state, "x", 1)
        enc.end_struct(state)
        self.assertEqual(buf.getvalue(), b"d1:xi1e1:yi2ee")

    def test_value_without_key(self):
        enc, _buf = _encoder()
        state = enc.begin_dict()
        with self.assertRaises(BencodeSerError) as ctx:
            enc.dict_value(state, 1)
        self.assertEqual(ctx.exception.code, ERR_CUSTOM)

    def test_dangling_key(self):
        enc, _buf = _encoder()
        state = enc.begin_dict()
        enc.dict_key(state, "a")
        with self.assertRaises(BencodeSerError) as ctx:
            enc.end_dict(state)
        self.assertEqual(ctx.exception.code, ERR_CUSTOM)

    def test_buffer_render(self):
        buf = DictBuffer()
        buf.add_key(b"1:b")
        buf.add_value(b"i1e")
        buf.add_key(b"1:a")
        buf.add_value(b"le")
        self.assertEqual(buf.render(), b"d1:ale1:bi1ee")

    def test_buffer_absent_value_removes_entry(self):
        buf = DictBuffer()
        buf.add_key(b"1:a")
        buf.add_value(b"i1e")
        buf.add_key(b"1:a")
        buf.add_value(b"")
        self.assertEqual(buf.render(), b"de")


# ── Scalars ───────────────────────────────────────────────────

class TestScalarCalls(unittest.TestCase):
    def test_emit_uint_range(self):
        enc, buf = _encoder()
        enc.emit_uint(2**63 - 1)
        self.assertEqual(buf.getvalue(), b"i9223372036854775807e")
        with self.assertRaises(BencodeSerError) as ctx:
            enc.emit_uint(2**63)
        self.assertEqual(ctx.exception.code, ERR_NUMBER_OUT_OF_RANGE)

    def test_emit_int_prints_given_value(self):
        enc, buf = _encoder()
        enc.emit_int(-5)
        self.assertEqual(buf.getvalue(), b"i-5e")

    def test_written_counter(self):
        enc, _buf = _encoder()
        enc.emit_str("spam")
        self.assertEqual(enc.written, 6)
        enc.emit_none()
        self.assertEqual(enc.written, 6)


if __name__ == "__main__":
    unittest.main()
