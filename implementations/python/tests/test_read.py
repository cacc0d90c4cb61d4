"""Byte-source tests.

All three readers must look the same to the decoder: peek_char() is the
byte the next next_char() returns, and position counts consumed bytes.
"""

from __future__ import annotations

import io
import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from bencodec import (
    BencodeIOError,
    ERR_IO,
    IteratorRead,
    SliceRead,
    StringRead,
    iter_reader,
)


def _readers(raw: bytes):
    yield "slice", SliceRead(raw)
    yield "string", StringRead(raw.decode("utf-8"))
    yield "iter", IteratorRead(iter(raw))


class TestReaderContract(unittest.TestCase):
    def test_peek_matches_next(self):
        raw = "d3:cowé".encode("utf-8")
        for name, r in _readers(raw):
            with self.subTest(reader=name):
                seen = []
                while True:
                    peeked = r.peek_char()
                    self.assertEqual(r.peek_char(), peeked)  # peek is idempotent
                    ch = r.next_char()
                    self.assertEqual(ch, peeked)
                    if ch is None:
                        break
                    seen.append(ch)
                self.assertEqual(bytes(seen), raw)

    def test_position_counts_consumed_bytes(self):
        for name, r in _readers(b"abc"):
            with self.subTest(reader=name):
                self.assertEqual(r.position, 0)
                r.peek_char()
                self.assertEqual(r.position, 0)
                r.next_char()
                self.assertEqual(r.position, 1)
                r.next_char()
                r.next_char()
                self.assertEqual(r.position, 3)
                self.assertIsNone(r.next_char())
                self.assertEqual(r.position, 3)

    def test_empty_input(self):
        for name, r in _readers(b""):
            with self.subTest(reader=name):
                self.assertIsNone(r.peek_char())
                self.assertIsNone(r.next_char())

    def test_read_exact(self):
        for name, r in _readers(b"4:spam"):
            with self.subTest(reader=name):
                r.next_char()
                r.next_char()
                self.assertEqual(r.read_exact(4), b"spam")
                self.assertEqual(r.position, 6)

    def test_read_exact_after_peek(self):
        for name, r in _readers(b"spam"):
            with self.subTest(reader=name):
                self.assertEqual(r.peek_char(), ord("s"))
                self.assertEqual(r.read_exact(2), b"sp")
                self.assertEqual(r.next_char(), ord("a"))

    def test_read_exact_short(self):
        for name, r in _readers(b"sp"):
            with self.subTest(reader=name):
                self.assertEqual(r.read_exact(4), b"sp")
                self.assertEqual(r.position, 2)


class TestIteratorRead(unittest.TestCase):
    def test_io_error_propagates(self):
        def source():
            yield ord("l")
            raise OSError("broken pipe")

        r = IteratorRead(source())
        self.assertEqual(r.next_char(), ord("l"))
        with self.assertRaises(BencodeIOError) as ctx:
            r.next_char()
        self.assertEqual(ctx.exception.code, ERR_IO)
        self.assertIsInstance(ctx.exception.__cause__, OSError)

    def test_io_error_on_peek(self):
        def source():
            raise OSError("broken pipe")
            yield  # pragma: no cover

        with self.assertRaises(BencodeIOError):
            IteratorRead(source()).peek_char()

    def test_non_byte_items_rejected(self):
        for bad in ["l", 256, -1, None, b"l"]:
            with self.subTest(bad=bad):
                r = IteratorRead(iter([ord("l"), bad]))
                self.assertEqual(r.next_char(), ord("l"))
                with self.assertRaises(BencodeIOError) as ctx:
                    r.peek_char()
                self.assertEqual(ctx.exception.code, ERR_IO)

    def test_iter_reader_chunks(self):
        buf = io.BytesIO(b"x" * 10)
        self.assertEqual(bytes(iter_reader(buf, chunk_size=3)), b"x" * 10)

    def test_iter_reader_lazy(self):
        """Only the chunks actually consumed are read from the file."""
        buf = io.BytesIO(b"abcdef")
        r = IteratorRead(iter_reader(buf, chunk_size=2))
        r.next_char()
        self.assertEqual(buf.tell(), 2)


if __name__ == "__main__":
    unittest.main()
