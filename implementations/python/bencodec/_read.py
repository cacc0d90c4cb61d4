"""Byte sources for the decoder.

Three readers share one contract:

    next_char()   consume one byte, or None at end of input
    peek_char()   the byte the next next_char() will return, or None
    read_exact(n) consume up to n bytes (shorter only at end of input)
    position      bytes consumed so far

``peek_char`` is a true one-byte lookahead on every reader, including the
stream reader, so the decoder behaves the same whatever it reads from.
"""

from __future__ import annotations

from typing import BinaryIO, Iterable, Iterator, Optional

from ._errors import BencodeIOError


class Read:
    """Interface the decoder consumes."""

    def next_char(self) -> Optional[int]:
        raise NotImplementedError

    def peek_char(self) -> Optional[int]:
        raise NotImplementedError

    def read_exact(self, n: int) -> bytes:
        out = bytearray()
        for _ in range(n):
            ch = self.next_char()
            if ch is None:
                break
            out.append(ch)
        return bytes(out)

    @property
    def position(self) -> int:
        raise NotImplementedError


class SliceRead(Read):
    """Reader over an in-memory buffer.  All operations are O(1)."""

    def __init__(self, data: bytes) -> None:
        self._data = memoryview(data).cast("B")
        self._pos = 0

    def next_char(self) -> Optional[int]:
        if self._pos >= len(self._data):
            return None
        ch = self._data[self._pos]
        self._pos += 1
        return ch

    def peek_char(self) -> Optional[int]:
        if self._pos >= len(self._data):
            return None
        return self._data[self._pos]

    def read_exact(self, n: int) -> bytes:
        chunk = self._data[self._pos:self._pos + n].tobytes()
        self._pos += len(chunk)
        return chunk

    @property
    def position(self) -> int:
        return self._pos


class StringRead(SliceRead):
    """Reader over the UTF-8 bytes of a str."""

    def __init__(self, text: str) -> None:
        super().__init__(text.encode("utf-8"))


class IteratorRead(Read):
    """Reader over an iterable of byte values (ints in 0..255).

    Position counts consumed bytes; a byte sitting in the lookahead slot
    has not been consumed yet.  An OSError raised while pulling from the
    iterator surfaces as BencodeIOError at that read.
    """

    def __init__(self, source: Iterable[int]) -> None:
        self._iter: Iterator[int] = iter(source)
        self._peeked: Optional[int] = None
        self._has_peeked = False
        self._pos = 0

    def _pull(self) -> Optional[int]:
        try:
            ch = next(self._iter)
        except StopIteration:
            return None
        except OSError as e:
            raise BencodeIOError("read failed at byte {}: {}".format(self._pos, e)) from e
        if not isinstance(ch, int) or isinstance(ch, bool) or not 0 <= ch <= 255:
            raise BencodeIOError(
                "byte source yielded {!r} at byte {}, not a byte".format(ch, self._pos))
        return ch

    def next_char(self) -> Optional[int]:
        if self._has_peeked:
            ch = self._peeked
            self._has_peeked = False
            self._peeked = None
        else:
            ch = self._pull()
        if ch is not None:
            self._pos += 1
        return ch

    def peek_char(self) -> Optional[int]:
        if not self._has_peeked:
            self._peeked = self._pull()
            self._has_peeked = True
        return self._peeked

    @property
    def position(self) -> int:
        return self._pos


def iter_reader(fileobj: BinaryIO, chunk_size: int = 8192) -> Iterator[int]:
    """Yield the bytes of a binary file object one at a time.

    Reads are chunked; nothing is read past the chunk holding the last
    byte the decoder asked for.
    """
    while True:
        chunk = fileobj.read(chunk_size)
        if not chunk:
            return
        yield from chunk
