"""Immutable cursor over the undecoded bytes of one decoding scope."""

from __future__ import annotations

from typing import Tuple


class ByteCursor:
    """A ``[start, end)`` window onto a shared, never-mutated buffer.

    Consuming never changes a cursor in place: `take` hands back the
    prefix as ``bytes`` together with a new cursor over what is left, so
    a caller can never observe bytes another step already consumed.
    """

    __slots__ = ("_buf", "_start", "_end")

    def __init__(self, buf: bytes, start: int = 0, end: int = -1) -> None:
        if end < 0:
            end = len(buf)
        if not 0 <= start <= end <= len(buf):
            raise ValueError("cursor window out of bounds")
        self._buf = buf
        self._start = start
        self._end = end

    def __len__(self) -> int:
        return self._end - self._start

    def __bool__(self) -> bool:
        return self._end > self._start

    def __repr__(self) -> str:
        return "ByteCursor({}..{} of {})".format(self._start, self._end, len(self._buf))

    @property
    def offset(self) -> int:
        """Absolute position of the first unconsumed byte."""
        return self._start

    def peek(self, n: int) -> bytes:
        """Return up to `n` leading bytes without consuming them."""
        return self._buf[self._start:min(self._start + n, self._end)]

    def first(self) -> int:
        if self._start >= self._end:
            raise IndexError("peek on empty cursor")
        return self._buf[self._start]

    def find(self, byte: int) -> int:
        """Index of `byte` relative to the cursor, or -1."""
        idx = self._buf.find(bytes([byte]), self._start, self._end)
        return -1 if idx < 0 else idx - self._start

    def take(self, n: int) -> Tuple[bytes, "ByteCursor"]:
        """Consume `n` bytes; return them and the cursor over the rest."""
        if n < 0 or n > len(self):
            raise ValueError("take({}) from {} bytes".format(n, len(self)))
        cut = self._start + n
        return self._buf[self._start:cut], ByteCursor(self._buf, cut, self._end)

    def take_all(self) -> Tuple[bytes, "ByteCursor"]:
        return self.take(len(self))

    def split(self, n: int) -> Tuple["ByteCursor", "ByteCursor"]:
        """Split into a bounded sub-scope of `n` bytes and the rest."""
        if n < 0 or n > len(self):
            raise ValueError("split({}) from {} bytes".format(n, len(self)))
        cut = self._start + n
        return ByteCursor(self._buf, self._start, cut), ByteCursor(self._buf, cut, self._end)
