"""Buffered line extraction from random positions in a file."""

from __future__ import annotations

from typing import BinaryIO


def _read_at(reader: BinaryIO, offset: int, size: int) -> bytes:
    reader.seek(offset)
    return reader.read(size)


class LineBuffer:
    """Reads a chunk at an offset and walks the complete lines inside it.

    ``line_start`` and ``line_end`` are positions within the current chunk.
    Methods raise EOFError when no further line is available.
    """

    def __init__(self, buf_size: int):
        self.buf_size = buf_size
        self._data = b""
        self.line_start = -1
        self.line_end = 0
        self.discarded = True

    def reset(self) -> None:
        self.line_start = -1
        self.line_end = 0
        self.discarded = True

    def read_line(self, reader: BinaryIO, offset: int) -> bytes:
        """Return the first complete line starting after ``offset``.

        At offset 0 the chunk's first line counts; elsewhere the partial
        line before the first newline is skipped.
        """
        self.line_start = -1
        self.line_end = 0
        data = _read_at(reader, offset, self.buf_size)
        if not data:
            raise EOFError
        self._data = data
        self.discarded = False

        if offset == 0:
            self.line_start = 0
        else:
            first = data.find(b"\n")
            if first < 0:
                raise EOFError
            self.line_start = first + 1

        cursor = data.find(b"\n", self.line_start)
        if cursor >= 0:
            self.line_end = cursor
            return data[self.line_start:cursor]

        if len(data) < self.buf_size * 4:
            data += _read_at(reader, offset + len(data), self.buf_size)
            self._data = data
            cursor = data.find(b"\n", self.line_start)
            if cursor >= 0:
                self.line_end = cursor
                return data[self.line_start:cursor]

        self.line_end = len(data)
        if self.line_start < self.line_end:
            return data[self.line_start:self.line_end]
        raise EOFError

    def next_line(self) -> bytes:
        """Return the next newline-terminated, non-empty line of the chunk."""
        if self.discarded:
            raise EOFError
        self.line_start = self.line_end + 1
        if self.line_start >= len(self._data):
            raise EOFError
        cursor = self._data.find(b"\n", self.line_start)
        if cursor > self.line_start:
            self.line_end = cursor
            return self._data[self.line_start:cursor]
        raise EOFError

    def find_last_line(self, reader: BinaryIO, offset: int) -> bytes:
        """Return the last newline-terminated line in the chunk at ``offset``."""
        data = _read_at(reader, offset, self.buf_size)
        if not data:
            raise EOFError
        self._data = data
        last = data.rfind(b"\n")
        if last <= 0:
            raise EOFError
        self.line_start = data.rfind(b"\n", 0, last) + 1
        self.line_end = last
        if self.line_start < self.line_end:
            return data[self.line_start:self.line_end]
        raise EOFError