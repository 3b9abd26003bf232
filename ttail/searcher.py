"""Locate the first line of a time window in a timestamped log file."""

from __future__ import annotations

from datetime import datetime
from typing import BinaryIO

from ttail.config import Options
from ttail.linebuffer import LineBuffer
from ttail.parser import TimeParser

_COPY_CHUNK = 64 * 1024


class TimeSearcher:
    """Binary-searches a log file for the start of the requested time span.

    ``offset`` holds the position found by :meth:`find_position`;
    ``from_time`` is the reference time the search compares against.
    """

    def __init__(self, file: BinaryIO, options: Options):
        self._file = file
        self.options = options
        self._parser = TimeParser(options.time_re, options.time_layout, options.location)
        self._buffer = LineBuffer(options.buf_size)
        self.from_time: datetime = self._now()
        self.offset = 0
        self.size = file.seek(0, 2)

    def _now(self) -> datetime:
        return datetime.now(self.options.location)

    def _last_line_time(self) -> datetime | None:
        buf_size = self.options.buf_size
        offset = max(self.size - buf_size, 0)
        for _ in range(self.options.steps_limit):
            if offset < 0:
                break
            try:
                line = self._buffer.find_last_line(self._file, offset)
            except EOFError:
                line = b""
            except OSError:
                continue
            if line:
                found = self._parser.parse_time(line)
                if found is not None:
                    self.offset = offset
                    return found
            if 0 < offset < buf_size:
                offset = 0
            else:
                offset -= buf_size
        return None

    def _time_at_offset(self, offset: int) -> datetime | None:
        self.offset = offset
        while True:
            try:
                line = self._buffer.read_line(self._file, self.offset)
            except EOFError:
                return None
            if not line:
                self.offset += self._buffer.line_end
                continue
            found = self._parser.parse_time(line)
            if found is not None:
                return found
            try:
                following = self._buffer.next_line()
            except EOFError:
                following = b""
            if following:
                found = self._parser.parse_time(following)
                if found is not None:
                    return found
            self.offset += self._buffer.line_end

    def _precise_find(self) -> None:
        duration = self.options.duration
        while True:
            try:
                line = self._buffer.next_line()
            except EOFError:
                self.offset += self._buffer.line_end
                line = self._buffer.read_line(self._file, self.offset)
            found = self._parser.parse_time(line)
            if found is not None and self.from_time - found <= duration:
                return

    def find_position(self) -> None:
        """Set ``offset`` to the first line inside the requested time span."""
        if self.size == 0:
            self.offset = 0
            return

        if self.options.time_from_last_line:
            last = self._last_line_time()
            if last is None:
                self.offset = 0
                return
            self.from_time = last - self.options.duration
        else:
            self.from_time = self._now() - self.options.duration

        up, down = 0, self.size
        while down - up > self.options.buf_size:
            middle = up + (down - up) // 2
            found = self._time_at_offset(middle)
            if found is None:
                self.offset = 0
                return
            if found < self.from_time:
                up = middle
            else:
                down = middle

        self.offset = up
        self._buffer.reset()
        try:
            self._precise_find()
        except EOFError:
            pass
        self.offset += self._buffer.line_start

    def copy_to(self, out: BinaryIO) -> int:
        """Write the file from ``offset`` to its end into ``out``; return the byte count."""
        self._file.seek(self.offset)
        total = 0
        while chunk := self._file.read(_COPY_CHUNK):
            out.write(chunk)
            total += len(chunk)
        return total

    def reader(self) -> BinaryIO:
        """Return the underlying file positioned at ``offset``."""
        self._file.seek(self.offset)
        return self._file