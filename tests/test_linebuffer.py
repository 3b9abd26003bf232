import io

import pytest

from ttail.linebuffer import LineBuffer


@pytest.mark.parametrize(
    "data,buf_size,offset,expected",
    [
        (b"first line\nsecond line\nthird line\n", 1024, 0, b"first line"),
        (b"first line\nsecond line\nthird line\n", 1024, 10, b"second line"),
        (b"very long line that exceeds buffer size\nshort\n", 50, 0,
         b"very long line that exceeds buffer size"),
        (b"very long line that exceeds buffer size\nshort\n", 8, 0, b"very long line t"),
        (b"0123456789abcdef\nshort\n", 10, 0, b"0123456789abcdef"),
    ],
)
def test_read_line(data, buf_size, offset, expected):
    assert LineBuffer(buf_size).read_line(io.BytesIO(data), offset) == expected


def test_read_line_past_end():
    with pytest.raises(EOFError):
        LineBuffer(16).read_line(io.BytesIO(b"abc\n"), 10)


def test_read_line_no_newline_mid_file():
    with pytest.raises(EOFError):
        LineBuffer(16).read_line(io.BytesIO(b"abcdefghij"), 2)


def test_next_line():
    buf = LineBuffer(1024)
    reader = io.BytesIO(b"first line\nsecond line\nthird line\n")
    assert buf.read_line(reader, 0) == b"first line"
    assert buf.next_line() == b"second line"
    assert buf.next_line() == b"third line"
    with pytest.raises(EOFError):
        buf.next_line()


def test_next_line_when_discarded():
    with pytest.raises(EOFError):
        LineBuffer(16).next_line()


@pytest.mark.parametrize(
    "data,expected",
    [
        (b"first line\nsecond line\nthird line\npartial", b"third line"),
        (b"only line\n", b"only line"),
    ],
)
def test_find_last_line(data, expected):
    assert LineBuffer(1024).find_last_line(io.BytesIO(data), 0) == expected


@pytest.mark.parametrize("data", [b"no newlines here", b"\n", b""])
def test_find_last_line_eof(data):
    with pytest.raises(EOFError):
        LineBuffer(1024).find_last_line(io.BytesIO(data), 0)


def test_reset():
    buf = LineBuffer(1024)
    buf.line_start = 10
    buf.line_end = 20
    buf.discarded = False
    buf.reset()
    assert buf.line_start == -1
    assert buf.line_end == 0
    assert buf.discarded is True