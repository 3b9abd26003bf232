import io
import re
from datetime import datetime, timedelta

import pytest

from ttail.config import default_options
from ttail.searcher import TimeSearcher

BASE = datetime(2023, 12, 25, 10, 0, 0)
STAMP_RE = re.compile(rb"\ttimestamp=([^\t]+)\t")


def make_log(count, start=BASE, step=timedelta(seconds=1)):
    lines = []
    for i in range(count):
        stamp = (start + step * i).strftime("%Y-%m-%dT%H:%M:%S")
        lines.append(f"\ttimestamp={stamp}\tlevel=info\tmsg=entry_{i}\n")
    return "".join(lines).encode()


def stamp_of(line):
    match = STAMP_RE.search(line)
    return datetime.strptime(match.group(1).decode(), "%Y-%m-%dT%H:%M:%S")


@pytest.fixture
def open_log(tmp_path):
    handles = []

    def _open(content):
        path = tmp_path / "app.log"
        path.write_bytes(content)
        fh = open(path, "rb")
        handles.append(fh)
        return fh

    yield _open
    for fh in handles:
        fh.close()


def make_searcher(fh, **changes):
    options = default_options()
    for name, value in changes.items():
        setattr(options, name, value)
    return TimeSearcher(fh, options)


def test_empty_file(open_log):
    searcher = make_searcher(open_log(b""), duration=timedelta(minutes=1))
    searcher.find_position()
    out = io.BytesIO()
    assert searcher.offset == 0
    assert searcher.copy_to(out) == 0
    assert out.getvalue() == b""


def test_recent_lines_are_all_copied(open_log):
    content = make_log(5, start=datetime.now() - timedelta(seconds=5))
    searcher = make_searcher(open_log(content), duration=timedelta(hours=1))
    searcher.find_position()
    out = io.BytesIO()
    copied = searcher.copy_to(out)
    assert searcher.offset == 0
    assert out.getvalue() == content
    assert copied == len(content)


def test_old_lines_give_end_of_file(open_log):
    content = make_log(5)
    searcher = make_searcher(open_log(content), duration=timedelta(seconds=30))
    searcher.find_position()
    assert searcher.offset == len(content)
    assert searcher.reader().read() == b""


def test_binary_search_on_large_file(open_log):
    content = make_log(2000)
    duration = timedelta(seconds=100)
    searcher = make_searcher(
        open_log(content),
        duration=duration,
        buf_size=512,
        time_from_last_line=True,
    )
    searcher.find_position()
    offset = searcher.offset
    assert 0 < offset < len(content)
    assert content[offset - 1] == ord("\n")

    out = io.BytesIO()
    copied = searcher.copy_to(out)
    output = out.getvalue()
    assert output == content[offset:]
    assert copied == len(output)

    lines = output.splitlines()
    last = stamp_of(content.splitlines()[-1])
    first = stamp_of(lines[0])
    assert first <= last - duration
    assert first >= last - 2 * duration
    assert stamp_of(lines[-1]) == last


def test_reader_starts_at_offset(open_log):
    content = make_log(2000)
    searcher = make_searcher(
        open_log(content),
        duration=timedelta(seconds=50),
        buf_size=512,
        time_from_last_line=True,
    )
    searcher.find_position()
    assert searcher.reader().read() == content[searcher.offset:]


def test_large_file_without_timestamps_starts_at_beginning(open_log):
    content = b"no timestamp here\n" * 2000
    searcher = make_searcher(open_log(content), duration=timedelta(minutes=1), buf_size=512)
    searcher.find_position()
    assert searcher.offset == 0


def test_steps_limit_stops_last_line_search(open_log):
    content = make_log(3) + b"plain line without time\n" * 200
    searcher = make_searcher(
        open_log(content),
        duration=timedelta(minutes=1),
        buf_size=512,
        steps_limit=1,
        time_from_last_line=True,
    )
    searcher.find_position()
    assert searcher.offset == 0


def test_from_time_follows_last_line(open_log):
    content = make_log(10)
    duration = timedelta(seconds=3)
    searcher = make_searcher(
        open_log(content), duration=duration, time_from_last_line=True
    )
    searcher.find_position()
    last = stamp_of(content.splitlines()[-1])
    assert searcher.from_time == last - duration