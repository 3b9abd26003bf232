"""Timestamp extraction from log lines using reference-time layouts."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo

from ttail.config import ISO_LAYOUT, TSKV_PATTERN

_MONTHS = [
    "January", "February", "March", "April", "May", "June", "July",
    "August", "September", "October", "November", "December",
]
_MONTH_ABBR = [m[:3].lower() for m in _MONTHS]
_MONTH_FULL = [m.lower() for m in _MONTHS]

# Layout elements, checked in order at every position.
_TOKENS: list[tuple[str, str, str]] = [
    ("January", "month_name", r"([A-Za-z]+)"),
    ("Jan", "month_abbr", r"([A-Za-z]{3})"),
    ("Monday", "weekday", r"([A-Za-z]+)"),
    ("Mon", "weekday", r"([A-Za-z]{3})"),
    ("MST", "zone_name", r"([A-Za-z]{3,5})"),
    ("2006", "year", r"(\d{4})"),
    ("Z07:00", "zone", r"(Z|[+-]\d{2}:\d{2})"),
    ("Z0700", "zone", r"(Z|[+-]\d{4})"),
    ("-07:00", "zone", r"([+-]\d{2}:\d{2})"),
    ("-0700", "zone", r"([+-]\d{4})"),
    ("01", "month", r"(\d{2})"),
    ("02", "day", r"(\d{2})"),
    ("03", "hour12", r"(\d{2})"),
    ("04", "minute", r"(\d{2})"),
    ("05", "second", r"(\d{2})"),
    ("06", "year2", r"(\d{2})"),
    ("_2", "day", r"( ?\d{1,2})"),
    ("15", "hour", r"(\d{1,2})"),
    ("1", "month", r"(\d{1,2})"),
    ("2", "day", r"(\d{1,2})"),
    ("3", "hour12", r"(\d{1,2})"),
    ("4", "minute", r"(\d{1,2})"),
    ("5", "second", r"(\d{1,2})"),
    ("PM", "ampm", r"(AM|PM)"),
    ("pm", "ampm", r"(am|pm)"),
]


def _compile_layout(layout: str) -> tuple[re.Pattern[str], list[str]]:
    parts: list[str] = []
    kinds: list[str] = []
    i = 0
    n = len(layout)
    while i < n:
        c = layout[i]
        if c in ".," and i + 1 < n and layout[i + 1] in "09":
            j = i + 1
            while j < n and layout[j] == layout[i + 1]:
                j += 1
            if j >= n or not layout[j].isdigit():
                if layout[i + 1] == "0":
                    parts.append(r"[.,](\d{%d})" % (j - i - 1))
                else:
                    parts.append(r"(?:[.,](\d+))?")
                kinds.append("fraction")
                i = j
                continue
        for text, kind, pattern in _TOKENS:
            if layout.startswith(text, i):
                parts.append(pattern)
                kinds.append(kind)
                i += len(text)
                if kind == "second" and not (
                    i + 1 < n and layout[i] in ".," and layout[i + 1] in "09"
                ):
                    parts.append(r"(?:[.,](\d+))?")
                    kinds.append("fraction")
                break
        else:
            parts.append(re.escape(c))
            i += 1
    return re.compile("".join(parts)), kinds


_layout_cache: dict[str, tuple[re.Pattern[str], list[str]]] = {}


def _zone(text: str) -> timezone:
    if text == "Z":
        return timezone.utc
    sign = -1 if text[0] == "-" else 1
    digits = text[1:].replace(":", "")
    return timezone(sign * timedelta(hours=int(digits[:2]), minutes=int(digits[2:4])))


def parse_layout(layout: str, value: str, tzinfo: tzinfo | None = None) -> datetime:
    """Parse ``value`` according to a reference-time layout.

    The layout uses the reference date ``Mon Jan 2 15:04:05 MST 2006``.
    Without a zone in the value the result carries ``tzinfo``; ``None``
    means naive local time. Raises ValueError when the value does not fit.
    """
    if layout not in _layout_cache:
        _layout_cache[layout] = _compile_layout(layout)
    pattern, kinds = _layout_cache[layout]
    match = pattern.fullmatch(value)
    if match is None:
        raise ValueError(f"cannot parse {value!r} as {layout!r}")

    fields = {"year": 1, "month": 1, "day": 1, "hour": 0, "minute": 0, "second": 0}
    microsecond = 0
    ampm: str | None = None
    hour12: int | None = None
    zone: tzinfo | None = None
    for kind, text in zip(kinds, match.groups()):
        if text is None:
            continue
        if kind in ("year", "month", "day", "hour", "minute", "second"):
            fields[kind] = int(text)
        elif kind == "year2":
            yy = int(text)
            fields["year"] = yy + (1900 if yy >= 69 else 2000)
        elif kind == "month_abbr":
            try:
                fields["month"] = _MONTH_ABBR.index(text.lower()) + 1
            except ValueError:
                raise ValueError(f"bad month name {text!r}") from None
        elif kind == "month_name":
            try:
                fields["month"] = _MONTH_FULL.index(text.lower()) + 1
            except ValueError:
                raise ValueError(f"bad month name {text!r}") from None
        elif kind == "hour12":
            hour12 = int(text)
            if hour12 > 12:
                raise ValueError(f"hour out of range: {text!r}")
        elif kind == "ampm":
            ampm = text.upper()
        elif kind == "fraction":
            microsecond = int(text[:6].ljust(6, "0"))
        elif kind == "zone":
            zone = _zone(text)
        elif kind == "zone_name" and text.upper() in ("UTC", "GMT"):
            zone = timezone.utc

    if hour12 is not None:
        fields["hour"] = hour12
    if ampm == "PM" and fields["hour"] < 12:
        fields["hour"] += 12
    elif ampm == "AM" and fields["hour"] == 12:
        fields["hour"] = 0

    if zone is not None:
        result = datetime(**fields, microsecond=microsecond, tzinfo=zone)
        if tzinfo is None:
            return result.astimezone().replace(tzinfo=None)
        return result
    return datetime(**fields, microsecond=microsecond, tzinfo=tzinfo)


class TimeParser:
    """Finds and parses the timestamp carried by a log line."""

    _TSKV_PREFIX = b"\ttimestamp="
    _TSKV_LEN = 19

    def __init__(self, regex: re.Pattern[str], layout: str, location: tzinfo | None = None):
        self.regex = regex
        self.layout = layout
        self.location = location
        self._fast = regex.pattern == TSKV_PATTERN and layout == ISO_LAYOUT

    def parse_time(self, line: bytes) -> datetime | None:
        """Return the line's timestamp, or None when it has none that parses."""
        if self._fast:
            return self._parse_tskv(line)
        match = self.regex.search(line.decode("utf-8", "surrogateescape"))
        if match is None or match.re.groups < 1 or match.group(1) is None:
            return None
        return self._parse(match.group(1))

    def _parse_tskv(self, line: bytes) -> datetime | None:
        idx = line.find(self._TSKV_PREFIX)
        if idx < 0:
            return None
        start = idx + len(self._TSKV_PREFIX)
        end = start + self._TSKV_LEN
        if end >= len(line) or line[end] != ord("\t"):
            return None
        return self._parse(line[start:end].decode("utf-8", "surrogateescape"))

    def _parse(self, text: str) -> datetime | None:
        try:
            return parse_layout(self.layout, text, self.location)
        except ValueError:
            return None