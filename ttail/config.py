"""Log type definitions, search options and configuration loading."""

from __future__ import annotations

import dataclasses
import functools
import os
import re
import tomllib
from dataclasses import dataclass, field
from datetime import timedelta, tzinfo

DEFAULT_CONFIG_FILE = "/etc/ttail/types.toml"

TSKV_PATTERN = r"\ttimestamp=(\d{4}-\d{2}-\d{2}T\d\d:\d\d:\d\d)\t"
ISO_LAYOUT = "2006-01-02T15:04:05"


class ConfigError(Exception):
    """Raised when configuration cannot be loaded or applied."""


@functools.lru_cache(maxsize=None)
def compiled_regex(pattern: str) -> re.Pattern[str]:
    """Compile a pattern once and reuse the compiled object afterwards."""
    return re.compile(pattern)


@dataclass
class Options:
    """Settings that drive a time search over a file."""

    location: tzinfo | None = None
    duration: timedelta = field(default_factory=timedelta)
    buf_size: int = 1 << 14
    steps_limit: int = 1024
    time_re: re.Pattern[str] = field(default_factory=lambda: compiled_regex(TSKV_PATTERN))
    time_layout: str = ISO_LAYOUT
    time_from_last_line: bool = False

    def clone(self) -> Options:
        """Return an independent copy of these options."""
        return dataclasses.replace(self)


def default_options() -> Options:
    """Return the default options (local time, 16 KiB buffer, TSKV format)."""
    return Options()


@dataclass(frozen=True)
class LogType:
    """Per-format overrides; zero or empty values leave the defaults alone."""

    buf_size: int = 0
    steps_limit: int = 0
    time_re_str: str = ""
    time_layout: str = ""

    def apply_to_options(self, options: Options) -> None:
        """Overwrite the fields of ``options`` that this log type sets."""
        if self.buf_size:
            options.buf_size = self.buf_size
        if self.steps_limit:
            options.steps_limit = self.steps_limit
        if self.time_re_str:
            try:
                options.time_re = compiled_regex(self.time_re_str)
            except re.error as exc:
                raise ConfigError(f"invalid time regex {self.time_re_str!r}: {exc}") from exc
        if self.time_layout:
            options.time_layout = self.time_layout


class Config(dict[str, LogType]):
    """Mapping of log type names to their definitions."""

    def get_log_type_options(self, log_type: str) -> LogType:
        try:
            return self[log_type]
        except KeyError:
            raise ConfigError(f"failed to find options for log type: {log_type}") from None


def _lt(pattern: str, layout: str) -> LogType:
    return LogType(time_re_str=pattern, time_layout=layout)


_BRACKET_CLF = r"\[(\d{2}/\w{3}/\d{4}:\d{2}:\d{2}:\d{2})\s"
_CLF_LAYOUT = "02/Jan/2006:15:04:05"
_ISO_ANY = r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})"
_ISO_START = r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})"
_SPACE_START = r"^(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})"
_SPACE_LAYOUT = "2006-01-02 15:04:05"
_NANO_START = r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d+Z)"

BUILTIN_LOG_TYPES = Config(
    {
        "tskv": _lt(TSKV_PATTERN, ISO_LAYOUT),
        "kern": _lt(r"^(\d{4}-\d{2}-\d{2}T\d\d:\d\d:\d\d)", ISO_LAYOUT),
        "apache": _lt(_BRACKET_CLF, _CLF_LAYOUT),
        "apache_common": _lt(_BRACKET_CLF, _CLF_LAYOUT),
        "apache_combined": _lt(_BRACKET_CLF, _CLF_LAYOUT),
        "nginx": _lt(_BRACKET_CLF, _CLF_LAYOUT),
        "nginx_iso": _lt(_ISO_ANY, ISO_LAYOUT),
        "java": _lt(_SPACE_START, _SPACE_LAYOUT),
        "java_iso": _lt(_ISO_ANY, ISO_LAYOUT),
        "python": _lt(r"^(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}),\d+", _SPACE_LAYOUT),
        "go": _lt(r"^(\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2})", "2006/01/02 15:04:05"),
        "docker": _lt(_NANO_START, "2006-01-02T15:04:05.000000000Z"),
        "docker_local": _lt(_ISO_START, ISO_LAYOUT),
        "kubernetes": _lt(_NANO_START, "2006-01-02T15:04:05.000000000Z"),
        "syslog": _lt(r"^(\w{3}\s+\d{1,2} \d{2}:\d{2}:\d{2})", "Jan _2 15:04:05"),
        "syslog_rfc5424": _lt(_ISO_START, ISO_LAYOUT),
        "mysql": _lt(_NANO_START, "2006-01-02T15:04:05.000000Z"),
        "mysql_general": _lt(_SPACE_START, _SPACE_LAYOUT),
        "postgresql": _lt(
            r"^(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d+)", "2006-01-02 15:04:05.000"
        ),
        "elasticsearch": _lt(r"\[(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}),\d+\]", ISO_LAYOUT),
        "logstash": _lt(
            r'"@timestamp":"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d+Z)"',
            "2006-01-02T15:04:05.000Z",
        ),
        "json": _lt(r'"timestamp":"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})"', ISO_LAYOUT),
        "json_time": _lt(r'"time":"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})"', ISO_LAYOUT),
        "rails": _lt(_SPACE_START, _SPACE_LAYOUT),
        "django": _lt(r"^(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}),\d+", _SPACE_LAYOUT),
    }
)

_TOML_FIELDS = {
    "bufSize": ("buf_size", int),
    "stepsLimit": ("steps_limit", int),
    "timeReStr": ("time_re_str", str),
    "timeLayout": ("time_layout", str),
}


def _log_type_from_table(name: str, table: object) -> LogType:
    if not isinstance(table, dict):
        raise ConfigError(f"log type {name!r} must be a table")
    values = {}
    for key, value in table.items():
        if key not in _TOML_FIELDS:
            continue
        attr, kind = _TOML_FIELDS[key]
        if not isinstance(value, kind) or isinstance(value, bool):
            raise ConfigError(f"log type {name!r}: {key} must be {kind.__name__}")
        values[attr] = value
    return LogType(**values)


def load_config(config_file: str | os.PathLike[str] | None = "") -> Config:
    """Load log types from a TOML file merged over the builtins.

    A missing file yields the builtin log types alone.
    """
    path = config_file or DEFAULT_CONFIG_FILE
    try:
        os.stat(path)
    except OSError:
        return BUILTIN_LOG_TYPES
    try:
        with open(path, "rb") as fh:
            data = tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"failed to load config {os.fspath(path)!r}: {exc}") from exc
    merged = Config(BUILTIN_LOG_TYPES)
    for name, table in data.items():
        merged[name] = _log_type_from_table(name, table)
    return merged