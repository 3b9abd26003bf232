"""High-level handle for copying the recent part of a log file."""

from __future__ import annotations

import dataclasses
import logging
import os
import re
from datetime import datetime, timedelta
from typing import Any, BinaryIO

from ttail.config import ConfigError, Options, compiled_regex, default_options, load_config
from ttail.searcher import TimeSearcher

logger = logging.getLogger("ttail")

_OPTION_FIELDS = frozenset(f.name for f in dataclasses.fields(Options))


class TimeFile:
    """A log file that can be positioned at the start of a time span.

    Options start from ``options`` (or the defaults) and are then changed by
    keyword overrides named after the fields of :class:`Options`.
    """

    def __init__(self, file: BinaryIO, options: Options | None = None, **overrides: Any):
        opts = options.clone() if options is not None else default_options()
        for name, value in overrides.items():
            if name not in _OPTION_FIELDS:
                raise TypeError(f"unknown option: {name}")
            if name == "time_re" and isinstance(value, str):
                value = re.compile(value)
            elif name == "duration" and not isinstance(value, timedelta):
                value = timedelta(seconds=value)
            setattr(opts, name, value)
        logger.debug("TimeFile: with options %r", opts)
        self.options = opts
        self.file = file
        self._searcher = TimeSearcher(file, opts)

    @property
    def offset(self) -> int:
        return self._searcher.offset

    @property
    def from_time(self) -> datetime:
        return self._searcher.from_time

    @from_time.setter
    def from_time(self, value: datetime) -> None:
        self._searcher.from_time = value

    def find_position(self) -> None:
        """Search for the first line of the configured time span."""
        self._searcher.find_position()

    def copy_to(self, out: BinaryIO) -> int:
        """Copy from the found position to ``out``; return the bytes written."""
        logger.debug("[copy_to]: copy file from offset=%d", self._searcher.offset)
        try:
            return self._searcher.copy_to(out)
        except OSError as exc:
            logger.debug("[copy_to]: copy failed: %s", exc)
            raise

    def reader(self) -> BinaryIO:
        """Return the file positioned at the found offset."""
        return self._searcher.reader()


def options_from_config(log_type: str, config_path: str | os.PathLike[str] | None) -> dict[str, Any]:
    """Return the option overrides a configured log type sets."""
    lt = load_config(config_path).get_log_type_options(log_type)
    overrides: dict[str, Any] = {}
    if lt.buf_size:
        overrides["buf_size"] = lt.buf_size
    if lt.steps_limit:
        overrides["steps_limit"] = lt.steps_limit
    if lt.time_re_str:
        try:
            overrides["time_re"] = compiled_regex(lt.time_re_str)
        except re.error as exc:
            raise ConfigError(f"invalid time regex {lt.time_re_str!r}: {exc}") from exc
    if lt.time_layout:
        overrides["time_layout"] = lt.time_layout
    return overrides


def apply_config(
    log_type: str, config_path: str | os.PathLike[str] | None, options: Options
) -> None:
    """Apply a configured log type to ``options`` in place."""
    load_config(config_path).get_log_type_options(log_type).apply_to_options(options)