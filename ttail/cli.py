"""Command line entry point: print the last span of time from log files."""

from __future__ import annotations

import argparse
import logging
import os
import re
import sys
from datetime import timedelta

from ttail.config import DEFAULT_CONFIG_FILE, ConfigError
from ttail.tfile import TimeFile, options_from_config

logger = logging.getLogger("ttail")

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def _parse_duration(text: str) -> timedelta:
    """Parse durations such as ``10s``, ``1h30m`` or ``-2.5m``."""
    body = text
    sign = 1
    if body[:1] in ("+", "-"):
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    if body == "0":
        return timedelta()
    if not body:
        raise argparse.ArgumentTypeError(f"invalid duration {text!r}")
    seconds = 0.0
    pos = 0
    while pos < len(body):
        match = _DURATION_PART.match(body, pos)
        if match is None:
            raise argparse.ArgumentTypeError(f"invalid duration {text!r}")
        seconds += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()
    return timedelta(seconds=sign * seconds)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ttail", usage="%(prog)s [options] file [file ...]"
    )
    parser.add_argument(
        "-n", dest="duration", type=_parse_duration, default=timedelta(seconds=10),
        help="offset in time to start copy (default 10s)",
    )
    parser.add_argument(
        "-l", dest="from_last_line", action="store_true",
        help="tail last N seconds from time in the last line (default from now)",
    )
    parser.add_argument("-t", dest="log_type", default="tskv", help="use a type of log")
    parser.add_argument("-d", dest="debug", action="store_true", help="set debug mode")
    parser.add_argument(
        "-c", dest="config", default=DEFAULT_CONFIG_FILE, help="set config path"
    )
    parser.add_argument("files", nargs="*", metavar="file")
    return parser


def _process(path: str, args: argparse.Namespace, out) -> bool:
    """Copy the recent part of one file; return False on a fatal error."""
    logger.debug("[main]: process file %s", path)
    try:
        info = os.stat(path)
    except OSError as exc:
        logger.error("[main]: file stat %s: %s", path, exc)
        return True
    if os.path.isdir(path) or (info.st_mode & 0o170000) == 0o040000:
        logger.error("[main]: skip directory! %s", path)
        return True
    try:
        fh = open(path, "rb")
    except OSError as exc:
        logger.error("[main]: skip %s: %s", path, exc)
        return True

    with fh:
        overrides = {"time_from_last_line": args.from_last_line, "duration": args.duration}
        if args.log_type:
            try:
                overrides.update(options_from_config(args.log_type, args.config))
            except ConfigError as exc:
                logger.error("Failed to get ttail options from config: %s", exc)
                return False
        tfile = TimeFile(fh, **overrides)
        try:
            tfile.find_position()
        except OSError as exc:
            logger.error("[main]: error: %s", exc)
            return False
        try:
            tfile.copy_to(out)
        except OSError as exc:
            logger.debug("[main]: copy failed: %s", exc)
        out.flush()
    return True


def main(argv: list[str] | None = None) -> int:
    """Run the command; return the process exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.files:
        parser.print_help(sys.stderr)
        return 1

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if args.debug else logging.ERROR)
    try:
        sys.stdout.flush()
        out = sys.stdout.buffer
        for path in args.files:
            if not _process(path, args, out):
                return 1
        return 0
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)


if __name__ == "__main__":
    sys.exit(main())