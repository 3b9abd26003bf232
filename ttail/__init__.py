"""Tail a log file by time span, using binary search over line timestamps."""

__version__ = "0.1.0"