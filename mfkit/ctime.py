"""Thin, thread-safe helpers over C-style calendar time functions."""

from __future__ import annotations

import calendar
import time

DEFAULT_STRFTIME_FORMAT = "%c"

# Formatted results longer than this are reported as an empty string.
MAX_STRFTIME_LENGTH = 25


def time_now() -> int:
    """Return the current time as whole seconds since the epoch."""
    return int(time.time())


def difftime(time_end: float, time_beg: float) -> float:
    """Return ``time_end - time_beg`` in seconds."""
    return float(time_end - time_beg)


def mktime(src: time.struct_time) -> int:
    """Interpret ``src`` as local time and return the matching timestamp."""
    return int(time.mktime(src))


def localtime_reversed(src: time.struct_time) -> int:
    """Interpret ``src`` as local time and return the matching timestamp."""
    return mktime(src)


def localtime(src: float | None = None) -> time.struct_time:
    """Break a timestamp (default: now) down into local time."""
    return time.localtime(time_now() if src is None else src)


def gmtime(src: float | None = None) -> time.struct_time:
    """Break a timestamp (default: now) down into UTC time."""
    return time.gmtime(time_now() if src is None else src)


def gmtime_reversed(src: time.struct_time) -> int:
    """Interpret ``src`` as UTC time and return the matching timestamp."""
    return calendar.timegm(src)


def strftime(src: time.struct_time, fmt: str = DEFAULT_STRFTIME_FORMAT) -> str:
    """Format ``src``; return an empty string if the result is too long."""
    result = time.strftime(fmt, src)
    return result if len(result) <= MAX_STRFTIME_LENGTH else ""


def strptime(src: str, fmt: str = DEFAULT_STRFTIME_FORMAT) -> time.struct_time:
    """Parse ``src`` with ``fmt``; raise ValueError if it does not match."""
    return time.strptime(src, fmt)