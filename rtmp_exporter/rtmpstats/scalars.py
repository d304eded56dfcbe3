"""Decoders for the scalar values found in nginx_rtmp_module stats.

The module writes a few values in formats that need more than ``int()``:

* ``built`` uses a C-style date (``Jul 11 2020 22:03:37``, day space-padded).
* ``uptime``, ``time`` and ``timestamp`` are plain integers in milliseconds.
* ``active`` and ``publishing`` are empty tags whose presence means true.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any

from rtmp_exporter.rtmpstats.errors import ScalarParseError

_MONTHS = {
    name: index
    for index, name in enumerate(
        ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
         "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"),
        start=1,
    )
}

# Month abbreviation, day (optionally space-padded), year, HH:MM:SS
_TIMESTAMP_RE = re.compile(
    r"([A-Z][a-z]{2}) {1,2}([0-9]{1,2}) ([0-9]{4}) ([0-9]{2}):([0-9]{2}):([0-9]{2})"
)

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def parse_timestamp(text: str) -> datetime:
    """Parse ``Jan _2 2006 15:04:05`` style text into an aware UTC datetime."""
    match = _TIMESTAMP_RE.fullmatch(text)
    if match is None or match.group(1) not in _MONTHS:
        raise ScalarParseError(f"invalid timestamp {text!r}", value=text)
    month, day, year, hour, minute, second = match.groups()
    try:
        return datetime(
            int(year), _MONTHS[month], int(day),
            int(hour), int(minute), int(second),
            tzinfo=timezone.utc,
        )
    except ValueError as exc:
        raise ScalarParseError(f"invalid timestamp {text!r}: {exc}", value=text) from exc


def parse_int(text: str) -> int:
    """Parse an integer, treating empty text as zero."""
    stripped = text.strip()
    if not stripped:
        return 0
    if not _INT_RE.fullmatch(stripped):
        raise ScalarParseError(f"invalid integer {text!r}", value=text)
    return int(stripped)


def parse_float(text: str) -> float:
    """Parse a float, treating empty text as zero."""
    stripped = text.strip()
    if not stripped:
        return 0.0
    if not _FLOAT_RE.fullmatch(stripped):
        raise ScalarParseError(f"invalid float {text!r}", value=text)
    return float(stripped)


def parse_duration(text: str) -> timedelta:
    """Parse an integer number of milliseconds into a timedelta."""
    try:
        milliseconds = parse_int(text)
    except ScalarParseError as exc:
        raise ScalarParseError(f"invalid duration {text!r}", value=text) from exc
    return timedelta(milliseconds=milliseconds)


def parse_str(text: str) -> str:
    return text


def is_present(element: Any) -> bool:
    """Presence boolean: true iff the tag exists, whatever its content."""
    return element is not None


def truncate_to_seconds(value: timedelta) -> timedelta:
    """Drop the sub-second part of a duration (floor to whole seconds)."""
    return timedelta(seconds=value // timedelta(seconds=1))
