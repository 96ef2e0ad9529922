"""Parsing and formatting of duration strings such as "1h30m" or "250ms"."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

_NANOSECOND = 1
_MICROSECOND = 1_000 * _NANOSECOND
_MILLISECOND = 1_000 * _MICROSECOND
_SECOND = 1_000 * _MILLISECOND
_MINUTE = 60 * _SECOND
_HOUR = 60 * _MINUTE

_UNITS = {
    "ns": _NANOSECOND,
    "us": _MICROSECOND,
    "\u00b5s": _MICROSECOND,
    "\u03bcs": _MICROSECOND,
    "ms": _MILLISECOND,
    "s": _SECOND,
    "m": _MINUTE,
    "h": _HOUR,
}

_MAX_NANOSECONDS = (1 << 63) - 1

_COMPONENT = re.compile(r"(\d*)(\.\d*)?([^\d.]+)")


def _invalid(text: str) -> ValueError:
    return ValueError(f'time: invalid duration "{text}"')


def parse_duration(text: str) -> float:
    """Parse a duration string and return its length in seconds.

    A duration is an optionally signed sequence of decimal numbers, each with
    an optional fraction and a unit suffix: "300ms", "-1.5h" or "2h45m".
    Valid units are "ns", "us" (or "µs"), "ms", "s", "m" and "h".
    """
    original = text
    negative = False
    if text[:1] in ("-", "+"):
        negative = text[0] == "-"
        text = text[1:]
    if text == "0":
        return 0.0
    if not text:
        raise _invalid(original)

    total = 0
    position = 0
    while position < len(text):
        match = _COMPONENT.match(text, position)
        if match is None:
            raise _invalid(original)
        whole, fraction, unit = match.groups()
        fraction = fraction or ""
        if not whole and len(fraction) <= 1:
            raise _invalid(original)
        if unit not in _UNITS:
            raise ValueError(f'time: unknown unit "{unit}" in duration "{original}"')
        try:
            value = Decimal((whole or "0") + fraction)
        except InvalidOperation as exc:
            raise _invalid(original) from exc
        total += int(value * _UNITS[unit])
        if total > _MAX_NANOSECONDS:
            raise _invalid(original)
        position = match.end()

    if negative:
        total = -total
    return total / _SECOND


def _split_fraction(value: int, precision: int) -> tuple[int, str]:
    scale = 10**precision
    digits = str(value % scale).rjust(precision, "0").rstrip("0")
    return value // scale, f".{digits}" if digits else ""


def format_duration(seconds: float) -> str:
    """Format a length in seconds the way durations are written, e.g. "1h2m3.5s"."""
    nanoseconds = round(seconds * _SECOND)
    if nanoseconds == 0:
        return "0s"
    sign = "-" if nanoseconds < 0 else ""
    remaining = abs(nanoseconds)

    if remaining < _SECOND:
        if remaining < _MICROSECOND:
            return f"{sign}{remaining}ns"
        if remaining < _MILLISECOND:
            whole, fraction = _split_fraction(remaining, 3)
            return f"{sign}{whole}{fraction}\u00b5s"
        whole, fraction = _split_fraction(remaining, 6)
        return f"{sign}{whole}{fraction}ms"

    total_seconds, fraction = _split_fraction(remaining, 9)
    secs = total_seconds % 60
    total_minutes = total_seconds // 60
    parts = f"{secs}{fraction}s"
    if total_minutes > 0:
        minutes = total_minutes % 60
        hours = total_minutes // 60
        parts = f"{minutes}m{parts}"
        if hours > 0:
            parts = f"{hours}h{parts}"
    return sign + parts