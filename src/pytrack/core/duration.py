"""
Human-entered duration parsing.

Comment forms take time spent as free text instead of a float. Accepted forms:

    7        hours
    7.5      hours with decimals
    7h       hours
    30m      minutes (fractions of an hour)
    2h 30m   hours and minutes
    2:30     hours and minutes

Anything else falls back to the legacy numeric format, which reads the leading
number and yields ``0.0`` when there is none.
"""

import re

_HOURS_AND_MINUTES = re.compile(r"(\d+)h[ ]*(\d+)m", re.IGNORECASE | re.ASCII)
_CLOCK = re.compile(r"(\d+):(\d+)", re.ASCII)
_MINUTES = re.compile(r"(\d+)m", re.IGNORECASE | re.ASCII)
_HOURS = re.compile(r"(\d+)h", re.IGNORECASE | re.ASCII)
_NUMERIC_PREFIX = re.compile(r"\s*([+-]?(?:\d[\d_]*)?(?:\.\d+)?(?:[eE][+-]?\d+)?)", re.ASCII)


def _leading_float(text: str) -> float:
    """Read the leading number of ``text``; ``0.0`` when there is none."""
    match = _NUMERIC_PREFIX.match(text)
    candidate = match.group(1).replace("_", "") if match else ""
    try:
        return float(candidate)
    except ValueError:
        return 0.0


def parse_duration(value: str | float | int | None) -> float | None:
    """
    Convert a duration string into hours.

    Never raises. Blank input clears the value (``None``); unparsable input
    degrades to ``0.0``.

    Args:
        value: Text typed by the user, or an already numeric value

    Returns:
        Hours as a float, or None for blank input
    """
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)

    text = str(value)
    if not text.strip():
        return None

    if match := _HOURS_AND_MINUTES.search(text):
        return float(match.group(1)) + float(match.group(2)) / 60
    if match := _CLOCK.search(text):
        return float(match.group(1)) + float(match.group(2)) / 60.0
    if match := _MINUTES.search(text):
        return float(match.group(1)) / 60.0
    if match := _HOURS.search(text):
        return float(match.group(1))
    return _leading_float(text)
