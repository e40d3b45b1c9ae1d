"""
Time-of-day helpers.

Schedule times are stored as integer minutes since midnight (0-1439) and
exchanged with clients as 24-hour "HH:MM" strings.
"""

import re

from carpool.errors import InvalidTimeFormat, OutOfRange
from carpool.type_defs import Minutes

MINUTES_PER_DAY = 24 * 60

TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$"

_TIME_RE = re.compile(TIME_PATTERN)


def is_valid_time_format(value: object) -> bool:
    # fullmatch: "$" alone would accept a trailing newline
    return isinstance(value, str) and _TIME_RE.fullmatch(value) is not None


def parse_time_of_day(value: str) -> Minutes:
    """
    Convert "H:MM" / "HH:MM" to minutes since midnight.

    >>> parse_time_of_day("08:30")
    510
    """
    if not isinstance(value, str):
        raise InvalidTimeFormat(value)
    match = _TIME_RE.fullmatch(value)
    if match is None:
        raise InvalidTimeFormat(value)
    hours, minutes = int(match.group(1)), int(match.group(2))
    return hours * 60 + minutes


def format_time_of_day(minutes: Minutes) -> str:
    """
    Convert minutes since midnight to zero-padded "HH:MM".

    >>> format_time_of_day(1439)
    '23:59'
    """
    if isinstance(minutes, bool) or not isinstance(minutes, int):
        raise OutOfRange(minutes)
    if minutes < 0 or minutes >= MINUTES_PER_DAY:
        raise OutOfRange(minutes)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
