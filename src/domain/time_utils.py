"""
Time Utilities Module

Normalizes raw time-of-day and duration cell values into typed values.
"""

import math
import re
from datetime import datetime, time, timedelta
from typing import Optional

MINUTES_PER_DAY = 24 * 60

# Pattern to clean time values with asterisks
TIME_CLEAN_PATTERN = re.compile(r'\*')

TIME_FORMATS = ['%H:%M:%S', '%H:%M', '%I:%M %p', '%I:%M:%S %p']


def parse_time(time_str: str) -> time:
    """Parse a configured time string (HH:MM) to a time object."""
    try:
        return datetime.strptime(time_str.strip(), '%H:%M').time()
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid time setting: {time_str!r} (expected HH:MM)")


def _time_from_minutes(total_minutes: int) -> time:
    if not 0 <= total_minutes < MINUTES_PER_DAY:
        raise ValueError(f"Time out of range: {total_minutes} minutes")
    return time(total_minutes // 60, total_minutes % 60)


def _time_from_number(value: float) -> time:
    """
    Numeric cells are either Excel day fractions (< 1) or decimal hours.
    """
    if value < 0:
        raise ValueError(f"Negative time value: {value}")
    if value < 1:
        return _time_from_minutes(round(value * MINUTES_PER_DAY))
    return _time_from_minutes(round(value * 60))


def parse_time_of_day(value) -> Optional[time]:
    """
    Normalize a raw check-in/check-out value.

    Args:
        value: time, datetime, string, Excel fraction or decimal hours

    Returns:
        time object, or None when the cell is empty

    Raises:
        ValueError: If the value is present but cannot be read as a time
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid time value: {value!r}")
    if isinstance(value, (int, float)):
        return _time_from_number(float(value))

    str_val = TIME_CLEAN_PATTERN.sub('', str(value)).strip()
    if not str_val or str_val == '-':
        return None

    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(str_val, fmt).time()
        except ValueError:
            continue

    try:
        number = float(str_val)
    except ValueError:
        raise ValueError(f"Unrecognized time format: {value!r}")
    return _time_from_number(number)


def parse_duration_minutes(value) -> Optional[float]:
    """
    Normalize a raw duration value to minutes.

    Numbers are minutes. Strings are H:MM[:SS] or plain minutes.
    time/timedelta values (as returned by spreadsheet readers for
    duration-formatted cells) are converted directly.

    Raises:
        ValueError: If the value is present but negative or unreadable
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration value: {value!r}")
    if isinstance(value, timedelta):
        minutes = value.total_seconds() / 60
    elif isinstance(value, time):
        minutes = value.hour * 60 + value.minute + value.second / 60
    elif isinstance(value, (int, float)):
        minutes = float(value)
    else:
        str_val = str(value).strip()
        if not str_val or str_val == '-':
            return None
        if ':' in str_val:
            parts = str_val.split(':')
            if len(parts) > 3 or not all(p.strip().isdigit() for p in parts):
                raise ValueError(f"Unrecognized duration format: {value!r}")
            hours, mins, secs = (int(p) for p in parts + ['0'] * (3 - len(parts)))
            minutes = hours * 60 + mins + secs / 60
        else:
            try:
                minutes = float(str_val)
            except ValueError:
                raise ValueError(f"Unrecognized duration format: {value!r}")

    if minutes < 0 or not math.isfinite(minutes):
        raise ValueError(f"Invalid duration: {value!r}")
    return minutes


def minutes_between(start: time, end: time) -> float:
    """Minutes from start to end, wrapping past midnight."""
    start_min = start.hour * 60 + start.minute + start.second / 60
    end_min = end.hour * 60 + end.minute + end.second / 60
    span = end_min - start_min
    if span < 0:
        span += MINUTES_PER_DAY
    return max(0.0, min(span, float(MINUTES_PER_DAY)))


def add_minutes(value: time, minutes: float) -> time:
    """Shift a time of day, clamped to the same day."""
    total = value.hour * 60 + value.minute + minutes
    total = max(0, min(total, MINUTES_PER_DAY - 1))
    return time(int(total) // 60, int(total) % 60)
