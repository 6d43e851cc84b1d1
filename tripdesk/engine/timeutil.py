"""Date and time-of-day helpers for the calendar engine."""

from datetime import date, datetime, time, timedelta
from typing import Any, Tuple
import calendar
import re

from ..errors import TimeParseError


_TIME_OF_DAY = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def parse_time_of_day(value: Any) -> time:
    """
    Parse an "HH:MM" (or "HH:MM:SS") string.

    Raises:
        TimeParseError: If the value is missing or not a valid time of day
    """
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        raise TimeParseError(value)
    match = _TIME_OF_DAY.match(value.strip())
    if not match:
        raise TimeParseError(value)
    hour, minute = int(match.group(1)), int(match.group(2))
    second = int(match.group(3) or 0)
    if hour > 23 or minute > 59 or second > 59:
        raise TimeParseError(value)
    return time(hour, minute, second)


def combine(day: date, time_of_day: Any) -> datetime:
    """Combine a calendar date and an "HH:MM" string into a naive datetime."""
    return datetime.combine(day, parse_time_of_day(time_of_day))


def format_time_of_day(value: datetime) -> str:
    return value.strftime("%H:%M")


def minutes_between(start: datetime, end: datetime) -> float:
    """Signed number of minutes from ``start`` to ``end``."""
    return (end - start).total_seconds() / 60


def split_minutes(total_minutes: float) -> Tuple[int, int]:
    """Split a minute count into whole (hours, minutes)."""
    whole = int(total_minutes)
    return whole // 60, whole % 60


def format_countdown(target: datetime, now: datetime) -> str:
    """
    Human countdown from ``now`` to ``target``.

    Examples: "1d 3h 05m", "2h 05m", "45m", "departed".
    """
    remaining = minutes_between(now, target)
    if remaining <= 0:
        return "departed"
    whole = int(remaining)
    days, rest = divmod(whole, 24 * 60)
    hours, minutes = divmod(rest, 60)
    if days:
        return f"{days}d {hours}h {minutes:02d}m"
    if hours:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m"


def add_months(day: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


def add_years(day: date, years: int) -> date:
    return add_months(day, years * 12)


def days_in_range(start: date, end: date):
    """Yield every date from ``start`` to ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
