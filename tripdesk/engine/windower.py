"""
Calendar Windower

Turns a (reference date, granularity) pair into the ordered day cells a
calendar shows. No event data is involved.

Month grids always cover whole weeks: from the week start on or before the
1st through the week end on or after the last day, so every grid is a whole
number of 7-day rows and includes spill-over days from adjacent months.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Union
import calendar

from ..models import Granularity
from .timeutil import add_months, add_years, days_in_range


# Python weekday numbers (Monday == 0)
MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY = range(7)

WEEKDAY_NAMES = {
    "monday": MONDAY,
    "tuesday": TUESDAY,
    "wednesday": WEDNESDAY,
    "thursday": THURSDAY,
    "friday": FRIDAY,
    "saturday": SATURDAY,
    "sunday": SUNDAY,
}

DEFAULT_WEEK_START = SUNDAY


def weekday_from_name(value: Union[str, int]) -> int:
    """Resolve a weekday name ("sunday", "Mon") or number to a weekday int."""
    if isinstance(value, int) and not isinstance(value, bool):
        if 0 <= value <= 6:
            return value
        raise ValueError(f"Weekday number out of range: {value}")
    text = str(value).strip().lower()
    for name, number in WEEKDAY_NAMES.items():
        if len(text) >= 3 and name.startswith(text):
            return number
    raise ValueError(f"Unknown weekday: {value!r}")


def start_of_week(day: date, week_start: int = DEFAULT_WEEK_START) -> date:
    return day - timedelta(days=(day.weekday() - week_start) % 7)


def end_of_week(day: date, week_start: int = DEFAULT_WEEK_START) -> date:
    return start_of_week(day, week_start) + timedelta(days=6)


@dataclass(frozen=True)
class MonthGrid:
    """A padded month: whole weeks covering one calendar month."""
    year: int
    month: int
    days: List[date]

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])

    @property
    def weeks(self) -> List[List[date]]:
        """Days grouped into 7-day rows."""
        return [self.days[i:i + 7] for i in range(0, len(self.days), 7)]

    def in_month(self, day: date) -> bool:
        """True for days of the grid's own month (not spill-over days)."""
        return day.year == self.year and day.month == self.month


# =============================================================================
# WINDOWS
# =============================================================================

def day_window(reference: date) -> List[date]:
    return [reference]


def week_window(reference: date, week_start: int = DEFAULT_WEEK_START) -> List[date]:
    start = start_of_week(reference, week_start)
    return [start + timedelta(days=i) for i in range(7)]


def month_grid(reference: date, week_start: int = DEFAULT_WEEK_START) -> MonthGrid:
    """Padded grid for the month containing ``reference``."""
    first = reference.replace(day=1)
    last = first.replace(day=calendar.monthrange(first.year, first.month)[1])
    days = list(days_in_range(start_of_week(first, week_start), end_of_week(last, week_start)))
    return MonthGrid(year=first.year, month=first.month, days=days)


def month_window(reference: date, week_start: int = DEFAULT_WEEK_START) -> List[date]:
    return month_grid(reference, week_start).days


def year_windows(reference: date, week_start: int = DEFAULT_WEEK_START) -> List[MonthGrid]:
    """Twelve independent month grids for the reference year."""
    return [month_grid(date(reference.year, month, 1), week_start) for month in range(1, 13)]


def window(
    reference: date,
    granularity: Granularity,
    week_start: int = DEFAULT_WEEK_START
) -> List[date]:
    """
    Ordered day cells for a calendar view.

    For YEAR the twelve month grids are concatenated in month order. Grids are
    independent, so a day shared by two adjacent month grids appears twice.
    """
    granularity = Granularity(granularity)
    if granularity == Granularity.DAY:
        return day_window(reference)
    if granularity == Granularity.WEEK:
        return week_window(reference, week_start)
    if granularity == Granularity.MONTH:
        return month_window(reference, week_start)
    days: List[date] = []
    for grid in year_windows(reference, week_start):
        days.extend(grid.days)
    return days


def shift(reference: date, granularity: Granularity, steps: int = 1) -> date:
    """Move the reference date by ``steps`` units of the granularity."""
    granularity = Granularity(granularity)
    if granularity == Granularity.DAY:
        return reference + timedelta(days=steps)
    if granularity == Granularity.WEEK:
        return reference + timedelta(weeks=steps)
    if granularity == Granularity.MONTH:
        return add_months(reference, steps)
    return add_years(reference, steps)
