"""
Event Aggregator

Buckets normalized events into calendar day cells.

Within a day, events sort by their "HH:MM" anchor compared as strings, with
untimed events treated as the empty string so they surface first. The sort
is stable, so ties keep the order produced by the normalizer.
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import logging

from ..errors import TimeParseError
from ..models import CalendarEvent, SourceKind
from .timeutil import parse_time_of_day


logger = logging.getLogger(__name__)

# Row that untimed events occupy in a day view
DEFAULT_SLOT_HOUR = 9


@dataclass(frozen=True)
class EventFilter:
    """Host-selected filters; None means "all"."""
    kind: Optional[SourceKind] = None
    assignee: Optional[str] = None

    def matches(self, event: CalendarEvent) -> bool:
        if self.kind is not None and event.source_kind != self.kind:
            return False
        if self.assignee is not None and event.assignee != self.assignee:
            return False
        return True

    def apply(self, events: Iterable[CalendarEvent]) -> List[CalendarEvent]:
        return [e for e in events if self.matches(e)]


ALL_EVENTS = EventFilter()


@dataclass(frozen=True)
class SpanSegment:
    """
    One row-slice of a multi-day event bar on a 7-column grid.

    ``continues_before`` / ``continues_after`` mark bars clipped by the edge
    of the visible grid.
    """
    event: CalendarEvent
    row: int
    start_col: int
    end_col: int
    continues_before: bool = False
    continues_after: bool = False

    @property
    def width(self) -> int:
        return self.end_col - self.start_col + 1


def sort_key(event: CalendarEvent) -> str:
    return event.time_of_day or ""


def events_on_date(day: date, events: Iterable[CalendarEvent]) -> List[CalendarEvent]:
    """All events occupying ``day``, untimed first, then by time of day."""
    return sorted((e for e in events if e.occurs_on(day)), key=sort_key)


def events_in_window(
    days: Sequence[date],
    events: Iterable[CalendarEvent],
    event_filter: Optional[EventFilter] = None
) -> Dict[date, List[CalendarEvent]]:
    """
    Map every day of a window to its ordered event list.

    The filter is applied before bucketing so per-day counts only reflect the
    active selection. Days repeated in the window (year view) map once.
    """
    selected = (event_filter or ALL_EVENTS).apply(events)
    buckets: Dict[date, List[CalendarEvent]] = {}
    for day in days:
        if day not in buckets:
            buckets[day] = events_on_date(day, selected)
    logger.debug(f"Bucketed {len(selected)} events over {len(buckets)} days")
    return buckets


def span_segments(days: Sequence[date], events: Iterable[CalendarEvent]) -> List[SpanSegment]:
    """
    Lay multi-day events out as bars over a grid of whole weeks.

    Each event yields one segment per week row it crosses, clipped to the
    visible days. Single-day events and events entirely outside the grid
    yield nothing.
    """
    if not days:
        return []
    first, last = days[0], days[-1]
    index = {day: i for i, day in reversed(list(enumerate(days)))}

    segments = []
    seen = set()
    for event in events:
        if not event.is_multi_day or event.ref in seen:
            continue
        seen.add(event.ref)
        if event.end_date < first or event.date > last:
            continue

        start = max(event.date, first)
        end = min(event.end_date, last)
        start_index, end_index = index.get(start), index.get(end)
        if start_index is None or end_index is None:
            continue

        start_row, end_row = start_index // 7, end_index // 7
        for row in range(start_row, end_row + 1):
            segments.append(SpanSegment(
                event=event,
                row=row,
                start_col=start_index % 7 if row == start_row else 0,
                end_col=end_index % 7 if row == end_row else 6,
                continues_before=(row == start_row and event.date < first) or row > start_row,
                continues_after=(row == end_row and event.end_date > last) or row < end_row,
            ))
    return segments


def preview(events: Sequence[CalendarEvent], limit: int) -> Tuple[List[CalendarEvent], int]:
    """Split a day's list into the first ``limit`` events and a hidden count."""
    if limit < 0:
        limit = 0
    shown = list(events[:limit])
    return shown, len(events) - len(shown)


def hour_slots(events: Iterable[CalendarEvent], default_hour: int = DEFAULT_SLOT_HOUR) -> Dict[int, List[CalendarEvent]]:
    """
    Group a day's events into the 24 hour rows of a day view.

    Untimed events, and events whose time does not parse, sit in the
    ``default_hour`` row. Every hour is present; rows keep ``sort_key`` order.
    """
    slots: Dict[int, List[CalendarEvent]] = {hour: [] for hour in range(24)}
    for event in sorted(events, key=sort_key):
        hour = default_hour
        if event.time_of_day:
            try:
                hour = parse_time_of_day(event.time_of_day).hour
            except TimeParseError:
                logger.debug(f"Slotting event {event.id!r} at {default_hour:02d}:00; unreadable time")
        slots[hour].append(event)
    return slots
