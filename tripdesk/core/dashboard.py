"""
Dashboard and Calendar Assembly for tripdesk

Runs the engine end to end for the two consumers of the core:

Calendar page:
- normalize -> filter -> window -> bucket, plus month grids, multi-day span
  bars, "same month" highlighting and per-kind summary counts

Dashboard:
1. Today's tasks / meetings / itinerary counts
2. Upcoming travel (next 7 days, first 3)
3. Flight countdowns
4. Mini-calendar markers for the current month
5. Current alerts

Everything here is recomputed from scratch on each call.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence
import calendar
import logging

from ..engine.aggregator import SpanSegment, events_in_window, span_segments
from ..engine.alerts import AlertConfig, AlertEngine
from ..engine.normalizer import normalize
from ..engine.timeutil import combine, format_countdown, minutes_between
from ..engine.windower import DEFAULT_WEEK_START, MonthGrid, month_grid, window, year_windows
from ..errors import TimeParseError
from ..models import Alert, CalendarEvent, Confirmation, Granularity, SourceKind
from .state import DisplayState


logger = logging.getLogger(__name__)


# =============================================================================
# CALENDAR VIEW
# =============================================================================

@dataclass(frozen=True)
class CalendarStats:
    """Summary counts shown beside the calendar, over the filtered events."""
    itinerary: int = 0
    appointments: int = 0
    tasks: int = 0
    pending: int = 0

    @classmethod
    def from_events(cls, events: Iterable[CalendarEvent]) -> "CalendarStats":
        events = list(events)
        return cls(
            itinerary=len(_of_kind(events, SourceKind.ITINERARY)),
            appointments=len(_of_kind(events, SourceKind.APPOINTMENT)),
            tasks=len(_of_kind(events, SourceKind.TASK)),
            pending=sum(1 for e in events if e.confirmed == Confirmation.PENDING),
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "itinerary": self.itinerary,
            "appointments": self.appointments,
            "tasks": self.tasks,
            "pending": self.pending
        }


@dataclass
class CalendarView:
    """Everything a calendar page needs for one display state."""
    state: DisplayState
    days: List[date]
    buckets: Dict[date, List[CalendarEvent]]
    grids: List[MonthGrid] = field(default_factory=list)
    segments: List[SpanSegment] = field(default_factory=list)
    stats: CalendarStats = field(default_factory=CalendarStats)

    def events_for(self, day: date) -> List[CalendarEvent]:
        return self.buckets.get(day, [])

    def in_focus(self, day: date) -> bool:
        """False for spill-over days of a month view."""
        if self.state.granularity == Granularity.MONTH and self.grids:
            return self.grids[0].in_month(day)
        return True

    @property
    def total_events(self) -> int:
        return len({e.ref for events in self.buckets.values() for e in events})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.to_dict(),
            "stats": self.stats.to_dict(),
            "days": [
                {
                    "date": day.isoformat(),
                    "in_focus": self.in_focus(day),
                    "events": [e.to_dict() for e in self.events_for(day)]
                }
                for day in dict.fromkeys(self.days)
            ],
            "segments": [
                {
                    "ref": s.event.ref.to_dict(),
                    "row": s.row,
                    "start_col": s.start_col,
                    "end_col": s.end_col,
                    "continues_before": s.continues_before,
                    "continues_after": s.continues_after
                }
                for s in self.segments
            ]
        }


def calendar_from_events(
    events: Sequence[CalendarEvent],
    state: DisplayState,
    week_start: int = DEFAULT_WEEK_START
) -> CalendarView:
    """Lay already-normalized events out for a display state."""
    granularity = state.granularity
    days = window(state.reference_date, granularity, week_start)
    buckets = events_in_window(days, events, state.event_filter)
    visible = state.event_filter.apply(events)

    grids: List[MonthGrid] = []
    if granularity == Granularity.MONTH:
        grids = [month_grid(state.reference_date, week_start)]
    elif granularity == Granularity.YEAR:
        grids = year_windows(state.reference_date, week_start)

    segments: List[SpanSegment] = []
    if granularity in (Granularity.WEEK, Granularity.MONTH):
        segments = span_segments(days, visible)

    return CalendarView(
        state=state,
        days=days,
        buckets=buckets,
        grids=grids,
        segments=segments,
        stats=CalendarStats.from_events(visible),
    )


def build_calendar(
    itinerary: Optional[Iterable[Any]],
    appointments: Optional[Iterable[Any]],
    tasks: Optional[Iterable[Any]],
    state: DisplayState,
    week_start: int = DEFAULT_WEEK_START
) -> CalendarView:
    """Normalize the three source collections and lay them out."""
    return calendar_from_events(normalize(itinerary, appointments, tasks), state, week_start)


# =============================================================================
# DASHBOARD
# =============================================================================

@dataclass(frozen=True)
class FlightCountdown:
    """Live countdown entry for one flight."""
    event: CalendarEvent
    departure: datetime
    countdown: str
    status: str  # upcoming, imminent, departed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ref": self.event.ref.to_dict(),
            "title": self.event.title,
            "departure": self.departure.isoformat(),
            "countdown": self.countdown,
            "status": self.status
        }


@dataclass
class DashboardSummary:
    """Dashboard snapshot at one instant."""
    generated_at: datetime
    todays_tasks: List[CalendarEvent]
    todays_appointments: List[CalendarEvent]
    todays_itinerary: List[CalendarEvent]
    upcoming_itinerary: List[CalendarEvent]
    countdowns: List[FlightCountdown]
    markers: Dict[date, str]
    alerts: List[Alert]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated_at": self.generated_at.isoformat(),
            "counts": {
                "tasks_today": len(self.todays_tasks),
                "appointments_today": len(self.todays_appointments),
                "itinerary_today": len(self.todays_itinerary)
            },
            "upcoming_itinerary": [e.to_dict() for e in self.upcoming_itinerary],
            "countdowns": [c.to_dict() for c in self.countdowns],
            "markers": {day.isoformat(): marker for day, marker in self.markers.items()},
            "alerts": [a.to_dict() for a in self.alerts]
        }


def _of_kind(events: Iterable[CalendarEvent], kind: SourceKind) -> List[CalendarEvent]:
    return [e for e in events if e.source_kind == kind]


def upcoming_itinerary(
    events: Sequence[CalendarEvent],
    today: date,
    days: int = 7,
    limit: int = 3
) -> List[CalendarEvent]:
    """Itinerary entries starting within [today, today + days], soonest first."""
    horizon = today + timedelta(days=days)
    upcoming = [
        e for e in _of_kind(events, SourceKind.ITINERARY)
        if today <= e.date <= horizon
    ]
    upcoming.sort(key=lambda e: (e.date, e.time_of_day or ""))
    return upcoming[:limit]


def flight_countdowns(
    events: Sequence[CalendarEvent],
    now: datetime,
    engine: Optional[AlertEngine] = None
) -> List[FlightCountdown]:
    """Countdowns for today's and future flights with a known departure time."""
    engine = engine or AlertEngine()
    horizon = engine.config.reminder_horizon_minutes
    countdowns = []
    for event in events:
        if not engine.is_flight(event) or not event.time_of_day or event.date < now.date():
            continue
        try:
            departure = combine(event.date, event.time_of_day)
        except TimeParseError as e:
            logger.warning(f"No countdown for {event.ref}: {e}")
            continue
        if now.tzinfo is not None:
            departure = departure.replace(tzinfo=now.tzinfo)

        remaining = minutes_between(now, departure)
        if remaining <= 0:
            status = "departed"
        elif remaining <= horizon:
            status = "imminent"
        else:
            status = "upcoming"
        countdowns.append(FlightCountdown(
            event=event,
            departure=departure,
            countdown=format_countdown(departure, now),
            status=status,
        ))
    countdowns.sort(key=lambda c: c.departure)
    return countdowns


def day_markers(events: Sequence[CalendarEvent], reference: date) -> Dict[date, str]:
    """
    Mini-calendar markers for every day of the reference month.

    Each day maps to "both", "appointment", "itinerary" or "none", based on
    the start dates of appointments and itinerary entries.
    """
    appointment_days = {e.date for e in _of_kind(events, SourceKind.APPOINTMENT)}
    itinerary_days = {e.date for e in _of_kind(events, SourceKind.ITINERARY)}

    markers = {}
    last = calendar.monthrange(reference.year, reference.month)[1]
    for number in range(1, last + 1):
        day = date(reference.year, reference.month, number)
        has_appointment = day in appointment_days
        has_itinerary = day in itinerary_days
        if has_appointment and has_itinerary:
            markers[day] = "both"
        elif has_appointment:
            markers[day] = "appointment"
        elif has_itinerary:
            markers[day] = "itinerary"
        else:
            markers[day] = "none"
    return markers


def build_dashboard(
    itinerary: Optional[Iterable[Any]],
    appointments: Optional[Iterable[Any]],
    tasks: Optional[Iterable[Any]],
    now: datetime,
    alert_config: Optional[AlertConfig] = None,
    upcoming_days: int = 7,
    upcoming_limit: int = 3
) -> DashboardSummary:
    """
    Build the dashboard snapshot.

    Args:
        itinerary, appointments, tasks: Raw source collections
        now: Injected wall-clock time
        alert_config: Alert engine settings
        upcoming_days: Look-ahead window for upcoming travel
        upcoming_limit: Maximum upcoming entries

    Returns:
        DashboardSummary for ``now``
    """
    events = normalize(itinerary, appointments, tasks)
    engine = AlertEngine(alert_config)
    today = now.date()

    def starting_today(kind: SourceKind) -> List[CalendarEvent]:
        return [e for e in _of_kind(events, kind) if e.date == today]

    return DashboardSummary(
        generated_at=now,
        todays_tasks=starting_today(SourceKind.TASK),
        todays_appointments=starting_today(SourceKind.APPOINTMENT),
        todays_itinerary=starting_today(SourceKind.ITINERARY),
        upcoming_itinerary=upcoming_itinerary(events, today, upcoming_days, upcoming_limit),
        countdowns=flight_countdowns(events, now, engine),
        markers=day_markers(events, today),
        alerts=engine.evaluate(events, now),
    )
