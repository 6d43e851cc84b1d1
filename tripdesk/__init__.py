"""
tripdesk - unified travel calendar and scheduling alerts.

Merges itinerary entries, appointments and due-dated tasks into one event
stream, lays it out over day/week/month/year calendars, and derives
pre-departure and tight-transition advisories.
"""

from .core import AlertPoller, DisplayState, build_calendar, build_dashboard
from .engine import (
    AlertConfig,
    AlertEngine,
    EventFilter,
    evaluate,
    events_in_window,
    events_on_date,
    normalize,
    window,
    year_windows,
)
from .errors import ConfigError, SourceError, TimeParseError, TripDeskError
from .models import (
    Alert,
    AlertKind,
    CalendarEvent,
    Confirmation,
    EventRef,
    Granularity,
    Severity,
    SourceKind,
)

__version__ = "1.0.0"

__all__ = [
    "Alert",
    "AlertConfig",
    "AlertEngine",
    "AlertKind",
    "AlertPoller",
    "CalendarEvent",
    "ConfigError",
    "Confirmation",
    "DisplayState",
    "EventFilter",
    "EventRef",
    "Granularity",
    "Severity",
    "SourceError",
    "SourceKind",
    "TimeParseError",
    "TripDeskError",
    "build_calendar",
    "build_dashboard",
    "evaluate",
    "events_in_window",
    "events_on_date",
    "normalize",
    "window",
    "year_windows",
]
