# tripdesk host-side assembly
# Display state, calendar/dashboard builders and the alert poller.

from .dashboard import (
    CalendarStats,
    CalendarView,
    DashboardSummary,
    FlightCountdown,
    build_calendar,
    build_dashboard,
    calendar_from_events,
    day_markers,
    flight_countdowns,
    upcoming_itinerary,
)
from .poller import AlertPoller
from .state import DisplayState

__all__ = [
    "AlertPoller",
    "CalendarStats",
    "CalendarView",
    "DashboardSummary",
    "DisplayState",
    "FlightCountdown",
    "build_calendar",
    "build_dashboard",
    "calendar_from_events",
    "day_markers",
    "flight_countdowns",
    "upcoming_itinerary",
]
