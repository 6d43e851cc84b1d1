# tripdesk calendar engine
# Normalizer -> Windower -> Aggregator for the calendar grid; Alert Engine for
# the dashboard advisories. All pure and synchronous.

from .aggregator import (
    ALL_EVENTS,
    EventFilter,
    SpanSegment,
    events_in_window,
    events_on_date,
    hour_slots,
    preview,
    span_segments,
)
from .alerts import AlertConfig, AlertEngine, create_alert_engine, evaluate
from .normalizer import normalize
from .windower import (
    DEFAULT_WEEK_START,
    MONDAY,
    SUNDAY,
    MonthGrid,
    month_grid,
    shift,
    start_of_week,
    weekday_from_name,
    window,
    year_windows,
)

__all__ = [
    "ALL_EVENTS",
    "AlertConfig",
    "AlertEngine",
    "DEFAULT_WEEK_START",
    "EventFilter",
    "MONDAY",
    "MonthGrid",
    "SUNDAY",
    "SpanSegment",
    "create_alert_engine",
    "evaluate",
    "events_in_window",
    "events_on_date",
    "hour_slots",
    "month_grid",
    "normalize",
    "preview",
    "shift",
    "span_segments",
    "start_of_week",
    "weekday_from_name",
    "window",
    "year_windows",
]
