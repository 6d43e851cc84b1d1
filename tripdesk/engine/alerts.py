"""
Alert Engine for tripdesk

Derives time-sensitive advisories from the full normalized event stream and
an injected wall-clock time.

Alert kinds:
- PRE_DEPARTURE_REMINDER: a flight is inside its reminder band
  (international (120, 180] minutes out, domestic (90, 120])
- TIGHT_TRANSITION: less than an hour between two of today's appointments or
  itinerary items

The engine keeps no state between passes. Hosts re-run ``evaluate`` on a
timer; a reminder simply stops appearing once its band is left. An event
whose time cannot be parsed is skipped and the rest of the stream is still
evaluated.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple
import logging

from ..errors import ConfigError, TimeParseError
from ..models import SEVERITY_RANK, Alert, AlertKind, CalendarEvent, Severity, SourceKind
from .timeutil import combine, format_time_of_day, minutes_between, split_minutes


logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class AlertConfig:
    """Configuration for the alert engine."""

    # Reminder bands, (exclusive low, inclusive high) minutes before departure
    international_band: Tuple[int, int] = (120, 180)
    domestic_band: Tuple[int, int] = (90, 120)

    # Title substring marking a flight as international (case-insensitive)
    international_keyword: str = "international"
    flight_subtypes: Tuple[str, ...] = ("Flight",)

    # Transition checks (minutes)
    default_duration_minutes: int = 60
    tight_transition_minutes: int = 60

    # Host polling cadence
    poll_interval_seconds: int = 60

    def validate(self) -> None:
        """Reject inconsistent values."""
        for name in ("international_band", "domestic_band"):
            band = getattr(self, name)
            if len(band) != 2 or band[0] >= band[1] or band[0] < 0:
                raise ConfigError(f"alerts.{name} must be [low, high] with 0 <= low < high, got {list(band)}")
        if not self.international_keyword.strip():
            raise ConfigError("alerts.international_keyword must not be empty")
        if self.default_duration_minutes <= 0:
            raise ConfigError("alerts.default_duration_minutes must be positive")
        if self.tight_transition_minutes <= 0:
            raise ConfigError("alerts.tight_transition_minutes must be positive")
        if self.poll_interval_seconds <= 0:
            raise ConfigError("alerts.poll_interval_seconds must be positive")
        if self.poll_interval_seconds > 300:
            logger.warning(
                f"Polling every {self.poll_interval_seconds}s; reminders may be shown late"
            )

    @property
    def reminder_horizon_minutes(self) -> int:
        """Furthest point before departure at which any reminder can fire."""
        return max(self.international_band[1], self.domestic_band[1])


@dataclass
class _TimedEvent:
    event: CalendarEvent
    start: datetime
    end: datetime


# =============================================================================
# ALERT ENGINE
# =============================================================================

class AlertEngine:
    """
    Stateless advisory generator.

    Does:
    - Remind about flights entering their pre-departure band
    - Flag short gaps between consecutive events today

    Does NOT:
    - Block, reschedule or mutate anything
    - Remember what it emitted on a previous pass
    """

    def __init__(self, config: Optional[AlertConfig] = None):
        self.config = config or AlertConfig()
        self._flight_subtypes = {s.strip().lower() for s in self.config.flight_subtypes}

    # -------------------------------------------------------------------------
    # MAIN INTERFACE
    # -------------------------------------------------------------------------

    def evaluate(self, events: Iterable[CalendarEvent], now: datetime) -> List[Alert]:
        """
        Evaluate the full event stream at ``now``.

        Returns:
            Alerts ordered by severity, then anchor time; reminders precede
            transitions on ties
        """
        events = list(events)
        alerts = self.pre_departure_reminders(events, now)
        alerts.extend(self.tight_transitions(events, now))
        alerts.sort(key=lambda a: (SEVERITY_RANK[a.severity], a.anchor_time))
        logger.debug(f"Evaluated {len(events)} events at {now.isoformat()}: {len(alerts)} alerts")
        return alerts

    def is_flight(self, event: CalendarEvent) -> bool:
        return (event.subtype or "").strip().lower() in self._flight_subtypes

    def is_international(self, event: CalendarEvent) -> bool:
        return self.config.international_keyword.lower() in (event.title or "").lower()

    # -------------------------------------------------------------------------
    # PRE-DEPARTURE REMINDERS
    # -------------------------------------------------------------------------

    def pre_departure_reminders(
        self,
        events: Sequence[CalendarEvent],
        now: datetime
    ) -> List[Alert]:
        alerts = []
        for event in events:
            if not self.is_flight(event) or not event.time_of_day:
                continue
            try:
                departure = self._localize(combine(event.date, event.time_of_day), now)
            except TimeParseError as e:
                logger.warning(f"Skipping reminder for {event.ref}: {e}")
                continue

            remaining = minutes_between(now, departure)
            international = self.is_international(event)
            low, high = self.config.international_band if international else self.config.domestic_band
            if not low < remaining <= high:
                continue

            hours, minutes = split_minutes(remaining)
            scope = "International" if international else "Domestic"
            alerts.append(Alert(
                kind=AlertKind.PRE_DEPARTURE_REMINDER,
                severity=Severity.HIGH,
                message=(
                    f"{scope} flight '{event.title}' departs in {hours}h {minutes:02d}m "
                    f"at {format_time_of_day(departure)}"
                ),
                anchor_time=format_time_of_day(departure),
                related=(event.ref,),
                minutes=int(remaining),
            ))
        return alerts

    # -------------------------------------------------------------------------
    # TIGHT TRANSITIONS
    # -------------------------------------------------------------------------

    def tight_transitions(
        self,
        events: Sequence[CalendarEvent],
        now: datetime
    ) -> List[Alert]:
        sequence = self._todays_sequence(events, now)
        alerts = []
        for current, following in zip(sequence, sequence[1:]):
            gap = minutes_between(current.end, following.start)
            if not 0 < gap < self.config.tight_transition_minutes:
                continue
            gap_minutes = int(gap)
            alerts.append(Alert(
                kind=AlertKind.TIGHT_TRANSITION,
                severity=Severity.MEDIUM,
                message=(
                    f"Only {gap_minutes} minutes between '{current.event.title}' "
                    f"(ends {format_time_of_day(current.end)}) and "
                    f"'{following.event.title}' (starts {format_time_of_day(following.start)})"
                ),
                anchor_time=format_time_of_day(current.end),
                related=(current.event.ref, following.event.ref),
                minutes=gap_minutes,
            ))
        return alerts

    def _todays_sequence(
        self,
        events: Sequence[CalendarEvent],
        now: datetime
    ) -> List[_TimedEvent]:
        """Today's timed appointments and itinerary items, sorted by start."""
        today = now.date()
        timed = []
        for event in events:
            if event.source_kind == SourceKind.TASK or event.date != today:
                continue
            if not event.time_of_day:
                continue
            try:
                start = self._localize(combine(event.date, event.time_of_day), now)
            except TimeParseError as e:
                logger.warning(f"Skipping {event.ref} in transition check: {e}")
                continue
            timed.append(_TimedEvent(event=event, start=start, end=self._effective_end(event, start)))
        timed.sort(key=lambda t: t.start)
        return timed

    def _effective_end(self, event: CalendarEvent, start: datetime) -> datetime:
        """
        Explicit end time for single-day events, else start plus the default
        duration. A multi-day event's end time belongs to its last day.
        """
        default = start + timedelta(minutes=self.config.default_duration_minutes)
        if not event.end_time or event.is_multi_day:
            return default
        try:
            return self._localize(combine(event.date, event.end_time), start)
        except TimeParseError as e:
            logger.warning(f"Using default duration for {event.ref}: {e}")
            return default

    @staticmethod
    def _localize(value: datetime, reference: datetime) -> datetime:
        """Attach the reference's timezone so naive and aware values compare."""
        if reference.tzinfo is not None and value.tzinfo is None:
            return value.replace(tzinfo=reference.tzinfo)
        return value


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def evaluate(
    events: Iterable[CalendarEvent],
    now: datetime,
    config: Optional[AlertConfig] = None
) -> List[Alert]:
    """Evaluate alerts with a one-off engine."""
    return AlertEngine(config).evaluate(events, now)


def create_alert_engine(config: Optional[AlertConfig] = None) -> AlertEngine:
    """
    Factory function to create a configured AlertEngine.

    Args:
        config: Optional AlertConfig; validated before use

    Returns:
        Configured AlertEngine instance
    """
    config = config or AlertConfig()
    config.validate()
    return AlertEngine(config)
