"""
Value types shared by the calendar engine.

CalendarEvent and Alert are immutable projections. They are rebuilt from the
source collections on every pass and never written back; an edit always goes
through the (source_kind, id) pair exposed by ``CalendarEvent.ref``.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional, Tuple


# =============================================================================
# ENUMS
# =============================================================================

class SourceKind(str, Enum):
    """Which source collection an event was projected from."""
    ITINERARY = "itinerary"
    APPOINTMENT = "appointment"
    TASK = "task"


class Confirmation(str, Enum):
    """Display-only confirmation signal."""
    CONFIRMED = "confirmed"
    PENDING = "pending"
    NOT_APPLICABLE = "not_applicable"


class Granularity(str, Enum):
    """Calendar zoom level."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class AlertKind(str, Enum):
    """Advisory categories produced by the alert engine."""
    PRE_DEPARTURE_REMINDER = "pre_departure_reminder"
    TIGHT_TRANSITION = "tight_transition"


class Severity(str, Enum):
    """Alert severity levels."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


SEVERITY_RANK = {
    Severity.HIGH: 0,
    Severity.MEDIUM: 1,
    Severity.LOW: 2,
}


# =============================================================================
# DATA CLASSES
# =============================================================================

class EventRef(NamedTuple):
    """Edit-intent key: resolves an event back to its source record."""
    source_kind: SourceKind
    id: str

    def to_dict(self) -> Dict[str, str]:
        return {"source_kind": self.source_kind.value, "id": self.id}


@dataclass(frozen=True)
class CalendarEvent:
    """
    Normalized event positioned on the calendar.

    Attributes:
        id: Identifier, unique only within its source collection
        source_kind: Source collection the event came from
        subtype: Display category (Flight, Hotel, Meeting, task priority...)
        title: Display label
        date: Anchor (start) date
        end_date: Last day occupied by a multi-day event, inclusive
        time_of_day: "HH:MM" intra-day anchor
        end_time: Explicit "HH:MM" end, when the source record has one
        confirmed: Display-only confirmation state
        assignee: Traveler tag used for filtering
    """
    id: str
    source_kind: SourceKind
    subtype: str
    title: str
    date: date
    end_date: Optional[date] = None
    time_of_day: Optional[str] = None
    end_time: Optional[str] = None
    confirmed: Confirmation = Confirmation.NOT_APPLICABLE
    assignee: Optional[str] = None

    @property
    def ref(self) -> EventRef:
        return EventRef(self.source_kind, self.id)

    @property
    def is_multi_day(self) -> bool:
        return self.end_date is not None and self.end_date > self.date

    @property
    def nights(self) -> int:
        """Number of nights covered, zero for single-day events."""
        if self.end_date is None:
            return 0
        return max((self.end_date - self.date).days, 0)

    def occurs_on(self, day: date) -> bool:
        """Check whether the event occupies the given calendar day."""
        if day == self.date:
            return True
        return self.end_date is not None and self.date <= day <= self.end_date

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source_kind": self.source_kind.value,
            "subtype": self.subtype,
            "title": self.title,
            "date": self.date.isoformat(),
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "time_of_day": self.time_of_day,
            "end_time": self.end_time,
            "confirmed": self.confirmed.value,
            "assignee": self.assignee
        }


@dataclass(frozen=True)
class Alert:
    """
    Advisory derived from the event stream at one evaluation pass.

    ``minutes`` carries the computed figure behind the message: minutes
    remaining before departure for reminders, gap length for transitions.
    """
    kind: AlertKind
    severity: Severity
    message: str
    anchor_time: str
    related: Tuple[EventRef, ...] = field(default_factory=tuple)
    minutes: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "severity": self.severity.value,
            "message": self.message,
            "anchor_time": self.anchor_time,
            "related": [ref.to_dict() for ref in self.related],
            "minutes": self.minutes
        }
