"""
Source Record Models for tripdesk

Validated shapes for the three collections handed over by the persistence
layer: itinerary entries, appointments and tasks.

The persistence layer spells keys in snake_case while exported sample data
uses camelCase, so every renamed field accepts both. Unknown keys are kept
and ignored. Only the id and the dates are validated strictly here (a record
with an unusable date fails validation and is dropped by the normalizer).
Display fields such as title, notes or attendees are coerced or defaulted
instead. Times of day that parse are zero-padded to "HH:MM"; the rest stay
raw strings because a malformed time must only knock out the alert that
needs it.

Itinerary entries carry a loosely-typed ``type_specific_data`` bag. It is
validated into one variant per itinerary type:

- Flight             -> FlightDetails
- Hotel              -> HotelDetails
- Train / Bus / Taxi -> TransportDetails
- anything else      -> GenericDetails
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Type
import logging
import re

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator, model_validator


# Configure logging
logger = logging.getLogger(__name__)

_DATETIME_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]")
_CLOCK_TIME = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")

_TRUE_WORDS = {"true", "yes", "y", "1", "confirmed"}
_FALSE_WORDS = {"false", "no", "n", "0", "pending", "unconfirmed"}


def _aliased(name: str, camel: str, default: Any = None) -> Any:
    """Field accepting both the snake_case and camelCase spelling."""
    return Field(default=default, validation_alias=AliasChoices(name, camel))


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    return value


def _coerce_date(value: Any) -> Any:
    value = _blank_to_none(value)
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and _DATETIME_PREFIX.match(value):
        return value[:10]
    return value


def _coerce_time(value: Any) -> Optional[str]:
    """Zero-pad a parseable clock time to "HH:MM"; anything else stays raw."""
    value = _blank_to_none(value)
    if value is None:
        return None
    text = str(value).strip()
    match = _CLOCK_TIME.match(text)
    if not match:
        return text
    hour, minute = int(match.group(1)), int(match.group(2))
    second = int(match.group(3) or 0)
    if hour > 23 or minute > 59 or second > 59:
        return text
    if match.group(3):
        return f"{hour:02d}:{minute:02d}:{second:02d}"
    return f"{hour:02d}:{minute:02d}"


def _display_text(value: Any) -> Optional[str]:
    """Free-text field: scalars become strings, containers are discarded."""
    value = _blank_to_none(value)
    if value is None or isinstance(value, (dict, list, tuple, set)):
        return None
    return str(value)


def _coerce_flag(value: Any) -> Optional[bool]:
    """Best-effort boolean; None when the value cannot be read as one."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return None


def _coerce_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, dict):
        return []
    return [value]


# =============================================================================
# Itinerary Detail Variants
# =============================================================================

class TripDetails(BaseModel):
    """Base for the per-type detail bag of an itinerary entry."""

    class Config:
        extra = "allow"

    def anchor_time(self) -> Optional[str]:
        """Time of day the entry should be positioned by, if the bag has one."""
        return None


class FlightDetails(TripDetails):
    """Flight leg details."""
    flight_number: Optional[str] = _aliased("flight_number", "flightNumber")
    airline: Optional[str] = None
    departure_airport: Optional[str] = _aliased("departure_airport", "departureAirport")
    arrival_airport: Optional[str] = _aliased("arrival_airport", "arrivalAirport")
    departure_time: Optional[str] = _aliased("departure_time", "departureTime")
    arrival_time: Optional[str] = _aliased("arrival_time", "arrivalTime")

    @field_validator("departure_time", "arrival_time", mode="before")
    @classmethod
    def clean_times(cls, v):
        return _coerce_time(v)

    def anchor_time(self) -> Optional[str]:
        return self.departure_time


class HotelDetails(TripDetails):
    """Hotel stay details."""
    hotel_name: Optional[str] = _aliased("hotel_name", "hotelName")
    confirmation_number: Optional[str] = _aliased("confirmation_number", "confirmationNumber")
    check_in_time: Optional[str] = _aliased("check_in_time", "checkInTime")
    check_out_time: Optional[str] = _aliased("check_out_time", "checkOutTime")

    @field_validator("check_in_time", "check_out_time", mode="before")
    @classmethod
    def clean_times(cls, v):
        return _coerce_time(v)

    def anchor_time(self) -> Optional[str]:
        return self.check_in_time


class TransportDetails(TripDetails):
    """Train, bus and taxi details."""
    operator: Optional[str] = None
    departure_station: Optional[str] = _aliased("departure_station", "departureStation")
    arrival_station: Optional[str] = _aliased("arrival_station", "arrivalStation")
    departure_time: Optional[str] = _aliased("departure_time", "departureTime")
    arrival_time: Optional[str] = _aliased("arrival_time", "arrivalTime")

    @field_validator("departure_time", "arrival_time", mode="before")
    @classmethod
    def clean_times(cls, v):
        return _coerce_time(v)

    def anchor_time(self) -> Optional[str]:
        return self.departure_time


class GenericDetails(TripDetails):
    """Details for trade shows, visits, sightseeing and other entries."""
    departure_time: Optional[str] = _aliased("departure_time", "departureTime")
    check_in_time: Optional[str] = _aliased("check_in_time", "checkInTime")

    @field_validator("departure_time", "check_in_time", mode="before")
    @classmethod
    def clean_times(cls, v):
        return _coerce_time(v)

    def anchor_time(self) -> Optional[str]:
        return self.departure_time or self.check_in_time


DETAIL_VARIANTS: Dict[str, Type[TripDetails]] = {
    "flight": FlightDetails,
    "hotel": HotelDetails,
    "train": TransportDetails,
    "bus": TransportDetails,
    "taxi": TransportDetails,
}


def details_class_for(item_type: Optional[str]) -> Type[TripDetails]:
    """Pick the detail variant for an itinerary type."""
    if not item_type:
        return GenericDetails
    return DETAIL_VARIANTS.get(str(item_type).strip().lower(), GenericDetails)


# =============================================================================
# Source Records
# =============================================================================

class SourceRecord(BaseModel):
    """Fields common to all three source collections."""
    id: str
    title: str = ""
    assigned_to: Optional[str] = _aliased("assigned_to", "assignedTo")

    class Config:
        extra = "allow"

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("record id is required")
        return str(v)

    @field_validator("title", mode="before")
    @classmethod
    def default_title(cls, v):
        return _display_text(v) or ""

    @field_validator("assigned_to", mode="before")
    @classmethod
    def clean_assignee(cls, v):
        return _display_text(v)


class ItineraryRecord(SourceRecord):
    """Itinerary entry: flight, hotel, train, trade show, visit..."""
    type: str = "Other"
    description: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[date] = _aliased("start_date", "startDate")
    end_date: Optional[date] = _aliased("end_date", "endDate")
    start_time: Optional[str] = _aliased("start_time", "startTime")
    end_time: Optional[str] = _aliased("end_time", "endTime")
    confirmed: Optional[bool] = None
    notes: Optional[str] = None
    type_specific_data: Optional[TripDetails] = None

    @model_validator(mode="before")
    @classmethod
    def select_details_variant(cls, data):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        raw = data.pop("typeSpecificData", None)
        raw = data.get("type_specific_data", raw)
        if raw is None or isinstance(raw, TripDetails):
            data["type_specific_data"] = raw
            return data

        variant = details_class_for(data.get("type"))
        if not isinstance(raw, dict):
            logger.warning(f"Ignoring non-mapping details on itinerary item {data.get('id')!r}")
            data["type_specific_data"] = None
            return data
        try:
            data["type_specific_data"] = variant.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed details on itinerary item {data.get('id')!r}: {e}")
            data["type_specific_data"] = None
        return data

    @field_validator("type", mode="before")
    @classmethod
    def default_type(cls, v):
        return _display_text(v) or "Other"

    @field_validator("description", "location", "notes", mode="before")
    @classmethod
    def clean_text(cls, v):
        return _display_text(v)

    @field_validator("confirmed", mode="before")
    @classmethod
    def clean_confirmed(cls, v):
        return _coerce_flag(v)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def clean_dates(cls, v):
        return _coerce_date(v)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def clean_times(cls, v):
        return _coerce_time(v)

    def anchor_time(self) -> Optional[str]:
        """Explicit start time, else the type-specific anchor, else None."""
        if self.start_time:
            return self.start_time
        if self.type_specific_data is not None:
            return self.type_specific_data.anchor_time()
        return None


class AppointmentRecord(SourceRecord):
    """Scheduled meeting, call, visit or conference."""
    type: str = "Other"
    description: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[date] = _aliased("start_date", "startDate")
    end_date: Optional[date] = _aliased("end_date", "endDate")
    start_time: Optional[str] = _aliased("start_time", "startTime")
    end_time: Optional[str] = _aliased("end_time", "endTime")
    status: Optional[str] = None
    attendees: List[Any] = Field(default_factory=list)

    @field_validator("type", mode="before")
    @classmethod
    def default_type(cls, v):
        return _display_text(v) or "Other"

    @field_validator("description", "location", "status", mode="before")
    @classmethod
    def clean_text(cls, v):
        return _display_text(v)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def clean_dates(cls, v):
        return _coerce_date(v)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def clean_times(cls, v):
        return _coerce_time(v)

    @field_validator("attendees", mode="before")
    @classmethod
    def clean_attendees(cls, v):
        return _coerce_list(v)

    @property
    def is_confirmed(self) -> bool:
        return (self.status or "").strip().lower() == "confirmed"


class TaskRecord(SourceRecord):
    """To-do item. Only tasks with a due date reach the calendar."""
    description: Optional[str] = None
    completed: bool = False
    priority: str = "Medium"
    category: Optional[str] = None
    due_date: Optional[date] = _aliased("due_date", "dueDate")

    @field_validator("priority", mode="before")
    @classmethod
    def default_priority(cls, v):
        return _display_text(v) or "Medium"

    @field_validator("description", "category", mode="before")
    @classmethod
    def clean_text(cls, v):
        return _display_text(v)

    @field_validator("completed", mode="before")
    @classmethod
    def default_completed(cls, v):
        return bool(_coerce_flag(v))

    @field_validator("due_date", mode="before")
    @classmethod
    def clean_due_date(cls, v):
        return _coerce_date(v)
