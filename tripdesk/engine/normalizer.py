"""
Event Normalizer

Projects the three source collections into one stream of CalendarEvent
values. Output order is itinerary entries, then appointments, then tasks,
each in input order; that order is the stable tie-break used downstream.

Records that cannot be validated (most often an unparseable date) or that
have no calendar position are dropped with a log line. A bad record never
aborts the rest of the batch.
"""

from typing import Any, Callable, Iterable, List, Optional, Type, TypeVar
import logging

from pydantic import BaseModel, ValidationError

from ..integrations.records import AppointmentRecord, ItineraryRecord, TaskRecord
from ..models import CalendarEvent, Confirmation, SourceKind


logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


def _coerce(raw: Any, model: Type[RecordT]) -> Optional[RecordT]:
    """Validate one raw record; None if it is malformed."""
    if isinstance(raw, model):
        return raw
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        record_id = raw.get("id") if isinstance(raw, dict) else None
        reasons = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        logger.warning(f"Dropping malformed {model.__name__} {record_id!r}: {reasons}")
        return None


def _confirmation(flag: Optional[bool]) -> Confirmation:
    if flag is None:
        return Confirmation.NOT_APPLICABLE
    return Confirmation.CONFIRMED if flag else Confirmation.PENDING


def itinerary_event(record: ItineraryRecord) -> Optional[CalendarEvent]:
    """Project one itinerary entry; None when it has no start date."""
    if record.start_date is None:
        logger.warning(f"Dropping itinerary item {record.id!r}: no start date")
        return None
    return CalendarEvent(
        id=record.id,
        source_kind=SourceKind.ITINERARY,
        subtype=record.type,
        title=record.title,
        date=record.start_date,
        end_date=record.end_date,
        time_of_day=record.anchor_time(),
        end_time=record.end_time,
        confirmed=_confirmation(record.confirmed),
        assignee=record.assigned_to,
    )


def appointment_event(record: AppointmentRecord) -> Optional[CalendarEvent]:
    """Project one appointment; None when it has no start date."""
    if record.start_date is None:
        logger.warning(f"Dropping appointment {record.id!r}: no start date")
        return None
    return CalendarEvent(
        id=record.id,
        source_kind=SourceKind.APPOINTMENT,
        subtype=record.type,
        title=record.title,
        date=record.start_date,
        end_date=record.end_date,
        time_of_day=record.start_time,
        end_time=record.end_time,
        confirmed=_confirmation(record.is_confirmed),
        assignee=record.assigned_to,
    )


def task_event(record: TaskRecord) -> Optional[CalendarEvent]:
    """Project one task; tasks without a due date have no calendar position."""
    if record.due_date is None:
        return None
    return CalendarEvent(
        id=record.id,
        source_kind=SourceKind.TASK,
        subtype=record.priority,
        title=record.title,
        date=record.due_date,
        confirmed=Confirmation.NOT_APPLICABLE,
        assignee=record.assigned_to,
    )


def _project(
    records: Optional[Iterable[Any]],
    model: Type[RecordT],
    to_event: Callable[[RecordT], Optional[CalendarEvent]]
) -> List[CalendarEvent]:
    events = []
    for raw in records or ():
        record = _coerce(raw, model)
        if record is None:
            continue
        event = to_event(record)
        if event is not None:
            events.append(event)
    return events


def normalize(
    itinerary: Optional[Iterable[Any]] = None,
    appointments: Optional[Iterable[Any]] = None,
    tasks: Optional[Iterable[Any]] = None
) -> List[CalendarEvent]:
    """
    Merge the three source collections into one event stream.

    Args:
        itinerary: Itinerary entries (mappings or ItineraryRecord)
        appointments: Appointments (mappings or AppointmentRecord)
        tasks: Tasks (mappings or TaskRecord)

    Returns:
        Events in source order: itinerary, appointments, tasks
    """
    events = _project(itinerary, ItineraryRecord, itinerary_event)
    events.extend(_project(appointments, AppointmentRecord, appointment_event))
    events.extend(_project(tasks, TaskRecord, task_event))
    logger.debug(f"Normalized {len(events)} calendar events")
    return events
