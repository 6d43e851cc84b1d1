"""
Pytest fixtures for tripdesk testing.

Provides:
- Sample itinerary / appointment / task records
- A fixed evaluation clock
- Event factories
- Snapshot and config files under tmp_path
"""

import json
from datetime import date, datetime
from typing import Any, Dict

import pytest

from tripdesk.models import CalendarEvent, Confirmation, SourceKind


# =============================================================================
# CLOCK FIXTURES
# =============================================================================

@pytest.fixture
def fixed_now():
    """Fixed evaluation time: 2024-06-10 10:00."""
    return datetime(2024, 6, 10, 10, 0)


@pytest.fixture
def fixed_today(fixed_now):
    return fixed_now.date()


# =============================================================================
# SAMPLE RECORD FIXTURES
# =============================================================================

@pytest.fixture
def sample_flight_record():
    """Flight leg using the exported camelCase spelling."""
    return {
        "id": 1,
        "type": "Flight",
        "title": "Flight to Frankfurt",
        "startDate": "2024-06-10",
        "confirmed": True,
        "assignedTo": "alex",
        "typeSpecificData": {
            "flightNumber": "LH401",
            "airline": "Lufthansa",
            "departureAirport": "JFK",
            "arrivalAirport": "FRA",
            "departureTime": "11:40",
            "arrivalTime": "23:55"
        }
    }


@pytest.fixture
def sample_hotel_record():
    """Three-night hotel stay."""
    return {
        "id": 2,
        "type": "Hotel",
        "title": "Hotel Frankfurter Hof",
        "start_date": "2024-06-10",
        "end_date": "2024-06-13",
        "confirmed": False,
        "assigned_to": "alex",
        "type_specific_data": {
            "hotel_name": "Frankfurter Hof",
            "check_in_time": "15:00",
            "check_out_time": "11:00"
        }
    }


@pytest.fixture
def sample_appointment_record():
    return {
        "id": "a-1",
        "type": "Meeting",
        "title": "Supplier review",
        "startDate": "2024-06-10",
        "startTime": "14:00",
        "endTime": "15:00",
        "status": "Confirmed",
        "assignedTo": "sam",
        "attendees": ["alex", "sam"]
    }


@pytest.fixture
def sample_task_record():
    return {
        "id": 7,
        "title": "Submit expense report",
        "priority": "High",
        "dueDate": "2024-06-10",
        "completed": False,
        "assignedTo": "alex"
    }


@pytest.fixture
def sample_collections(sample_flight_record, sample_hotel_record, sample_appointment_record, sample_task_record):
    """The three source collections as a host would hand them over."""
    return {
        "itinerary": [sample_flight_record, sample_hotel_record],
        "appointments": [sample_appointment_record],
        "tasks": [
            sample_task_record,
            {"id": 8, "title": "Book visa appointment", "priority": "Low"}
        ]
    }


# =============================================================================
# FACTORY FIXTURES
# =============================================================================

@pytest.fixture
def event_factory():
    """Factory for CalendarEvent values with sensible defaults."""
    counter = {"n": 0}

    def _create(
        title: str = "Event",
        day: date = date(2024, 6, 10),
        time_of_day: str = None,
        source_kind: SourceKind = SourceKind.APPOINTMENT,
        subtype: str = "Meeting",
        **kwargs: Any
    ) -> CalendarEvent:
        counter["n"] += 1
        return CalendarEvent(
            id=kwargs.pop("id", str(counter["n"])),
            source_kind=source_kind,
            subtype=subtype,
            title=title,
            date=day,
            time_of_day=time_of_day,
            confirmed=kwargs.pop("confirmed", Confirmation.NOT_APPLICABLE),
            **kwargs
        )
    return _create


@pytest.fixture
def flight_factory(event_factory):
    """Factory for flight itinerary events."""
    def _create(title: str = "Flight to Chicago", time_of_day: str = "12:00", **kwargs: Any) -> CalendarEvent:
        kwargs.setdefault("subtype", "Flight")
        return event_factory(
            title=title,
            time_of_day=time_of_day,
            source_kind=SourceKind.ITINERARY,
            **kwargs
        )
    return _create


# =============================================================================
# FILE FIXTURES
# =============================================================================

@pytest.fixture
def snapshot_file(tmp_path, sample_collections):
    """JSON snapshot of the sample collections."""
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(sample_collections), encoding="utf-8")
    return path


@pytest.fixture
def write_config(tmp_path):
    """Write a YAML config file and return its path."""
    def _write(text: str, name: str = "tripdesk.yaml"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def write_snapshot(tmp_path):
    """Write an arbitrary snapshot payload and return its path."""
    def _write(payload: Dict[str, Any], name: str = "custom_snapshot.json"):
        path = tmp_path / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path
    return _write
