"""
tripdesk integrations: validated source record shapes and the record
sources that feed the calendar engine.
"""

from .records import (
    AppointmentRecord,
    FlightDetails,
    GenericDetails,
    HotelDetails,
    ItineraryRecord,
    SourceRecord,
    TaskRecord,
    TransportDetails,
    TripDetails,
    details_class_for,
)
from .sources import InMemorySource, RecordSource, SnapshotFileSource

__all__ = [
    "AppointmentRecord",
    "FlightDetails",
    "GenericDetails",
    "HotelDetails",
    "InMemorySource",
    "ItineraryRecord",
    "RecordSource",
    "SnapshotFileSource",
    "SourceRecord",
    "TaskRecord",
    "TransportDetails",
    "TripDetails",
    "details_class_for",
]
