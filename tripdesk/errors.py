"""
Error classes for tripdesk.

The calendar engine itself never raises for bad record content; malformed
records are dropped and malformed times are skipped. Exceptions are reserved
for the edges: reading configuration, reading record sources, and the
strict time helpers whose failures the alert engine isolates.
"""

from typing import Any, Dict, Optional


class TripDeskError(Exception):
    """Base exception for tripdesk errors."""
    pass


class ConfigError(TripDeskError):
    """Configuration file missing, unreadable or inconsistent."""
    pass


class TimeParseError(TripDeskError, ValueError):
    """A time-of-day string is not a valid "HH:MM" value."""

    def __init__(self, value: Any):
        super().__init__(f"Invalid time of day: {value!r}")
        self.value = value


class SourceError(TripDeskError):
    """A record source could not be read."""

    def __init__(
        self,
        message: str,
        source_name: str,
        recoverable: bool = True,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.source_name = source_name
        self.recoverable = recoverable
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": str(self),
            "source": self.source_name,
            "recoverable": self.recoverable
        }
