"""
Record sources for tripdesk.

The calendar engine performs no I/O. Hosts hand it the three collections
through a ``RecordSource``: anything with ``fetch_itinerary``,
``fetch_appointments`` and ``fetch_tasks`` returning lists of raw mappings
(or already-validated records).

Two implementations ship here:
- InMemorySource: lists supplied directly by the host
- SnapshotFileSource: a JSON snapshot exported from the persistence service
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Protocol, Union, runtime_checkable
import json
import logging

from ..errors import SourceError


logger = logging.getLogger(__name__)


@runtime_checkable
class RecordSource(Protocol):
    """Protocol for the persistence collaborator."""

    def fetch_itinerary(self) -> List[Any]:
        """Return the current itinerary entries."""
        ...

    def fetch_appointments(self) -> List[Any]:
        """Return the current appointments."""
        ...

    def fetch_tasks(self) -> List[Any]:
        """Return the current tasks."""
        ...


@dataclass
class InMemorySource:
    """Source backed by lists owned by the host."""
    itinerary: List[Any] = field(default_factory=list)
    appointments: List[Any] = field(default_factory=list)
    tasks: List[Any] = field(default_factory=list)

    def fetch_itinerary(self) -> List[Any]:
        return list(self.itinerary)

    def fetch_appointments(self) -> List[Any]:
        return list(self.appointments)

    def fetch_tasks(self) -> List[Any]:
        return list(self.tasks)


class SnapshotFileSource:
    """
    Source reading a JSON snapshot file.

    The file holds one object with ``itinerary``, ``appointments`` and
    ``tasks`` lists; ``todos`` is accepted as an alias for ``tasks``. Missing
    keys read as empty collections. The file is re-read on every fetch so a
    polling host sees edits made between passes.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            raise SourceError(
                f"Snapshot file not found: {self.path}",
                source_name=str(self.path),
                recoverable=False
            )
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise SourceError(
                f"Snapshot file is not valid JSON: {self.path} ({e})",
                source_name=str(self.path),
                original_error=e
            ) from e
        except OSError as e:
            raise SourceError(
                f"Cannot read snapshot file {self.path}: {e}",
                source_name=str(self.path),
                original_error=e
            ) from e

        if not isinstance(data, dict):
            raise SourceError(
                f"Snapshot must be a JSON object, got {type(data).__name__}",
                source_name=str(self.path),
                recoverable=False
            )
        return data

    def _collection(self, key: str) -> List[Any]:
        data = self._load()
        value = data.get(key)
        if value is None and key == "tasks":
            value = data.get("todos")
        if value is None:
            return []
        if not isinstance(value, list):
            raise SourceError(
                f"Snapshot key '{key}' must be a list, got {type(value).__name__}",
                source_name=str(self.path),
                recoverable=False
            )
        logger.debug(f"Loaded {len(value)} {key} records from {self.path}")
        return value

    def fetch_itinerary(self) -> List[Any]:
        return self._collection("itinerary")

    def fetch_appointments(self) -> List[Any]:
        return self._collection("appointments")

    def fetch_tasks(self) -> List[Any]:
        return self._collection("tasks")
