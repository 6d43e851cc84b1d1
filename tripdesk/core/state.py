"""
Host-owned display selection.

The calendar engine reads no ambient UI state. The host keeps one
DisplayState (reference date, zoom level, filters) and passes it into each
recomputation.
"""

from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Dict, Optional

from ..engine.aggregator import ALL_EVENTS, EventFilter
from ..engine.windower import shift
from ..models import Granularity, SourceKind


@dataclass(frozen=True)
class DisplayState:
    """Selected reference date, granularity and filters."""
    reference_date: date
    granularity: Granularity = Granularity.MONTH
    event_filter: EventFilter = ALL_EVENTS

    def navigate(self, direction: int) -> "DisplayState":
        """Step one unit of the granularity forward (+1) or back (-1)."""
        if direction not in (1, -1):
            raise ValueError(f"direction must be 1 or -1, got {direction}")
        return replace(self, reference_date=shift(self.reference_date, self.granularity, direction))

    def go_to_today(self, today: date) -> "DisplayState":
        return replace(self, reference_date=today)

    def with_granularity(self, granularity: Granularity) -> "DisplayState":
        return replace(self, granularity=Granularity(granularity))

    def with_filter(
        self,
        kind: Optional[SourceKind] = None,
        assignee: Optional[str] = None
    ) -> "DisplayState":
        return replace(self, event_filter=EventFilter(kind=kind, assignee=assignee))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reference_date": self.reference_date.isoformat(),
            "granularity": self.granularity.value,
            "kind": self.event_filter.kind.value if self.event_filter.kind else "all",
            "assignee": self.event_filter.assignee or "all"
        }
