"""
Tests for the Event Aggregator

Tests cover:
- Multi-day membership
- Intra-day ordering and tie-breaks
- Filtering before bucketing
- Span bars for multi-day events
- Compact preview split
- Hour slots for the day view
"""

from datetime import date

import pytest

from tripdesk.engine.aggregator import (
    EventFilter,
    events_in_window,
    events_on_date,
    hour_slots,
    preview,
    span_segments,
)
from tripdesk.engine.normalizer import normalize
from tripdesk.engine.windower import month_window, window
from tripdesk.models import Granularity, SourceKind


class TestEventsOnDate:
    """Tests for per-day selection and ordering."""

    def test_multi_day_membership(self, event_factory):
        """Test that a 06-10..06-12 event occupies exactly those three days."""
        trip = event_factory(title="Trip", day=date(2025, 6, 10), end_date=date(2025, 6, 12))
        for day in range(5, 20):
            current = date(2025, 6, day)
            expected = date(2025, 6, 10) <= current <= date(2025, 6, 12)
            assert (trip in events_on_date(current, [trip])) is expected

    def test_untimed_sorts_first(self, event_factory):
        """Test that an untimed event precedes a 09:00 event."""
        timed = event_factory(title="B", time_of_day="09:00")
        untimed = event_factory(title="A")
        assert [e.title for e in events_on_date(date(2024, 6, 10), [timed, untimed])] == ["A", "B"]

    def test_sorts_by_time_string(self, event_factory):
        events = [
            event_factory(title="late", time_of_day="18:30"),
            event_factory(title="early", time_of_day="07:05"),
            event_factory(title="noon", time_of_day="12:00"),
        ]
        assert [e.title for e in events_on_date(date(2024, 6, 10), events)] == ["early", "noon", "late"]

    def test_ties_keep_input_order(self, event_factory):
        """Test that equal or absent times preserve normalizer order."""
        events = [
            event_factory(title="first", time_of_day="09:00"),
            event_factory(title="u1"),
            event_factory(title="second", time_of_day="09:00"),
            event_factory(title="u2"),
        ]
        assert [e.title for e in events_on_date(date(2024, 6, 10), events)] == ["u1", "u2", "first", "second"]

    def test_end_date_before_start_only_on_start(self, event_factory):
        event = event_factory(day=date(2024, 6, 10), end_date=date(2024, 6, 8))
        assert events_on_date(date(2024, 6, 10), [event]) == [event]
        assert events_on_date(date(2024, 6, 9), [event]) == []


class TestEventsInWindow:
    """Tests for window bucketing."""

    def test_every_day_has_a_bucket(self, event_factory):
        days = window(date(2024, 6, 12), Granularity.WEEK)
        buckets = events_in_window(days, [event_factory(day=date(2024, 6, 12))])
        assert list(buckets) == days
        assert len(buckets[date(2024, 6, 12)]) == 1
        assert buckets[date(2024, 6, 11)] == []

    def test_filter_by_kind_applied_before_bucketing(self, event_factory):
        """Test that per-day counts reflect only the active kind filter."""
        events = [
            event_factory(title="meeting", source_kind=SourceKind.APPOINTMENT),
            event_factory(title="task", source_kind=SourceKind.TASK, subtype="High"),
        ]
        buckets = events_in_window([date(2024, 6, 10)], events, EventFilter(kind=SourceKind.TASK))
        assert [e.title for e in buckets[date(2024, 6, 10)]] == ["task"]

    def test_filter_by_assignee(self, event_factory):
        events = [
            event_factory(title="alex", assignee="alex"),
            event_factory(title="sam", assignee="sam"),
            event_factory(title="nobody"),
        ]
        buckets = events_in_window([date(2024, 6, 10)], events, EventFilter(assignee="sam"))
        assert [e.title for e in buckets[date(2024, 6, 10)]] == ["sam"]

    def test_repeated_days_bucket_once(self, event_factory):
        """Test that the year window's duplicated spill-over days map once."""
        reference = date(2024, 6, 1)
        days = window(reference, Granularity.YEAR)
        buckets = events_in_window(days, [event_factory(day=date(2024, 5, 31))])
        assert len(buckets) == len(set(days))
        assert len(buckets[date(2024, 5, 31)]) == 1

    def test_pipeline_is_idempotent(self, sample_collections):
        """Test that normalize -> window -> bucket twice yields equal output."""
        def run():
            events = normalize(**sample_collections)
            days = window(date(2024, 6, 10), Granularity.MONTH)
            return events_in_window(days, events)

        assert run() == run()


class TestSpanSegments:
    """Tests for multi-day bars on a grid."""

    def test_single_row_bar(self, event_factory):
        """Test a hotel stay inside one week row."""
        days = month_window(date(2024, 6, 1))  # starts Sunday 2024-05-26
        stay = event_factory(day=date(2024, 6, 10), end_date=date(2024, 6, 13))
        segments = span_segments(days, [stay])
        assert len(segments) == 1
        segment = segments[0]
        assert (segment.row, segment.start_col, segment.end_col) == (2, 1, 4)
        assert segment.width == 4
        assert not segment.continues_before and not segment.continues_after

    def test_bar_wraps_across_rows(self, event_factory):
        days = month_window(date(2024, 6, 1))
        trip = event_factory(day=date(2024, 6, 14), end_date=date(2024, 6, 18))
        segments = span_segments(days, [trip])
        assert [(s.row, s.start_col, s.end_col) for s in segments] == [(2, 5, 6), (3, 0, 2)]
        assert segments[0].continues_after is True
        assert segments[1].continues_before is True

    def test_bar_clipped_by_grid(self, event_factory):
        """Test that an event starting before the grid is clipped with a flag."""
        days = window(date(2024, 6, 12), Granularity.WEEK)  # 06-09 .. 06-15
        trip = event_factory(day=date(2024, 6, 5), end_date=date(2024, 6, 20))
        segments = span_segments(days, [trip])
        assert len(segments) == 1
        assert (segments[0].start_col, segments[0].end_col) == (0, 6)
        assert segments[0].continues_before is True
        assert segments[0].continues_after is True

    def test_single_day_and_outside_events_ignored(self, event_factory):
        days = window(date(2024, 6, 12), Granularity.WEEK)
        events = [
            event_factory(day=date(2024, 6, 12)),
            event_factory(day=date(2024, 7, 1), end_date=date(2024, 7, 3)),
        ]
        assert span_segments(days, events) == []

    def test_empty_grid(self, event_factory):
        assert span_segments([], [event_factory(end_date=date(2024, 6, 12))]) == []


class TestPreview:
    """Tests for the compact "+K more" split."""

    @pytest.mark.parametrize("limit,shown,hidden", [(2, 2, 3), (5, 5, 0), (10, 5, 0), (0, 0, 5), (-1, 0, 5)])
    def test_preview_split(self, event_factory, limit, shown, hidden):
        events = [event_factory(title=str(i)) for i in range(5)]
        visible, more = preview(events, limit)
        assert len(visible) == shown
        assert more == hidden
        assert visible == events[:shown]


class TestHourSlots:
    """Tests for grouping a day into hour rows."""

    def test_all_hours_present(self):
        slots = hour_slots([])
        assert list(slots) == list(range(24))
        assert all(rows == [] for rows in slots.values())

    def test_timed_events_by_hour(self, event_factory):
        breakfast = event_factory(title="Breakfast", time_of_day="07:30")
        flight = event_factory(title="Flight", time_of_day="17:40")
        briefing = event_factory(title="Briefing", time_of_day="17:05")
        slots = hour_slots([flight, breakfast, briefing])
        assert slots[7] == [breakfast]
        assert [e.title for e in slots[17]] == ["Briefing", "Flight"]

    def test_untimed_events_in_nine_o_clock_row(self, event_factory):
        """Test that untimed events share the 09:00 row, ahead of timed ones."""
        meeting = event_factory(title="Standup", time_of_day="09:15")
        task = event_factory(title="Pack", source_kind=SourceKind.TASK, subtype="High")
        slots = hour_slots([meeting, task])
        assert slots[9] == [task, meeting]

    def test_unreadable_time_uses_default_row(self, event_factory):
        odd = event_factory(title="Odd", time_of_day="noon")
        assert hour_slots([odd], default_hour=12)[12] == [odd]
