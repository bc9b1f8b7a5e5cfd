"""Tests for scripts/event_groups.py

Covers the event value type, grouping by local day and the
half-open overlap test used by the fix workflow.
"""

from datetime import date, datetime, timedelta, timezone

from conftest import TZ, at
from date_range import DateTimeRange
from event_groups import CalendarEvent, group_events_by_date, is_in_range


# ─────────────────────────────────────────────────────────────────────────────
# CalendarEvent
# ─────────────────────────────────────────────────────────────────────────────


class TestCalendarEvent:

    def test_from_api_timed_event(self):
        item = {
            "id": "abc",
            "summary": "Meeting",
            "start": {"dateTime": "2024-06-01T10:00:00+09:00"},
            "end": {"dateTime": "2024-06-01T11:00:00+09:00"},
        }

        event = CalendarEvent.from_api(item)

        assert event.name == "Meeting"
        assert event.event_id == "abc"
        assert event.start == at("2024-06-01 10:00")
        assert event.all_day is False

    def test_from_api_utc_z_suffix(self):
        item = {"start": {"dateTime": "2024-06-01T01:00:00Z"}, "end": {"dateTime": "2024-06-01T02:00:00Z"}}

        event = CalendarEvent.from_api(item)

        assert event.start == datetime(2024, 6, 1, 1, tzinfo=timezone.utc)
        assert event.name == "(no title)"

    def test_from_api_all_day_event(self):
        item = {"summary": "Holiday", "start": {"date": "2024-06-01"}, "end": {"date": "2024-06-02"}}

        event = CalendarEvent.from_api(item)

        assert event.start == date(2024, 6, 1)
        assert event.all_day is True

    def test_all_day_span_is_whole_day(self, make_event):
        event = make_event("Holiday", "2024-06-01", "2024-06-02")

        assert event.span(TZ) == (at("2024-06-01 00:00"), at("2024-06-02 00:00"))

    def test_all_day_span_never_shorter_than_a_day(self, make_event):
        """An end date equal to the start date still covers that day."""
        event = make_event("Holiday", "2024-06-01", "2024-06-01")

        assert event.span(TZ)[1] == at("2024-06-02 00:00")

    def test_timed_span_converted_to_local_zone(self):
        event = CalendarEvent("x", datetime(2024, 6, 1, 1, tzinfo=timezone.utc),
                              datetime(2024, 6, 1, 2, tzinfo=timezone.utc))

        start, end = event.span(TZ)

        assert (start.hour, end.hour) == (10, 11)
        assert start.utcoffset() == timedelta(hours=9)


# ─────────────────────────────────────────────────────────────────────────────
# Grouping
# ─────────────────────────────────────────────────────────────────────────────


class TestGroupEventsByDate:

    def test_orders_days_ascending(self, make_event):
        """Later day first in the input still comes out second."""
        second = make_event("B", "2024-06-02 10:00", "2024-06-02 11:00")
        first  = make_event("A", "2024-06-01 10:00", "2024-06-01 11:00")

        buckets = group_events_by_date([second, first], TZ)

        assert [b.day for b in buckets] == [at("2024-06-01 00:00"), at("2024-06-02 00:00")]
        assert buckets[0].events == (first,)

    def test_same_day_events_share_bucket_in_source_order(self, make_event):
        late  = make_event("late", "2024-06-01 15:00", "2024-06-01 16:00")
        early = make_event("early", "2024-06-01 09:00", "2024-06-01 10:00")

        buckets = group_events_by_date([late, early], TZ)

        assert len(buckets) == 1
        assert buckets[0].events == (late, early)

    def test_all_day_and_timed_events_on_same_day(self, make_event):
        holiday = make_event("Holiday", "2024-06-01", "2024-06-02")
        meeting = make_event("Meeting", "2024-06-01 10:00", "2024-06-01 11:00")

        buckets = group_events_by_date([holiday, meeting], TZ)

        assert len(buckets) == 1
        assert buckets[0].events == (holiday, meeting)

    def test_day_key_uses_local_time(self):
        """23:30 UTC on the 1st is already the 2nd at +09:00."""
        event = CalendarEvent("late", datetime(2024, 6, 1, 23, 30, tzinfo=timezone.utc),
                              datetime(2024, 6, 2, 0, 30, tzinfo=timezone.utc))

        buckets = group_events_by_date([event], TZ)

        assert buckets[0].day == at("2024-06-02 00:00")

    def test_partition_keeps_every_event_once(self, make_event):
        events = [
            make_event("a", "2024-06-03 10:00", "2024-06-03 11:00"),
            make_event("b", "2024-06-01 10:00", "2024-06-01 11:00"),
            make_event("c", "2024-06-03 12:00", "2024-06-03 13:00"),
            make_event("d", "2024-06-02", "2024-06-03"),
            make_event("b", "2024-06-01 10:00", "2024-06-01 11:00"),
        ]

        buckets = group_events_by_date(events, TZ)
        flattened = [e for b in buckets for e in b.events]
        days = [b.day for b in buckets]

        assert sorted(flattened, key=repr) == sorted(events, key=repr)
        assert days == sorted(set(days))

    def test_empty_input(self):
        assert group_events_by_date([], TZ) == []


# ─────────────────────────────────────────────────────────────────────────────
# Range Membership
# ─────────────────────────────────────────────────────────────────────────────


class TestIsInRange:

    def rng(self, start, end):
        return DateTimeRange(at(start), at(end))

    def test_overlapping_event(self, make_event):
        events = [make_event("Meeting", "2024-06-01 10:00", "2024-06-01 11:00")]

        assert is_in_range(self.rng("2024-06-01 10:30", "2024-06-01 12:00"), events, TZ) is True

    def test_identical_span_overlaps(self, make_event):
        events = [make_event("Meeting", "2024-06-01 10:00", "2024-06-01 11:00")]

        assert is_in_range(self.rng("2024-06-01 10:00", "2024-06-01 11:00"), events, TZ) is True

    def test_event_ending_at_range_start_does_not_count(self, make_event):
        events = [make_event("Meeting", "2024-06-01 09:00", "2024-06-01 10:00")]

        assert is_in_range(self.rng("2024-06-01 10:00", "2024-06-01 11:00"), events, TZ) is False

    def test_event_starting_at_range_end_does_not_count(self, make_event):
        events = [make_event("Meeting", "2024-06-01 11:00", "2024-06-01 12:00")]

        assert is_in_range(self.rng("2024-06-01 10:00", "2024-06-01 11:00"), events, TZ) is False

    def test_any_one_overlap_is_enough(self, make_event):
        events = [
            make_event("Meeting", "2024-06-01 08:00", "2024-06-01 09:00"),
            make_event("Meeting", "2024-06-02 10:00", "2024-06-02 11:00"),
        ]

        assert is_in_range(self.rng("2024-06-02 10:30", "2024-06-02 10:45"), events, TZ) is True

    def test_empty_event_list_is_false(self):
        assert is_in_range(self.rng("2024-06-01 10:00", "2024-06-01 11:00"), [], TZ) is False

    def test_all_day_event_covers_its_day(self, make_event):
        events = [make_event("Holiday", "2024-06-01", "2024-06-02")]

        assert is_in_range(self.rng("2024-06-01 23:00", "2024-06-02 01:00"), events, TZ) is True
        assert is_in_range(self.rng("2024-06-02 00:00", "2024-06-02 01:00"), events, TZ) is False
