"""
Calendar events as plain values, grouped by day and tested against a range.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import NamedTuple, Union

from date_range import DateTimeRange

When = Union[datetime, date]


def parse_api_time(field: dict) -> When:
    """Google sends ``{"dateTime": ...}`` for timed events, ``{"date": ...}`` for all-day ones."""
    if field.get("dateTime"):
        return datetime.fromisoformat(field["dateTime"].replace("Z", "+00:00"))
    return date.fromisoformat(field["date"])


@dataclass(frozen=True)
class CalendarEvent:
    name: str
    start: When
    end: When
    event_id: str = ""

    @classmethod
    def from_api(cls, item: dict) -> "CalendarEvent":
        return cls(
            name=item.get("summary", "(no title)"),
            start=parse_api_time(item.get("start", {})),
            end=parse_api_time(item.get("end", {})),
            event_id=item.get("id", ""),
        )

    @property
    def all_day(self) -> bool:
        return not isinstance(self.start, datetime)

    def span(self, tz: tzinfo):
        """Half-open ``[start, end)`` in ``tz``. All-day events cover at least one whole day."""
        if self.all_day:
            start = datetime.combine(self.start, time(), tzinfo=tz)
            end = datetime.combine(self.end, time(), tzinfo=tz)
            return start, max(end, start + timedelta(days=1))
        return self.start.astimezone(tz), self.end.astimezone(tz)


class DayBucket(NamedTuple):
    day: datetime
    events: tuple


def start_of_day(event: CalendarEvent, tz: tzinfo) -> datetime:
    start, _ = event.span(tz)
    return start.replace(hour=0, minute=0, second=0, microsecond=0)


def group_events_by_date(events, tz: tzinfo) -> list:
    """Bucket events by the local day they start on, earliest day first."""
    grouped = {}
    for event in events:
        grouped.setdefault(start_of_day(event, tz), []).append(event)
    return [DayBucket(day, tuple(grouped[day])) for day in sorted(grouped)]


def is_in_range(date_range: DateTimeRange, events, tz: tzinfo) -> bool:
    """True if any event overlaps the range. Touching endpoints do not count."""
    for event in events:
        start, end = event.span(tz)
        if start < date_range.end and end > date_range.start:
            return True
    return False
