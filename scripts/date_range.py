"""
Date-time range parsing for timehunt.

A range is written as two date-times joined by a tilde:

    2024-06-01T10:00~2024-06-01T12:00
    2024-06-01~2024-06-03            (whole days)
    tomorrow 10:00 ～ tomorrow 11:30  (anything dateparser understands)

A date-only token covers the whole calendar day: as a start it means 00:00,
as an end it means 24:00 (00:00 of the following day).
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo

from dateparser.date import DateDataParser

DELIMITER = re.compile(r"\s*[~～]\s*")

DATETIME_FORMATS = [
    "%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M",
    "%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M",
]
DATE_FORMATS = ["%Y-%m-%d", "%Y/%m/%d"]
CLOCK_TIME = re.compile(r"\d{1,2}:\d{2}|\d\s*[ap]\.?m\b|\b(noon|midnight)\b", re.IGNORECASE)


class ParseError(ValueError):
    """Raised when a range expression cannot be turned into a DateTimeRange."""


@dataclass(frozen=True)
class DateTimeRange:
    start: datetime
    end: datetime
    all_day: bool = False

    def __str__(self):
        if self.all_day:
            last_day = (self.end - timedelta(days=1)).date()
            return f"{self.start.date().isoformat()}~{last_day.isoformat()}"
        return f"{self.start.strftime('%Y-%m-%d %H:%M')}~{self.end.strftime('%Y-%m-%d %H:%M')}"


def local_timezone() -> tzinfo:
    return datetime.now().astimezone().tzinfo


def parse_token(token: str, tz: tzinfo, reference: datetime = None):
    """Parse one side of a range.

    Returns ``(datetime, date_only)``; raises ParseError if nothing matches.
    """
    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(token, fmt).replace(tzinfo=tz), False
        except ValueError:
            continue
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(token, fmt).replace(tzinfo=tz), True
        except ValueError:
            continue
    try:
        dt = datetime.fromisoformat(token.replace("Z", "+00:00"))
        if dt.tzinfo is not None:
            return dt, False
    except ValueError:
        pass

    if reference is None:
        reference = datetime.now(tz)
    data = DateDataParser(settings={
        "PREFER_DATES_FROM": "future",
        "RELATIVE_BASE": reference.replace(tzinfo=None),
        "RETURN_TIME_AS_PERIOD": True,
    }).get_date_data(token)
    dt = data.date_obj
    if dt is None:
        raise ParseError(f"Cannot parse date-time: '{token}'")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz)
    # "June 1 2024" or "tomorrow" name a whole day; a clock time keeps the token timed.
    date_only = data.period == "day" and not CLOCK_TIME.search(token)
    if date_only:
        dt = dt.replace(hour=0, minute=0, second=0, microsecond=0)
    return dt, date_only


def parse_range(expression: str, tz: tzinfo = None, reference: datetime = None) -> DateTimeRange:
    """Parse ``START~END`` into a DateTimeRange.

    Naive tokens are placed in ``tz`` (the local timezone when omitted).
    ``reference`` anchors relative expressions such as "tomorrow".
    """
    if tz is None:
        tz = local_timezone()
    tokens = DELIMITER.split((expression or "").strip())
    if len(tokens) != 2 or not all(tokens):
        raise ParseError(
            f"Cannot parse range: '{expression}'. Use START~END, e.g. 2024-06-01T10:00~2024-06-01T12:00"
        )

    start, start_date_only = parse_token(tokens[0], tz, reference)
    end, end_date_only = parse_token(tokens[1], tz, reference)
    if end_date_only:
        end = end + timedelta(days=1)

    if start > end:
        raise ParseError(f"Range start {tokens[0]} is after its end {tokens[1]}")
    return DateTimeRange(start, end, all_day=start_date_only and end_date_only)
