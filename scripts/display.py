"""
Human-readable rendering of grouped calendar events.

Nothing here knows about a particular language: the date header template,
weekday names and the all-day label come from a DisplayConfig, normally
built from the user's config file.
"""

from dataclasses import dataclass
from datetime import datetime, time, tzinfo

from event_groups import When

LOCALES = {
    "ja": {
        "date_format":   "{year}年{month}月{day}日({weekday})",
        "weekday_names": ("月", "火", "水", "木", "金", "土", "日"),
        "all_day_label": "終日",
    },
    "en": {
        "date_format":   "{weekday} {month}/{day}/{year}",
        "weekday_names": ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"),
        "all_day_label": "all day",
    },
}
DEFAULT_LOCALE = "ja"


def parse_hhmm(value: str) -> time:
    h, m = map(int, value.split(":"))
    return time(h, m)


@dataclass(frozen=True)
class DisplayConfig:
    # The "business day": a span covering it is shown as all day.
    business_start: time = time(9, 0)
    business_end:   time = time(19, 0)
    all_day_label:  str = LOCALES[DEFAULT_LOCALE]["all_day_label"]
    range_separator: str = "～"
    date_format:    str = LOCALES[DEFAULT_LOCALE]["date_format"]
    weekday_names:  tuple = LOCALES[DEFAULT_LOCALE]["weekday_names"]
    joiner:         str = " or "

    @classmethod
    def from_config(cls, config: dict) -> "DisplayConfig":
        locale = LOCALES.get(config.get("locale", DEFAULT_LOCALE), LOCALES[DEFAULT_LOCALE])
        hours  = config.get("business_hours", {})
        return cls(
            business_start=parse_hhmm(hours.get("start", "09:00")),
            business_end=parse_hhmm(hours.get("end", "19:00")),
            all_day_label=config.get("all_day_label") or locale["all_day_label"],
            date_format=config.get("date_format") or locale["date_format"],
            weekday_names=tuple(locale["weekday_names"]),
        )


def covers_business_day(start: datetime, end: datetime, config: DisplayConfig) -> bool:
    opening = start.replace(hour=config.business_start.hour, minute=config.business_start.minute,
                            second=0, microsecond=0)
    closing = start.replace(hour=config.business_end.hour, minute=config.business_end.minute,
                            second=0, microsecond=0)
    return start <= opening and end >= closing


def format_time_range(start: When, end: When, config: DisplayConfig, tz: tzinfo = None) -> str:
    """``10:00～15:00``, ``10:00`` when it runs to closing time, or the all-day label."""
    if not isinstance(start, datetime) or start == end:
        return config.all_day_label
    if tz is not None:
        start, end = start.astimezone(tz), end.astimezone(tz)
    if covers_business_day(start, end, config):
        return config.all_day_label

    start_str = start.strftime("%H:%M")
    closes_same_day = end.date() == start.date() and \
        (end.hour, end.minute) == (config.business_end.hour, config.business_end.minute)
    if closes_same_day:
        return start_str
    return f"{start_str}{config.range_separator}{end.strftime('%H:%M')}"


def format_date_header(day: datetime, config: DisplayConfig) -> str:
    return config.date_format.format(
        year=day.year,
        month=day.month,
        day=day.day,
        weekday=config.weekday_names[day.weekday()],
    )


def format_buckets(buckets, config: DisplayConfig, tz: tzinfo = None) -> list:
    lines = []
    for bucket in buckets:
        times = [format_time_range(ev.start, ev.end, config, tz) for ev in bucket.events]
        lines.append(f"{format_date_header(bucket.day, config)} : {config.joiner.join(times)}")
    return lines
