"""Date and time display helpers for dashboard widgets.

Values may be ISO-8601 strings, dates or datetimes. Naive values are read
as wall time in the preferred time zone (Asia/Kolkata unless the caller
passes the store's timezone preference). Helpers never raise on bad input;
they return the same placeholders the web dashboard shows.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser as date_parser

from lawmasters.domain.value_objects import DEFAULT_TIMEZONE
from lawmasters.logging_config import get_logger

logger = get_logger(__name__)

INVALID_DATE = "Invalid date"
INVALID_TIME = "Invalid time"

DateLike = str | date | datetime

_MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
_WEEKDAYS = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

# date-fns style tokens, longest first so "MMMM" wins over "MM".
_TOKEN_RE = re.compile(
    r"'(?:[^']|'')*'|EEEE|EEE|yyyy|yy|MMMM|MMM|MM|M|dd|d|HH|H|hh|h|mm|m|ss|s|a"
)


@dataclass(frozen=True, slots=True)
class TimeParts:
    hour: str
    period: str
    full: str


INVALID_TIME_PARTS = TimeParts(hour="--", period="--", full=INVALID_TIME)


def resolve_zone(name: str | None = None) -> tzinfo:
    """Return the ZoneInfo for name, falling back to the default zone."""
    try:
        return ZoneInfo(name or DEFAULT_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("unknown_timezone", timezone=name, fallback=DEFAULT_TIMEZONE)
        return ZoneInfo(DEFAULT_TIMEZONE)


def parse_datetime(value: DateLike, tz: str | None = None) -> datetime | None:
    """Parse value into an aware datetime in the preferred zone, or None."""
    zone = resolve_zone(tz)
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    else:
        try:
            parsed = date_parser.isoparse(value)
        except (ValueError, OverflowError, TypeError):
            return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=zone)
    return parsed.astimezone(zone)


def _now(now: datetime | None, tz: str | None) -> datetime:
    zone = resolve_zone(tz)
    if now is None:
        return datetime.now(zone)
    if now.tzinfo is None:
        return now.replace(tzinfo=zone)
    return now.astimezone(zone)


def _hour12(value: datetime) -> int:
    return value.hour % 12 or 12


_TOKEN_RENDERERS: dict[str, Callable[[datetime], str]] = {
    "yyyy": lambda v: f"{v.year:04d}",
    "yy": lambda v: f"{v.year % 100:02d}",
    "MMMM": lambda v: _MONTHS[v.month - 1],
    "MMM": lambda v: _MONTHS[v.month - 1][:3],
    "MM": lambda v: f"{v.month:02d}",
    "M": lambda v: str(v.month),
    "dd": lambda v: f"{v.day:02d}",
    "d": lambda v: str(v.day),
    "EEEE": lambda v: _WEEKDAYS[v.weekday()],
    "EEE": lambda v: _WEEKDAYS[v.weekday()][:3],
    "HH": lambda v: f"{v.hour:02d}",
    "H": lambda v: str(v.hour),
    "hh": lambda v: f"{_hour12(v):02d}",
    "h": lambda v: str(_hour12(v)),
    "mm": lambda v: f"{v.minute:02d}",
    "m": lambda v: str(v.minute),
    "ss": lambda v: f"{v.second:02d}",
    "s": lambda v: str(v.second),
    "a": lambda v: "AM" if v.hour < 12 else "PM",
}


def _render_token(token: str, value: datetime) -> str:
    if token.startswith("'"):
        return token[1:-1].replace("''", "'")
    return _TOKEN_RENDERERS[token](value)


def format_pattern(value: datetime, pattern: str) -> str:
    """Render value with a date-fns style pattern such as 'dd/MM/yyyy'."""
    return _TOKEN_RE.sub(lambda m: _render_token(m.group(0), value), pattern)


def format_with_preference(
    value: DateLike, pattern: str, tz: str | None = None
) -> str:
    """Format value with the user's date_format preference."""
    parsed = parse_datetime(value, tz)
    if parsed is None:
        return INVALID_DATE
    return format_pattern(parsed, pattern)


def format_date(value: DateLike, tz: str | None = None) -> str:
    return format_with_preference(value, "MMM dd, yyyy", tz)


def format_date_time(value: DateLike, tz: str | None = None) -> str:
    return format_with_preference(value, "MMM dd, yyyy HH:mm", tz)


def format_time(value: DateLike, tz: str | None = None) -> TimeParts:
    parsed = parse_datetime(value, tz)
    if parsed is None:
        return INVALID_TIME_PARTS
    return TimeParts(
        hour=format_pattern(parsed, "h"),
        period=format_pattern(parsed, "a"),
        full=format_pattern(parsed, "h:mm a"),
    )


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def format_relative_date(
    value: DateLike, now: datetime | None = None, tz: str | None = None
) -> str:
    """Describe value relative to now ("5 minutes ago", "2 days ago").

    Future values read as "Just now"; anything a week or older falls back
    to the absolute date.
    """
    parsed = parse_datetime(value, tz)
    if parsed is None:
        return INVALID_DATE

    minutes = math.floor((_now(now, tz) - parsed).total_seconds() / 60)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return _plural(minutes, "minute")
    if minutes < 1440:
        return _plural(minutes // 60, "hour")
    if minutes < 10080:
        return _plural(minutes // 1440, "day")
    return format_pattern(parsed, "MMM dd, yyyy")


def is_today(
    value: DateLike, now: datetime | None = None, tz: str | None = None
) -> bool:
    parsed = parse_datetime(value, tz)
    return parsed is not None and parsed.date() == _now(now, tz).date()


def is_same_day(first: DateLike, second: DateLike, tz: str | None = None) -> bool:
    a = parse_datetime(first, tz)
    b = parse_datetime(second, tz)
    return a is not None and b is not None and a.date() == b.date()


def is_overdue(
    due: DateLike, now: datetime | None = None, tz: str | None = None
) -> bool:
    parsed = parse_datetime(due, tz)
    return parsed is not None and parsed < _now(now, tz)


def days_until(
    value: DateLike, now: datetime | None = None, tz: str | None = None
) -> int:
    """Whole days until value, rounded up; 0 for unparseable input."""
    parsed = parse_datetime(value, tz)
    if parsed is None:
        return 0
    return math.ceil((parsed - _now(now, tz)) / timedelta(days=1))


def format_date_for_input(value: DateLike, tz: str | None = None) -> str:
    parsed = parse_datetime(value, tz)
    return format_pattern(parsed, "yyyy-MM-dd") if parsed else ""


def format_date_time_for_input(value: DateLike, tz: str | None = None) -> str:
    parsed = parse_datetime(value, tz)
    return format_pattern(parsed, "yyyy-MM-dd'T'HH:mm") if parsed else ""


def local_date_string(now: datetime | None = None, tz: str | None = None) -> str:
    """Long date for the dashboard header, e.g. 'Saturday, 17 October 2026'."""
    return format_pattern(_now(now, tz), "EEEE, d MMMM yyyy")


def local_time_string(now: datetime | None = None, tz: str | None = None) -> str:
    return format_pattern(_now(now, tz), "hh:mm a")


def format_duration(milliseconds: int) -> str:
    """Format a timer duration as HH:MM:SS."""
    seconds = max(int(milliseconds), 0) // 1000
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    return f"{h:02}:{m:02}:{s:02}"
