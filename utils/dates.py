"""
Date helpers for game logs and stats.

All aggregation happens in UTC so that day buckets do not depend on the
server's (or the player's) local timezone.
"""

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple, Union

DATE_ONLY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def to_utc(value: Union[datetime, date, str]) -> datetime:
    """
    Coerce a datetime, date or ISO-8601 string into an aware UTC datetime.

    Naive datetimes are assumed to already be UTC. A trailing "Z" is accepted.

    Raises:
        ValueError: If the string cannot be parsed or the value falls outside
            the representable range once converted to UTC.
        TypeError: If the value is not a supported type.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    elif not isinstance(value, datetime):
        raise TypeError(f"Expected datetime, date or str, got {type(value).__name__}")

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    try:
        return value.astimezone(timezone.utc)
    except OverflowError:
        # Offsets that push the value past year 1 or 9999
        raise ValueError(f"Date out of range: {value.isoformat()}")


def isoformat_utc(value: datetime) -> str:
    """Format as ISO-8601 in UTC with millisecond precision and a Z suffix."""
    value = to_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def utc_day(value: Union[datetime, date, str]) -> date:
    """Truncate to the UTC calendar day."""
    return to_utc(value).date()


def start_of_week_utc(value: Union[datetime, date, str]) -> date:
    """Return the Monday of the UTC week containing ``value``."""
    day = utc_day(value)
    return day - timedelta(days=day.weekday())


def parse_date_param(value: Optional[str], is_end: bool = False) -> Optional[datetime]:
    """
    Parse a ``from``/``to`` query parameter.

    A bare ``YYYY-MM-DD`` covers the whole UTC day: the start of the day for
    ``from`` and the last millisecond of the day for ``to``.

    Returns:
        None for an empty value, otherwise an aware UTC datetime.

    Raises:
        ValueError: If the value is not a valid date.
    """
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None

    try:
        if DATE_ONLY_PATTERN.match(text):
            day = date.fromisoformat(text)
            if is_end:
                return datetime.combine(day, time(23, 59, 59, 999000), tzinfo=timezone.utc)
            return datetime.combine(day, time.min, tzinfo=timezone.utc)
        return to_utc(text)
    except ValueError:
        raise ValueError(f"Invalid date: '{value}'")


def parse_date_range(
    date_from: Optional[str], date_to: Optional[str]
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Parse an inclusive date range, rejecting ranges that end before they start."""
    start = parse_date_param(date_from, is_end=False)
    end = parse_date_param(date_to, is_end=True)
    if start and end and start > end:
        raise ValueError("from must be before to")
    return start, end
