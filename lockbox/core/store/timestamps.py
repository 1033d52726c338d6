"""
Timestamp text form for credential change dates.

Format: ``2016-Jan-05 13:45:10`` with an optional ``.ffffff`` fraction, and
``not-a-date-time`` when unset. Month names are fixed English abbreviations
so output does not depend on the process locale. The format has no offset:
aware values are written, and ISO input with an offset is read, as naive
local time.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Final, Optional

NOT_A_DATE_TIME: Final[str] = "not-a-date-time"

_MONTHS: Final[tuple[str, ...]] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(\d{4})-([A-Za-z]{3})-(\d{2}) (\d{2}):(\d{2}):(\d{2})(?:\.(\d{1,6}))?$"
)


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return NOT_A_DATE_TIME

    value = to_local_naive(value)

    text = (
        f"{value.year:04d}-{_MONTHS[value.month - 1]}-{value.day:02d} "
        f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += f".{value.microsecond:06d}"
    return text


def parse_timestamp(text: str) -> Optional[datetime]:
    """
    Parse a timestamp written by format_timestamp (or ISO-8601).

    Raises:
        ValueError: If the text is not a recognised timestamp
    """
    text = text.strip()
    if text == NOT_A_DATE_TIME:
        return None

    match = _PATTERN.match(text)
    if match is None:
        return to_local_naive(datetime.fromisoformat(text))

    year, month_name, day, hour, minute, second, fraction = match.groups()
    try:
        month = _MONTHS.index(month_name.capitalize()) + 1
    except ValueError:
        raise ValueError(f"Unknown month: {month_name}") from None

    return datetime(
        int(year), month, int(day),
        int(hour), int(minute), int(second),
        int(fraction.ljust(6, "0")) if fraction else 0,
    )
