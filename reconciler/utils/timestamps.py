"""Timestamp utilities for UTC handling and sold-date parsing.

Sold dates arrive as ISO 8601 strings from Booli ("2024-05-03",
"2024-05-03T00:00:00Z") and as Swedish card text from Hemnet ("3 maj 2024",
"12 okt. 2024"). Everything is parsed into timezone-aware UTC datetimes;
naive values are treated as UTC.
"""

import re
from datetime import datetime, timezone
from typing import Optional

SECONDS_PER_DAY = 86400

# Keyed on the first three letters; English spellings cover the months
# where Swedish differs.
_MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "maj": 5,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "okt": 10,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

_DAY_MONTH_YEAR_RE = re.compile(r"^(\d{1,2})\s+([^\W\d_]+)\.?\s+(\d{4})$")


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure a datetime is timezone-aware and in UTC.

    Naive datetimes are treated as UTC; aware ones are converted.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def parse_iso_datetime(iso_string: str) -> Optional[datetime]:
    """Parse an ISO 8601 date or datetime string to UTC datetime.

    Supports:
    - 2025-11-04T12:00:00Z
    - 2025-11-04T12:00:00+00:00
    - 2025-11-04 12:00:00
    - 2025-11-04

    Returns:
        Timezone-aware datetime in UTC, or None if parsing fails
    """
    if not iso_string or not iso_string.strip():
        return None

    cleaned = iso_string.strip()
    if cleaned.endswith(("Z", "z")):
        cleaned = cleaned[:-1] + "+00:00"

    try:
        return ensure_utc(datetime.fromisoformat(cleaned))
    except ValueError:
        return None


def parse_day_month_year(text: str) -> Optional[datetime]:
    """Parse Swedish (or English) "day month year" dates.

    Example:
        >>> parse_day_month_year("12 okt. 2024").date().isoformat()
        '2024-10-12'
    """
    match = _DAY_MONTH_YEAR_RE.match(text.strip().lower())
    if not match:
        return None

    day, month_name, year = match.groups()
    month = _MONTHS.get(month_name[:3])
    if month is None:
        return None

    try:
        return datetime(int(year), month, int(day), tzinfo=timezone.utc)
    except ValueError:
        return None


def parse_sold_date(value) -> Optional[datetime]:
    """Parse a sold date in any supported format.

    Args:
        value: Raw sold date (non-strings never parse)

    Returns:
        Timezone-aware UTC datetime, or None if the value is not a date
    """
    if not isinstance(value, str) or not value.strip():
        return None

    return parse_iso_datetime(value) or parse_day_month_year(value)


def days_between(first: datetime, second: datetime) -> float:
    """Absolute distance between two datetimes in (fractional) days."""
    return abs((first - second).total_seconds()) / SECONDS_PER_DAY
