"""Date parsing utilities.

Statement exports use day-first dates. Everything is normalized to ISO local
timestamps (``YYYY-MM-DDTHH:MM:SS``) without a timezone.
"""

import re
from datetime import date, datetime, time

from dateutil import parser as date_parser

from finledger.domain.errors import InvalidDate, InvalidTime

_DATE_SEPARATORS = re.compile(r"[/-]")


def _split_day_first(date_str: str) -> tuple[int, int, int]:
    parts = [p for p in _DATE_SEPARATORS.split(date_str.strip()) if p]
    if len(parts) != 3:
        raise InvalidDate(f"Invalid date: {date_str}")
    try:
        day, month, year = (int(p) for p in parts)
    except ValueError:
        raise InvalidDate(f"Invalid date: {date_str}")
    if not (1 <= month <= 12 and 1 <= day <= 31):
        raise InvalidDate(f"Invalid date: {date_str}")
    return year, month, day


def _split_time(time_str: str) -> tuple[int, int, int]:
    parts = time_str.strip().split(":")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise InvalidTime(f"Invalid time: {time_str}")
    seconds = parts[2] if len(parts) > 2 and parts[2] else "00"
    try:
        return int(parts[0]), int(parts[1]), int(seconds)
    except ValueError:
        raise InvalidTime(f"Invalid time: {time_str}")


def to_iso_local_datetime(date_str: str, time_str: str) -> str:
    """Combine a day-first date and a clock time into an ISO local timestamp.

    Args:
        date_str: Date as DD/MM/YYYY or DD-MM-YYYY
        time_str: Time as HH:MM or HH:MM:SS

    Returns:
        Timestamp formatted as YYYY-MM-DDTHH:MM:SS

    Raises:
        InvalidDate: If the date is not a real calendar day
        InvalidTime: If the time lacks hours or minutes or is out of range
    """
    year, month, day = _split_day_first(date_str)
    hour, minute, second = _split_time(time_str)
    try:
        day_value = date(year, month, day)
    except ValueError:
        raise InvalidDate(f"Invalid date: {date_str}")
    try:
        time_value = time(hour, minute, second)
    except ValueError:
        raise InvalidTime(f"Invalid time: {time_str}")
    return datetime.combine(day_value, time_value).isoformat()


def parse_wise_datetime(date_time_str: str | None, fallback_date: str | None = None) -> str:
    """Parse the combined date-time column used in Wise exports.

    ``"30-11-2025 07:46:38.928"`` becomes ``"2025-11-30T07:46:38"``. When the
    combined column is empty the plain date column is used at midnight.

    Args:
        date_time_str: Value of the combined date-time column
        fallback_date: Value of the plain date column

    Returns:
        Timestamp formatted as YYYY-MM-DDTHH:MM:SS

    Raises:
        InvalidDate: If neither column holds a usable date
        InvalidTime: If the time part is malformed
    """
    source = (date_time_str or "").strip() or (fallback_date or "").strip()
    if not source:
        raise InvalidDate("Missing date")

    date_part, _, time_part = source.partition(" ")
    # Fractional seconds are dropped
    time_part = time_part.strip().split(".")[0] or "00:00:00"
    return to_iso_local_datetime(date_part, time_part)


def parse_iso_date(date_str: str) -> date:
    """Parse a strict YYYY-MM-DD date."""
    try:
        return date.fromisoformat(date_str.strip())
    except ValueError:
        raise InvalidDate(f"Invalid date: {date_str}")


def parse_english_date(date_str: str) -> date:
    """Parse a long-form English date such as ``"5 March 2024"``.

    Raises:
        InvalidDate: If the string cannot be parsed
    """
    try:
        return date_parser.parse(date_str.strip(), dayfirst=True).date()
    except (ValueError, OverflowError):
        raise InvalidDate(f"Invalid date: {date_str}")
