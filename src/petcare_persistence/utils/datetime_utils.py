"""
Date utilities for pet-care records.

Record dates (birth dates, application/expiry dates, appointment days) are
calendar dates stored as ISO ``YYYY-MM-DD`` strings in the document medium and
as ``DATE`` columns in the relational medium. These helpers normalise the
values callers hand in.
"""

from datetime import date, datetime
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo

DateLike = Union[date, datetime, str]


def get_current_utc() -> datetime:
    """Get the current UTC datetime."""
    return datetime.now(ZoneInfo("UTC"))


def to_date(value: DateLike) -> date:
    """
    Convert a date, datetime or ISO string to a calendar date.

    Datetimes (and ISO datetime strings, including a trailing ``Z``) keep only
    their date part, so ``"2024-03-01T18:30:00.000Z"`` becomes ``2024-03-01``.

    Args:
        value: Value to convert

    Returns:
        The calendar date

    Raises:
        ValueError: If the value is empty or cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Cannot interpret {value!r} as a date")

    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValueError(f"Date must be in ISO format, got {value!r}")


def to_optional_date(value: Optional[DateLike]) -> Optional[date]:
    """Like :func:`to_date` but maps ``None`` and blank strings to ``None``."""
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return to_date(value)


def normalize_date_range(start: DateLike, end: DateLike) -> Tuple[date, date]:
    """
    Normalise an inclusive date range.

    Args:
        start: First day of the range
        end: Last day of the range

    Returns:
        Tuple of (start, end) calendar dates

    Raises:
        ValueError: If either bound is missing or unparsable, or start > end
    """
    if start is None or end is None:
        raise ValueError("Both start and end dates are required")

    start_date = to_date(start)
    end_date = to_date(end)
    if start_date > end_date:
        raise ValueError(
            f"Start date {start_date.isoformat()} is after end date {end_date.isoformat()}"
        )
    return start_date, end_date


def is_within_range(value: Optional[DateLike], start: date, end: date) -> bool:
    """
    Check whether a stored date falls within ``[start, end]``.

    Unparsable or missing values are treated as outside the range.
    """
    try:
        day = to_optional_date(value)
    except ValueError:
        return False
    if day is None:
        return False
    return start <= day <= end
