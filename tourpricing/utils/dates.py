"""Calendar date helpers shared by imports and pricing."""

from datetime import date, datetime
from typing import Optional, Union

DateInput = Union[date, datetime, str, None]


def to_calendar_date(value: DateInput) -> Optional[date]:
    """Reduce a date, datetime or ISO string to its calendar date.

    Time and timezone information is dropped: the calendar date written in the
    value is the one kept, so "2025-03-01T23:30:00+05:30" stays 2025-03-01.

    Args:
        value: date, datetime, ISO 8601 string, or None

    Returns:
        The calendar date, or None when value is None/blank

    Raises:
        ValueError: If a string cannot be read as an ISO 8601 date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        if stripped.endswith("Z"):
            stripped = stripped[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(stripped).date()
        except ValueError:
            return date.fromisoformat(stripped)
    raise ValueError(f"Unsupported date value: {value!r}")


def date_ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """Return True when the closed windows [start_a, end_a] and [start_b, end_b] share a day."""
    return start_a <= end_b and end_a >= start_b
