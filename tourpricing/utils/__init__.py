"""Shared helpers."""

from tourpricing.utils.dates import date_ranges_overlap, to_calendar_date

__all__ = ["date_ranges_overlap", "to_calendar_date"]
