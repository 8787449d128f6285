"""
Calendar utilities for FinProjector.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime
from decimal import Decimal

import numpy as np

DAYS_PER_YEAR_JULIAN = Decimal("365.25")


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month."""
    return calendar.monthrange(year, month)[1]


def clamp_day(year: int, month: int, day: int) -> date:
    """
    Build a date, clamping ``day`` to the last valid day of the month.

    **Example:**
        ```python
        clamp_day(2024, 2, 31)  # date(2024, 2, 29)
        clamp_day(2023, 2, 31)  # date(2023, 2, 28)
        ```
    """
    return date(year, month, min(day, days_in_month(year, month)))


def add_months(d: date, months: int, day: int | None = None) -> date:
    """
    Add calendar months to a date.

    The day of month is preserved where the target month has it and clamped
    to the month end otherwise. Pass ``day`` to anchor the result to a day
    other than ``d.day``; this is how a series keeps returning to the 31st
    after a short month.

    Args:
        d: Starting date
        months: Number of months to add (may be negative)
        day: Anchor day of month (defaults to ``d.day``)

    Returns:
        The shifted date
    """
    total = d.year * 12 + (d.month - 1) + months
    year, month0 = divmod(total, 12)
    return clamp_day(year, month0 + 1, day if day is not None else d.day)


def month_diff(start: date, end: date) -> int:
    """Difference in calendar months between two dates, ignoring the day."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def months_held(purchase_date: date, as_of: date) -> Decimal:
    """
    Fractional months elapsed between two dates.

    Uses the average Julian year (365.25 days) so 30 or 31 day months count
    the same. Returns 0 when ``as_of`` is before ``purchase_date``.
    """
    days = (as_of - purchase_date).days
    if days <= 0:
        return Decimal("0")
    return Decimal(days) * 12 / DAYS_PER_YEAR_JULIAN


def month_range(start: date, months: int) -> np.ndarray:
    """
    Generate a range of monthly dates starting from a given date.

    **Args:**
        start: The starting date for the range
        months: Number of months to generate

    **Returns:**
        A numpy array of datetime64 objects representing monthly intervals

    **Example:**
        ```python
        from datetime import date
        from finprojector.core.dates import month_range

        dates = month_range(date(2026, 1, 15), 3)
        # ['2026-01' '2026-02' '2026-03']
        ```
    """
    s = np.datetime64(start, "M")
    return s + np.arange(months).astype("timedelta64[M]")


def parse_date(value: date | str, field: str = "date") -> date:
    """
    Parse an ISO date string (``YYYY-MM-DD``; a trailing time part is ignored).

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"{field} must be an ISO date string, got {value!r}")
    text = value.strip()
    if "T" in text:
        text = text.split("T", 1)[0]
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise ValueError(f"{field} must be an ISO date string, got {value!r}") from None
