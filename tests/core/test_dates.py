"""
Tests for calendar helpers.
"""

from datetime import date, datetime
from decimal import Decimal

import numpy as np
import pytest

from finprojector.core.dates import (
    add_months,
    clamp_day,
    days_in_month,
    month_diff,
    month_range,
    months_held,
    parse_date,
)


class TestAddMonths:
    def test_preserves_day(self):
        assert add_months(date(2024, 1, 15), 1) == date(2024, 2, 15)

    def test_clamps_to_month_end(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
        assert add_months(date(2024, 3, 31), 1) == date(2024, 4, 30)

    def test_anchor_day_returns_to_31st(self):
        """Without the anchor Feb 29 + 1 month would give Mar 29."""
        assert add_months(date(2024, 2, 29), 1) == date(2024, 3, 29)
        assert add_months(date(2024, 2, 29), 1, day=31) == date(2024, 3, 31)

    def test_crosses_year_boundaries(self):
        assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)
        assert add_months(date(2024, 1, 15), -2) == date(2023, 11, 15)
        assert add_months(date(2024, 6, 1), 24) == date(2026, 6, 1)


def test_clamp_day_and_days_in_month():
    assert days_in_month(2024, 2) == 29
    assert days_in_month(2100, 2) == 28
    assert clamp_day(2024, 2, 31) == date(2024, 2, 29)
    assert clamp_day(2024, 4, 15) == date(2024, 4, 15)


def test_month_diff_ignores_day():
    assert month_diff(date(2023, 3, 31), date(2024, 1, 1)) == 10
    assert month_diff(date(2024, 5, 1), date(2024, 2, 28)) == -3


class TestMonthsHeld:
    def test_one_julian_year_is_twelve_months(self):
        held = months_held(date(2023, 1, 1), date(2024, 1, 1))
        assert held == Decimal(365) * 12 / Decimal("365.25")
        assert Decimal("11.9") < held < Decimal("12")

    def test_future_purchase_is_zero(self):
        assert months_held(date(2024, 6, 1), date(2024, 1, 1)) == Decimal("0")
        assert months_held(date(2024, 1, 1), date(2024, 1, 1)) == Decimal("0")


def test_month_range_is_monthly_datetime64():
    months = month_range(date(2026, 1, 15), 3)

    assert months.dtype == np.dtype("datetime64[M]")
    assert [str(m) for m in months] == ["2026-01", "2026-02", "2026-03"]


class TestParseDate:
    def test_iso_string(self):
        assert parse_date("2024-02-29") == date(2024, 2, 29)

    def test_time_part_is_ignored(self):
        assert parse_date("2024-03-15T10:30:00.000Z") == date(2024, 3, 15)

    def test_date_and_datetime_pass_through(self):
        assert parse_date(date(2024, 1, 1)) == date(2024, 1, 1)
        assert parse_date(datetime(2024, 1, 1, 23, 59)) == date(2024, 1, 1)

    @pytest.mark.parametrize("bad", ["2024-02-30", "yesterday", 20240101, None])
    def test_invalid_values(self, bad):
        with pytest.raises(ValueError, match="start_date"):
            parse_date(bad, "start_date")
