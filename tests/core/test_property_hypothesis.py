"""
Property-based tests for amortization, growth and recurrence identities.
"""

import warnings
from datetime import date, timedelta
from decimal import Decimal

from hypothesis import assume, given, settings
from hypothesis import strategies as st

from finprojector import (
    AmortizationProjector,
    Frequency,
    GrowthProjector,
    HorizonExceededWarning,
    RecurrenceScheduler,
    RecurringObligation,
    ScheduleStatus,
)

money_strategy = st.decimals(
    min_value=Decimal("1.00"), max_value=Decimal("100000.00"), places=2, allow_nan=False, allow_infinity=False
)
rate_strategy = st.decimals(
    min_value=Decimal("0"), max_value=Decimal("36"), places=2, allow_nan=False, allow_infinity=False
)
growth_rate_strategy = st.decimals(
    min_value=Decimal("-50"), max_value=Decimal("30"), places=2, allow_nan=False, allow_infinity=False
)
date_strategy = st.dates(min_value=date(2000, 1, 1), max_value=date(2040, 12, 31))


def _project(balance, rate, payment, extra=Decimal("0")):
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", HorizonExceededWarning)
        return AmortizationProjector().project(balance, rate, payment, extra, max_periods=600)


class TestAmortizationProperties:
    @given(balance=money_strategy, rate=rate_strategy, payment=money_strategy)
    @settings(max_examples=60, deadline=None)
    def test_principal_is_conserved(self, balance, rate, payment):
        """Principal paid plus the remaining balance always equals the start."""
        schedule = _project(balance, rate, payment)

        assert schedule.total_principal + schedule.ending_balance == balance
        for period in schedule.periods:
            assert period.balance >= Decimal("0")
        if schedule.status is ScheduleStatus.PAID_OFF:
            assert schedule.ending_balance == Decimal("0")

    @given(
        balance=money_strategy,
        rate=rate_strategy,
        payment=money_strategy,
        extra=st.decimals(min_value=Decimal("0.01"), max_value=Decimal("5000"), places=2),
    )
    @settings(max_examples=60, deadline=None)
    def test_extra_payment_never_hurts(self, balance, rate, payment, extra):
        baseline = _project(balance, rate, payment)
        accelerated = _project(balance, rate, payment, extra)
        assume(baseline.status is ScheduleStatus.PAID_OFF)

        assert accelerated.status is ScheduleStatus.PAID_OFF
        assert accelerated.months_remaining <= baseline.months_remaining
        assert accelerated.total_interest <= baseline.total_interest

    @given(balance=money_strategy, rate=rate_strategy, payment=money_strategy)
    @settings(max_examples=40, deadline=None)
    def test_projection_is_deterministic(self, balance, rate, payment):
        assert _project(balance, rate, payment) == _project(balance, rate, payment)


class TestGrowthProperties:
    @given(
        principal=money_strategy,
        rate=growth_rate_strategy,
        months=st.integers(min_value=0, max_value=120),
    )
    @settings(max_examples=60, deadline=None)
    def test_monotonic_in_time(self, principal, rate, months):
        projector = GrowthProjector()
        now = projector.projected_value(principal, rate, months)
        later = projector.projected_value(principal, rate, months + 12)

        if rate > 0:
            assert later >= now
        elif rate < 0:
            assert later <= now
        else:
            assert later == now

    @given(principal=money_strategy, rate=growth_rate_strategy)
    @settings(max_examples=40, deadline=None)
    def test_zero_months_is_principal(self, principal, rate):
        assert GrowthProjector().projected_value(principal, rate, 0) == principal


class TestRecurrenceProperties:
    @given(
        start=date_strategy,
        frequency=st.sampled_from(list(Frequency)),
        offset=st.integers(min_value=-400, max_value=400),
        horizon=st.integers(min_value=0, max_value=400),
    )
    @settings(max_examples=80, deadline=None)
    def test_window_is_sorted_bounded_and_stable(self, start, frequency, offset, horizon):
        ob = RecurringObligation(id="x", start_date=start, frequency=frequency, amount="1")
        scheduler = RecurrenceScheduler()
        from_date = start + timedelta(days=offset)

        dates = scheduler.occurrences_within(ob, from_date, horizon)

        assert dates == sorted(set(dates))
        assert all(max(start, from_date) <= d <= from_date + timedelta(days=horizon) for d in dates)
        assert scheduler.occurrences_within(ob, from_date, horizon) == dates

    @given(start=date_strategy, frequency=st.sampled_from(list(Frequency)))
    @settings(max_examples=60, deadline=None)
    def test_advance_walks_the_schedule(self, start, frequency):
        ob = RecurringObligation(id="x", start_date=start, frequency=frequency, amount="1")
        scheduler = RecurrenceScheduler()
        expected = scheduler.occurrences_within(ob, start, 370)[:4]

        paid = []
        for _ in expected:
            ob = scheduler.advance(ob)
            paid.append(ob.last_paid)
        assert paid == expected
