"""
Debt amortization projections.

Builds month-by-month payoff schedules for a fixed monthly payment, with an
optional extra principal amount for accelerated payoff scenarios.
"""

from __future__ import annotations

import logging
import warnings
from datetime import date
from decimal import Decimal

from finprojector.config import DEFAULT_CONFIG, EngineConfig
from finprojector.core.dates import add_months, clamp_day
from finprojector.core.decimal_math import ONE, ZERO, ceil_int, daily_rate, monthly_rate, to_decimal
from finprojector.core.errors import HorizonExceededWarning, InvalidInputError, InvalidRateError
from finprojector.core.instruments import DebtInstrument
from finprojector.core.results import (
    AmortizationPeriod,
    AmortizationSchedule,
    DebtProjection,
    PayoffComparison,
    PaymentSplit,
    ScheduleStatus,
)

logger = logging.getLogger(__name__)

Number = Decimal | int | float | str


def first_due_date(start: date, due_day: int | None = None) -> date:
    """
    First payment date strictly after ``start``.

    With no ``due_day`` the payment falls one calendar month after ``start``.
    Otherwise it is the next ``due_day`` (clamped to the month end) after
    ``start``, which may still be in the same month.
    """
    day = due_day if due_day is not None else start.day
    candidate = clamp_day(start.year, start.month, day)
    if candidate > start:
        return candidate
    return add_months(start, 1, day=day)


def estimate_months_to_payoff(
    balance: Number, annual_rate_percent: Number, monthly_payment: Number
) -> int | None:
    """
    Closed-form number of payments needed to clear a balance.

    Uses the annuity term formula ``n = -ln(1 - B*r/P) / ln(1 + r)`` (or
    ``B / P`` at a zero rate), rounded up. Returns None when the payment
    never covers the interest.

    Args:
        balance: Outstanding balance
        annual_rate_percent: Nominal annual rate in percent
        monthly_payment: Total monthly payment

    Returns:
        Number of months, or None for a non-amortizing debt
    """
    b = to_decimal(balance, "balance")
    payment = to_decimal(monthly_payment, "monthly_payment")
    r = monthly_rate(to_decimal(annual_rate_percent, "annual_rate_percent"))

    if b <= ZERO:
        return 0
    if payment <= ZERO:
        return None
    if r == ZERO:
        return ceil_int(b / payment)
    if payment <= b * r:
        return None
    n = -(ONE - b * r / payment).ln() / (ONE + r).ln()
    return ceil_int(n)


class AmortizationProjector:
    """
    Month-by-month payoff projector for fixed-payment debts.

    Each period charges ``balance * rate / 100 / 12`` interest (rounded to
    the currency precision), applies the rest of the payment to principal
    and advances one calendar month. The final principal payment is capped
    at the outstanding balance so the schedule lands exactly on zero.

    **Example:**
        ```python
        from datetime import date
        from finprojector import AmortizationProjector

        projector = AmortizationProjector()
        schedule = projector.project("5000", "18", "200", start=date(2024, 1, 1))
        schedule.status            # ScheduleStatus.PAID_OFF
        schedule.months_remaining  # 32
        schedule.payoff_date       # date(2026, 9, 1)
        ```
    """

    def __init__(self, config: EngineConfig | None = None):
        self.config = config or DEFAULT_CONFIG

    def project(
        self,
        balance: Number,
        annual_rate_percent: Number,
        monthly_payment: Number,
        extra_payment: Number = 0,
        max_periods: int | None = None,
        *,
        start: date | None = None,
        due_day: int | None = None,
        instrument_id: str | None = None,
    ) -> AmortizationSchedule:
        """
        Project the payoff schedule of a debt.

        Args:
            balance: Outstanding balance
            annual_rate_percent: Nominal annual rate in percent (>= 0)
            monthly_payment: Scheduled monthly payment (> 0)
            extra_payment: Extra principal paid every month (>= 0)
            max_periods: Schedule cap; defaults to ``config.max_periods``
            start: Reference date; payments are dated from the next due day
            due_day: Day of month payments fall on (defaults to ``start.day``)
            instrument_id: ID carried into the schedule and its errors

        Returns:
            AmortizationSchedule tagged ``PAID_OFF``, ``NON_AMORTIZING`` or
            ``TRUNCATED``

        Raises:
            InvalidRateError: If the rate is negative
            InvalidInputError: For negative balances or non-positive payments
        """
        money = self.config.money
        cap = self.config.max_periods if max_periods is None else max_periods
        if isinstance(cap, bool) or not isinstance(cap, int) or cap < 1:
            raise InvalidInputError(f"max_periods must be a positive integer, got {cap!r}", instrument_id)

        remaining = money.quantize(to_decimal(balance, "balance"))
        rate = to_decimal(annual_rate_percent, "annual_rate_percent")
        payment = money.quantize(to_decimal(monthly_payment, "monthly_payment"))
        extra = money.quantize(to_decimal(extra_payment, "extra_payment"))

        if rate < ZERO:
            raise InvalidRateError(f"debt rate must not be negative, got {rate}", instrument_id)
        if remaining < ZERO:
            raise InvalidInputError(f"balance must not be negative, got {remaining}", instrument_id)
        if payment <= ZERO:
            raise InvalidInputError(f"monthly_payment must be positive, got {payment}", instrument_id)
        if extra < ZERO:
            raise InvalidInputError(f"extra_payment must not be negative, got {extra}", instrument_id)

        r = monthly_rate(rate)
        first_date = first_due_date(start, due_day) if start is not None else None
        anchor_day = None
        if start is not None:
            anchor_day = due_day if due_day is not None else start.day

        starting_balance = remaining
        periods: list[AmortizationPeriod] = []
        status = ScheduleStatus.PAID_OFF
        first_interest = None
        period_index = 0

        while remaining > ZERO and period_index < cap:
            interest = money.quantize(remaining * r)
            principal = min(payment + extra - interest, remaining)
            if principal <= ZERO:
                status = ScheduleStatus.NON_AMORTIZING
                first_interest = interest
                break

            remaining -= principal
            period_index += 1
            period_date = None
            if first_date is not None:
                period_date = add_months(first_date, period_index - 1, day=anchor_day)
            periods.append(
                AmortizationPeriod(
                    period_index=period_index,
                    date=period_date,
                    balance=remaining,
                    interest_portion=interest,
                    principal_portion=principal,
                )
            )

        if status is ScheduleStatus.PAID_OFF and remaining > ZERO:
            status = ScheduleStatus.TRUNCATED
            label = f"[{instrument_id}] " if instrument_id else ""
            warnings.warn(
                f"{label}schedule truncated at {cap} periods with {remaining} outstanding; "
                f"payoff date is beyond the horizon",
                HorizonExceededWarning,
                stacklevel=2,
            )

        return AmortizationSchedule(
            starting_balance=starting_balance,
            periods=tuple(periods),
            status=status,
            max_periods=cap,
            monthly_payment=payment,
            extra_payment=extra,
            annual_rate_percent=rate,
            first_interest=first_interest,
            instrument_id=instrument_id,
        )

    def project_debt(
        self,
        debt: DebtInstrument,
        now: date,
        extra_payment: Number = 0,
        max_periods: int | None = None,
    ) -> DebtProjection:
        """
        Payoff projection for a debt snapshot as of ``now``.

        Raises:
            NonAmortizingDebtError: If the minimum payment never covers interest
        """
        schedule = self.project(
            debt.current_balance,
            debt.annual_rate_percent,
            debt.minimum_payment,
            extra_payment,
            max_periods,
            start=now,
            due_day=debt.due_day_of_month,
            instrument_id=debt.id,
        ).raise_for_status()
        return self._summarize(schedule)

    def compare(
        self,
        balance: Number,
        annual_rate_percent: Number,
        monthly_payment: Number,
        extra_payment: Number,
        max_periods: int | None = None,
        *,
        start: date | None = None,
        due_day: int | None = None,
        instrument_id: str | None = None,
    ) -> PayoffComparison:
        """
        Baseline versus accelerated payoff, both built with the same cap.

        Returns:
            PayoffComparison with ``months_saved`` and ``interest_saved``
        """
        cap = self.config.max_periods if max_periods is None else max_periods
        baseline = self.project(
            balance,
            annual_rate_percent,
            monthly_payment,
            0,
            cap,
            start=start,
            due_day=due_day,
            instrument_id=instrument_id,
        )
        accelerated = self.project(
            balance,
            annual_rate_percent,
            monthly_payment,
            extra_payment,
            cap,
            start=start,
            due_day=due_day,
            instrument_id=instrument_id,
        )
        return PayoffComparison.from_schedules(baseline, accelerated)

    def compare_debt(
        self,
        debt: DebtInstrument,
        extra_payment: Number,
        now: date,
        max_periods: int | None = None,
    ) -> PayoffComparison:
        """Accelerated payoff comparison for a debt snapshot as of ``now``."""
        return self.compare(
            debt.current_balance,
            debt.annual_rate_percent,
            debt.minimum_payment,
            extra_payment,
            max_periods,
            start=now,
            due_day=debt.due_day_of_month,
            instrument_id=debt.id,
        )

    def accrued_interest(
        self,
        balance: Number,
        annual_rate_percent: Number,
        last_payment_date: date,
        as_of: date,
    ) -> Decimal:
        """
        Simple interest accrued since the last payment.

        ``balance * rate / 100 / 365 * days``, rounded to the currency
        precision. Dates in the wrong order accrue nothing.
        """
        rate = to_decimal(annual_rate_percent, "annual_rate_percent")
        if rate < ZERO:
            raise InvalidRateError(f"debt rate must not be negative, got {rate}")
        days = max(0, (as_of - last_payment_date).days)
        accrued = to_decimal(balance, "balance") * daily_rate(rate) * days
        return self.config.money.quantize(accrued)

    def split_payment(
        self,
        balance: Number,
        annual_rate_percent: Number,
        payment_amount: Number,
        last_payment_date: date,
        payment_date: date,
    ) -> PaymentSplit:
        """
        Split a recorded payment into interest and principal.

        Accrued interest is paid first; the remainder reduces the balance,
        which never goes below zero.
        """
        money = self.config.money
        current = money.quantize(to_decimal(balance, "balance"))
        amount = money.quantize(to_decimal(payment_amount, "payment_amount"))
        if amount < ZERO:
            raise InvalidInputError(f"payment_amount must not be negative, got {amount}")

        accrued = self.accrued_interest(current, annual_rate_percent, last_payment_date, payment_date)
        interest_paid = min(amount, accrued)
        principal_paid = max(ZERO, amount - interest_paid)
        new_balance = max(ZERO, current - principal_paid)
        return PaymentSplit(
            interest_paid=interest_paid,
            principal_paid=principal_paid,
            new_balance=new_balance,
        )

    def _summarize(self, schedule: AmortizationSchedule) -> DebtProjection:
        estimated = None
        if schedule.status is ScheduleStatus.TRUNCATED:
            estimated = estimate_months_to_payoff(
                schedule.starting_balance,
                schedule.annual_rate_percent,
                schedule.monthly_payment + schedule.extra_payment,
            )
        logger.debug(
            "Projected %s: status=%s months=%s interest=%s",
            schedule.instrument_id,
            schedule.status.value,
            schedule.months_remaining,
            schedule.total_interest,
        )
        return DebtProjection(
            instrument_id=schedule.instrument_id,
            status=schedule.status,
            payoff_date=schedule.payoff_date,
            total_interest=schedule.total_interest,
            months_remaining=schedule.months_remaining,
            estimated_months=estimated,
            schedule=schedule,
        )
