"""
Result records returned by the projection engine.

Every result is a frozen dataclass with a ``to_dict()`` that renders
Decimals as strings and dates as ISO strings, ready for JSON. Schedules
also expose ``to_frame()`` for the presentation layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

import pandas as pd

from .dates import month_range
from .decimal_math import ZERO
from .errors import InvalidInputError, NonAmortizingDebtError


def _json(value: Any) -> Any:
    """Convert Decimals, dates and enums to JSON-friendly values."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): _json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json(v) for v in value]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


class ScheduleStatus(str, Enum):
    """Tagged outcome of an amortization run."""

    PAID_OFF = "paid_off"
    NON_AMORTIZING = "non_amortizing"
    TRUNCATED = "truncated"


@dataclass(frozen=True)
class AmortizationPeriod:
    """One month of an amortization schedule."""

    period_index: int
    date: date | None
    balance: Decimal
    interest_portion: Decimal
    principal_portion: Decimal

    @property
    def payment(self) -> Decimal:
        return self.interest_portion + self.principal_portion

    def to_dict(self) -> dict[str, Any]:
        return {
            "period_index": self.period_index,
            "date": _json(self.date),
            "balance": _json(self.balance),
            "interest_portion": _json(self.interest_portion),
            "principal_portion": _json(self.principal_portion),
            "payment": _json(self.payment),
        }


@dataclass(frozen=True)
class AmortizationSchedule:
    """
    Month-by-month payoff schedule for a single debt.

    The ``status`` tag tells a real payoff apart from a debt whose payment
    never covers interest (``NON_AMORTIZING``) and from a schedule cut at
    ``max_periods`` (``TRUNCATED``). Only ``PAID_OFF`` carries a payoff date.

    Attributes:
        starting_balance: Balance before the first period (quantized)
        periods: Ordered schedule entries
        status: Terminal state of the run
        max_periods: Cap the schedule was built with
        monthly_payment: Scheduled payment excluding extra principal
        extra_payment: Extra principal paid every period
        annual_rate_percent: Nominal annual rate the schedule was built with
        first_interest: Interest of the first period (set for non-amortizing runs)
        instrument_id: ID of the debt, when projected from an instrument
    """

    starting_balance: Decimal
    periods: tuple[AmortizationPeriod, ...]
    status: ScheduleStatus
    max_periods: int
    monthly_payment: Decimal
    extra_payment: Decimal = ZERO
    annual_rate_percent: Decimal = ZERO
    first_interest: Decimal | None = None
    instrument_id: str | None = None

    @property
    def months_remaining(self) -> int | None:
        """Number of recorded periods; None when the debt never amortizes."""
        if self.status is ScheduleStatus.NON_AMORTIZING:
            return None
        return len(self.periods)

    @property
    def total_interest(self) -> Decimal:
        return sum((p.interest_portion for p in self.periods), ZERO)

    @property
    def total_principal(self) -> Decimal:
        return sum((p.principal_portion for p in self.periods), ZERO)

    @property
    def ending_balance(self) -> Decimal:
        return self.periods[-1].balance if self.periods else self.starting_balance

    @property
    def payoff_date(self) -> date | None:
        """Date of the final payment, only for schedules that reach zero."""
        if self.status is not ScheduleStatus.PAID_OFF or not self.periods:
            return None
        return self.periods[-1].date

    @property
    def is_paid_off(self) -> bool:
        return self.status is ScheduleStatus.PAID_OFF

    def raise_for_status(self) -> AmortizationSchedule:
        """
        Raise ``NonAmortizingDebtError`` if the payment never covers interest.

        Truncated schedules are not errors; they only lack a concrete payoff
        date. Returns ``self`` so calls can be chained.
        """
        if self.status is ScheduleStatus.NON_AMORTIZING:
            raise NonAmortizingDebtError(
                f"payment {self.monthly_payment + self.extra_payment} does not exceed "
                f"monthly interest {self.first_interest}",
                self.instrument_id,
                monthly_interest=self.first_interest,
                payment=self.monthly_payment + self.extra_payment,
            )
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "instrument_id": self.instrument_id,
            "status": self.status.value,
            "starting_balance": _json(self.starting_balance),
            "monthly_payment": _json(self.monthly_payment),
            "extra_payment": _json(self.extra_payment),
            "annual_rate_percent": _json(self.annual_rate_percent),
            "max_periods": self.max_periods,
            "months_remaining": self.months_remaining,
            "total_interest": _json(self.total_interest),
            "payoff_date": _json(self.payoff_date),
            "periods": [p.to_dict() for p in self.periods],
        }

    def to_frame(self) -> pd.DataFrame:
        """
        Schedule as a DataFrame indexed by ``period_index``.

        Money columns keep their ``Decimal`` values (object dtype). When the
        schedule is dated, a ``month`` column holds the monthly period of
        each payment.
        """
        columns = ["date", "balance", "interest_portion", "principal_portion", "payment"]
        rows = [
            {
                "date": p.date,
                "balance": p.balance,
                "interest_portion": p.interest_portion,
                "principal_portion": p.principal_portion,
                "payment": p.payment,
            }
            for p in self.periods
        ]
        index = pd.Index([p.period_index for p in self.periods], name="period_index")
        df = pd.DataFrame(rows, columns=columns, index=index)
        if self.periods and self.periods[0].date is not None:
            df["month"] = pd.PeriodIndex(
                month_range(self.periods[0].date, len(self.periods)).astype(str), freq="M"
            )
        return df


@dataclass(frozen=True)
class DebtProjection:
    """
    Payoff summary for one debt.

    ``is_estimate`` is true for truncated schedules: ``payoff_date`` is then
    None and ``estimated_months`` holds the closed-form term beyond the
    horizon.
    """

    instrument_id: str | None
    status: ScheduleStatus
    payoff_date: date | None
    total_interest: Decimal
    months_remaining: int | None
    estimated_months: int | None = None
    schedule: AmortizationSchedule | None = field(default=None, repr=False, compare=False)

    @property
    def is_estimate(self) -> bool:
        return self.status is ScheduleStatus.TRUNCATED

    def to_dict(self, include_schedule: bool = False) -> dict[str, Any]:
        data = {
            "instrument_id": self.instrument_id,
            "status": self.status.value,
            "payoff_date": _json(self.payoff_date),
            "total_interest": _json(self.total_interest),
            "months_remaining": self.months_remaining,
            "is_estimate": self.is_estimate,
            "estimated_months": self.estimated_months,
        }
        if include_schedule and self.schedule is not None:
            data["schedule"] = self.schedule.to_dict()
        return data


@dataclass(frozen=True)
class PayoffComparison:
    """
    Baseline versus accelerated payoff for the same debt.

    Savings are concrete only when both schedules paid off; otherwise they
    are None because a truncated or non-amortizing run has no real end.
    """

    baseline: AmortizationSchedule
    accelerated: AmortizationSchedule

    @classmethod
    def from_schedules(
        cls, baseline: AmortizationSchedule, accelerated: AmortizationSchedule
    ) -> PayoffComparison:
        """
        Pair two schedules, rejecting ones built with different caps.

        Raises:
            InvalidInputError: If ``max_periods`` differs between schedules
        """
        if baseline.max_periods != accelerated.max_periods:
            raise InvalidInputError(
                f"cannot compare schedules built with different max_periods "
                f"({baseline.max_periods} vs {accelerated.max_periods})",
                baseline.instrument_id,
            )
        return cls(baseline=baseline, accelerated=accelerated)

    @property
    def comparable(self) -> bool:
        return self.baseline.is_paid_off and self.accelerated.is_paid_off

    @property
    def months_saved(self) -> int | None:
        if not self.comparable:
            return None
        return self.baseline.months_remaining - self.accelerated.months_remaining

    @property
    def interest_saved(self) -> Decimal | None:
        if not self.comparable:
            return None
        return self.baseline.total_interest - self.accelerated.total_interest

    def to_dict(self) -> dict[str, Any]:
        return {
            "instrument_id": self.baseline.instrument_id,
            "extra_payment": _json(self.accelerated.extra_payment),
            "baseline_status": self.baseline.status.value,
            "accelerated_status": self.accelerated.status.value,
            "baseline_months": self.baseline.months_remaining,
            "accelerated_months": self.accelerated.months_remaining,
            "baseline_payoff_date": _json(self.baseline.payoff_date),
            "accelerated_payoff_date": _json(self.accelerated.payoff_date),
            "months_saved": self.months_saved,
            "interest_saved": _json(self.interest_saved),
        }


@dataclass(frozen=True)
class PaymentSplit:
    """Interest/principal split of a single recorded payment."""

    interest_paid: Decimal
    principal_paid: Decimal
    new_balance: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "interest_paid": _json(self.interest_paid),
            "principal_paid": _json(self.principal_paid),
            "new_balance": _json(self.new_balance),
        }


@dataclass(frozen=True)
class InvestmentMetrics:
    """Historical returns and forward projections for one investment."""

    instrument_id: str | None
    total_return: Decimal
    total_return_percentage: Decimal
    annualized_return: Decimal
    months_held: Decimal
    projected_values: dict[int, Decimal]

    def to_dict(self) -> dict[str, Any]:
        return {
            "instrument_id": self.instrument_id,
            "total_return": _json(self.total_return),
            "total_return_percentage": _json(self.total_return_percentage),
            "annualized_return": _json(self.annualized_return),
            "months_held": _json(self.months_held),
            "projected_values": _json(self.projected_values),
        }


@dataclass(frozen=True)
class FlaggedInstrument:
    """An instrument excluded from a rollup because its projection failed."""

    instrument_id: str | None
    error: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"instrument_id": self.instrument_id, "error": self.error, "message": self.message}


@dataclass
class PortfolioReport:
    """
    Portfolio rollup with per-instrument results and flagged failures.

    Attributes:
        results: Successful per-instrument results keyed by instrument ID
        flagged: Instruments excluded because their projection failed
        total: Sum of the successful results (when the rollup has one)
    """

    results: dict[str, Any] = field(default_factory=dict)
    flagged: list[FlaggedInstrument] = field(default_factory=list)
    total: Decimal | None = None

    def has_flags(self) -> bool:
        return bool(self.flagged)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": _json(self.total),
            "results": {k: _json(v) for k, v in self.results.items()},
            "flagged": [f.to_dict() for f in self.flagged],
        }


@dataclass(frozen=True)
class DebtSummary:
    """Totals across a set of debts."""

    total_debt: Decimal
    weighted_average_rate: Decimal
    monthly_obligations: Decimal
    total_monthly_interest: Decimal
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_debt": _json(self.total_debt),
            "weighted_average_rate": _json(self.weighted_average_rate),
            "monthly_obligations": _json(self.monthly_obligations),
            "total_monthly_interest": _json(self.total_monthly_interest),
            "count": self.count,
        }


@dataclass(frozen=True)
class AllocationSlice:
    asset_type: str
    value: Decimal
    percentage: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "asset_type": self.asset_type,
            "value": _json(self.value),
            "percentage": _json(self.percentage),
        }


@dataclass(frozen=True)
class PortfolioMetrics:
    """Value, cost basis, return and allocation of an investment portfolio."""

    total_value: Decimal
    total_invested: Decimal
    total_return: Decimal
    total_return_percentage: Decimal
    allocation: tuple[AllocationSlice, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_value": _json(self.total_value),
            "total_invested": _json(self.total_invested),
            "total_return": _json(self.total_return),
            "total_return_percentage": _json(self.total_return_percentage),
            "allocation": [a.to_dict() for a in self.allocation],
        }


class RecurrenceState(str, Enum):
    """Lifecycle state of a recurring obligation at a given moment."""

    PENDING = "pending"
    DUE = "due"
    LAPSED = "lapsed"
    INACTIVE = "inactive"


@dataclass(frozen=True)
class RecurrenceStatus:
    obligation_id: str | None
    state: RecurrenceState
    next_date: date | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "obligation_id": self.obligation_id,
            "state": self.state.value,
            "next_date": _json(self.next_date),
        }


@dataclass(frozen=True)
class UpcomingOccurrence:
    """A scheduled occurrence inside a look-ahead window."""

    obligation_id: str | None
    date: date
    days_remaining: int
    amount: Decimal
    kind: str
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "obligation_id": self.obligation_id,
            "date": _json(self.date),
            "days_remaining": self.days_remaining,
            "amount": _json(self.amount),
            "kind": self.kind,
            "description": self.description,
        }
