"""
Investment growth projections and return calculations.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_EVEN, Decimal

import pandas as pd

from finprojector.config import DEFAULT_CONFIG, EngineConfig
from finprojector.core.dates import month_range, months_held
from finprojector.core.decimal_math import (
    HUNDRED,
    MONTHS_PER_YEAR,
    ONE,
    ZERO,
    percent_to_rate,
    percentage,
    power,
    to_decimal,
)
from finprojector.core.errors import DivisionByZeroError, InvalidInputError, InvalidRateError
from finprojector.core.instruments import MIN_INVESTMENT_RATE, InvestmentInstrument
from finprojector.core.results import InvestmentMetrics

logger = logging.getLogger(__name__)

Number = Decimal | int | float | str

PERCENT_QUANTUM = Decimal("0.01")


def _pct(value: Decimal) -> Decimal:
    return value.quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_EVEN)


def _months(months: int, instrument_id: str | None = None) -> int:
    if isinstance(months, bool) or not isinstance(months, int):
        raise InvalidInputError(f"months must be an integer, got {months!r}", instrument_id)
    if months < 0:
        raise InvalidInputError(f"months must not be negative, got {months}", instrument_id)
    return months


class GrowthProjector:
    """
    Compound growth projector for investments.

    Values grow as ``principal * (1 + rate / 100) ** (months / 12)``, with a
    fractional exponent so 18 months is one and a half years of growth, not
    a table lookup. Standard horizons are plain calls with 12, 36 or 60.

    **Example:**
        ```python
        projector = GrowthProjector()
        projector.projected_value("1000", "7", 12)   # Decimal('1070.00')
        projector.projections("1000", "7")           # {12: ..., 36: ..., 60: ...}
        ```
    """

    def __init__(self, config: EngineConfig | None = None):
        self.config = config or DEFAULT_CONFIG

    def projected_value(
        self,
        principal: Number,
        annual_rate_percent: Number,
        months: int,
        monthly_contribution: Number = 0,
        *,
        instrument_id: str | None = None,
    ) -> Decimal:
        """
        Projected value after ``months`` of compound growth.

        Contributions are made at the end of each month and compound for the
        time left until the horizon.

        Args:
            principal: Value at the start of the projection (>= 0)
            annual_rate_percent: Expected annual return in percent (>= -100)
            months: Horizon in months (>= 0)
            monthly_contribution: Amount added at the end of every month
            instrument_id: ID carried into errors

        Returns:
            Projected value rounded to the currency precision, never negative

        Raises:
            InvalidRateError: If the rate is below -100%
            InvalidInputError: For negative principal, contribution or months
        """
        months = _months(months, instrument_id)
        base = to_decimal(principal, "principal")
        rate = to_decimal(annual_rate_percent, "annual_rate_percent")
        contribution = to_decimal(monthly_contribution, "monthly_contribution")

        if rate < MIN_INVESTMENT_RATE:
            raise InvalidRateError(
                f"annual rate below -100% implies a negative value, got {rate}", instrument_id
            )
        if base < ZERO:
            raise InvalidInputError(f"principal must not be negative, got {base}", instrument_id)
        if contribution < ZERO:
            raise InvalidInputError(
                f"monthly_contribution must not be negative, got {contribution}", instrument_id
            )

        growth = ONE + percent_to_rate(rate)
        value = base * power(growth, Decimal(months) / MONTHS_PER_YEAR)
        if contribution > ZERO:
            for month in range(1, months + 1):
                value += contribution * power(growth, Decimal(months - month) / MONTHS_PER_YEAR)
        return self.config.money.quantize(value)

    def projections(
        self,
        principal: Number,
        annual_rate_percent: Number,
        horizons: tuple[int, ...] | list[int] | None = None,
        monthly_contribution: Number = 0,
        *,
        instrument_id: str | None = None,
    ) -> dict[int, Decimal]:
        """Projected values at each horizon (defaults to ``config.horizons``)."""
        horizons = self.config.horizons if horizons is None else horizons
        return {
            months: self.projected_value(
                principal,
                annual_rate_percent,
                months,
                monthly_contribution,
                instrument_id=instrument_id,
            )
            for months in horizons
        }

    def projection_series(
        self,
        principal: Number,
        annual_rate_percent: Number,
        months: int,
        monthly_contribution: Number = 0,
        start: date | None = None,
    ) -> pd.Series:
        """
        Month-by-month projected values from month 0 to ``months``.

        Indexed by monthly periods when ``start`` is given, otherwise by the
        month offset. Values stay ``Decimal``.
        """
        months = _months(months)
        values = [
            self.projected_value(principal, annual_rate_percent, m, monthly_contribution)
            for m in range(months + 1)
        ]
        if start is not None:
            index = pd.PeriodIndex(month_range(start, months + 1).astype(str), freq="M", name="month")
        else:
            index = pd.RangeIndex(months + 1, name="month")
        return pd.Series(values, index=index, name="projected_value", dtype=object)

    @staticmethod
    def total_return(current: Number, initial: Number) -> Decimal:
        """Absolute gain or loss: ``current - initial``."""
        return to_decimal(current, "current") - to_decimal(initial, "initial")

    def total_return_percentage(self, current: Number, initial: Number) -> Decimal:
        """
        Total return as a percentage of the initial amount.

        A zero initial amount has no meaningful return; it is reported as 0%.
        """
        try:
            return _pct(percentage(self.total_return(current, initial), to_decimal(initial, "initial")))
        except DivisionByZeroError:
            logger.debug("Zero initial basis; reporting total return as 0%%")
            return _pct(ZERO)

    def annualized_return(self, current: Number, initial: Number, months: Number) -> Decimal:
        """
        Compound annual growth rate over the holding period, in percent.

        ``((current / initial) ** (12 / months) - 1) * 100``. Holding periods
        shorter than a month fall back to the unannualized total return.
        """
        held = to_decimal(months, "months_held")
        if held < ONE:
            logger.debug("Holding period %s < 1 month; using total return", held)
            return self.total_return_percentage(current, initial)

        start_value = to_decimal(initial, "initial")
        end_value = to_decimal(current, "current")
        if start_value == ZERO:
            logger.debug("Zero initial basis; reporting annualized return as 0%%")
            return _pct(ZERO)
        if end_value < ZERO or start_value < ZERO:
            raise InvalidInputError("annualized return needs non-negative values")
        ratio = end_value / start_value
        return _pct((power(ratio, MONTHS_PER_YEAR / held) - ONE) * HUNDRED)

    def metrics(
        self,
        investment: InvestmentInstrument,
        now: date,
        horizons: tuple[int, ...] | list[int] | None = None,
    ) -> InvestmentMetrics:
        """
        Returns and projections for an investment snapshot as of ``now``.

        Historical returns use ``initial_amount`` as the basis; projections
        grow ``current_value``.

        Raises:
            InvalidInputError: If the purchase date is after ``now``
        """
        if investment.purchase_date > now:
            raise InvalidInputError(
                f"purchase_date {investment.purchase_date} is after {now}", investment.id
            )
        held = months_held(investment.purchase_date, now)
        return InvestmentMetrics(
            instrument_id=investment.id,
            total_return=self.total_return(investment.current_value, investment.initial_amount),
            total_return_percentage=self.total_return_percentage(
                investment.current_value, investment.initial_amount
            ),
            annualized_return=self.annualized_return(
                investment.current_value, investment.initial_amount, held
            ),
            months_held=held.quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_EVEN),
            projected_values=self.projections(
                investment.current_value,
                investment.annual_rate_percent,
                horizons,
                investment.monthly_contribution,
                instrument_id=investment.id,
            ),
        )
