"""
Portfolio-level rollups over debts, investments and recurring obligations.

Every rollup folds independently computed per-instrument results. A record
that fails to parse or project is excluded and flagged; it never blocks the
rest of the portfolio.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import date
from decimal import Decimal
from typing import Any, TypeVar

from finprojector.amortization import AmortizationProjector
from finprojector.config import DEFAULT_CONFIG, EngineConfig
from finprojector.core.decimal_math import ZERO, monthly_rate, percentage
from finprojector.core.errors import DivisionByZeroError, ProjectionError
from finprojector.core.instruments import DebtInstrument, InvestmentInstrument, RecurringObligation
from finprojector.core.results import (
    AllocationSlice,
    DebtSummary,
    FlaggedInstrument,
    PortfolioMetrics,
    PortfolioReport,
)
from finprojector.growth import GrowthProjector
from finprojector.recurrence import RecurrenceScheduler

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _coerce(record: T | Mapping[str, Any], kind: type[T]) -> T:
    """Accept either an instrument or its JSON record."""
    if isinstance(record, kind):
        return record
    return kind.from_dict(record)


def _guess_id(record: Any) -> str | None:
    if isinstance(record, Mapping):
        value = record.get("id", record.get("_id"))
        return None if value is None else str(value)
    return getattr(record, "id", None)


class ProjectionAggregator:
    """
    Folds per-instrument projections into portfolio rollups.

    Instruments may be passed as dataclasses or raw JSON records. Failures
    are collected as ``FlaggedInstrument`` entries next to valid results.
    """

    def __init__(self, config: EngineConfig | None = None):
        self.config = config or DEFAULT_CONFIG
        self.amortization = AmortizationProjector(self.config)
        self.growth = GrowthProjector(self.config)
        self.recurrence = RecurrenceScheduler(self.config)

    def _fold(
        self,
        records: Iterable[Any],
        kind: type[T],
        compute: Callable[[T], Any],
        report: PortfolioReport,
    ) -> None:
        for position, record in enumerate(records):
            record_id = _guess_id(record)
            try:
                instrument = _coerce(record, kind)
                value = compute(instrument)
            except ProjectionError as exc:
                flag = FlaggedInstrument(
                    instrument_id=record_id,
                    error=type(exc).__name__,
                    message=str(exc),
                )
                report.flagged.append(flag)
                logger.warning("Excluding %s from rollup: %s", record_id or f"#{position}", exc)
                continue
            key = instrument.id or f"#{position}"
            if key in report.results:
                key = f"{key}#{position}"
            report.results[key] = value

    def _valid(self, records: Iterable[Any], kind: type[T]) -> tuple[list[T], PortfolioReport]:
        report = PortfolioReport()
        valid: list[T] = []
        self._fold(records, kind, lambda instrument: valid.append(instrument), report)
        return valid, report

    def debt_summary(self, debts: Iterable[DebtInstrument | Mapping[str, Any]]) -> DebtSummary:
        """
        Total debt, balance-weighted average rate and monthly obligations.

        The weighted average rate is 0 when the total balance is 0. Invalid
        records are left out of every total.
        """
        valid, _ = self._valid(debts, DebtInstrument)
        money = self.config.money

        total_debt = sum((d.current_balance for d in valid), ZERO)
        weighted = sum((d.annual_rate_percent * d.current_balance for d in valid), ZERO)
        average_rate = weighted / total_debt if total_debt > ZERO else ZERO
        obligations = sum((d.minimum_payment for d in valid), ZERO)
        monthly_interest = sum(
            (d.current_balance * monthly_rate(d.annual_rate_percent) for d in valid), ZERO
        )
        return DebtSummary(
            total_debt=money.quantize(total_debt),
            weighted_average_rate=money.quantize(average_rate),
            monthly_obligations=money.quantize(obligations),
            total_monthly_interest=money.quantize(monthly_interest),
            count=len(valid),
        )

    def project_debts(
        self,
        debts: Iterable[DebtInstrument | Mapping[str, Any]],
        now: date,
        extra_payment: Decimal | int | str = 0,
    ) -> PortfolioReport:
        """
        Payoff projection for each debt.

        Non-amortizing debts are flagged with ``NonAmortizingDebtError``;
        ``total`` is the interest summed over debts that paid off or were
        truncated.
        """
        report = PortfolioReport()
        self._fold(
            debts,
            DebtInstrument,
            lambda debt: self.amortization.project_debt(debt, now, extra_payment),
            report,
        )
        report.total = sum((p.total_interest for p in report.results.values()), ZERO)
        return report

    def compare_debts(
        self,
        debts: Iterable[DebtInstrument | Mapping[str, Any]],
        extra_payment: Decimal | int | str,
        now: date,
    ) -> PortfolioReport:
        """Baseline versus accelerated payoff for each debt, same cap for both."""
        report = PortfolioReport()
        self._fold(
            debts,
            DebtInstrument,
            lambda debt: self.amortization.compare_debt(debt, extra_payment, now),
            report,
        )
        return report

    def portfolio_projected_value(
        self,
        investments: Iterable[InvestmentInstrument | Mapping[str, Any]],
        months: int,
    ) -> PortfolioReport:
        """
        Sum of individually projected values at ``months``.

        Each instrument grows at its own rate, so the total is the sum of
        projections, never a projection of the summed value.
        """
        report = PortfolioReport()
        self._fold(
            investments,
            InvestmentInstrument,
            lambda inv: self.growth.projected_value(
                inv.current_value,
                inv.annual_rate_percent,
                months,
                inv.monthly_contribution,
                instrument_id=inv.id,
            ),
            report,
        )
        report.total = sum(report.results.values(), ZERO)
        return report

    def growth_projection(
        self,
        investments: Iterable[InvestmentInstrument | Mapping[str, Any]],
        horizons: tuple[int, ...] | list[int] | None = None,
    ) -> dict[int, Decimal]:
        """
        Portfolio value now (key 0) and at each horizon.

        Flagged instruments are excluded from every point so the series is
        consistent across horizons.
        """
        valid, _ = self._valid(list(investments), InvestmentInstrument)
        horizons = self.config.horizons if horizons is None else horizons
        series = {0: self.config.money.quantize(sum((i.current_value for i in valid), ZERO))}
        for months in horizons:
            series[months] = self.portfolio_projected_value(valid, months).total
        return series

    def portfolio_metrics(
        self, investments: Iterable[InvestmentInstrument | Mapping[str, Any]]
    ) -> PortfolioMetrics:
        """Value, cost basis, total return and allocation by asset type."""
        valid, _ = self._valid(investments, InvestmentInstrument)
        money = self.config.money

        total_value = sum((i.current_value for i in valid), ZERO)
        total_invested = sum((i.initial_amount for i in valid), ZERO)
        total_return = total_value - total_invested

        by_type: dict[str, Decimal] = {}
        for inv in valid:
            by_type[inv.asset_type] = by_type.get(inv.asset_type, ZERO) + inv.current_value

        allocation = []
        for asset_type, value in sorted(by_type.items()):
            try:
                share = percentage(value, total_value)
            except DivisionByZeroError:
                share = ZERO
            allocation.append(
                AllocationSlice(asset_type=asset_type, value=money.quantize(value), percentage=money.quantize(share))
            )

        return PortfolioMetrics(
            total_value=money.quantize(total_value),
            total_invested=money.quantize(total_invested),
            total_return=money.quantize(total_return),
            total_return_percentage=self.growth.total_return_percentage(total_value, total_invested),
            allocation=tuple(allocation),
        )

    def investment_metrics(
        self,
        investments: Iterable[InvestmentInstrument | Mapping[str, Any]],
        now: date,
    ) -> PortfolioReport:
        """Per-investment returns and projections as of ``now``."""
        report = PortfolioReport()
        self._fold(investments, InvestmentInstrument, lambda inv: self.growth.metrics(inv, now), report)
        return report

    def upcoming(
        self,
        obligations: Iterable[RecurringObligation | Mapping[str, Any]],
        now: date,
        days_ahead: int | None = None,
    ) -> PortfolioReport:
        """
        Upcoming occurrences across obligations, malformed ones flagged.

        ``results`` maps each obligation to its occurrences; ``total`` is the
        net amount due in the window (income positive, expenses negative).
        """
        report = PortfolioReport()
        self._fold(
            obligations,
            RecurringObligation,
            lambda ob: self.recurrence.upcoming([ob], now, days_ahead),
            report,
        )
        net = ZERO
        for items in report.results.values():
            for item in items:
                net += item.amount if item.kind == "income" else -item.amount
        report.total = net
        return report
