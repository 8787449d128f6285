"""
Tests for portfolio rollups and failure isolation.
"""

import logging
from datetime import date
from decimal import Decimal

import pytest

from finprojector import (
    DebtInstrument,
    GrowthProjector,
    HorizonExceededWarning,
    InvestmentInstrument,
    ProjectionAggregator,
)

NOW = date(2024, 1, 1)


@pytest.fixture
def aggregator():
    return ProjectionAggregator()


@pytest.fixture
def debts():
    return [
        {
            "id": "card",
            "originalAmount": 5000,
            "currentBalance": 5000,
            "annualRatePercent": 18,
            "minimumPayment": 200,
        },
        {
            "id": "car",
            "originalAmount": 12000,
            "currentBalance": 5000,
            "annualRatePercent": 6,
            "minimumPayment": 250,
        },
    ]


@pytest.fixture
def investments():
    return [
        InvestmentInstrument("etf", "1000", "1100", "7", date(2023, 1, 1), asset_type="stocks"),
        InvestmentInstrument("bond", "3000", "2900", "3", date(2023, 6, 1), asset_type="bonds"),
    ]


class TestDebtSummary:
    def test_weighted_average_rate(self, aggregator, debts):
        summary = aggregator.debt_summary(debts)

        assert summary.count == 2
        assert summary.total_debt == Decimal("10000.00")
        assert summary.weighted_average_rate == Decimal("12.00")
        assert summary.monthly_obligations == Decimal("450.00")
        assert summary.total_monthly_interest == Decimal("100.00")

    def test_zero_total_balance(self, aggregator):
        paid = DebtInstrument("paid", "1000", "0", "10", "50")
        summary = aggregator.debt_summary([paid])
        assert summary.weighted_average_rate == Decimal("0.00")
        assert summary.total_debt == Decimal("0.00")

    def test_empty(self, aggregator):
        assert aggregator.debt_summary([]).count == 0

    def test_invalid_records_excluded(self, aggregator, debts):
        debts.append({"id": "bad", "originalAmount": 100, "currentBalance": 500,
                      "annualRatePercent": 5, "minimumPayment": 10})
        assert aggregator.debt_summary(debts).total_debt == Decimal("10000.00")


class TestProjectDebts:
    def test_results_and_total(self, aggregator, debts):
        report = aggregator.project_debts(debts, NOW)

        assert set(report.results) == {"card", "car"}
        assert not report.has_flags()
        assert report.results["card"].months_remaining == 32
        assert report.total == sum(p.total_interest for p in report.results.values())

    def test_non_amortizing_debt_is_flagged(self, aggregator, debts, caplog):
        debts.append(
            {
                "id": "stuck",
                "originalAmount": 5000,
                "currentBalance": 5000,
                "annualRatePercent": 18,
                "minimumPayment": 75,
            }
        )
        with caplog.at_level(logging.WARNING, logger="finprojector"):
            report = aggregator.project_debts(debts, NOW)

        assert set(report.results) == {"card", "car"}
        assert [f.instrument_id for f in report.flagged] == ["stuck"]
        assert report.flagged[0].error == "NonAmortizingDebtError"
        assert "stuck" in caplog.text

    def test_malformed_record_is_flagged(self, aggregator, debts):
        debts.insert(0, {"id": "broken", "originalAmount": "lots"})
        report = aggregator.project_debts(debts, NOW)

        assert report.flagged[0].instrument_id == "broken"
        assert report.flagged[0].error == "InvalidInputError"
        assert len(report.results) == 2

    def test_oversized_record_is_flagged(self, aggregator, debts):
        debts.append(
            {
                "id": "huge",
                "originalAmount": "1e30",
                "currentBalance": "1e30",
                "annualRatePercent": 5,
                "minimumPayment": 100,
            }
        )
        report = aggregator.project_debts(debts, NOW)

        assert set(report.results) == {"card", "car"}
        assert [f.instrument_id for f in report.flagged] == ["huge"]
        assert report.flagged[0].error == "InvalidInputError"
        assert aggregator.debt_summary(debts).total_debt == Decimal("10000.00")

    def test_oversized_payment_is_flagged(self, aggregator, debts):
        report = aggregator.project_debts(debts, NOW, extra_payment="1e20")

        assert report.results == {}
        assert {f.instrument_id for f in report.flagged} == {"card", "car"}

    def test_truncated_debts_stay_in_results(self, debts):
        from finprojector import EngineConfig

        aggregator = ProjectionAggregator(EngineConfig(max_periods=12))
        with pytest.warns(HorizonExceededWarning):
            report = aggregator.project_debts(debts, NOW)

        assert report.results["card"].is_estimate
        assert report.results["card"].estimated_months == 32

    def test_duplicate_ids_do_not_overwrite(self, aggregator, debts):
        report = aggregator.project_debts([debts[0], debts[0]], NOW)
        assert set(report.results) == {"card", "card#1"}

    def test_compare_debts(self, aggregator, debts):
        report = aggregator.compare_debts(debts, "100", NOW)

        assert report.results["card"].months_saved == 12
        assert report.results["car"].months_saved > 0


class TestInvestments:
    def test_portfolio_projected_value_is_sum_of_projections(self, aggregator, investments):
        growth = GrowthProjector()
        report = aggregator.portfolio_projected_value(investments, 12)

        expected = growth.projected_value("1100", "7", 12) + growth.projected_value("2900", "3", 12)
        assert report.total == expected
        assert report.results["etf"] == Decimal("1177.00")
        assert report.results["bond"] == Decimal("2987.00")

    def test_growth_projection(self, aggregator, investments):
        series = aggregator.growth_projection(investments)

        assert list(series) == [0, 12, 36, 60]
        assert series[0] == Decimal("4000.00")
        assert series[12] == Decimal("4164.00")

    def test_growth_projection_excludes_flagged(self, aggregator, investments):
        records = investments + [{"id": "bad", "initialAmount": 10}]
        assert aggregator.growth_projection(records, [12]) == {
            0: Decimal("4000.00"),
            12: Decimal("4164.00"),
        }

    def test_portfolio_metrics(self, aggregator, investments):
        metrics = aggregator.portfolio_metrics(investments)

        assert metrics.total_value == Decimal("4000.00")
        assert metrics.total_invested == Decimal("4000.00")
        assert metrics.total_return == Decimal("0.00")
        assert metrics.total_return_percentage == Decimal("0.00")
        assert [(a.asset_type, a.percentage) for a in metrics.allocation] == [
            ("bonds", Decimal("72.50")),
            ("stocks", Decimal("27.50")),
        ]

    def test_portfolio_metrics_empty(self, aggregator):
        metrics = aggregator.portfolio_metrics([])
        assert metrics.total_value == Decimal("0.00")
        assert metrics.allocation == ()

    def test_investment_metrics_flags_future_purchase(self, aggregator, investments):
        investments.append(InvestmentInstrument("new", "100", "100", "5", date(2024, 6, 1)))
        report = aggregator.investment_metrics(investments, NOW)

        assert set(report.results) == {"etf", "bond"}
        assert report.flagged[0].instrument_id == "new"


class TestUpcoming:
    def test_net_amount_and_flags(self, aggregator):
        records = [
            {"id": "rent", "startDate": "2024-01-31", "frequency": "monthly", "amount": 950},
            {"id": "pay", "startDate": "2024-01-05", "frequency": "bi-weekly", "amount": 2000,
             "type": "income"},
            {"id": "broken", "startDate": "2024-05-01", "endDate": "2024-01-01",
             "frequency": "monthly", "amount": 10},
        ]
        report = aggregator.upcoming(records, NOW, 30)

        assert [len(report.results[k]) for k in ("rent", "pay")] == [1, 2]
        assert report.total == Decimal("3050")
        assert report.flagged[0].error == "InvalidFrequencyTransitionError"

    def test_unused_keys_do_not_block_the_rollup(self, aggregator):
        records = [
            {"id": "rent", "startDate": "2024-01-31", "frequency": "monthly", "amount": 950},
            {"id": "gym", "startDate": "2024-01-10", "frequency": "monthly", "amount": 30,
             "tags": 5},
        ]
        report = aggregator.upcoming(records, NOW, 30)

        assert not report.has_flags()
        assert [o.date for o in report.results["rent"]] == [date(2024, 1, 31)]
        assert [o.date for o in report.results["gym"]] == [date(2024, 1, 10)]
