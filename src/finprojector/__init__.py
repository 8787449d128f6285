"""
FinProjector - Deterministic Financial Projection Engine

FinProjector turns a handful of financial parameters (principal, rate,
payment, frequency) into forward-looking schedules: debt payoff timelines,
interest totals, projected investment values and the calendar dates of
recurring bills and income.

Key Features:
- **Decimal Money**: All amounts are ``Decimal`` quantized to currency precision
- **Pure Functions**: No wall-clock reads; "now" is always passed in
- **Tagged Outcomes**: Schedules report paid-off, non-amortizing or truncated
- **Failure Isolation**: One bad record never blocks a portfolio rollup

Components:
- **AmortizationProjector**: Month-by-month payoff schedules and accelerated payoff
- **GrowthProjector**: Compound growth at arbitrary horizons and historical returns
- **RecurrenceScheduler**: Next occurrence and bounded look-ahead for recurring items
- **ProjectionAggregator**: Portfolio totals, weighted rates and projected values

Quick Start:
    ```python
    from datetime import date
    from finprojector import AmortizationProjector, GrowthProjector

    schedule = AmortizationProjector().project("5000", "18", "200", start=date(2024, 1, 1))
    print(schedule.status, schedule.months_remaining, schedule.total_interest)

    GrowthProjector().projected_value("1000", "7", 12)  # Decimal('1070.00')
    ```
"""

# Version information
__version__ = "0.1.0"
__author__ = "FinProjector Team"
__description__ = "Deterministic financial projection engine"

from .aggregator import ProjectionAggregator
from .amortization import AmortizationProjector, estimate_months_to_payoff, first_due_date
from .config import ConfigWarning, EngineConfig, load_config
from .core import (
    AmortizationPeriod,
    AmortizationSchedule,
    ConfigError,
    DebtInstrument,
    DebtProjection,
    DebtSummary,
    DivisionByZeroError,
    FlaggedInstrument,
    Frequency,
    HorizonExceededWarning,
    InvalidFrequencyTransitionError,
    InvalidInputError,
    InvalidRateError,
    InvestmentInstrument,
    InvestmentMetrics,
    NonAmortizingDebtError,
    PaymentSplit,
    PayoffComparison,
    PortfolioMetrics,
    PortfolioReport,
    ProjectionError,
    RecurrenceState,
    RecurrenceStatus,
    RecurringObligation,
    ScheduleStatus,
    UpcomingOccurrence,
)
from .growth import GrowthProjector
from .recurrence import RecurrenceScheduler

__all__ = [
    # Projectors
    "AmortizationProjector",
    "GrowthProjector",
    "RecurrenceScheduler",
    "ProjectionAggregator",
    "estimate_months_to_payoff",
    "first_due_date",
    # Configuration
    "EngineConfig",
    "ConfigWarning",
    "load_config",
    # Instruments
    "DebtInstrument",
    "InvestmentInstrument",
    "RecurringObligation",
    "Frequency",
    # Results
    "AmortizationPeriod",
    "AmortizationSchedule",
    "DebtProjection",
    "DebtSummary",
    "FlaggedInstrument",
    "InvestmentMetrics",
    "PaymentSplit",
    "PayoffComparison",
    "PortfolioMetrics",
    "PortfolioReport",
    "RecurrenceState",
    "RecurrenceStatus",
    "ScheduleStatus",
    "UpcomingOccurrence",
    # Errors
    "ProjectionError",
    "ConfigError",
    "InvalidInputError",
    "InvalidRateError",
    "InvalidFrequencyTransitionError",
    "NonAmortizingDebtError",
    "DivisionByZeroError",
    "HorizonExceededWarning",
    # Version info
    "__version__",
    "__author__",
    "__description__",
]
