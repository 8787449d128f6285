"""
Core building blocks for FinProjector.

Decimal arithmetic, calendar helpers, instrument records, result records and
the error taxonomy shared by every projector.
"""

from .dates import add_months, clamp_day, month_range, months_held, parse_date
from .decimal_math import (
    CURRENCIES,
    Currency,
    RoundingPolicy,
    get_currency,
    monthly_rate,
    percent_to_rate,
    round_cents,
    to_decimal,
)
from .errors import (
    ConfigError,
    DivisionByZeroError,
    HorizonExceededWarning,
    InvalidFrequencyTransitionError,
    InvalidInputError,
    InvalidRateError,
    NonAmortizingDebtError,
    ProjectionError,
)
from .instruments import (
    DebtInstrument,
    Frequency,
    InvestmentInstrument,
    ObligationKind,
    RecurringObligation,
)
from .results import (
    AmortizationPeriod,
    AmortizationSchedule,
    DebtProjection,
    DebtSummary,
    FlaggedInstrument,
    InvestmentMetrics,
    PaymentSplit,
    PayoffComparison,
    PortfolioMetrics,
    PortfolioReport,
    RecurrenceState,
    RecurrenceStatus,
    ScheduleStatus,
    UpcomingOccurrence,
)

__all__ = [
    # Dates
    "add_months",
    "clamp_day",
    "month_range",
    "months_held",
    "parse_date",
    # Decimal math
    "CURRENCIES",
    "Currency",
    "RoundingPolicy",
    "get_currency",
    "monthly_rate",
    "percent_to_rate",
    "round_cents",
    "to_decimal",
    # Errors
    "ConfigError",
    "DivisionByZeroError",
    "HorizonExceededWarning",
    "InvalidFrequencyTransitionError",
    "InvalidInputError",
    "InvalidRateError",
    "NonAmortizingDebtError",
    "ProjectionError",
    # Instruments
    "DebtInstrument",
    "Frequency",
    "InvestmentInstrument",
    "ObligationKind",
    "RecurringObligation",
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
]
