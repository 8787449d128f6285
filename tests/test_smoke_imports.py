"""
Smoke tests to verify basic imports and functionality.
"""

from datetime import date
from decimal import Decimal


def test_import_finprojector():
    """Test that we can import the main package."""
    import finprojector

    assert hasattr(finprojector, "__version__")
    assert finprojector.__version__ == "0.1.0"


def test_public_names_resolve():
    import finprojector

    for name in finprojector.__all__:
        assert getattr(finprojector, name) is not None


def test_import_core_components():
    """Test that core components can be imported."""
    from finprojector.core import (
        AmortizationSchedule,
        Currency,
        DebtInstrument,
        ProjectionError,
        RecurringObligation,
    )

    assert issubclass(AmortizationSchedule, object)
    assert Currency("usd").code == "USD"
    assert DebtInstrument is not None
    assert ProjectionError is not None
    assert RecurringObligation is not None


def test_error_hierarchy():
    from finprojector import (
        DivisionByZeroError,
        InvalidFrequencyTransitionError,
        InvalidInputError,
        InvalidRateError,
        NonAmortizingDebtError,
        ProjectionError,
    )

    for exc in (
        InvalidInputError,
        InvalidRateError,
        InvalidFrequencyTransitionError,
        NonAmortizingDebtError,
        DivisionByZeroError,
    ):
        assert issubclass(exc, ProjectionError)
    assert issubclass(InvalidRateError, ValueError)


def test_basic_projection():
    """Test that the quick start runs."""
    from finprojector import AmortizationProjector, GrowthProjector

    schedule = AmortizationProjector().project("5000", "18", "200", start=date(2024, 1, 1))
    assert schedule.months_remaining == 32
    assert GrowthProjector().projected_value("1000", "7", 12) == Decimal("1070.00")
