"""
Error classes for FinProjector.

This module defines the exception hierarchy raised by the projection engine.
Every per-instrument failure derives from ``ProjectionError`` so portfolio
rollups can isolate a bad record without aborting the whole aggregation.
"""

from __future__ import annotations

from decimal import Decimal


class ProjectionError(Exception):
    """
    Base class for failures tied to a single instrument or call.

    Attributes:
        instrument_id: ID of the instrument that failed (if known)
    """

    def __init__(self, message: str, instrument_id: str | None = None):
        self.instrument_id = instrument_id
        super().__init__(self._fmt(message))

    def _fmt(self, msg: str) -> str:
        """Format the error message with the instrument context."""
        if self.instrument_id:
            return f"[{self.instrument_id}] {msg}"
        return msg


class ConfigError(ValueError):
    """
    Configuration error while loading or validating an ``EngineConfig``.

    **Common Causes:**
    - Non-positive ``max_periods``
    - Unknown rounding policy name
    - Configuration file that is not a mapping
    """


class InvalidInputError(ProjectionError, ValueError):
    """
    Raised when an input record violates its schema.

    Negative amounts, a balance above the original amount, missing fields and
    unparseable dates all end up here. It is fatal to a single call only.
    """


class InvalidRateError(InvalidInputError):
    """
    Raised for rates that cannot be projected.

    Debts reject negative rates (and rates above 100%); investments reject
    rates below -100% since they would imply a negative value.
    """


class InvalidFrequencyTransitionError(InvalidInputError):
    """
    Raised for malformed recurrence input or an impossible state transition.

    **Common Causes:**
    - ``end_date`` earlier than ``start_date``
    - Unknown frequency name
    - Advancing an obligation that already lapsed or is inactive
    """


class NonAmortizingDebtError(ProjectionError):
    """
    Raised when the payment does not exceed the monthly interest.

    Such a debt never pays off; callers should prompt for a higher payment
    instead of displaying a payoff date.

    Attributes:
        monthly_interest: Interest charged in the first period
        payment: Total monthly payment that failed to cover it
    """

    def __init__(
        self,
        message: str,
        instrument_id: str | None = None,
        monthly_interest: Decimal | None = None,
        payment: Decimal | None = None,
    ):
        self.monthly_interest = monthly_interest
        self.payment = payment
        super().__init__(message, instrument_id)


class DivisionByZeroError(ProjectionError, ZeroDivisionError):
    """Raised when a return is computed against a zero basis."""


class HorizonExceededWarning(UserWarning):
    """Warning for schedules truncated at their maximum number of periods."""
