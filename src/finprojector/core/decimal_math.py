"""
Currency and precision handling for FinProjector.

Money never goes through binary floating point: every amount is a ``Decimal``
quantized to its currency precision, so schedules can reach exactly zero.
"""

from __future__ import annotations

from decimal import ROUND_CEILING, ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal, InvalidOperation, Overflow
from enum import Enum

from .errors import DivisionByZeroError, InvalidInputError

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")
MONTHS_PER_YEAR = Decimal("12")
DAYS_PER_YEAR = Decimal("365")

# Largest absolute amount or rate accepted as input
MAX_MAGNITUDE = Decimal("1e15")


class RoundingPolicy(Enum):
    """Rounding policies for currency calculations."""

    BANKERS = ROUND_HALF_EVEN
    HALF_UP = ROUND_HALF_UP

    @classmethod
    def from_name(cls, name: str) -> RoundingPolicy:
        """Resolve a policy from a config name ('bankers', 'half_up')."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown rounding policy: {name!r}") from None


class Currency:
    """
    Currency definition with precision and rounding rules.

    Attributes:
        code: ISO currency code (e.g., 'EUR', 'USD', 'JPY')
        decimals: Number of decimal places for this currency
        rounding: Rounding policy for calculations
    """

    def __init__(
        self,
        code: str,
        decimals: int = 2,
        rounding: RoundingPolicy = RoundingPolicy.BANKERS,
    ):
        self.code = code.upper()
        self.decimals = decimals
        self.rounding = rounding

    @property
    def quantum(self) -> Decimal:
        """Smallest representable unit, e.g. 0.01 for 2 dp."""
        return Decimal("1").scaleb(-self.decimals)

    def quantize(self, amount: Decimal) -> Decimal:
        """
        Quantize amount to currency precision.

        Raises:
            InvalidInputError: If the amount has too many digits for the context
        """
        try:
            return amount.quantize(self.quantum, rounding=self.rounding.value)
        except InvalidOperation:
            raise InvalidInputError(f"amount {amount} is too large to quantize to {self.code}") from None

    def with_rounding(self, rounding: RoundingPolicy) -> Currency:
        return Currency(self.code, self.decimals, rounding)

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency('{self.code}', decimals={self.decimals})"


# Standard currency definitions
EUR = Currency("EUR", decimals=2)
USD = Currency("USD", decimals=2)
JPY = Currency("JPY", decimals=0)
GBP = Currency("GBP", decimals=2)

# Currency registry
CURRENCIES: dict[str, Currency] = {
    "EUR": EUR,
    "USD": USD,
    "JPY": JPY,
    "GBP": GBP,
}


def get_currency(code: str) -> Currency:
    """Get currency by code."""
    if code.upper() not in CURRENCIES:
        # Default to 2 decimal places for unknown currencies
        return Currency(code, decimals=2)
    return CURRENCIES[code.upper()]


def to_decimal(value: Decimal | int | float | str, field: str = "value") -> Decimal:
    """
    Convert a JSON-ish number to ``Decimal``.

    Floats go through ``str()`` so ``0.1`` becomes ``Decimal('0.1')`` rather
    than its binary expansion. Booleans, NaN, infinities and magnitudes above
    ``MAX_MAGNITUDE`` are rejected.

    Raises:
        InvalidInputError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise InvalidInputError(f"{field} must be a number, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidInputError(f"{field} must be a number, got {value!r}") from None
    else:
        raise InvalidInputError(f"{field} must be a number, got {value!r}")
    if not result.is_finite():
        raise InvalidInputError(f"{field} must be finite, got {value!r}")
    if abs(result) > MAX_MAGNITUDE:
        raise InvalidInputError(f"{field} must not exceed {MAX_MAGNITUDE:,f} in magnitude, got {value!r}")
    return result


def round_cents(amount: Decimal, currency: Currency = USD) -> Decimal:
    """Round an amount to the currency precision (cents for USD/EUR)."""
    return currency.quantize(amount)


def percent_to_rate(percent: Decimal) -> Decimal:
    """Convert a percentage (7 for 7%) to a rate (0.07)."""
    return percent / HUNDRED


def monthly_rate(annual_rate_percent: Decimal) -> Decimal:
    """Nominal monthly rate from an annual percentage: ``rate / 100 / 12``."""
    return percent_to_rate(annual_rate_percent) / MONTHS_PER_YEAR


def daily_rate(annual_rate_percent: Decimal) -> Decimal:
    """Simple daily rate from an annual percentage: ``rate / 100 / 365``."""
    return percent_to_rate(annual_rate_percent) / DAYS_PER_YEAR


def power(base: Decimal, exponent: Decimal) -> Decimal:
    """
    Raise a non-negative ``Decimal`` base to a possibly fractional exponent.

    ``x ** 0`` is 1 for any base (including 0) and ``0 ** e`` is 0 for
    positive ``e``; the Decimal module would otherwise signal on ``0 ** 0``.
    """
    if exponent == ZERO:
        return ONE
    if base == ZERO:
        if exponent < ZERO:
            raise DivisionByZeroError("zero base raised to a negative exponent")
        return ZERO
    if base < ZERO:
        raise InvalidInputError(f"negative base {base} has no real fractional power")
    try:
        return base**exponent
    except (InvalidOperation, Overflow):
        raise InvalidInputError(f"{base} ** {exponent} is out of range") from None


def percentage(numerator: Decimal, denominator: Decimal) -> Decimal:
    """
    Return ``numerator / denominator * 100``.

    Raises:
        DivisionByZeroError: If the denominator is zero
    """
    if denominator == ZERO:
        raise DivisionByZeroError("percentage of a zero basis is undefined")
    return numerator / denominator * HUNDRED


def ceil_int(value: Decimal) -> int:
    """Smallest integer greater than or equal to ``value``."""
    return int(value.to_integral_value(rounding=ROUND_CEILING))
