"""
Instrument records consumed by the projection engine.

Instruments are immutable snapshots. The engine reads them and returns new
results; recorded payments and balance updates belong to the persistence
layer outside this package.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from .dates import parse_date
from .decimal_math import HUNDRED, ZERO, to_decimal
from .errors import InvalidFrequencyTransitionError, InvalidInputError, InvalidRateError

__all__ = [
    "Frequency",
    "ObligationKind",
    "DebtInstrument",
    "InvestmentInstrument",
    "RecurringObligation",
]

MIN_INVESTMENT_RATE = Decimal("-100")


class Frequency(str, Enum):
    """Recurrence frequencies with their step expressed in days or months."""

    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "bi-weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"

    @property
    def step_days(self) -> int | None:
        """Fixed step in days, or None for calendar-month frequencies."""
        return _STEP_DAYS.get(self)

    @property
    def step_months(self) -> int | None:
        """Step in calendar months, or None for day-based frequencies."""
        return _STEP_MONTHS.get(self)

    @classmethod
    def parse(cls, value: Frequency | str) -> Frequency:
        """
        Parse a frequency name.

        Accepts the canonical names plus 'biweekly', 'bi_weekly' and 'annually'.

        Raises:
            InvalidFrequencyTransitionError: For unknown names
        """
        if isinstance(value, Frequency):
            return value
        if not isinstance(value, str):
            raise InvalidFrequencyTransitionError(f"Unknown frequency: {value!r}")
        key = value.strip().lower().replace("_", "-")
        key = _FREQUENCY_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise InvalidFrequencyTransitionError(f"Unknown frequency: {value!r}") from None


_STEP_DAYS = {Frequency.DAILY: 1, Frequency.WEEKLY: 7, Frequency.BIWEEKLY: 14}
_STEP_MONTHS = {Frequency.MONTHLY: 1, Frequency.QUARTERLY: 3, Frequency.YEARLY: 12}
_FREQUENCY_ALIASES = {"biweekly": "bi-weekly", "annually": "yearly", "annual": "yearly"}


class ObligationKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


def _pick(record: Mapping[str, Any], *keys: str, default: Any = ...) -> Any:
    """Return the first key present in ``record`` (camelCase or snake_case)."""
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    if default is ...:
        raise InvalidInputError(f"Missing required field: {keys[0]}", record.get("id"))
    return default


def _record_id(record: Mapping[str, Any]) -> str | None:
    value = record.get("id", record.get("_id"))
    return None if value is None else str(value)


def _set(obj: object, name: str, value: Any) -> None:
    object.__setattr__(obj, name, value)


def _due_day(value: Any, instrument_id: str | None) -> int:
    """
    Day of month from a bare day number or a full due date.

    Stored records carry ``dueDate`` as an ISO date; only its day is kept.
    """
    if isinstance(value, date):
        return value.day
    if isinstance(value, str) and not value.strip().isdigit():
        try:
            return parse_date(value, "dueDate").day
        except ValueError as exc:
            raise InvalidInputError(str(exc), instrument_id) from None
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise InvalidInputError(f"dueDayOfMonth must be an integer, got {value!r}", instrument_id)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"dueDayOfMonth must be an integer, got {value!r}", instrument_id) from None


@dataclass(frozen=True)
class DebtInstrument:
    """
    Snapshot of a debt.

    Attributes:
        id: Instrument identifier
        original_amount: Amount originally borrowed (> 0)
        current_balance: Outstanding balance, between 0 and ``original_amount``
        annual_rate_percent: Nominal annual interest rate in percent (0-100)
        minimum_payment: Required monthly payment (> 0)
        due_day_of_month: Day of month the payment is due (1-31)
        name: Display name
    """

    id: str
    original_amount: Decimal
    current_balance: Decimal
    annual_rate_percent: Decimal
    minimum_payment: Decimal
    due_day_of_month: int = 1
    name: str = ""

    def __post_init__(self):
        for name in ("original_amount", "current_balance", "annual_rate_percent", "minimum_payment"):
            try:
                _set(self, name, to_decimal(getattr(self, name), name))
            except InvalidInputError as exc:
                raise InvalidInputError(str(exc), self.id) from None

        if self.original_amount <= ZERO:
            raise InvalidInputError("original_amount must be positive", self.id)
        if self.current_balance < ZERO:
            raise InvalidInputError("current_balance must not be negative", self.id)
        if self.current_balance > self.original_amount:
            raise InvalidInputError(
                f"current_balance {self.current_balance} exceeds original_amount "
                f"{self.original_amount}",
                self.id,
            )
        if not ZERO <= self.annual_rate_percent <= HUNDRED:
            raise InvalidRateError(
                f"annual_rate_percent must be between 0 and 100, got {self.annual_rate_percent}",
                self.id,
            )
        if self.minimum_payment <= ZERO:
            raise InvalidInputError("minimum_payment must be positive", self.id)
        if isinstance(self.due_day_of_month, bool) or not isinstance(self.due_day_of_month, int):
            raise InvalidInputError("due_day_of_month must be an integer", self.id)
        if not 1 <= self.due_day_of_month <= 31:
            raise InvalidInputError(
                f"due_day_of_month must be between 1 and 31, got {self.due_day_of_month}",
                self.id,
            )

    @classmethod
    def from_dict(cls, record: Mapping[str, Any]) -> DebtInstrument:
        """
        Build a debt from a JSON record.

        Accepted keys (camelCase or snake_case): ``originalAmount``,
        ``currentBalance``, ``annualRatePercent`` (alias ``interestRate``),
        ``minimumPayment``, ``dueDayOfMonth`` (alias ``dueDate``, a day number
        or an ISO date whose day is used).
        """
        if not isinstance(record, Mapping):
            raise InvalidInputError(f"Debt record must be an object, got {type(record).__name__}")
        instrument_id = _record_id(record) or ""
        due_day = _due_day(
            _pick(record, "dueDayOfMonth", "due_day_of_month", "dueDate", default=1), instrument_id
        )
        return cls(
            id=instrument_id,
            name=str(record.get("name", "")),
            original_amount=_pick(record, "originalAmount", "original_amount"),
            current_balance=_pick(record, "currentBalance", "current_balance"),
            annual_rate_percent=_pick(
                record, "annualRatePercent", "annual_rate_percent", "interestRate"
            ),
            minimum_payment=_pick(record, "minimumPayment", "minimum_payment"),
            due_day_of_month=due_day,
        )


@dataclass(frozen=True)
class InvestmentInstrument:
    """
    Snapshot of an investment position.

    ``current_value`` is the basis for forward projection; ``initial_amount``
    is the basis for historical return calculation.
    """

    id: str
    initial_amount: Decimal
    current_value: Decimal
    annual_rate_percent: Decimal
    purchase_date: date
    asset_type: str = "other"
    monthly_contribution: Decimal = ZERO
    name: str = ""

    def __post_init__(self):
        for name in ("initial_amount", "current_value", "annual_rate_percent", "monthly_contribution"):
            try:
                _set(self, name, to_decimal(getattr(self, name), name))
            except InvalidInputError as exc:
                raise InvalidInputError(str(exc), self.id) from None
        try:
            _set(self, "purchase_date", parse_date(self.purchase_date, "purchase_date"))
        except ValueError as exc:
            raise InvalidInputError(str(exc), self.id) from None

        if self.initial_amount <= ZERO:
            raise InvalidInputError("initial_amount must be positive", self.id)
        if self.current_value < ZERO:
            raise InvalidInputError("current_value must not be negative", self.id)
        if self.monthly_contribution < ZERO:
            raise InvalidInputError("monthly_contribution must not be negative", self.id)
        if self.annual_rate_percent < MIN_INVESTMENT_RATE:
            raise InvalidRateError(
                f"annual_rate_percent below -100 implies a negative value, "
                f"got {self.annual_rate_percent}",
                self.id,
            )

    @classmethod
    def from_dict(cls, record: Mapping[str, Any]) -> InvestmentInstrument:
        """
        Build an investment from a JSON record.

        Accepted keys: ``initialAmount``, ``currentValue``,
        ``annualRatePercent`` (alias ``ratePerAnnum``), ``purchaseDate``,
        ``type``/``assetType`` and ``monthlyContribution``.
        """
        if not isinstance(record, Mapping):
            raise InvalidInputError(
                f"Investment record must be an object, got {type(record).__name__}"
            )
        return cls(
            id=_record_id(record) or "",
            name=str(record.get("name", "")),
            initial_amount=_pick(record, "initialAmount", "initial_amount"),
            current_value=_pick(record, "currentValue", "current_value"),
            annual_rate_percent=_pick(
                record, "annualRatePercent", "annual_rate_percent", "ratePerAnnum"
            ),
            purchase_date=_pick(record, "purchaseDate", "purchase_date"),
            asset_type=str(_pick(record, "assetType", "asset_type", "type", default="other")),
            monthly_contribution=_pick(
                record, "monthlyContribution", "monthly_contribution", default=ZERO
            ),
        )


@dataclass(frozen=True)
class RecurringObligation:
    """
    A repeating bill or income.

    ``last_paid`` is the last scheduled date that was paid or acknowledged;
    the next occurrence is always derived from it and the start date, never
    stored.

    Date ordering (``end_date >= start_date``) is checked by the scheduler,
    not here, so a malformed record can still be loaded and reported.
    """

    id: str
    start_date: date
    frequency: Frequency
    amount: Decimal
    end_date: date | None = None
    is_active: bool = True
    last_paid: date | None = None
    kind: ObligationKind = ObligationKind.EXPENSE
    description: str = ""

    def __post_init__(self):
        try:
            _set(self, "amount", to_decimal(self.amount, "amount"))
            _set(self, "start_date", parse_date(self.start_date, "start_date"))
            if self.end_date is not None:
                _set(self, "end_date", parse_date(self.end_date, "end_date"))
            if self.last_paid is not None:
                _set(self, "last_paid", parse_date(self.last_paid, "last_paid"))
        except InvalidInputError as exc:
            raise InvalidInputError(str(exc), self.id) from None
        except ValueError as exc:
            raise InvalidInputError(str(exc), self.id) from None
        try:
            _set(self, "frequency", Frequency.parse(self.frequency))
        except InvalidFrequencyTransitionError as exc:
            raise InvalidFrequencyTransitionError(str(exc), self.id) from None
        try:
            _set(self, "kind", ObligationKind(self.kind))
        except ValueError:
            raise InvalidInputError(f"kind must be 'income' or 'expense', got {self.kind!r}", self.id) from None
        if not isinstance(self.is_active, bool):
            raise InvalidInputError("is_active must be a boolean", self.id)

    @classmethod
    def from_dict(cls, record: Mapping[str, Any]) -> RecurringObligation:
        """
        Build an obligation from a JSON record.

        Accepted keys: ``startDate``, ``endDate``, ``frequency``, ``amount``,
        ``isActive``, ``lastPaid`` (alias ``lastProcessed``), ``type``/``kind``
        and ``description``.
        """
        if not isinstance(record, Mapping):
            raise InvalidInputError(
                f"Recurring record must be an object, got {type(record).__name__}"
            )
        return cls(
            id=_record_id(record) or "",
            start_date=_pick(record, "startDate", "start_date"),
            end_date=_pick(record, "endDate", "end_date", default=None),
            frequency=_pick(record, "frequency"),
            amount=_pick(record, "amount"),
            is_active=_pick(record, "isActive", "is_active", default=True),
            last_paid=_pick(record, "lastPaid", "last_paid", "lastProcessed", default=None),
            kind=_pick(record, "kind", "type", default=ObligationKind.EXPENSE.value),
            description=str(record.get("description", "")),
        )
