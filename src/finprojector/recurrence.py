"""
Calendar recurrence for repeating bills and income.

Occurrence ``k`` of an obligation is ``start_date + k`` periods. Month-based
frequencies keep the start date's day of month where the target month has
it and clamp to the month end otherwise, so a series starting on Jan 31
runs Jan 31, Feb 29, Mar 31 instead of drifting to the 29th.
"""

from __future__ import annotations

import dataclasses
import itertools
from collections.abc import Iterable, Iterator
from datetime import date, timedelta

from finprojector.config import DEFAULT_CONFIG, EngineConfig
from finprojector.core.dates import add_months, month_diff
from finprojector.core.errors import InvalidFrequencyTransitionError, InvalidInputError
from finprojector.core.instruments import Frequency, RecurringObligation
from finprojector.core.results import RecurrenceState, RecurrenceStatus, UpcomingOccurrence

ONE_DAY = timedelta(days=1)


def occurrence(start: date, frequency: Frequency, index: int) -> date:
    """Date of the ``index``-th occurrence (0 is ``start`` itself)."""
    if frequency.step_days is not None:
        return start + timedelta(days=frequency.step_days * index)
    return add_months(start, frequency.step_months * index, day=start.day)


def following(previous: date, frequency: Frequency, anchor_day: int | None = None) -> date:
    """
    Add exactly one period to a previously scheduled date.

    ``anchor_day`` is the series' original day of month; passing it lets a
    date clamped to Feb 29 return to the 31st in March.
    """
    if frequency.step_days is not None:
        return previous + timedelta(days=frequency.step_days)
    return add_months(previous, frequency.step_months, day=anchor_day or previous.day)


def _first_index_on_or_after(start: date, frequency: Frequency, target: date) -> int:
    """Smallest ``k`` with ``occurrence(start, frequency, k) >= target``."""
    if target <= start:
        return 0
    if frequency.step_days is not None:
        delta = (target - start).days
        return -(-delta // frequency.step_days)
    k = month_diff(start, target) // frequency.step_months
    while occurrence(start, frequency, k) < target:
        k += 1
    return k


class RecurrenceScheduler:
    """
    Occurrence queries for recurring obligations.

    Every query recomputes from the obligation's fields; nothing is cached
    between calls, so the same inputs always give the same dates.

    **States:**
        - PENDING: ``now`` is before the start date
        - DUE: a next occurrence exists
        - LAPSED: the next occurrence would fall after ``end_date``
        - INACTIVE: ``is_active`` is false; no occurrences are generated

    **Example:**
        ```python
        bill = RecurringObligation(
            id="rent", start_date=date(2024, 1, 31), frequency="monthly", amount="950"
        )
        scheduler = RecurrenceScheduler()
        scheduler.occurrences_within(bill, date(2024, 1, 1), 91)
        # [date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31)]
        ```
    """

    def __init__(self, config: EngineConfig | None = None):
        self.config = config or DEFAULT_CONFIG

    @staticmethod
    def validate(obligation: RecurringObligation) -> None:
        """
        Reject malformed recurrence input before any date arithmetic.

        Raises:
            InvalidFrequencyTransitionError: If ``end_date`` precedes ``start_date``
        """
        if obligation.end_date is not None and obligation.end_date < obligation.start_date:
            raise InvalidFrequencyTransitionError(
                f"end_date {obligation.end_date} is before start_date {obligation.start_date}",
                obligation.id,
            )

    def iter_occurrences(
        self, obligation: RecurringObligation, from_date: date | None = None
    ) -> Iterator[date]:
        """
        Unbounded ascending occurrences on or after ``from_date``.

        Occurrences already covered by ``last_paid`` are skipped and the
        sequence stops after ``end_date`` or at ``date.max``. Each call returns a
        fresh iterator.
        """
        self.validate(obligation)
        if not obligation.is_active:
            return iter(())

        lower = obligation.start_date
        if from_date is not None:
            lower = max(lower, from_date)
        if obligation.last_paid is not None:
            if obligation.last_paid == date.max:
                return iter(())
            lower = max(lower, obligation.last_paid + ONE_DAY)
        return self._generate(obligation, lower)

    @staticmethod
    def _generate(obligation: RecurringObligation, lower: date) -> Iterator[date]:
        try:
            k = _first_index_on_or_after(obligation.start_date, obligation.frequency, lower)
        except (OverflowError, ValueError):
            return
        while True:
            try:
                current = occurrence(obligation.start_date, obligation.frequency, k)
            except (OverflowError, ValueError):
                # past date.max
                return
            if obligation.end_date is not None and current > obligation.end_date:
                return
            yield current
            k += 1

    def occurrences_within(
        self, obligation: RecurringObligation, from_date: date, horizon_days: int
    ) -> list[date]:
        """
        Occurrences in ``[from_date, from_date + horizon_days]``, ascending.

        Raises:
            InvalidInputError: If ``horizon_days`` is negative
            InvalidFrequencyTransitionError: For malformed obligations
        """
        if isinstance(horizon_days, bool) or not isinstance(horizon_days, int):
            raise InvalidInputError(f"horizon_days must be an integer, got {horizon_days!r}", obligation.id)
        if horizon_days < 0:
            raise InvalidInputError(f"horizon_days must not be negative, got {horizon_days}", obligation.id)
        if horizon_days > (date.max - from_date).days:
            window_end = date.max
        else:
            window_end = from_date + timedelta(days=horizon_days)
        return list(
            itertools.takewhile(
                lambda d: d <= window_end, self.iter_occurrences(obligation, from_date)
            )
        )

    def next_occurrence(self, obligation: RecurringObligation, now: date) -> date | None:
        """First occurrence on or after ``now``; None if lapsed or inactive."""
        return next(self.iter_occurrences(obligation, now), None)

    def pending_occurrence(self, obligation: RecurringObligation) -> date | None:
        """
        The derived next occurrence: first scheduled date after ``last_paid``.

        Unlike ``next_occurrence`` this can lie in the past when payments
        are behind. None when the series has lapsed or is inactive.
        """
        return next(self.iter_occurrences(obligation), None)

    def due_occurrences(self, obligation: RecurringObligation, as_of: date) -> list[date]:
        """All unpaid scheduled dates up to and including ``as_of``."""
        return list(itertools.takewhile(lambda d: d <= as_of, self.iter_occurrences(obligation)))

    def status(self, obligation: RecurringObligation, now: date) -> RecurrenceStatus:
        """Lifecycle state of the obligation at ``now``."""
        self.validate(obligation)
        if not obligation.is_active:
            return RecurrenceStatus(obligation.id, RecurrenceState.INACTIVE, None)
        pending = self.pending_occurrence(obligation)
        if pending is None:
            return RecurrenceStatus(obligation.id, RecurrenceState.LAPSED, None)
        if now < obligation.start_date:
            return RecurrenceStatus(obligation.id, RecurrenceState.PENDING, pending)
        return RecurrenceStatus(obligation.id, RecurrenceState.DUE, pending)

    def advance(self, obligation: RecurringObligation) -> RecurringObligation:
        """
        Mark the pending occurrence as paid.

        The next occurrence is derived from the previous scheduled date, not
        from the day the payment was recorded, so late or early payments do
        not shift the series.

        Returns:
            A new obligation with ``last_paid`` set to the paid occurrence

        Raises:
            InvalidFrequencyTransitionError: If the obligation is inactive or lapsed
        """
        self.validate(obligation)
        if not obligation.is_active:
            raise InvalidFrequencyTransitionError("cannot advance an inactive obligation", obligation.id)
        pending = self.pending_occurrence(obligation)
        if pending is None:
            raise InvalidFrequencyTransitionError(
                f"obligation lapsed after {obligation.end_date}", obligation.id
            )
        return dataclasses.replace(obligation, last_paid=pending)

    def upcoming(
        self,
        obligations: Iterable[RecurringObligation],
        now: date,
        days_ahead: int | None = None,
    ) -> list[UpcomingOccurrence]:
        """
        Occurrences of every obligation within ``days_ahead`` of ``now``.

        Sorted by date, then obligation ID. Inactive obligations are skipped.
        """
        window = self.config.upcoming_days if days_ahead is None else days_ahead
        items = []
        for obligation in obligations:
            for when in self.occurrences_within(obligation, now, window):
                items.append(
                    UpcomingOccurrence(
                        obligation_id=obligation.id,
                        date=when,
                        days_remaining=(when - now).days,
                        amount=obligation.amount,
                        kind=obligation.kind.value,
                        description=obligation.description,
                    )
                )
        return sorted(items, key=lambda item: (item.date, item.obligation_id or ""))
