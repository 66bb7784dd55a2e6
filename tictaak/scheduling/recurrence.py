"""Weekly recurrence: which calendar day a weekday pattern lands on next."""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable

from tictaak.domain.enums import Weekday
from tictaak.domain.errors import InvalidPatternError


def weekday_of(day: date) -> Weekday:
    # date.weekday() counts from Monday; patterns count from Sunday.
    return Weekday((day.weekday() + 1) % 7)


def parse_pattern(values: Iterable[int] | str | None) -> frozenset[Weekday]:
    """Validate raw weekday indices (or a stored ``"1,3,5"`` string).

    Returns an empty frozenset for ``None`` or an empty input, which callers
    read as a one-off task. Duplicates and values outside 0-6 raise
    :class:`InvalidPatternError`.
    """
    if values is None:
        return frozenset()
    if isinstance(values, str):
        parts = [part.strip() for part in values.split(",") if part.strip()]
        try:
            values = [int(part) for part in parts]
        except ValueError as exc:
            raise InvalidPatternError(f"Cannot parse weekday pattern {values!r}") from exc

    days: list[Weekday] = []
    for value in values:
        try:
            day = Weekday(int(value))
        except ValueError as exc:
            raise InvalidPatternError(f"{value!r} is not a weekday index (0-6)") from exc
        if day in days:
            raise InvalidPatternError(f"Weekday {day.short} listed twice")
        days.append(day)
    return frozenset(days)


def format_pattern(pattern: Iterable[Weekday]) -> str:
    return ",".join(str(int(day)) for day in sorted(pattern))


def next_occurrence(pattern: Iterable[int], reference: date | datetime) -> date:
    """Return the first day on or after ``reference`` whose weekday is in ``pattern``.

    The reference day itself counts. Only the calendar date of a datetime
    reference is used.
    """
    days: list[Weekday] = []
    for value in pattern:
        try:
            days.append(Weekday(int(value)))
        except ValueError as exc:
            raise InvalidPatternError(f"{value!r} is not a weekday index (0-6)") from exc
    if not days:
        raise InvalidPatternError("Recurrence pattern invalid")

    if isinstance(reference, datetime):
        reference = reference.date()

    today = weekday_of(reference)
    soonest = min((day - today + 7) % 7 for day in days)
    return reference + timedelta(days=soonest)
