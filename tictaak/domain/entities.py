from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Union

from .enums import Weekday
from .errors import InvalidPatternError


@dataclass(frozen=True)
class Recurring:
    pattern: frozenset[Weekday]

    def __post_init__(self) -> None:
        days = []
        for value in self.pattern:
            try:
                days.append(Weekday(value))
            except ValueError as exc:
                raise InvalidPatternError(f"{value!r} is not a weekday index (0-6)") from exc
        if not days:
            raise InvalidPatternError("Recurrence pattern invalid")
        object.__setattr__(self, "pattern", frozenset(days))

    def days(self) -> list[Weekday]:
        return sorted(self.pattern)


@dataclass(frozen=True)
class OneOff:
    pass


Schedule = Union[Recurring, OneOff]


@dataclass(frozen=True)
class TaskEntity:
    id: int | None
    title: str
    category: str
    schedule: Schedule = field(default_factory=OneOff)
    next_eligible_date: Optional[date] = None
    last_printed_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
