from __future__ import annotations

from enum import IntEnum, StrEnum


class Weekday(IntEnum):
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @property
    def short(self) -> str:
        return self.name[:3].title()


class ScheduleState(StrEnum):
    UNSCHEDULED = "unscheduled"
    PENDING = "pending"
    PRINTED = "printed"
