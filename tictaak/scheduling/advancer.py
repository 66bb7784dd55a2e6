"""Schedule bookkeeping around a successful print."""
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional

from tictaak.domain.entities import Recurring, Schedule, TaskEntity
from tictaak.domain.enums import ScheduleState

from .recurrence import next_occurrence
from .timezones import as_aware, local_date, resolve_timezone, start_of_day

logger = logging.getLogger(__name__)


def initial_eligible_date(
    schedule: Schedule,
    reference: date | datetime,
    scheduled_for: Optional[date] = None,
) -> Optional[date]:
    if isinstance(schedule, Recurring):
        return next_occurrence(schedule.pattern, reference)
    return scheduled_for


def advance(
    task: TaskEntity,
    printed_at: datetime,
    timezone: str | tzinfo | None = None,
) -> TaskEntity:
    """Return ``task`` as it should be stored after printing it at ``printed_at``.

    Recurring tasks move to their first occurrence after the printed day, so
    the day that was just consumed never comes back through the date alone.
    One-off tasks keep their date; ``last_printed_at`` is what retires them.
    """
    if not isinstance(task.schedule, Recurring):
        return replace(task, last_printed_at=printed_at)

    if timezone is None:
        printed_on = printed_at.date()
    else:
        printed_on = local_date(printed_at, resolve_timezone(timezone))

    next_date = next_occurrence(task.schedule.pattern, printed_on + timedelta(days=1))
    logger.debug("Task %s advanced from %s to %s", task.id, task.next_eligible_date, next_date)
    return replace(task, last_printed_at=printed_at, next_eligible_date=next_date)


def schedule_state(task: TaskEntity, reference: datetime, timezone: str | tzinfo) -> ScheduleState:
    tz = resolve_timezone(timezone)
    window_start = start_of_day(local_date(reference, tz), tz)
    if task.last_printed_at is not None and as_aware(task.last_printed_at) >= window_start:
        return ScheduleState.PRINTED
    if isinstance(task.schedule, Recurring):
        if task.next_eligible_date is None:
            return ScheduleState.UNSCHEDULED
        return ScheduleState.PENDING
    if task.last_printed_at is not None:
        # One-off tasks stay printed once they have been printed.
        return ScheduleState.PRINTED
    # An undated one-off is "print now", so it waits in today's window.
    return ScheduleState.PENDING
