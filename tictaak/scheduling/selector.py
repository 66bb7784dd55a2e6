"""Pick the tasks that are due inside a window of local days.

Every function takes the reference instant and the timezone as arguments;
nothing here reads the clock.  A window is ``[start, end)`` where ``start``
is local midnight of the reference day shifted by the window offset.  Stored
``next_eligible_date`` values are plain dates, so the timezone only decides
where the window boundaries fall.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable, Optional

from tictaak.domain.entities import Recurring, TaskEntity
from tictaak.domain.filters import TODAY, DueWindow, upcoming_window

from .recurrence import next_occurrence
from .timezones import as_aware, day_bounds, local_date, resolve_timezone, start_of_day


def effective_date(task: TaskEntity, today: date) -> Optional[date]:
    """The date a task counts as eligible on, seen from local ``today``.

    Recurring tasks whose stored date was never advanced past an earlier
    day fall back to their next occurrence from ``today``.  A one-off task
    without a date is eligible immediately until its first print.  ``None``
    means the task is not eligible on any day.
    """
    if task.archived_at is not None:
        return None

    if isinstance(task.schedule, Recurring):
        if task.next_eligible_date is None:
            return None
        if task.next_eligible_date < today:
            return next_occurrence(task.schedule.pattern, today)
        return task.next_eligible_date

    if task.next_eligible_date is None:
        return today if task.last_printed_at is None else None
    return task.next_eligible_date


def select_due(
    tasks: Iterable[TaskEntity],
    reference: datetime,
    timezone: str | tzinfo,
    window_start_offset_days: int,
    window_length_days: int,
) -> list[TaskEntity]:
    window = DueWindow(window_start_offset_days, window_length_days)
    tz = resolve_timezone(timezone)
    today = local_date(reference, tz)
    first_day = today + timedelta(days=window.start_offset_days)
    last_day = first_day + timedelta(days=window.length_days)
    window_start = start_of_day(first_day, tz)

    selected: list[tuple[bool, date, datetime, TaskEntity]] = []
    for task in tasks:
        eligible_on = effective_date(task, today)
        if eligible_on is None or not first_day <= eligible_on < last_day:
            continue
        if task.last_printed_at is not None and as_aware(task.last_printed_at) >= window_start:
            continue
        created = as_aware(task.created_at) if task.created_at else window_start
        selected.append((task.next_eligible_date is None, eligible_on, created, task))

    selected.sort(key=lambda item: item[:3])
    return [item[3] for item in selected]


def due_today(
    tasks: Iterable[TaskEntity], reference: datetime, timezone: str | tzinfo
) -> list[TaskEntity]:
    return select_due(tasks, reference, timezone, TODAY.start_offset_days, TODAY.length_days)


def upcoming(
    tasks: Iterable[TaskEntity],
    reference: datetime,
    timezone: str | tzinfo,
    days: int = 30,
) -> list[TaskEntity]:
    window = upcoming_window(days)
    return select_due(tasks, reference, timezone, window.start_offset_days, window.length_days)


def printed_today(
    tasks: Iterable[TaskEntity], reference: datetime, timezone: str | tzinfo
) -> list[TaskEntity]:
    tz = resolve_timezone(timezone)
    start, end = day_bounds(local_date(reference, tz), tz)
    printed = [
        task
        for task in tasks
        if task.last_printed_at is not None and start <= as_aware(task.last_printed_at) < end
    ]
    printed.sort(key=lambda task: as_aware(task.last_printed_at), reverse=True)
    return printed

