from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Callable, Iterable, Optional, Protocol

from tictaak.domain.entities import OneOff, Recurring, Schedule, TaskEntity
from tictaak.domain.errors import PrintFailedError, TaskNotFoundError
from tictaak.infra.printer import PrintResult
from tictaak.infra.repository import TaskRepository
from tictaak.scheduling import selector
from tictaak.scheduling.advancer import advance, initial_eligible_date
from tictaak.scheduling.recurrence import parse_pattern
from tictaak.scheduling.timezones import local_date, resolve_timezone, start_of_day

logger = logging.getLogger(__name__)


class Printer(Protocol):
    def print_ticket(self, title: str, category: str) -> PrintResult: ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TaskService:
    def __init__(
        self,
        repo: TaskRepository,
        printer: Printer,
        timezone_name: str,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repo = repo
        self._printer = printer
        self._tz = resolve_timezone(timezone_name)
        self._now = now

    def create_task(
        self,
        title: str,
        category: str,
        recurs_on: Iterable[int] | None = None,
        scheduled_for: Optional[date] = None,
    ) -> TaskEntity:
        pattern = parse_pattern(recurs_on)
        schedule: Schedule = Recurring(pattern) if pattern else OneOff()
        if isinstance(schedule, Recurring) and scheduled_for is not None:
            raise ValueError("A recurring task cannot also be scheduled for a single date")

        today = local_date(self._now(), self._tz)
        if scheduled_for is not None and scheduled_for < today:
            raise ValueError(f"Cannot schedule a task in the past ({scheduled_for.isoformat()})")

        next_date = initial_eligible_date(schedule, today, scheduled_for)
        task = self._repo.create_task(title.strip(), category, schedule, next_date)
        logger.info("Created task %s %r next eligible on %s", task.id, task.title, next_date)
        return task

    def get_task(self, task_id: int) -> TaskEntity:
        task = self._repo.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def list_due_tasks(self) -> list[TaskEntity]:
        return selector.due_today(self._repo.list_tasks(), self._now(), self._tz)

    def list_upcoming_tasks(self, days: int = 30) -> list[TaskEntity]:
        return selector.upcoming(self._repo.list_tasks(), self._now(), self._tz, days)

    def list_printed_today(self) -> list[TaskEntity]:
        now = self._now()
        since = start_of_day(local_date(now, self._tz), self._tz)
        return selector.printed_today(self._repo.list_printed_since(since), now, self._tz)

    def print_task(self, task_id: int) -> TaskEntity:
        task = self.get_task(task_id)
        result = self._printer.print_ticket(task.title, task.category)
        if not result.success:
            logger.warning("Task %s was not printed: %s", task_id, result.error)
            raise PrintFailedError(task_id, result.error)

        printed = advance(task, self._now(), self._tz)
        stored = self._repo.save_print_state(printed, previous_printed_at=task.last_printed_at)
        if stored is None:
            raise TaskNotFoundError(task_id)
        logger.info(
            "Printed task %s, next eligible on %s", task_id, stored.next_eligible_date
        )
        return stored

    def print_due_tasks(self) -> list[TaskEntity]:
        """Print every task due today, stopping at the first printer failure.

        A :class:`PrintFailedError` carries the tasks printed before it in
        ``printed``.
        """
        printed: list[TaskEntity] = []
        for task in self.list_due_tasks():
            try:
                printed.append(self.print_task(task.id))
            except PrintFailedError as exc:
                exc.printed = printed
                raise
        return printed

    def archive_task(self, task_id: int) -> TaskEntity:
        task = self._repo.set_archived(task_id, self._now())
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def unarchive_task(self, task_id: int) -> TaskEntity:
        task = self._repo.set_archived(task_id, None)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task
