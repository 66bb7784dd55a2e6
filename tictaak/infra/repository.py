from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import select, update

from tictaak.domain.entities import OneOff, Recurring, Schedule, TaskEntity
from tictaak.domain.errors import ConcurrentPrintError
from tictaak.scheduling.recurrence import format_pattern, parse_pattern

from .db import SessionLocal
from .models import CategoryModel, TaskModel

logger = logging.getLogger(__name__)


def _to_db_time(moment: Optional[datetime]) -> Optional[datetime]:
    if moment is None or moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def _from_db_time(moment: Optional[datetime]) -> Optional[datetime]:
    if moment is None:
        return None
    return moment.replace(tzinfo=timezone.utc)


def _to_schedule(raw: str | None) -> Schedule:
    pattern = parse_pattern(raw)
    return Recurring(pattern) if pattern else OneOff()


def _from_schedule(schedule: Schedule) -> str | None:
    if isinstance(schedule, Recurring):
        return format_pattern(schedule.pattern)
    return None


def _to_entity(model: TaskModel) -> TaskEntity:
    return TaskEntity(
        id=model.id,
        title=model.title,
        category=model.category.name,
        schedule=_to_schedule(model.recurs_on_days),
        next_eligible_date=model.next_eligible_date,
        last_printed_at=_from_db_time(model.last_printed_at),
        archived_at=_from_db_time(model.archived_at),
        created_at=_from_db_time(model.created_at),
    )


class TaskRepository:
    def __init__(self, session_factory=SessionLocal) -> None:
        self._session_factory = session_factory

    def list_tasks(self, include_archived: bool = False) -> list[TaskEntity]:
        with self._session_factory() as session:
            stmt = select(TaskModel)
            if not include_archived:
                stmt = stmt.where(TaskModel.archived_at.is_(None))
            stmt = stmt.order_by(TaskModel.created_at.asc(), TaskModel.id.asc())
            return [_to_entity(task) for task in session.scalars(stmt)]

    def list_printed_since(self, since: datetime) -> list[TaskEntity]:
        with self._session_factory() as session:
            stmt = (
                select(TaskModel)
                .where(
                    TaskModel.last_printed_at.is_not(None),
                    TaskModel.last_printed_at >= _to_db_time(since),
                )
                .order_by(TaskModel.last_printed_at.desc())
            )
            return [_to_entity(task) for task in session.scalars(stmt)]

    def get_task(self, task_id: int) -> Optional[TaskEntity]:
        with self._session_factory() as session:
            task = session.get(TaskModel, task_id)
            return _to_entity(task) if task else None

    def get_or_create_category(self, name: str) -> int:
        name = name.strip()
        with self._session_factory() as session:
            category_id = session.scalar(select(CategoryModel.id).where(CategoryModel.name == name))
            if category_id is not None:
                return category_id
            category = CategoryModel(name=name)
            session.add(category)
            session.commit()
            logger.info("Created category %r", name)
            return category.id

    def create_task(
        self,
        title: str,
        category: str,
        schedule: Schedule,
        next_eligible_date: Optional[date],
    ) -> TaskEntity:
        category_id = self.get_or_create_category(category)
        with self._session_factory() as session:
            task = TaskModel(
                title=title,
                category_id=category_id,
                recurs_on_days=_from_schedule(schedule),
                next_eligible_date=next_eligible_date,
            )
            session.add(task)
            session.commit()
            session.refresh(task)
            return _to_entity(task)

    def save_print_state(
        self, task: TaskEntity, previous_printed_at: Optional[datetime]
    ) -> Optional[TaskEntity]:
        """Store ``task``'s print state if nobody printed it since ``previous_printed_at``.

        Returns ``None`` when the task no longer exists and raises
        :class:`ConcurrentPrintError` when the stored ``last_printed_at`` moved.
        """
        if previous_printed_at is None:
            unchanged = TaskModel.last_printed_at.is_(None)
        else:
            unchanged = TaskModel.last_printed_at == _to_db_time(previous_printed_at)

        with self._session_factory() as session:
            result = session.execute(
                update(TaskModel)
                .where(TaskModel.id == task.id, unchanged)
                .values(
                    last_printed_at=_to_db_time(task.last_printed_at),
                    next_eligible_date=task.next_eligible_date,
                )
            )
            if result.rowcount == 0:
                session.rollback()
                if session.get(TaskModel, task.id) is None:
                    return None
                raise ConcurrentPrintError(task.id)
            session.commit()
            stored = session.get(TaskModel, task.id)
            session.refresh(stored)
            return _to_entity(stored)

    def set_archived(self, task_id: int, archived_at: Optional[datetime]) -> Optional[TaskEntity]:
        with self._session_factory() as session:
            task = session.get(TaskModel, task_id)
            if not task:
                return None
            task.archived_at = _to_db_time(archived_at)
            session.commit()
            session.refresh(task)
            return _to_entity(task)
