from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy.orm import sessionmaker

from tictaak.domain.entities import OneOff, Recurring
from tictaak.domain.errors import ConcurrentPrintError
from tictaak.infra.db import Base, make_engine
from tictaak.infra.repository import TaskRepository
from tictaak.scheduling.advancer import advance

UTC = timezone.utc


@pytest.fixture()
def repo(tmp_path) -> TaskRepository:
    engine = make_engine(f"sqlite:///{tmp_path / 'tictaak.db'}")
    Base.metadata.create_all(engine)
    yield TaskRepository(sessionmaker(bind=engine, autoflush=False, autocommit=False))
    engine.dispose()


def test_create_and_get_round_trip(repo: TaskRepository) -> None:
    created = repo.create_task("Water plants", "home", Recurring(frozenset({1, 3})), date(2025, 1, 1))

    loaded = repo.get_task(created.id)

    assert loaded == created
    assert loaded.category == "home"
    assert loaded.schedule == Recurring(frozenset({1, 3}))
    assert loaded.next_eligible_date == date(2025, 1, 1)
    assert loaded.last_printed_at is None
    assert loaded.created_at.tzinfo is not None


def test_one_off_round_trip(repo: TaskRepository) -> None:
    created = repo.create_task("Dentist", "health", OneOff(), None)

    assert isinstance(repo.get_task(created.id).schedule, OneOff)


def test_categories_are_shared(repo: TaskRepository) -> None:
    first = repo.get_or_create_category("home")
    repo.create_task("A", "home", OneOff(), None)

    assert repo.get_or_create_category(" home ") == first
    assert repo.get_or_create_category("work") != first


def test_missing_task(repo: TaskRepository) -> None:
    assert repo.get_task(99) is None
    assert repo.set_archived(99, datetime(2025, 1, 1, tzinfo=UTC)) is None


def test_save_print_state_is_conditional(repo: TaskRepository) -> None:
    task = repo.create_task("Water plants", "home", Recurring(frozenset({3})), date(2025, 1, 1))
    printed_at = datetime(2025, 1, 1, 10, 0, 30, 125000, tzinfo=UTC)

    stored = repo.save_print_state(advance(task, printed_at), previous_printed_at=None)

    assert stored.last_printed_at == printed_at
    assert stored.next_eligible_date == date(2025, 1, 8)

    with pytest.raises(ConcurrentPrintError):
        repo.save_print_state(advance(task, printed_at + timedelta(seconds=1)), previous_printed_at=None)

    later = advance(stored, datetime(2025, 1, 8, 9, 0, tzinfo=UTC))
    assert repo.save_print_state(later, previous_printed_at=stored.last_printed_at).next_eligible_date == date(
        2025, 1, 15
    )


def test_save_print_state_for_deleted_task(repo: TaskRepository) -> None:
    task = repo.create_task("Gone", "home", OneOff(), None)
    ghost = replace(task, id=task.id + 100, last_printed_at=datetime(2025, 1, 1, tzinfo=UTC))

    assert repo.save_print_state(ghost, previous_printed_at=None) is None


def test_archived_tasks_are_left_out(repo: TaskRepository) -> None:
    kept = repo.create_task("Kept", "home", OneOff(), None)
    gone = repo.create_task("Gone", "home", OneOff(), None)

    archived = repo.set_archived(gone.id, datetime(2025, 1, 1, 12, 0, tzinfo=UTC))

    assert archived.archived_at == datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
    assert [t.id for t in repo.list_tasks()] == [kept.id]
    assert [t.id for t in repo.list_tasks(include_archived=True)] == [kept.id, gone.id]

    repo.set_archived(gone.id, None)
    assert [t.id for t in repo.list_tasks()] == [kept.id, gone.id]


def test_list_printed_since(repo: TaskRepository) -> None:
    old = repo.create_task("Old", "home", OneOff(), None)
    new = repo.create_task("New", "home", OneOff(), None)
    repo.create_task("Never", "home", OneOff(), None)
    repo.save_print_state(advance(old, datetime(2024, 12, 31, 9, 0, tzinfo=UTC)), None)
    repo.save_print_state(advance(new, datetime(2025, 1, 1, 9, 0, tzinfo=UTC)), None)

    since = datetime(2025, 1, 1, 1, 0, tzinfo=timezone(timedelta(hours=1)))

    assert [t.title for t in repo.list_printed_since(since)] == ["New"]
