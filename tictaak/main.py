from __future__ import annotations

import argparse
import sys
from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from tictaak.config import PROJECT_ROOT, SETTINGS
from tictaak.domain.entities import Recurring, TaskEntity
from tictaak.domain.errors import (
    ConcurrentPrintError,
    InvalidPatternError,
    InvalidTimezoneError,
    PrintFailedError,
    TaskNotFoundError,
)
from tictaak.infra.db import init_db
from tictaak.infra.logging import setup_logging
from tictaak.infra.printer import TicketPrinter
from tictaak.infra.repository import TaskRepository
from tictaak.scheduling.timezones import resolve_timezone
from tictaak.services.task_service import TaskService


def _parse_date(d: Optional[str]) -> Optional[date]:
    if not d:
        return None
    try:
        return date.fromisoformat(d)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid date '{d}'. Use YYYY-MM-DD.") from e


def _parse_days(raw: str) -> list[int]:
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError as e:
        raise argparse.ArgumentTypeError(
            f"Invalid weekdays '{raw}'. Use comma separated numbers, 0 = Sunday."
        ) from e


def _describe_schedule(task: TaskEntity) -> str:
    if isinstance(task.schedule, Recurring):
        return "every " + " ".join(day.short for day in task.schedule.days())
    return "once"


def _print_tasks(tasks: list[TaskEntity]) -> None:
    if not tasks:
        print("No tasks found.")
        return
    print(f"{'ID':>4}  {'NEXT':<10}  {'REPEATS':<24} {'CATEGORY':<12} TITLE")
    print("-" * 72)
    for t in tasks:
        nxt = t.next_eligible_date.isoformat() if t.next_eligible_date else "now"
        print(f"{t.id:>4}  {nxt:<10}  {_describe_schedule(t):<24} {t.category:<12} {t.title}")


def _service(ns: argparse.Namespace) -> TaskService:
    tz = ns.timezone or SETTINGS.timezone
    printer = TicketPrinter(tz=resolve_timezone(tz))
    return TaskService(TaskRepository(), printer, tz)


def cmd_init(ns: argparse.Namespace) -> int:
    from alembic import command
    from alembic.config import Config

    config = Config(str(PROJECT_ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    config.set_main_option("sqlalchemy.url", SETTINGS.database_url)
    config.attributes["configure_logger"] = False
    command.upgrade(config, "head")
    print(f"Database ready at {SETTINGS.database_url}")
    return 0


def cmd_add(ns: argparse.Namespace) -> int:
    task = _service(ns).create_task(
        ns.title, ns.category, recurs_on=ns.days, scheduled_for=ns.on
    )
    print(f"Added task #{task.id}: {task.title} ({_describe_schedule(task)})")
    return 0


def cmd_due(ns: argparse.Namespace) -> int:
    print("Due today:")
    _print_tasks(_service(ns).list_due_tasks())
    return 0


def cmd_upcoming(ns: argparse.Namespace) -> int:
    print(f"Upcoming in the next {ns.days} days:")
    _print_tasks(_service(ns).list_upcoming_tasks(ns.days))
    return 0


def cmd_printed(ns: argparse.Namespace) -> int:
    print("Printed today:")
    _print_tasks(_service(ns).list_printed_today())
    return 0


def cmd_print(ns: argparse.Namespace) -> int:
    task = _service(ns).print_task(ns.task_id)
    nxt = task.next_eligible_date.isoformat() if task.next_eligible_date else "-"
    print(f"Printed task #{task.id}: {task.title} (next: {nxt})")
    return 0


def cmd_print_due(ns: argparse.Namespace) -> int:
    try:
        printed = _service(ns).print_due_tasks()
    except PrintFailedError as exc:
        print(f"Printed {len(exc.printed)} task(s) before stopping.")
        print(str(exc), file=sys.stderr)
        return 1
    print(f"Printed {len(printed)} task(s).")
    return 0


def cmd_archive(ns: argparse.Namespace) -> int:
    task = _service(ns).archive_task(ns.task_id)
    print(f"Archived task #{task.id}: {task.title}")
    return 0


def cmd_unarchive(ns: argparse.Namespace) -> int:
    task = _service(ns).unarchive_task(ns.task_id)
    print(f"Restored task #{task.id}: {task.title}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="tictaak",
        description="tictaak: print task tickets on a receipt printer.",
    )
    p.add_argument("--timezone", help=f"Timezone for day boundaries (default: {SETTINGS.timezone}).")
    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("init", help="Create or upgrade the database schema.")
    s.set_defaults(func=cmd_init)

    s = sub.add_parser("add", help="Add a new task.")
    s.add_argument("title", help="Ticket title.")
    s.add_argument("-c", "--category", required=True, help="Category printed on the ticket.")
    g = s.add_mutually_exclusive_group()
    g.add_argument("--days", type=_parse_days, help="Repeat on weekdays, e.g. 1,3,5 (0 = Sunday).")
    g.add_argument("--on", type=_parse_date, help="Print once on YYYY-MM-DD.")
    s.set_defaults(func=cmd_add)

    s = sub.add_parser("due", help="Show tasks due today.")
    s.set_defaults(func=cmd_due)

    s = sub.add_parser("upcoming", help="Show tasks due after today.")
    s.add_argument("--days", type=int, default=SETTINGS.upcoming_days, help="Window length in days.")
    s.set_defaults(func=cmd_upcoming)

    s = sub.add_parser("printed", help="Show tasks printed today.")
    s.set_defaults(func=cmd_printed)

    s = sub.add_parser("print", help="Print a task and schedule its next occurrence.")
    s.add_argument("task_id", type=int, help="Task ID.")
    s.set_defaults(func=cmd_print)

    s = sub.add_parser("print-due", help="Print every task due today.")
    s.set_defaults(func=cmd_print_due)

    s = sub.add_parser("archive", help="Archive a task.")
    s.add_argument("task_id", type=int, help="Task ID.")
    s.set_defaults(func=cmd_archive)

    s = sub.add_parser("unarchive", help="Restore an archived task.")
    s.add_argument("task_id", type=int, help="Task ID.")
    s.set_defaults(func=cmd_unarchive)

    return p


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    setup_logging()
    try:
        if ns.cmd != "init":
            init_db()
        return int(ns.func(ns))
    except SQLAlchemyError as exc:
        print(f"Database error: {exc}", file=sys.stderr)
        print("Run `tictaak init` to create or upgrade the database.", file=sys.stderr)
        return 3
    except (TaskNotFoundError, PrintFailedError, ConcurrentPrintError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except (InvalidPatternError, InvalidTimezoneError, ValueError) as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
