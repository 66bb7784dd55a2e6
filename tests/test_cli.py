from __future__ import annotations

import argparse
from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from tictaak import main as cli
from tictaak.domain.errors import PrintFailedError
from tictaak.main import _parse_days, build_parser


def test_add_recurring() -> None:
    ns = build_parser().parse_args(["add", "Water plants", "-c", "home", "--days", "1,3,5"])

    assert ns.title == "Water plants"
    assert ns.category == "home"
    assert ns.days == [1, 3, 5]
    assert ns.on is None


def test_add_scheduled() -> None:
    ns = build_parser().parse_args(["--timezone", "UTC", "add", "Dentist", "-c", "health", "--on", "2025-02-01"])

    assert ns.on == date(2025, 2, 1)
    assert ns.timezone == "UTC"


def test_days_and_on_are_exclusive() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["add", "X", "-c", "home", "--days", "1", "--on", "2025-02-01"])


def test_bad_weekdays() -> None:
    with pytest.raises(argparse.ArgumentTypeError):
        _parse_days("mon,wed")


def test_upcoming_defaults_to_configured_window() -> None:
    ns = build_parser().parse_args(["upcoming"])

    assert ns.days == 30


def test_task_ids_are_parsed_as_integers() -> None:
    parser = build_parser()

    assert parser.parse_args(["print", "7"]).task_id == 7
    assert parser.parse_args(["archive", "3"]).task_id == 3
    with pytest.raises(SystemExit):
        parser.parse_args(["print", "seven"])
    with pytest.raises(SystemExit):
        parser.parse_args(["unarchive", "1.5"])


def _quiet(monkeypatch) -> None:
    monkeypatch.setattr(cli, "setup_logging", lambda: None)


def test_missing_schema_asks_for_init(monkeypatch, capsys) -> None:
    _quiet(monkeypatch)

    def no_tables() -> None:
        raise OperationalError("SELECT 1", {}, Exception("no such table: tasks"))

    monkeypatch.setattr(cli, "init_db", no_tables)

    assert cli.main(["due"]) == 3
    assert "tictaak init" in capsys.readouterr().err


def test_print_due_reports_partial_run(monkeypatch, capsys) -> None:
    _quiet(monkeypatch)
    monkeypatch.setattr(cli, "init_db", lambda: None)

    class StoppedService:
        def print_due_tasks(self):
            error = PrintFailedError(2, "jam")
            error.printed = [object()]
            raise error

    monkeypatch.setattr(cli, "_service", lambda ns: StoppedService())

    assert cli.main(["print-due"]) == 1
    out, err = capsys.readouterr()
    assert "Printed 1 task(s) before stopping." in out
    assert "Failed to print task 2: jam" in err
