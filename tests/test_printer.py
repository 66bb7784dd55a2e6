from __future__ import annotations

from datetime import datetime, timezone

from escpos.printer import Dummy

from tictaak.infra.printer import TicketPrinter


class BrokenDevice(Dummy):
    def __init__(self) -> None:
        super().__init__()
        self.closed = False

    def text(self, txt: str) -> None:
        raise OSError("paper jam")

    def close(self) -> None:
        self.closed = True


def _fixed_now() -> datetime:
    return datetime(2025, 1, 1, 10, 0, tzinfo=timezone.utc)


def test_ticket_layout() -> None:
    device = Dummy()
    printer = TicketPrinter(device_factory=lambda: device, now=_fixed_now)

    result = printer.print_ticket("Water the plants", "home")

    assert result.success
    assert result.error is None
    output = device.output
    assert b"TICTAAK" in output
    assert b"Water the plants" in output
    assert b"category: home" in output
    assert b"01-01-2025 10:00:00" in output
    assert output.index(b"TICTAAK") < output.index(b"Water the plants")


def test_timestamp_uses_printer_timezone() -> None:
    from zoneinfo import ZoneInfo

    device = Dummy()
    printer = TicketPrinter(
        device_factory=lambda: device, tz=ZoneInfo("Europe/Amsterdam"), now=_fixed_now
    )

    printer.print_ticket("Water the plants", "home")

    assert b"01-01-2025 11:00:00" in device.output


def test_unreachable_printer_reports_failure() -> None:
    def unreachable():
        raise OSError("Printer not connected")

    result = TicketPrinter(device_factory=unreachable).print_ticket("Title", "home")

    assert not result.success
    assert result.error == "Printer not connected"


def test_device_closed_after_error() -> None:
    device = BrokenDevice()

    result = TicketPrinter(device_factory=lambda: device, now=_fixed_now).print_ticket("Title", "home")

    assert not result.success
    assert result.error == "paper jam"
    assert device.closed
