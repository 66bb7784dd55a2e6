from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Callable, Optional

from escpos.escpos import Escpos
from escpos.printer import Network

from tictaak.config import SETTINGS

logger = logging.getLogger(__name__)

HEADER = "TICTAAK"
LINE_WIDTH = 48


@dataclass(frozen=True)
class PrintResult:
    success: bool
    error: Optional[str] = None


def network_device() -> Escpos:
    return Network(SETTINGS.printer_host, port=SETTINGS.printer_port, timeout=SETTINGS.printer_timeout)


class TicketPrinter:
    """Prints one ticket per task on an ESC/POS receipt printer."""

    def __init__(
        self,
        device_factory: Callable[[], Escpos] = network_device,
        tz: Optional[tzinfo] = None,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._device_factory = device_factory
        self._tz = tz
        self._now = now

    def print_ticket(self, title: str, category: str) -> PrintResult:
        device = None
        try:
            device = self._device_factory()
            self._write_ticket(device, title, category)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Printing %r failed", title)
            return PrintResult(success=False, error=str(exc) or exc.__class__.__name__)
        finally:
            if device is not None:
                device.close()
        logger.info("Printed ticket %r (%s)", title, category)
        return PrintResult(success=True)

    def _write_ticket(self, device: Escpos, title: str, category: str) -> None:
        printed_at = self._now()
        if self._tz is not None:
            printed_at = printed_at.astimezone(self._tz)

        device.set(align="center")
        device.text(f"{HEADER}\n")
        device.text("=" * LINE_WIDTH + "\n")
        device.set(align="left")
        device.ln()

        device.set(double_width=True, double_height=True)
        device.text(f"{title}\n")
        device.set(normal_textsize=True)

        device.ln()
        device.text(f"category: {category}\n")
        device.ln(2)
        device.text(printed_at.strftime("%d-%m-%Y %H:%M:%S") + "\n")
        device.ln()
        device.text("=" * LINE_WIDTH + "\n")
        device.cut()
