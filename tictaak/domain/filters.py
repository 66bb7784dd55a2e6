from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DueWindow:
    """A run of whole local days, counted from the reference day."""

    start_offset_days: int = 0
    length_days: int = 1

    def __post_init__(self) -> None:
        if self.start_offset_days < 0:
            raise ValueError("start_offset_days must not be negative")
        if self.length_days < 1:
            raise ValueError("length_days must be at least 1")


TODAY = DueWindow(0, 1)


def upcoming_window(days: int = 30) -> DueWindow:
    return DueWindow(1, days)
