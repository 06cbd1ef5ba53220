from __future__ import annotations

from typing import Protocol


class ClockPort(Protocol):
    """Wall clock in milliseconds plus a blocking sleep."""

    def now_millis(self) -> int: ...

    def sleep_millis(self, millis: int) -> None: ...
