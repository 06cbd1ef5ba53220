from __future__ import annotations

import time

from telesync.core.ports.clock import ClockPort


class SystemClock(ClockPort):
    def now_millis(self) -> int:
        return int(time.monotonic() * 1000)

    def sleep_millis(self, millis: int) -> None:
        time.sleep(millis / 1000.0)
