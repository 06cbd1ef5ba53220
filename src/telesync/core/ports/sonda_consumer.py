from __future__ import annotations

from typing import Optional, Protocol

from telesync.domain.gps_types import Sonda


class SondaConsumer(Protocol):
    """Receives the interpolated sample of each played frame."""

    def __call__(self, video_ts_millis: int, sonda: Optional[Sonda]) -> None: ...
