from __future__ import annotations

from typing import Protocol

from telesync.domain.gps_types import TrackPoint


class TrackSourcePort(Protocol):
    """Producer of time-ordered track points (file readers, streams)."""

    def parse(self) -> list[TrackPoint]: ...
