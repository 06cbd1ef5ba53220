from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class PlaybackPhase(str, Enum):
    START = "start"
    FRAME = "frame"
    CANCELLED = "cancelled"
    DONE = "done"


@dataclass(frozen=True)
class PlaybackRequest:
    frame_rate: float
    start_offset_ms: float = 0.0
    duration_ms: Optional[float] = None
    realtime: bool = True


@dataclass(frozen=True)
class ProgressEvent:
    phase: PlaybackPhase
    message: str
    current: int = 0
    total: int = 0
    video_ts_ms: Optional[int] = None
    delay_ms: int = 0


@dataclass(frozen=True)
class PlaybackResult:
    frames: int
    total_delay_ms: int
    cancelled: bool = False
