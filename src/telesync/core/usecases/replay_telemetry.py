from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from typing import Optional

from telesync.core.models.playback_models import (
    PlaybackPhase,
    PlaybackRequest,
    PlaybackResult,
    ProgressEvent,
)
from telesync.core.models.telemetry import Telemetry
from telesync.core.ports.progress import ProgressReporter
from telesync.core.ports.sonda_consumer import SondaConsumer
from telesync.core.usecases.delay_controller import DelayController
from telesync.domain.errors import PlaybackCancelled

log = logging.getLogger(__name__)


@dataclass
class ReplayTelemetryUseCase:
    """Plays the telemetry frame by frame, handing one sonda per frame to a consumer."""

    telemetry: Telemetry
    delay_controller: DelayController

    def execute(
        self,
        request: PlaybackRequest,
        consumer: SondaConsumer,
        reporter: Optional[ProgressReporter] = None,
        cancel: Optional[threading.Event] = None,
    ) -> PlaybackResult:
        if request.frame_rate <= 0:
            raise ValueError(f"frame rate must be positive, got {request.frame_rate}")

        duration = self._playback_duration(request)
        frame_ms = 1000.0 / request.frame_rate
        if duration >= 0 and len(self.telemetry):
            # tolerance keeps the frame landing exactly on the end of the playback
            total = math.floor(duration * request.frame_rate / 1000 + 1e-9) + 1
        else:
            total = 0

        self.delay_controller.reset()
        if reporter:
            reporter.report(ProgressEvent(PlaybackPhase.START, "Starting playback", total=total))

        frames = 0
        total_delay = 0
        for k in range(total):
            video_ts = round(k * frame_ms)
            delay = 0
            try:
                if cancel is not None and cancel.is_set():
                    raise PlaybackCancelled(f"playback cancelled at {video_ts} ms")
                if request.realtime:
                    delay = self.delay_controller.wait_if_needed(video_ts, cancel)
            except PlaybackCancelled as e:
                log.info("%s", e)
                if reporter:
                    reporter.report(
                        ProgressEvent(PlaybackPhase.CANCELLED, "Playback cancelled",
                                      current=frames, total=total, video_ts_ms=video_ts)
                    )
                return PlaybackResult(frames=frames, total_delay_ms=total_delay, cancelled=True)

            total_delay += delay
            consumer(video_ts, self.telemetry.sonda_at_offset(request.start_offset_ms + video_ts))
            frames += 1

            if reporter:
                reporter.report(
                    ProgressEvent(
                        PlaybackPhase.FRAME,
                        f"Frame {frames}/{total}",
                        current=frames,
                        total=total,
                        video_ts_ms=video_ts,
                        delay_ms=delay,
                    )
                )

        if reporter:
            reporter.report(ProgressEvent(PlaybackPhase.DONE, "Done", current=frames, total=total))
        log.debug("played %d frames, waited %d ms", frames, total_delay)
        return PlaybackResult(frames=frames, total_delay_ms=total_delay)

    def _playback_duration(self, request: PlaybackRequest) -> float:
        if request.duration_ms is not None:
            return request.duration_ms
        return self.telemetry.duration_millis() - request.start_offset_ms
