#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""Application façade used by the command line.

The front end does not know the producers (fitparse/gpxpy) nor the clock:
the computation lives in `telesync.core` (models + use cases + ports).
"""

import logging
import os
import threading
from typing import Callable, Dict, Optional

from telesync.app.config import MAX_SLEEP_SLICE_MS, TRACK_EXTENSIONS
from telesync.core.models.playback_models import PlaybackRequest, PlaybackResult, ProgressEvent
from telesync.core.models.telemetry import Telemetry
from telesync.core.ports.clock import ClockPort
from telesync.core.ports.sonda_consumer import SondaConsumer
from telesync.core.ports.track_source import TrackSourcePort
from telesync.core.usecases.delay_controller import DelayController
from telesync.core.usecases.replay_telemetry import ReplayTelemetryUseCase
from telesync.domain.errors import TelemetryError, UnsupportedTrackFormat
from telesync.infra.garmin.fit_parser import FitParser
from telesync.infra.gpx.gpx_parser import GpxParser
from telesync.infra.system.clock import SystemClock

log = logging.getLogger(__name__)


def track_source_for(filepath: str) -> TrackSourcePort:
    """
    Picks the producer matching the file extension.

    Raises:
        UnsupportedTrackFormat: for extensions other than .fit and .gpx
    """
    extension = os.path.splitext(filepath)[1].lower()
    if extension not in TRACK_EXTENSIONS:
        raise UnsupportedTrackFormat(f"unsupported track file: {filepath}")
    if extension == ".fit":
        return FitParser(filepath)
    return GpxParser(filepath)


class TelemetryController:
    """
    Main controller of the telemetry playback.
    Loads a track file and drives the queries and the paced replay.
    """

    def __init__(self, clock: Optional[ClockPort] = None) -> None:
        self.clock: ClockPort = clock or SystemClock()
        self.telemetry: Telemetry = Telemetry.empty()
        self.track_path: Optional[str] = None
        self.delay_controller = DelayController(self.clock, max_sleep_slice_ms=MAX_SLEEP_SLICE_MS)

    def load_track_file(self, filepath: str) -> bool:
        """
        Loads, parses and analyzes a track file.

        Args:
            filepath: Path of a .fit or .gpx file

        Returns:
            True if the track was loaded
        """
        try:
            source = track_source_for(filepath)
            self.load_from(source)
        except (TelemetryError, OSError) as e:
            log.error("unable to load %s: %s", filepath, e)
            return False
        self.track_path = filepath
        return self.has_track()

    def load_from(self, source: TrackSourcePort) -> Telemetry:
        self.telemetry = Telemetry.load(source)
        return self.telemetry

    def has_track(self) -> bool:
        return len(self.telemetry) > 0

    def replay(
        self,
        request: PlaybackRequest,
        consumer: SondaConsumer,
        progress_callback: Optional[Callable[[int, int], None]] = None,
        cancel: Optional[threading.Event] = None,
    ) -> PlaybackResult:
        """
        Replays the loaded telemetry through the pacer.

        Args:
            request: Frame rate, offset and duration of the playback
            consumer: Receives (video timestamp in ms, sonda) for each frame
            progress_callback: Callback (current, total)
            cancel: Event stopping the playback once set
        """
        usecase = ReplayTelemetryUseCase(
            telemetry=self.telemetry,
            delay_controller=self.delay_controller,
        )
        reporter = _CallbackProgressReporter(progress_callback) if progress_callback else None
        return usecase.execute(request, consumer, reporter=reporter, cancel=cancel)

    def get_summary(self) -> Dict[str, object]:
        """Summary of the loaded track."""
        data = self.telemetry
        return {
            "track_points": len(data),
            "start_time": data.min_time,
            "end_time": data.max_time,
            "duration_s": data.duration_millis() / 1000.0,
            "total_distance_m": data.total_distance,
            "center": data.center_position,
            "elevation": data.elevation_boundary,
            "speed": data.speed_boundary,
            "grade": data.grade_boundary,
            "cadence": data.cadence_boundary,
            "heart_rate": data.heart_rate_boundary,
            "temperature": data.temperature_boundary,
        }


class _CallbackProgressReporter:
    def __init__(self, callback: Callable[[int, int], None]) -> None:
        self._callback = callback

    def report(self, event: ProgressEvent) -> None:
        if event.total and event.current:
            self._callback(event.current, event.total)
