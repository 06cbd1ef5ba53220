from __future__ import annotations

import bisect
import logging
import time
from datetime import datetime, timedelta
from typing import Optional, Sequence

from telesync.core.ports.track_source import TrackSourcePort
from telesync.domain.gps_types import (
    DEFAULT_CENTER_POSITION,
    GeoPosition,
    InputValue,
    MinMax,
    Sonda,
    TrackPoint,
)

log = logging.getLogger(__name__)


def _millis(delta: timedelta) -> float:
    return delta.total_seconds() * 1000.0


def _interpolate(f: float, left: float, right: float) -> float:
    """Linear interpolation, `f` on the 0-100 scale."""
    return left + f * (right - left) / 100


def _interpolate_optional(f: float, left: Optional[float], right: Optional[float]) -> Optional[float]:
    if left is None or right is None:
        return None
    return _interpolate(f, left, right)


class Telemetry:
    """
    Analyzed sequence of track points of one recording session.

    `analyze()` must run once before the queries; afterwards the instance is
    read-only and may be queried from several threads.
    """

    def __init__(self, track: Sequence[TrackPoint]) -> None:
        self.track: tuple[TrackPoint, ...] = tuple(track)
        self._times: list[datetime] = [p.time for p in self.track]

        self.elevation_boundary = MinMax.extreme()
        self.latitude_boundary = MinMax.extreme()
        self.longitude_boundary = MinMax.extreme()
        self.speed_boundary = MinMax.extreme()
        self.grade_boundary = MinMax.extreme()
        self.cadence_boundary = MinMax.extreme()
        self.temperature_boundary = MinMax.extreme()
        self.heart_rate_boundary = MinMax.extreme()

        self._center_position = DEFAULT_CENTER_POSITION
        self._analyzed = False

    @classmethod
    def empty(cls) -> "Telemetry":
        return cls([])

    @classmethod
    def load(cls, source: TrackSourcePort) -> "Telemetry":
        """Reads the points of a producer and returns the analyzed telemetry."""
        points = source.parse()
        log.info("found %d track points", len(points))
        data = cls(points)
        data.analyze()
        log.info("elevation boundary %r", data.elevation_boundary)
        return data

    def __len__(self) -> int:
        return len(self.track)

    def analyze(self) -> None:
        if self._analyzed:
            log.debug("telemetry already analyzed, skipping")
            return
        started = time.perf_counter()

        n = len(self.track)
        for i, point in enumerate(self.track):
            self.elevation_boundary.sample(point.elevation)
            self.latitude_boundary.sample(point.position.latitude)
            self.longitude_boundary.sample(point.position.longitude)
            ext = point.extension
            if ext.cadence is not None:
                self.cadence_boundary.sample(ext.cadence)
            if ext.temperature is not None:
                self.temperature_boundary.sample(ext.temperature)
            if ext.heart_rate is not None:
                self.heart_rate_boundary.sample(ext.heart_rate)
            if i < n - 1:
                point.analyze(self.track[i + 1])
                self.speed_boundary.sample(point.speed)
                self.grade_boundary.sample(point.grade)

        if self.latitude_boundary.is_defined():
            self._center_position = GeoPosition(self.latitude_boundary.mean(), self.longitude_boundary.mean())
        self._analyzed = True
        log.debug("analyze GPS data took %.1f ms", (time.perf_counter() - started) * 1000)

    @property
    def center_position(self) -> GeoPosition:
        return self._center_position

    @property
    def min_time(self) -> Optional[datetime]:
        return self.track[0].time if self.track else None

    @property
    def max_time(self) -> Optional[datetime]:
        return self.track[-1].time if self.track else None

    @property
    def total_distance(self) -> float:
        return self.track[-1].distance if self.track else 0.0

    def duration_millis(self) -> float:
        if not self.track:
            return 0.0
        return _millis(self.track[-1].time - self.track[0].time)

    def distance_for_progress(self, progress: float) -> Optional[float]:
        if not self.track:
            return None
        first, last = self.track[0], self.track[-1]
        if progress <= 0:
            return first.distance
        if progress >= 100:
            return last.distance
        return _interpolate(progress, first.distance, last.distance)

    def time_for_progress(self, progress: float) -> Optional[datetime]:
        """
        Interpolated time for the given progress.

        Args:
            progress: Progress between 0 and 100

        Returns:
            Timestamp, or None for an empty track
        """
        if not self.track:
            return None
        first, last = self.track[0], self.track[-1]
        if progress <= 0:
            return first.time
        if progress >= 100:
            return last.time
        return first.time + (last.time - first.time) * (progress / 100)

    def progress_for_time(
        self,
        t: datetime,
        first: Optional[datetime] = None,
        last: Optional[datetime] = None
    ) -> float:
        """
        Progress of `t` between `first` and `last` (the track endpoints by default).

        Returns:
            Value between 0 and 100
        """
        if first is None or last is None:
            if not self.track:
                return 0.0
            first = self.track[0].time if first is None else first
            last = self.track[-1].time if last is None else last
        if t <= first:
            return 0.0
        if t >= last:
            return 100.0
        return _millis(t - first) * 100 / _millis(last - first)

    def _nearest_index(self, t: datetime) -> int:
        """Index of the last point recorded at or before `t`, 0 if `t` precedes the track."""
        return max(bisect.bisect_right(self._times, t) - 1, 0)

    def sonda(self, t: datetime) -> Sonda:
        tn = len(self.track)
        if tn < 2:
            return Sonda.zero_at(t)

        ix = self._nearest_index(t)
        tr = self.track[ix]
        if ix == 0:
            left, right = tr, self.track[1]
        elif ix >= tn - 1:
            left, right = self.track[tn - 2], tr
        elif t < tr.time:
            left, right = tr, self.track[ix + 1]
        else:
            left, right = self.track[ix - 1], tr
        return self.interpolate(t, left, right).with_track_index(ix)

    def sonda_at_offset(self, relative_millis: float) -> Optional[Sonda]:
        """Sonda at `relative_millis` after the first track point."""
        if not self.track:
            return None
        return self.sonda(self.track[0].time + timedelta(milliseconds=relative_millis))

    def sonda_at_position(self, gp: GeoPosition) -> Optional[Sonda]:
        if len(self.track) < 3:
            return None
        # every point is a candidate, endpoints included
        nearest = min(self.track, key=lambda p: p.haversine_distance_to(gp))
        return self.sonda(nearest.time)

    def interpolate(self, t: datetime, left: TrackPoint, right: TrackPoint) -> Sonda:
        f = self.progress_for_time(t, left.time, right.time)
        elevation = _interpolate(f, left.elevation, right.elevation)
        distance = left.distance + _interpolate(f, 0, left.segment)
        location = GeoPosition(
            _interpolate(f, left.position.latitude, right.position.latitude),
            _interpolate(f, left.position.longitude, right.position.longitude),
        )
        cadence = _interpolate_optional(f, left.extension.cadence, right.extension.cadence)
        heart_rate = _interpolate_optional(f, left.extension.heart_rate, right.extension.heart_rate)
        temperature = _interpolate_optional(f, left.extension.temperature, right.extension.temperature)

        first_ts = self.track[0].time
        return Sonda(
            time=t,
            elapsed_time=InputValue(_millis(t - first_ts), MinMax(0.0, self.duration_millis())),
            location=location,
            elevation=InputValue(elevation, self.elevation_boundary),
            grade=InputValue(left.grade, self.grade_boundary),
            distance=InputValue(distance, MinMax(0.0, self.total_distance)),
            speed=InputValue(left.speed, self.speed_boundary),
            cadence=InputValue(cadence, self.cadence_boundary) if cadence is not None else None,
            heart_rate=InputValue(heart_rate, self.heart_rate_boundary) if heart_rate is not None else None,
            temperature=InputValue(temperature, self.temperature_boundary) if temperature is not None else None,
        )
