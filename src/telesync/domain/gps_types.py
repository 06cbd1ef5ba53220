#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
GPS telemetry data types for TeleSync.
Defines the dataclasses shared by the producers, the analysis and the playback loop.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional


# Mean Earth radius in meters
EARTH_RADIUS_M: float = 6371000.0


@dataclass(frozen=True)
class GeoPosition:
    """
    A WGS-84 position.

    Attributes:
        latitude: Latitude in decimal degrees
        longitude: Longitude in decimal degrees
    """
    latitude: float
    longitude: float

    def haversine_distance_to(self, other: "GeoPosition") -> float:
        """
        Great-circle distance to another position.

        Returns:
            Distance in meters
        """
        lat1 = math.radians(self.latitude)
        lat2 = math.radians(other.latitude)
        dlat = math.radians(other.latitude - self.latitude)
        dlon = math.radians(other.longitude - self.longitude)

        a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
        return EARTH_RADIUS_M * c


# Map centre of a track without samples, also reported before the analysis
DEFAULT_CENTER_POSITION = GeoPosition(47.3769, 8.5417)


@dataclass(frozen=True)
class SensorExtension:
    """
    Optional sensor metrics recorded with a track point.

    Attributes:
        cadence: Cadence in rpm
        heart_rate: Heart rate in bpm
        temperature: Temperature in °C
    """
    cadence: Optional[float] = None
    heart_rate: Optional[float] = None
    temperature: Optional[float] = None

    @classmethod
    def empty(cls) -> "SensorExtension":
        return cls()


@dataclass
class TrackPoint:
    """
    One recorded telemetry instant.

    The derived fields (distance, segment, speed, grade) stay at zero until
    the owning track has been analyzed. The last point of a track keeps them
    at zero since it has no next point.

    Attributes:
        position: Recorded position
        elevation: Elevation in meters
        time: Timestamp (timezone-aware)
        extension: Optional sensor metrics
        distance: Meters covered from the first point
        segment: Meters to the next point
        speed: Speed towards the next point in m/s
        grade: Elevation delta over segment length (ratio)
    """
    position: GeoPosition
    elevation: float
    time: datetime
    extension: SensorExtension = field(default_factory=SensorExtension.empty)

    distance: float = 0.0
    segment: float = 0.0
    speed: float = 0.0
    grade: float = 0.0

    def haversine_distance_to(self, position: GeoPosition) -> float:
        return self.position.haversine_distance_to(position)

    def analyze(self, next_point: "TrackPoint") -> None:
        """Derives the segment quantities towards `next_point` and carries the distance over."""
        self.segment = self.haversine_distance_to(next_point.position)
        next_point.distance = self.distance + self.segment

        elapsed_seconds = (next_point.time - self.time).total_seconds()
        self.speed = self.segment / elapsed_seconds if elapsed_seconds > 0 else 0.0
        elevation_delta = next_point.elevation - self.elevation
        self.grade = elevation_delta / self.segment if self.segment > 0 else 0.0


class MinMax:
    """
    Running min/max/mean accumulator of a numeric channel.
    Used to scale channel values for display.
    """

    def __init__(self, min_value: float, max_value: float) -> None:
        self.min = min_value
        self.max = max_value
        self.total = 0.0
        self.count = 0

    @classmethod
    def extreme(cls) -> "MinMax":
        """Empty accumulator, ready to be sampled."""
        return cls(math.inf, -math.inf)

    def sample(self, value: float) -> None:
        self.min = min(self.min, value)
        self.max = max(self.max, value)
        self.total += value
        self.count += 1

    def mean(self) -> float:
        if self.count == 0:
            return 0.0
        return self.total / self.count

    def is_defined(self) -> bool:
        return self.min <= self.max

    def diff(self) -> float:
        return self.max - self.min if self.is_defined() else 0.0

    def normalize(self, value: float) -> float:
        """
        Position of `value` inside the range, as a fraction.

        Returns:
            0.0 for the minimum, 1.0 for the maximum, 0.0 if the range is empty
        """
        span = self.diff()
        if span <= 0:
            return 0.0
        return (value - self.min) / span

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MinMax):
            return NotImplemented
        return (self.min, self.max, self.total, self.count) == (other.min, other.max, other.total, other.count)

    def __repr__(self) -> str:
        return f"MinMax(min={self.min}, max={self.max}, mean={self.mean()})"


@dataclass(frozen=True)
class InputValue:
    """A channel value paired with the boundary used to scale it."""
    current: float
    boundary: MinMax

    def normalized(self) -> float:
        return self.boundary.normalize(self.current)


@dataclass(frozen=True)
class Sonda:
    """
    Synthesized sample at an arbitrary query time or position.

    Attributes:
        time: Query timestamp
        elapsed_time: Milliseconds since the track start, within the track duration
        location: Interpolated position
        elevation, grade, distance, speed: Channel values with their boundaries
        cadence, heart_rate, temperature: Optional channels, None when a bracket point lacks them
        track_index: Index of the track point found by the lookup
    """
    time: datetime
    elapsed_time: InputValue
    location: GeoPosition
    elevation: InputValue
    grade: InputValue
    distance: InputValue
    speed: InputValue
    cadence: Optional[InputValue] = None
    heart_rate: Optional[InputValue] = None
    temperature: Optional[InputValue] = None
    track_index: int = 0

    @classmethod
    def zero_at(cls, t: datetime) -> "Sonda":
        def zero() -> InputValue:
            return InputValue(0.0, MinMax(0.0, 0.0))

        return cls(
            time=t,
            elapsed_time=zero(),
            location=GeoPosition(0.0, 0.0),
            elevation=zero(),
            grade=zero(),
            distance=zero(),
            speed=zero(),
        )

    def with_track_index(self, ix: int) -> "Sonda":
        return replace(self, track_index=ix)
