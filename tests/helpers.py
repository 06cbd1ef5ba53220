from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional, Sequence

from telesync.core.models.telemetry import Telemetry
from telesync.domain.gps_types import GeoPosition, SensorExtension, TrackPoint


T0 = datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc)

GPX_HEADER = """<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="tests"
     xmlns="http://www.topografix.com/GPX/1/1"
     xmlns:gpxtpx="http://www.garmin.com/xmlschemas/TrackPointExtension/v1">
<trk><name>ride</name><trkseg>
"""
GPX_FOOTER = "</trkseg></trk></gpx>\n"


def at(millis: float) -> datetime:
    return T0 + timedelta(milliseconds=millis)


def make_point(
    millis: float,
    lat: float,
    lon: float,
    elevation: float = 0.0,
    extension: Optional[SensorExtension] = None,
) -> TrackPoint:
    return TrackPoint(
        position=GeoPosition(lat, lon),
        elevation=elevation,
        time=at(millis),
        extension=extension or SensorExtension.empty(),
    )


def make_telemetry(points: Sequence[TrackPoint]) -> Telemetry:
    data = Telemetry(points)
    data.analyze()
    return data


class FakeClock:
    """Manual clock: time only moves through `advance` and `sleep_millis`."""

    def __init__(self, now: int = 1_000_000) -> None:
        self.now = now
        self.sleeps: List[int] = []

    def now_millis(self) -> int:
        return self.now

    def sleep_millis(self, millis: int) -> None:
        self.sleeps.append(millis)
        self.now += millis

    def advance(self, millis: int) -> None:
        self.now += millis


def write_gpx(directory: Path, body: str) -> Path:
    """Writes a one-segment GPX document around the given <trkpt> elements."""
    target = directory / "ride.gpx"
    target.write_text(GPX_HEADER + body + GPX_FOOTER, encoding="utf-8")
    return target
