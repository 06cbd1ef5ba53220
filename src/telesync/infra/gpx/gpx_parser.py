#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
GPX file reader for TeleSync.
Reads the first track segment, including the Garmin TrackPointExtension metrics.
"""

import logging
import os
from datetime import timezone
from typing import Dict, List, Optional

import gpxpy
import gpxpy.gpx

from telesync.core.ports.track_source import TrackSourcePort
from telesync.domain.errors import MissingTimestampError, TrackParseError
from telesync.domain.gps_types import GeoPosition, SensorExtension, TrackPoint

log = logging.getLogger(__name__)


# Extension tag (without namespace) -> SensorExtension field
EXTENSION_TAGS: Dict[str, str] = {
    "hr": "heart_rate",
    "cad": "cadence",
    "atemp": "temperature",
    "temp": "temperature",
}


def parse_extensions(extensions) -> SensorExtension:
    """
    Reads heart rate, cadence and temperature from gpxpy extension elements.
    Namespace prefixes are ignored, unreadable values are left out.
    """
    values: Dict[str, float] = {}
    for ext in extensions or []:
        for child in ext.iter():
            if child.text is None or not child.text.strip():
                continue
            tag = child.tag
            if "}" in tag:
                tag = tag.split("}", 1)[1]
            name = EXTENSION_TAGS.get(tag.lower())
            if name is None:
                continue
            try:
                values[name] = float(child.text.strip())
            except ValueError:
                log.debug("ignoring extension %s=%r", tag, child.text)
    return SensorExtension(**values)


class GpxParser(TrackSourcePort):
    """Reader of .gpx files, backed by gpxpy."""

    def __init__(self, filepath: str) -> None:
        self.filepath = filepath

    def parse(self) -> List[TrackPoint]:
        try:
            with open(self.filepath, "r", encoding="utf-8") as f:
                gpx = gpxpy.parse(f)
        except (gpxpy.gpx.GPXException, UnicodeDecodeError) as e:
            raise TrackParseError(f"cannot read {self.filepath}: {e}") from e

        if not gpx.tracks or not gpx.tracks[0].segments:
            log.warning("no track segment in %s", self.filepath)
            return []

        points = [
            self._to_track_point(index, wpt)
            for index, wpt in enumerate(gpx.tracks[0].segments[0].points)
        ]
        log.info("parsed %s: %d track points", os.path.basename(self.filepath), len(points))
        return points

    def _to_track_point(self, index: int, wpt) -> TrackPoint:
        timestamp = wpt.time
        if timestamp is None:
            raise MissingTimestampError(f"track point #{index} of {self.filepath} has no timestamp")
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        elevation: Optional[float] = wpt.elevation
        return TrackPoint(
            position=GeoPosition(float(wpt.latitude), float(wpt.longitude)),
            elevation=float(elevation) if elevation is not None else 0.0,
            time=timestamp,
            extension=parse_extensions(wpt.extensions)
        )
