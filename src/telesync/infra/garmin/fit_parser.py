#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Garmin .fit file reader for TeleSync.
Extracts the recorded track points and their sensor metrics.
"""

import logging
import os
from datetime import timezone
from typing import List, Optional

from fitparse import FitFile, FitParseError

from telesync.core.ports.track_source import TrackSourcePort
from telesync.domain.errors import MissingTimestampError, TrackParseError
from telesync.domain.gps_types import GeoPosition, SensorExtension, TrackPoint

log = logging.getLogger(__name__)


# Semicircles -> degrees conversion
SEMICIRCLES_TO_DEGREES: float = 180.0 / (2 ** 31)


class FitParser(TrackSourcePort):
    """
    Reader of Garmin .fit files.
    Uses the fitparse library to walk the "record" messages.
    """

    def __init__(self, filepath: str) -> None:
        """
        Args:
            filepath: Absolute path of the .fit file
        """
        self.filepath = filepath

    def parse(self) -> List[TrackPoint]:
        """
        Parses the .fit file.

        Returns:
            Track points in recording order, records without position are skipped

        Raises:
            FileNotFoundError: if the file does not exist
            MissingTimestampError: if a positioned record has no timestamp
            TrackParseError: if fitparse cannot decode the file
        """
        if not os.path.exists(self.filepath):
            raise FileNotFoundError(self.filepath)

        points: List[TrackPoint] = []
        try:
            fit_file = FitFile(self.filepath)
            for index, record in enumerate(fit_file.get_messages("record")):
                point = self._extract_point_from_record(record, index)
                if point is not None:
                    points.append(point)
        except FitParseError as e:
            raise TrackParseError(f"cannot read {self.filepath}: {e}") from e

        if points:
            log.info(
                "parsed %s: %d track points from %s to %s",
                os.path.basename(self.filepath), len(points), points[0].time, points[-1].time
            )
        else:
            log.warning("no GPS point found in %s", self.filepath)
        return points

    def _extract_point_from_record(self, record, index: int) -> Optional[TrackPoint]:
        """
        Builds a track point from a fitparse record.

        Returns:
            TrackPoint, or None if the record carries no position
        """
        lat_semicircles = None
        lon_semicircles = None
        elevation = 0.0
        timestamp = None
        cadence = None
        heart_rate = None
        temperature = None

        for field in record:
            if field.value is None:
                continue
            if field.name == "position_lat":
                lat_semicircles = field.value
            elif field.name == "position_long":
                lon_semicircles = field.value
            elif field.name in ("altitude", "enhanced_altitude"):
                elevation = float(field.value)
            elif field.name == "timestamp":
                # .fit timestamps are UTC
                timestamp = field.value
                if timestamp.tzinfo is None:
                    timestamp = timestamp.replace(tzinfo=timezone.utc)
            elif field.name == "cadence":
                cadence = float(field.value)
            elif field.name == "heart_rate":
                heart_rate = float(field.value)
            elif field.name == "temperature":
                temperature = float(field.value)

        if lat_semicircles is None or lon_semicircles is None:
            return None
        if timestamp is None:
            raise MissingTimestampError(f"record #{index} of {self.filepath} has no timestamp")

        return TrackPoint(
            position=GeoPosition(
                lat_semicircles * SEMICIRCLES_TO_DEGREES,
                lon_semicircles * SEMICIRCLES_TO_DEGREES
            ),
            elevation=elevation,
            time=timestamp,
            extension=SensorExtension(cadence=cadence, heart_rate=heart_rate, temperature=temperature)
        )
