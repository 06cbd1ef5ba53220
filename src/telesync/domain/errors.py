#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""Exceptions raised by TeleSync."""


class TelemetryError(Exception):
    """Base class of the TeleSync errors."""


class MissingTimestampError(TelemetryError):
    """A producer found a sample without timestamp."""


class UnsupportedTrackFormat(TelemetryError):
    """No producer is able to read the given file."""


class PlaybackCancelled(TelemetryError):
    """The playback wait was interrupted by a cancellation request."""


class TrackParseError(TelemetryError):
    """A producer could not decode the track file."""
