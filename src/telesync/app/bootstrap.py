from __future__ import annotations

import argparse
import logging
from datetime import datetime
from typing import Optional, Sequence

import pytz

from telesync.app.config import (
    APP_NAME,
    APP_VERSION,
    DEFAULT_FRAME_RATE,
    DEFAULT_TIMEZONE,
    setup_logging,
)
from telesync.core.models.playback_models import PlaybackRequest
from telesync.domain.gps_types import GeoPosition, MinMax, Sonda

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME.lower(),
        description="Analyze a GPS track and replay it in sync with a video timeline.",
    )
    parser.add_argument("path", help="Track file (.fit or .gpx)")
    parser.add_argument("--timezone", default=DEFAULT_TIMEZONE, help="Timezone used to display times")
    parser.add_argument("--at", type=float, metavar="MS", help="Print the sonda at MS after the track start")
    parser.add_argument("--near", type=float, nargs=2, metavar=("LAT", "LON"),
                        help="Print the sonda of the track point closest to LAT LON")
    parser.add_argument("--replay", action="store_true", help="Replay the track frame by frame")
    parser.add_argument("--fps", type=float, default=DEFAULT_FRAME_RATE, help="Replay frame rate")
    parser.add_argument("--offset", type=float, default=0.0, metavar="MS", help="Replay start offset")
    parser.add_argument("--duration", type=float, metavar="MS", help="Replay duration (default: whole track)")
    parser.add_argument("--no-realtime", dest="realtime", action="store_false",
                        help="Replay as fast as possible, without pacing")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {APP_VERSION}")
    return parser


def format_time(t: Optional[datetime], tz_name: str) -> str:
    if t is None:
        return "—"
    return t.astimezone(pytz.timezone(tz_name)).strftime("%Y-%m-%d %H:%M:%S %Z")


def format_boundary(boundary: MinMax) -> str:
    if not boundary.is_defined():
        return "—"
    return f"{boundary.min:.1f} .. {boundary.max:.1f} (mean {boundary.mean():.1f})"


def format_sonda(sonda: Optional[Sonda]) -> str:
    if sonda is None:
        return "no data"
    parts = [
        f"t+{sonda.elapsed_time.current / 1000.0:.1f}s",
        f"pos={sonda.location.latitude:.6f},{sonda.location.longitude:.6f}",
        f"ele={sonda.elevation.current:.1f}m",
        f"dist={sonda.distance.current / 1000.0:.3f}km",
        f"speed={sonda.speed.current:.2f}m/s",
        f"grade={sonda.grade.current * 100:.1f}%",
    ]
    if sonda.cadence is not None:
        parts.append(f"cad={sonda.cadence.current:.0f}")
    if sonda.heart_rate is not None:
        parts.append(f"hr={sonda.heart_rate.current:.0f}")
    if sonda.temperature is not None:
        parts.append(f"temp={sonda.temperature.current:.1f}C")
    return " ".join(parts)


def print_summary(summary: dict, tz_name: str) -> None:
    print(f"=== {APP_NAME} TRACK ===")
    print(f"  Points:    {summary['track_points']}")
    print(f"  Start:     {format_time(summary['start_time'], tz_name)}")
    print(f"  End:       {format_time(summary['end_time'], tz_name)}")
    print(f"  Duration:  {summary['duration_s']:.0f} s")
    print(f"  Distance:  {summary['total_distance_m'] / 1000.0:.3f} km")
    center = summary["center"]
    print(f"  Center:    {center.latitude:.6f}, {center.longitude:.6f}")
    for channel in ("elevation", "speed", "grade", "cadence", "heart_rate", "temperature"):
        print(f"  {channel + ':':<11}{format_boundary(summary[channel])}")


def run(argv: Sequence[str]) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv))
    try:
        pytz.timezone(args.timezone)
    except pytz.UnknownTimeZoneError:
        parser.error(f"unknown timezone: {args.timezone}")
    setup_logging(args.verbose)

    from telesync.services.telemetry_controller import TelemetryController

    controller = TelemetryController()
    if not controller.load_track_file(args.path):
        return 1

    print_summary(controller.get_summary(), args.timezone)
    telemetry = controller.telemetry

    if args.at is not None:
        print(f"at {args.at:.0f} ms: {format_sonda(telemetry.sonda_at_offset(args.at))}")

    if args.near is not None:
        position = GeoPosition(args.near[0], args.near[1])
        print(f"near {position.latitude}, {position.longitude}: {format_sonda(telemetry.sonda_at_position(position))}")

    if args.replay:
        request = PlaybackRequest(
            frame_rate=args.fps,
            start_offset_ms=args.offset,
            duration_ms=args.duration,
            realtime=args.realtime,
        )

        def show(video_ts: int, sonda: Optional[Sonda]) -> None:
            print(f"[{video_ts:>8d} ms] {format_sonda(sonda)}")

        try:
            result = controller.replay(request, show)
        except KeyboardInterrupt:
            log.info("replay interrupted")
            return 130
        print(f"played {result.frames} frames, waited {result.total_delay_ms} ms")

    return 0
