from __future__ import annotations

import math

import pytest

from telesync.core.models.telemetry import Telemetry
from telesync.domain.gps_types import DEFAULT_CENTER_POSITION, GeoPosition, SensorExtension

from tests.helpers import at, make_point, make_telemetry


def test_analyze_cumulates_distance(straight_track: Telemetry) -> None:
    points = straight_track.track
    assert points[0].distance == 0.0
    for left, right in zip(points, points[1:]):
        assert right.distance >= left.distance
        assert right.distance == pytest.approx(left.distance + left.segment)
    assert points[-1].distance == straight_track.total_distance
    assert straight_track.total_distance == pytest.approx(2 * points[0].segment, rel=1e-6)


def test_analyze_derives_speed_and_grade(straight_track: Telemetry) -> None:
    first, _, last = straight_track.track
    segment = GeoPosition(0.0, 0.0).haversine_distance_to(GeoPosition(0.0, 0.001))
    assert first.speed == pytest.approx(segment)
    assert first.grade == pytest.approx(10.0 / segment)
    assert last.speed == 0.0
    assert last.segment == 0.0
    assert straight_track.speed_boundary.count == 2
    assert straight_track.grade_boundary.count == 2


def test_analyze_feeds_boundaries_and_center(straight_track: Telemetry) -> None:
    assert straight_track.elevation_boundary.min == 0.0
    assert straight_track.elevation_boundary.max == 20.0
    assert straight_track.elevation_boundary.mean() == pytest.approx(10.0)
    assert straight_track.center_position.latitude == pytest.approx(0.0)
    assert straight_track.center_position.longitude == pytest.approx(0.001)
    assert not straight_track.cadence_boundary.is_defined()


def test_analyze_runs_once(straight_track: Telemetry) -> None:
    distance = straight_track.total_distance
    straight_track.analyze()
    assert straight_track.total_distance == distance
    assert straight_track.elevation_boundary.count == 3


def test_analyze_skips_missing_extension_metrics() -> None:
    data = make_telemetry([
        make_point(0, 0.0, 0.0, extension=SensorExtension(cadence=80.0, heart_rate=120.0)),
        make_point(1000, 0.0, 0.001, extension=SensorExtension(heart_rate=130.0, temperature=20.0)),
    ])
    assert data.cadence_boundary.count == 1
    assert data.heart_rate_boundary.count == 2
    assert data.heart_rate_boundary.mean() == pytest.approx(125.0)
    assert data.temperature_boundary.count == 1


def test_single_point_track_keeps_sentinels() -> None:
    data = make_telemetry([make_point(0, 45.0, 7.0, 300.0)])
    assert data.speed_boundary.min == math.inf
    assert data.speed_boundary.max == -math.inf
    assert data.grade_boundary.count == 0
    assert data.total_distance == 0.0
    assert data.center_position == GeoPosition(45.0, 7.0)


def test_empty_track() -> None:
    data = make_telemetry([])
    assert data.min_time is None
    assert data.max_time is None
    assert data.total_distance == 0.0
    assert data.progress_for_time(at(0)) == 0.0
    assert data.time_for_progress(50) is None
    assert data.distance_for_progress(50) is None
    assert data.sonda_at_offset(100) is None
    assert data.sonda(at(5)).elevation.current == 0.0


def test_empty_track_keeps_default_center() -> None:
    data = Telemetry([])
    assert data.center_position == DEFAULT_CENTER_POSITION
    data.analyze()
    assert data.center_position == DEFAULT_CENTER_POSITION


def test_progress_boundaries(straight_track: Telemetry) -> None:
    assert straight_track.progress_for_time(straight_track.min_time) == 0.0
    assert straight_track.progress_for_time(straight_track.max_time) == 100.0
    assert straight_track.progress_for_time(at(-500)) == 0.0
    assert straight_track.progress_for_time(at(5000)) == 100.0
    assert straight_track.progress_for_time(at(500)) == pytest.approx(25.0)


def test_progress_for_time_zero_duration() -> None:
    data = make_telemetry([make_point(0, 0.0, 0.0), make_point(0, 0.0, 0.0)])
    assert data.progress_for_time(at(0)) == 0.0
    assert data.progress_for_time(at(1)) == 100.0


@pytest.mark.parametrize("progress", [0.5, 12.5, 50.0, 73.3, 99.9])
def test_time_for_progress_round_trip(straight_track: Telemetry, progress: float) -> None:
    t = straight_track.time_for_progress(progress)
    assert straight_track.progress_for_time(t) == pytest.approx(progress, abs=1e-3)


def test_time_and_distance_for_progress_clamp(straight_track: Telemetry) -> None:
    assert straight_track.time_for_progress(-10) == straight_track.min_time
    assert straight_track.time_for_progress(150) == straight_track.max_time
    assert straight_track.distance_for_progress(0) == 0.0
    assert straight_track.distance_for_progress(100) == straight_track.total_distance
    assert straight_track.distance_for_progress(50) == pytest.approx(straight_track.total_distance / 2)


def test_sonda_interpolates_between_first_points(straight_track: Telemetry) -> None:
    sonda = straight_track.sonda(at(500))
    first = straight_track.track[0]
    assert sonda.elevation.current == pytest.approx(5.0)
    assert sonda.location.latitude == pytest.approx(0.0)
    assert sonda.location.longitude == pytest.approx(0.0005)
    assert sonda.distance.current == pytest.approx(first.segment / 2)
    assert sonda.speed.current == first.speed
    assert sonda.grade.current == first.grade
    assert sonda.elapsed_time.current == pytest.approx(500.0)
    assert sonda.elapsed_time.boundary.max == pytest.approx(2000.0)
    assert sonda.distance.boundary.max == straight_track.total_distance
    assert sonda.elevation.boundary is straight_track.elevation_boundary
    assert sonda.track_index == 0


@pytest.mark.parametrize("index", [0, 1, 2])
def test_sonda_at_sample_time_reproduces_sample(straight_track: Telemetry, index: int) -> None:
    point = straight_track.track[index]
    sonda = straight_track.sonda(point.time)
    assert sonda.elevation.current == pytest.approx(point.elevation)
    assert sonda.location.latitude == pytest.approx(point.position.latitude)
    assert sonda.location.longitude == pytest.approx(point.position.longitude)
    assert sonda.distance.current == pytest.approx(point.distance)
    assert sonda.track_index == index


def test_sonda_after_inner_point_uses_previous_bracket(straight_track: Telemetry) -> None:
    # the lookup lands on point 1, whose bracket is (0, 1): the value stays on point 1
    sonda = straight_track.sonda(at(1500))
    assert sonda.track_index == 1
    assert sonda.elevation.current == pytest.approx(10.0)


def test_sonda_outside_track_clamps(straight_track: Telemetry) -> None:
    before = straight_track.sonda(at(-1000))
    assert before.elevation.current == pytest.approx(0.0)
    assert before.track_index == 0
    after = straight_track.sonda(at(9000))
    assert after.elevation.current == pytest.approx(20.0)
    assert after.track_index == 2


def test_sonda_on_single_point_track_is_zero() -> None:
    data = make_telemetry([make_point(0, 45.0, 7.0, 300.0)])
    t = at(12345)
    sonda = data.sonda(t)
    assert sonda.time == t
    assert sonda.elevation.current == 0.0
    assert sonda.distance.current == 0.0
    assert sonda.location == GeoPosition(0.0, 0.0)


def test_sonda_optional_channels() -> None:
    data = make_telemetry([
        make_point(0, 0.0, 0.0, extension=SensorExtension(cadence=80.0, heart_rate=100.0, temperature=20.0)),
        make_point(1000, 0.0, 0.001, extension=SensorExtension(cadence=90.0, temperature=22.0)),
        make_point(2000, 0.0, 0.002, extension=SensorExtension(cadence=100.0)),
    ])
    sonda = data.sonda(at(500))
    assert sonda.cadence.current == pytest.approx(85.0)
    assert sonda.cadence.boundary is data.cadence_boundary
    assert sonda.temperature.current == pytest.approx(21.0)
    # missing on the right endpoint, not treated as zero
    assert sonda.heart_rate is None


def test_sonda_at_offset(straight_track: Telemetry) -> None:
    sonda = straight_track.sonda_at_offset(250)
    assert sonda.time == at(250)
    assert sonda.elevation.current == pytest.approx(2.5)


def test_sonda_at_position_picks_nearest_point(straight_track: Telemetry) -> None:
    sonda = straight_track.sonda_at_position(GeoPosition(0.0001, 0.00105))
    assert sonda.track_index == 1
    assert sonda.time == straight_track.track[1].time
    assert sonda.elevation.current == pytest.approx(10.0)


def test_sonda_at_position_includes_endpoints(straight_track: Telemetry) -> None:
    sonda = straight_track.sonda_at_position(GeoPosition(0.0, 0.0025))
    assert sonda.track_index == 2


def test_sonda_at_position_needs_three_points() -> None:
    data = make_telemetry([make_point(0, 0.0, 0.0), make_point(1000, 0.0, 0.001)])
    assert data.sonda_at_position(GeoPosition(0.0, 0.0)) is None


def test_lookup_on_long_track() -> None:
    points = [make_point(i * 1000, 0.0, i * 0.0001, float(i)) for i in range(1000)]
    data = make_telemetry(points)
    sonda = data.sonda(at(123_000))
    assert sonda.track_index == 123
    assert sonda.elevation.current == pytest.approx(123.0)
