from __future__ import annotations

import sys
from pathlib import Path
from typing import List

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from telesync.core.models.telemetry import Telemetry  # noqa: E402
from telesync.domain.gps_types import TrackPoint  # noqa: E402

from tests.helpers import FakeClock, make_point, make_telemetry  # noqa: E402


@pytest.fixture
def straight_points() -> List[TrackPoint]:
    """Three points along the equator, one second apart, climbing 10 m each."""
    return [
        make_point(0, 0.0, 0.000, 0.0),
        make_point(1000, 0.0, 0.001, 10.0),
        make_point(2000, 0.0, 0.002, 20.0),
    ]


@pytest.fixture
def straight_track(straight_points) -> Telemetry:
    return make_telemetry(straight_points)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
