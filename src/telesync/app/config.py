from __future__ import annotations

import logging
from typing import List


TRACK_EXTENSIONS: List[str] = [".fit", ".gpx"]

DEFAULT_TIMEZONE: str = "Europe/Paris"
DEFAULT_FRAME_RATE: float = 25.0
# Longest uninterrupted sleep of the pacer when playback can be cancelled
MAX_SLEEP_SLICE_MS: int = 100

LOG_FORMAT: str = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

APP_NAME: str = "TeleSync"
APP_VERSION: str = "1.0.0"


def setup_logging(verbose: bool = False) -> None:
    """Configures the root logger (INFO, DEBUG when `verbose`)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        force=True,
    )
