from __future__ import annotations

import logging
import threading
from typing import Optional

from telesync.core.ports.clock import ClockPort
from telesync.domain.errors import PlaybackCancelled

log = logging.getLogger(__name__)


class DelayController:
    """
    Paces a playback loop so that the video timeline advances at wall clock speed.

    One instance per playback loop. The consumer is never sped up when it
    falls behind: the delay floors at zero.
    """

    def __init__(self, clock: ClockPort, max_sleep_slice_ms: int = 100) -> None:
        self._clock = clock
        self._max_sleep_slice_ms = max_sleep_slice_ms
        self._prev_video_ts: Optional[int] = None
        self._prev_clock_ts: Optional[int] = None

    @property
    def is_tracking(self) -> bool:
        return self._prev_video_ts is not None and self._prev_clock_ts is not None

    def reset(self) -> None:
        self._prev_video_ts = None
        self._prev_clock_ts = None

    def mark_delay(self, video_ts_ms: int) -> int:
        """
        Records the current video position and returns how long to wait before showing it.

        Args:
            video_ts_ms: Position on the video timeline in milliseconds

        Returns:
            Delay in milliseconds, 0 on the first call after a reset
        """
        now = self._clock.now_millis()
        if self.is_tracking:
            elapsed_video = video_ts_ms - self._prev_video_ts
            elapsed_clock = now - self._prev_clock_ts
            delay = elapsed_video - elapsed_clock
        else:
            delay = 0
        self._prev_video_ts = video_ts_ms
        self._prev_clock_ts = now
        return max(int(delay), 0)

    def wait_if_needed(self, video_ts_ms: int, cancel: Optional[threading.Event] = None) -> int:
        """
        Blocks the calling thread for the delay computed by `mark_delay`.

        Args:
            video_ts_ms: Position on the video timeline in milliseconds
            cancel: When given, the wait is sliced and aborted once the event is set

        Returns:
            The delay that was waited, in milliseconds

        Raises:
            PlaybackCancelled: if `cancel` was set before the wait completed
        """
        delay = self.mark_delay(video_ts_ms)
        if delay <= 0:
            return delay

        log.debug("ts = %d ms, wait for %d ms", video_ts_ms, delay)
        if cancel is None:
            self._clock.sleep_millis(delay)
        else:
            remaining = delay
            while remaining > 0:
                if cancel.is_set():
                    raise PlaybackCancelled(f"playback cancelled at {video_ts_ms} ms")
                chunk = min(remaining, self._max_sleep_slice_ms)
                self._clock.sleep_millis(chunk)
                remaining -= chunk
            if cancel.is_set():
                raise PlaybackCancelled(f"playback cancelled at {video_ts_ms} ms")

        # the frame is shown now, the next delay is measured from here
        self._prev_clock_ts = self._clock.now_millis()
        return delay
