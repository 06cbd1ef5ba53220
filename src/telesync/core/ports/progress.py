from __future__ import annotations

from typing import Protocol

from telesync.core.models.playback_models import ProgressEvent


class ProgressReporter(Protocol):
    def report(self, event: ProgressEvent) -> None: ...
