"""Transient "what changed" notification for the last sync.

State machine: IDLE -> SHOWING(report) -> IDLE. ``show`` is only called by
a completed sync; the way back to IDLE is the display deadline passing or an
explicit ``clear`` (which a new sync issues before it starts fetching).
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from . import config
from .models import DiffReport, NotifierState

logger = logging.getLogger(__name__)


class SyncNotifier:
    def __init__(
        self,
        duration: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if duration is None:
            config.init()
            duration = config.TOAST_DURATION_SECONDS
        self.duration = duration
        self._clock = clock
        self._report: Optional[DiffReport] = None
        self._deadline = 0.0

    def show(self, report: DiffReport) -> None:
        self._report = report
        self._deadline = self._clock() + self.duration
        logger.debug("Showing sync report for %.1fs: %s", self.duration, report.summary())

    def clear(self) -> None:
        self._report = None
        self._deadline = 0.0

    def _expire(self) -> None:
        if self._report is not None and self._clock() >= self._deadline:
            self.clear()

    @property
    def state(self) -> NotifierState:
        self._expire()
        return NotifierState.SHOWING if self._report is not None else NotifierState.IDLE

    def get_current_report(self) -> Optional[DiffReport]:
        """The report on display, or None once it timed out or was cleared."""
        self._expire()
        return self._report
