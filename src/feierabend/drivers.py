"""Periodic drivers: the coarse balance refresh and the 1-second countdown tick.

Both are APScheduler interval jobs on one scheduler so a view can cancel
everything it started with a single stop().
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger("feierabend.drivers")

REFRESH_JOB_ID = "balance-refresh"
COUNTDOWN_JOB_ID = "countdown-tick"

DEFAULT_REFRESH_INTERVAL = "30s"
DEFAULT_COUNTDOWN_INTERVAL = "1s"


def parse_interval(schedule: str) -> dict:
    """Parse interval string like '30s', '1m', '2h' into trigger kwargs."""
    match = re.match(r"^(\d+)(s|m|h)$", schedule.strip().lower())
    if not match:
        raise ValueError(f"Invalid interval format: {schedule}. Use format like '30s', '1m', '2h'")

    value = int(match.group(1))
    if value <= 0:
        raise ValueError(f"Interval must be positive: {schedule}")

    unit_map = {"s": "seconds", "m": "minutes", "h": "hours"}
    return {unit_map[match.group(2)]: value}


class Ticker:
    """Owns the scheduler that drives one view."""

    def __init__(self, scheduler: BackgroundScheduler | None = None):
        self.scheduler = scheduler or BackgroundScheduler()
        self._started = False

    def start_refresh(self, callback: Callable[[], None], interval: str = DEFAULT_REFRESH_INTERVAL) -> None:
        self._add(REFRESH_JOB_ID, callback, interval)

    def start_countdown(self, callback: Callable[[], None], interval: str = DEFAULT_COUNTDOWN_INTERVAL) -> None:
        self._add(COUNTDOWN_JOB_ID, callback, interval)

    def cancel(self, job_id: str) -> None:
        if self.scheduler.get_job(job_id):
            self.scheduler.remove_job(job_id)
            logger.debug(f"Cancelled job {job_id}")

    def stop(self) -> None:
        """Cancel every job and shut the scheduler down."""
        for job_id in (REFRESH_JOB_ID, COUNTDOWN_JOB_ID):
            self.cancel(job_id)
        if self._started:
            self.scheduler.shutdown(wait=False)
            self._started = False

    @property
    def running(self) -> bool:
        return self._started

    def _add(self, job_id: str, callback: Callable[[], None], interval: str) -> None:
        trigger = IntervalTrigger(**parse_interval(interval))
        self.scheduler.add_job(
            callback,
            trigger=trigger,
            id=job_id,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        logger.debug(f"Registered job {job_id} every {interval}")
        if not self._started:
            self.scheduler.start()
            self._started = True
