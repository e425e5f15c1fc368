"""Injectable time sources."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Local wall-clock time, naive like the times users type in."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """Clock that only moves when told to. Used by tests and replays."""

    def __init__(self, start: datetime):
        self._now = start

    def now(self) -> datetime:
        return self._now

    def set(self, moment: datetime) -> None:
        self._now = moment

    def advance(self, **kwargs: float) -> datetime:
        """Move forward by timedelta kwargs, e.g. advance(seconds=1)."""
        self._now = self._now + timedelta(**kwargs)
        return self._now
