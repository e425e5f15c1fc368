"""Time-of-day parsing and signed duration arithmetic.

All durations are integer seconds so repeated recalculation never drifts.
Parsing never raises: anything unparseable comes back as ``None``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum


TIME_COLON_PATTERN = re.compile(r"^(?P<hour>\d{1,2}):(?P<minute>\d{2})$")
TIME_DIGITS_PATTERN = re.compile(r"^(?P<digits>\d{1,4})$")

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 60 * 60

UNAVAILABLE = "--:--"


class Polarity(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    ZERO = "zero"


@dataclass(frozen=True)
class TimeOfDay:
    hour: int
    minute: int

    def on(self, day: date) -> datetime:
        """Resolve this clock-face time against a calendar day."""
        return datetime(day.year, day.month, day.day, self.hour, self.minute)

    @classmethod
    def from_datetime(cls, moment: datetime) -> TimeOfDay:
        return cls(hour=moment.hour, minute=moment.minute)

    def format(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    def __str__(self) -> str:
        return self.format()


def parse_time(value: str | None) -> TimeOfDay | None:
    """Parse 8, 830, 08:30 or 1530 into a TimeOfDay.

    Returns None for empty, malformed or out-of-range input.
    """
    if value is None:
        return None

    value = value.strip()
    colon_match = TIME_COLON_PATTERN.match(value)
    if colon_match:
        return _validate_time(int(colon_match.group("hour")), int(colon_match.group("minute")))

    digits_match = TIME_DIGITS_PATTERN.match(value)
    if digits_match:
        digits = digits_match.group("digits")
        if len(digits) <= 2:
            return _validate_time(int(digits), 0)
        if len(digits) == 3:
            return _validate_time(int(digits[0]), int(digits[1:]))
        return _validate_time(int(digits[:2]), int(digits[2:]))

    return None


def _validate_time(hour: int, minute: int) -> TimeOfDay | None:
    if not 0 <= hour <= 23:
        return None
    if not 0 <= minute <= 59:
        return None
    return TimeOfDay(hour=hour, minute=minute)


@dataclass(frozen=True, order=True)
class Duration:
    """Signed span of time, stored as whole seconds."""

    seconds: int = 0

    @classmethod
    def from_minutes(cls, minutes: float) -> Duration:
        return cls(round(minutes * SECONDS_PER_MINUTE))

    @classmethod
    def from_hours(cls, hours: float) -> Duration:
        return cls(round(hours * SECONDS_PER_HOUR))

    @classmethod
    def from_timedelta(cls, delta: timedelta) -> Duration:
        return cls(round(delta.total_seconds()))

    @property
    def minutes(self) -> float:
        return self.seconds / SECONDS_PER_MINUTE

    @property
    def hours(self) -> float:
        return self.seconds / SECONDS_PER_HOUR

    @property
    def polarity(self) -> Polarity:
        if self.seconds > 0:
            return Polarity.POSITIVE
        if self.seconds < 0:
            return Polarity.NEGATIVE
        return Polarity.ZERO

    def to_timedelta(self) -> timedelta:
        return timedelta(seconds=self.seconds)

    def __add__(self, other: Duration) -> Duration:
        return Duration(self.seconds + other.seconds)

    def __sub__(self, other: Duration) -> Duration:
        return Duration(self.seconds - other.seconds)

    def __neg__(self) -> Duration:
        return Duration(-self.seconds)

    def format_hhmm(self) -> str:
        """Format as HH:MM with the sign applied once to the whole magnitude."""
        # Round half up on the magnitude so -00:00:30 and +00:00:30 agree.
        total_minutes = (abs(self.seconds) + SECONDS_PER_MINUTE // 2) // SECONDS_PER_MINUTE
        hours, minutes = divmod(total_minutes, 60)
        sign = "-" if self.seconds < 0 and total_minutes else ""
        return f"{sign}{hours:02d}:{minutes:02d}"

    def __str__(self) -> str:
        return self.format_hhmm()


def format_clock(delta: timedelta, prefix: str = "") -> str:
    """Format a non-negative span as HH:MM:SS, flooring partial seconds."""
    total = max(0, int(delta.total_seconds()))
    hours, rest = divmod(total, SECONDS_PER_HOUR)
    minutes, seconds = divmod(rest, SECONDS_PER_MINUTE)
    return f"{prefix}{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_optional(value: Duration | TimeOfDay | None) -> str:
    if value is None:
        return UNAVAILABLE
    return value.format_hhmm() if isinstance(value, Duration) else value.format()
