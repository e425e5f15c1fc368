"""Countdown engine: pure logic, no I/O.

Counts down to a target instant, then flips into counting up overtime.
The current instant is always passed in, so a sequence of ticks can be
replayed deterministically in tests.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum

from .calculator import suggested_end, target_break
from .settings import Settings
from .timeutil import Duration, format_clock


class CountdownMode(str, Enum):
    COUNTING_DOWN = "counting_down"
    COUNTING_UP = "counting_up"


class CountdownEvent(Enum):
    OVERTIME_STARTED = "overtime_started"


class Severity(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"
    OVERTIME = "overtime"


WARNING_THRESHOLD = timedelta(minutes=30)
CRITICAL_THRESHOLD = timedelta(minutes=15)

# Longest countdown accepted from a bare minutes parameter
MAX_PARAM_MINUTES = 7 * 24 * 60

MESSAGE_KEYS: dict[Severity, str] = {
    Severity.NORMAL: "workdayCompleteMessage",
    Severity.WARNING: "endingSoonMessage",
    Severity.CRITICAL: "almostDoneMessage",
    Severity.OVERTIME: "overtimeMessage",
}


@dataclass(frozen=True)
class CountdownState:
    target: datetime
    mode: CountdownMode = CountdownMode.COUNTING_DOWN
    overtime_anchor: datetime | None = None
    # Full length of the workday ending at target, for the progress figure.
    workday: timedelta | None = None


@dataclass(frozen=True)
class DisplayPayload:
    mode: CountdownMode
    elapsed: timedelta
    severity: Severity
    events: tuple[CountdownEvent, ...] = ()
    progress_percent: int | None = None

    @property
    def crossed_into_overtime(self) -> bool:
        return CountdownEvent.OVERTIME_STARTED in self.events

    @property
    def text(self) -> str:
        prefix = "+" if self.mode == CountdownMode.COUNTING_UP else ""
        return format_clock(self.elapsed, prefix)

    @property
    def title_key(self) -> str:
        if self.mode == CountdownMode.COUNTING_UP:
            return "endOfWorkTitle"
        return "timeUntilEndTitle"

    @property
    def message_key(self) -> str:
        return MESSAGE_KEYS[self.severity]


def severity_for(remaining: timedelta) -> Severity:
    """Band for the time left; stateless so it can be re-derived every tick."""
    if remaining > WARNING_THRESHOLD:
        return Severity.NORMAL
    if remaining >= CRITICAL_THRESHOLD:
        return Severity.WARNING
    return Severity.CRITICAL


def progress_percent(remaining: timedelta, workday: timedelta | None) -> int | None:
    """Share of the workday already behind us, floored to whole percent."""
    if workday is None or workday <= timedelta(0):
        return None
    done = (workday - remaining) / workday
    return max(0, min(100, int(done * 100)))


def arm(target: datetime, workday: timedelta | None = None) -> CountdownState:
    return CountdownState(target=target, workday=workday)


def resume(target: datetime, now: datetime, workday: timedelta | None = None) -> CountdownState:
    """Start a countdown whose target may already lie in the past.

    A target already behind now primes straight into COUNTING_UP with the
    overtime that has accrued preserved; no crossing event is raised for it.
    A target exactly at now is armed, so the first tick reports the crossing.
    """
    if target >= now:
        return arm(target, workday)
    overtime = now - target
    return CountdownState(
        target=target,
        mode=CountdownMode.COUNTING_UP,
        overtime_anchor=now - overtime,
        workday=workday,
    )


def tick(state: CountdownState, now: datetime) -> tuple[CountdownState, DisplayPayload]:
    """Advance the countdown to now.

    Returns (new_state, payload). OVERTIME_STARTED is emitted only on the
    tick that first reaches the target.
    """
    if state.mode == CountdownMode.COUNTING_UP:
        anchor = state.overtime_anchor or state.target
        return state, DisplayPayload(
            mode=CountdownMode.COUNTING_UP,
            elapsed=max(timedelta(0), now - anchor),
            severity=Severity.OVERTIME,
        )

    remaining = state.target - now
    if remaining <= timedelta(0):
        # Anchor at the tick that noticed the crossing, not at target.
        crossed = replace(state, mode=CountdownMode.COUNTING_UP, overtime_anchor=now)
        return crossed, DisplayPayload(
            mode=CountdownMode.COUNTING_UP,
            elapsed=timedelta(0),
            severity=Severity.OVERTIME,
            events=(CountdownEvent.OVERTIME_STARTED,),
        )

    severity = severity_for(remaining)
    percent = progress_percent(remaining, state.workday) if severity == Severity.NORMAL else None
    return state, DisplayPayload(
        mode=CountdownMode.COUNTING_DOWN,
        elapsed=remaining,
        severity=severity,
        progress_percent=percent,
    )


def workday_length(settings: Settings, force_break: bool = False) -> timedelta:
    """Target hours plus the break that goes with them."""
    settings = settings.sanitized()
    total = Duration.from_hours(settings.target_hours) + target_break(settings, force_break)
    return total.to_timedelta()


def target_from_param(
    value: str | None,
    now: datetime,
    settings: Settings,
    negative: bool = False,
    force_break: bool = False,
) -> CountdownState:
    """Build a countdown from a user-supplied target.

    value is "HH:MM" (today), or a bare number of minutes from now, up to
    one week.
    negative=True reads value as overtime already accrued. Without a
    value the target is one full workday from now.
    """
    workday = workday_length(settings, force_break)

    if not value:
        return arm(suggested_end(now, settings.sanitized(), force_break), workday)

    value = value.strip()
    minutes = _param_minutes(value)
    if minutes is None:
        raise ValueError(f"Invalid countdown target: {value!r}. Use HH:MM or minutes")

    if negative:
        return resume(now - timedelta(minutes=minutes), now, workday)

    if ":" in value:
        hours, mins = divmod(minutes, 60)
        target = now.replace(hour=hours, minute=mins, second=0, microsecond=0)
        return resume(target, now, workday)

    return arm(now + timedelta(minutes=minutes), workday)


def _param_minutes(value: str) -> int | None:
    if ":" in value:
        hours_text, _, minutes_text = value.partition(":")
        if not (hours_text.isdigit() and minutes_text.isdigit()):
            return None
        hours, minutes = int(hours_text), int(minutes_text)
        if not (0 <= hours <= 23 and 0 <= minutes <= 59):
            return None
        return hours * 60 + minutes
    if value.isdigit():
        minutes = int(value)
        return minutes if minutes <= MAX_PARAM_MINUTES else None
    return None


class Countdown:
    """Holds one CountdownState between ticks for a host driver."""

    def __init__(self, state: CountdownState):
        self._state = state

    @property
    def state(self) -> CountdownState:
        return self._state

    @property
    def mode(self) -> CountdownMode:
        return self._state.mode

    def tick(self, now: datetime) -> DisplayPayload:
        self._state, payload = tick(self._state, now)
        return payload
