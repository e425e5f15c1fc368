"""Balance calculator: pure arithmetic over one snapshot of inputs.

compute() never raises on user input. Missing or unparseable times come
through as None and the figures that depend on them are withheld (None),
never defaulted to zero.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta

from .settings import Settings
from .timeutil import Duration, TimeOfDay

# Below this much elapsed (or target) time the break is optional.
MANDATORY_BREAK_THRESHOLD = Duration.from_hours(6)


@dataclass(frozen=True)
class CalculationInputs:
    start_time: TimeOfDay | None
    end_time: TimeOfDay | None
    now: datetime
    settings: Settings = field(default_factory=Settings)
    prior_balance: Duration = Duration(0)
    force_break: bool = False
    include_current_balance: bool = False


@dataclass(frozen=True)
class CalculationResult:
    target_hours: Duration
    working_hours: Duration | None = None
    today_balance: Duration | None = None
    total_balance: Duration | None = None
    suggested_end_time: TimeOfDay | None = None
    suggested_end_at: datetime | None = None
    break_applied: bool = False
    break_optional: bool = False
    current_balance: Duration | None = None

    @property
    def has_balance(self) -> bool:
        return self.today_balance is not None


def elapsed_break(elapsed: Duration, break_minutes: int, force_break: bool) -> Duration:
    """Break to subtract from measured time.

    Mandatory from six hours of elapsed time, opt-in below that, and never
    more than the elapsed time itself.
    """
    if elapsed < MANDATORY_BREAK_THRESHOLD and not force_break:
        return Duration(0)
    return min(elapsed, Duration.from_minutes(break_minutes))


def target_break(settings: Settings, force_break: bool) -> Duration:
    """Break to add to the target when projecting the end of the day."""
    target = Duration.from_hours(settings.target_hours)
    break_time = Duration.from_minutes(settings.break_minutes)
    if target < break_time:
        return Duration(0)
    if target >= MANDATORY_BREAK_THRESHOLD or force_break:
        return break_time
    return Duration(0)


def suggested_end(start: datetime, settings: Settings, force_break: bool) -> datetime:
    """Departure instant that makes today's balance exactly zero."""
    target = Duration.from_hours(settings.target_hours)
    return start + (target + target_break(settings, force_break)).to_timedelta()


def compute(inputs: CalculationInputs) -> CalculationResult:
    settings = inputs.settings.sanitized()
    target = Duration.from_hours(settings.target_hours)

    if inputs.start_time is None:
        return CalculationResult(target_hours=target)

    start = inputs.start_time.on(inputs.now.date())
    suggestion = suggested_end(start, settings, inputs.force_break)
    base = CalculationResult(
        target_hours=target,
        suggested_end_time=TimeOfDay.from_datetime(suggestion),
        suggested_end_at=suggestion,
        break_applied=target_break(settings, inputs.force_break).seconds > 0,
        break_optional=target < MANDATORY_BREAK_THRESHOLD,
        current_balance=_current_balance(inputs, start, settings, target),
    )

    if inputs.end_time is None:
        return base

    # Not started yet: a pure projection of the full day still ahead.
    if start > inputs.now and inputs.end_time == inputs.start_time:
        return _with_balance(base, inputs.prior_balance, working=Duration(0), target=target)

    end = inputs.end_time.on(inputs.now.date())
    if end <= start:
        end += timedelta(days=1)

    elapsed = Duration.from_timedelta(end - start)
    applied = elapsed_break(elapsed, settings.break_minutes, inputs.force_break)
    working = max(Duration(0), elapsed - applied)

    result = _with_balance(base, inputs.prior_balance, working=working, target=target)
    return replace(
        result,
        break_applied=applied.seconds > 0,
        break_optional=elapsed < MANDATORY_BREAK_THRESHOLD,
    )


def _with_balance(
    base: CalculationResult, prior: Duration, working: Duration, target: Duration
) -> CalculationResult:
    today = working - target
    return replace(
        base,
        working_hours=working,
        today_balance=today,
        total_balance=prior + today,
    )


def _current_balance(
    inputs: CalculationInputs, start: datetime, settings: Settings, target: Duration
) -> Duration | None:
    """Total balance if the user left right now."""
    if not inputs.include_current_balance:
        return None
    elapsed = max(Duration(0), Duration.from_timedelta(inputs.now - start))
    applied = elapsed_break(elapsed, settings.break_minutes, inputs.force_break)
    working = max(Duration(0), elapsed - applied)
    return inputs.prior_balance + (working - target)


def default_end_time(
    start_time: TimeOfDay | None, settings: Settings, now: datetime, force_break: bool = False
) -> TimeOfDay:
    """End time to prefill when the user asks for "now".

    A start still in the future has no "now" to end at, so the projected
    end of that day is used instead.
    """
    if start_time is not None:
        start = start_time.on(now.date())
        if start > now:
            return TimeOfDay.from_datetime(suggested_end(start, settings.sanitized(), force_break))
    return TimeOfDay.from_datetime(now)
