"""Work-hours balance calculator and end-of-work countdown.

The calculator and the countdown engine are pure; settings, clock and
notifications are passed in by whoever hosts them.
"""

from .calculator import (
    CalculationInputs,
    CalculationResult,
    compute,
    default_end_time,
)
from .clock import Clock, FixedClock, SystemClock
from .countdown import (
    Countdown,
    CountdownEvent,
    CountdownMode,
    CountdownState,
    DisplayPayload,
    Severity,
    arm,
    resume,
    severity_for,
    target_from_param,
    tick,
)
from .settings import JsonSettingsStore, MemorySettingsStore, Settings
from .timeutil import Duration, Polarity, TimeOfDay, parse_time

__all__ = [
    "CalculationInputs",
    "CalculationResult",
    "Clock",
    "Countdown",
    "CountdownEvent",
    "CountdownMode",
    "CountdownState",
    "DisplayPayload",
    "Duration",
    "FixedClock",
    "JsonSettingsStore",
    "MemorySettingsStore",
    "Polarity",
    "Settings",
    "Severity",
    "SystemClock",
    "TimeOfDay",
    "arm",
    "compute",
    "default_end_time",
    "parse_time",
    "resume",
    "severity_for",
    "target_from_param",
    "tick",
]
