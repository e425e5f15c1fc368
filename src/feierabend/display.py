"""Map results to display-ready {value, polarity} pairs.

Nothing here renders; the CLI (or any other sink) decides how a polarity
looks.
"""

from __future__ import annotations

from dataclasses import dataclass

from .calculator import CalculationResult
from .countdown import DisplayPayload, Severity
from .messages import lookup
from .timeutil import UNAVAILABLE, Duration, Polarity, TimeOfDay, format_optional


@dataclass(frozen=True)
class DisplayValue:
    label: str
    value: str
    polarity: Polarity | None = None

    @property
    def available(self) -> bool:
        return self.value != UNAVAILABLE


def _signed(label: str, duration: Duration | None) -> DisplayValue:
    if duration is None:
        return DisplayValue(label, UNAVAILABLE)
    return DisplayValue(label, duration.format_hhmm(), duration.polarity)


def _plain(label: str, value: Duration | TimeOfDay | None) -> DisplayValue:
    return DisplayValue(label, format_optional(value))


def present_result(
    result: CalculationResult,
    language: str = "en",
    show_current_balance: bool = False,
) -> list[DisplayValue]:
    """Rows for the results panel, in display order."""
    rows = [
        _plain(lookup("workingHours", language), result.working_hours),
        _plain(lookup("targetHours", language), result.target_hours),
        _signed(lookup("todayBalance", language), result.today_balance),
        _signed(lookup("totalOvertime", language), result.total_balance),
        _plain(lookup("suggestedEndTime", language), result.suggested_end_time),
    ]
    if show_current_balance:
        rows.append(_signed(lookup("currentBalance", language), result.current_balance))
    return rows


@dataclass(frozen=True)
class CountdownView:
    title: str
    text: str
    message: str
    severity: Severity


def present_countdown(payload: DisplayPayload, language: str = "en") -> CountdownView:
    message = lookup(payload.message_key, language)
    if payload.progress_percent is not None:
        message = f"{payload.progress_percent}% {message}"
    return CountdownView(
        title=lookup(payload.title_key, language),
        text=payload.text,
        message=message,
        severity=payload.severity,
    )
