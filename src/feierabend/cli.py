#!/usr/bin/env python3
"""Feierabend CLI.

Usage:
    feierabend calc 08:00 16:45              # Balance for a finished day
    feierabend calc 08:00 now --watch        # Live "if I left now" figures
    feierabend calc 0800 --balance 2.5       # Only the suggested end time
    feierabend countdown                     # Count down to the end of the day
    feierabend countdown 17:15               # Count down to a fixed time
    feierabend countdown --from-start 08:00  # Use the suggested end time
    feierabend config set --target-hours 7.7
"""

from __future__ import annotations

import logging
import math
import threading

import click
from click.core import ParameterSource
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .calculator import CalculationInputs, CalculationResult, compute, default_end_time
from .clock import Clock, SystemClock
from .countdown import Countdown, CountdownState, DisplayPayload, Severity, resume, target_from_param, workday_length
from .display import DisplayValue, present_countdown, present_result
from .drivers import DEFAULT_REFRESH_INTERVAL, Ticker, parse_interval
from .messages import lookup
from .notify import ConsoleNotifier, Notifier
from .settings import (
    LANGUAGES,
    MAX_BALANCE_HOURS,
    MAX_BREAK_MINUTES,
    MAX_TARGET_HOURS,
    THEMES,
    AppConfig,
    Settings,
    get_config,
)
from .timeutil import Duration, TimeOfDay, parse_time

logger = logging.getLogger("feierabend")

console = Console()

# theme -> polarity -> rich style
POLARITY_STYLES = {
    "system": {"positive": "bold green", "negative": "bold red", "zero": "default"},
    "dark": {"positive": "bold bright_green", "negative": "bold bright_red", "zero": "white"},
    "light": {"positive": "bold dark_green", "negative": "bold red3", "zero": "black"},
}

SEVERITY_STYLES = {
    Severity.NORMAL: "bold cyan",
    Severity.WARNING: "bold yellow",
    Severity.CRITICAL: "bold red",
    Severity.OVERTIME: "bold magenta",
}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _balance_option(ctx, param, value: float | None) -> float | None:
    if value is None:
        return value
    if not math.isfinite(value) or abs(value) > MAX_BALANCE_HOURS:
        raise click.BadParameter(f"must be a number of hours between -{MAX_BALANCE_HOURS:g} and {MAX_BALANCE_HOURS:g}")
    return value


def _interval_option(ctx, param, value: str) -> str:
    try:
        parse_interval(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--interval") from exc
    return value


# ── Rendering ──────────────────────────────────────────────────


def _value_text(row: DisplayValue, theme: str = "system") -> Text:
    if not row.available:
        return Text(row.value, style="dim")
    palette = POLARITY_STYLES.get(theme, POLARITY_STYLES["system"])
    style = palette[row.polarity.value] if row.polarity else palette["zero"]
    return Text(row.value, style=style)


def render_result(result: CalculationResult, settings: Settings, show_current: bool) -> Group:
    table = Table(title=lookup("appTitle", settings.language), show_header=False, box=None)
    table.add_column("label", style="bold")
    table.add_column("value", justify="right")
    for row in present_result(result, settings.language, show_current):
        table.add_row(row.label, _value_text(row, settings.theme))
    if result.break_optional:
        return Group(table, Text(lookup("breakHint", settings.language), style="dim"))
    return Group(table)


def render_countdown(payload: DisplayPayload, settings: Settings) -> Panel:
    view = present_countdown(payload, settings.language)
    body = Group(
        Text(view.text, style=SEVERITY_STYLES[view.severity], justify="center"),
        Text(view.message, justify="center"),
    )
    return Panel(body, title=view.title)


# ── Command group ──────────────────────────────────────────────


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Work-hours balance calculator and end-of-work countdown."""
    config: AppConfig = get_config()
    _configure_logging(verbose or config.verbose)

    ctx.ensure_object(dict)
    ctx.obj.setdefault("config", config)
    ctx.obj.setdefault("store", config.store())
    ctx.obj.setdefault("clock", SystemClock())


# ── calc ───────────────────────────────────────────────────────


def _build_inputs(
    start: str | None,
    end: str | None,
    settings: Settings,
    clock: Clock,
    balance: float | None,
    force_break: bool,
    show_current: bool,
) -> CalculationInputs:
    now = clock.now()
    start_time = parse_time(start)
    if start is not None and start_time is None:
        logger.debug(f"Unparseable start time {start!r}, treating as absent")

    if end is not None and end.strip().lower() == "now":
        end_time: TimeOfDay | None = default_end_time(start_time, settings, now, force_break)
    else:
        end_time = parse_time(end)
        if end is not None and end_time is None:
            logger.debug(f"Unparseable end time {end!r}, treating as absent")

    prior = balance if balance is not None else settings.prior_balance_hours
    return CalculationInputs(
        start_time=start_time,
        end_time=end_time,
        now=now,
        settings=settings,
        prior_balance=Duration.from_hours(prior),
        force_break=force_break,
        include_current_balance=show_current,
    )


@cli.command()
@click.argument("start", required=False)
@click.argument("end", required=False)
@click.option("--balance", type=float, default=None, callback=_balance_option, help="Prior overtime balance in decimal hours (default: from settings)")
@click.option("--force-break", is_flag=True, help="Apply the break even below six hours")
@click.option("--current/--no-current", "show_current", default=False, show_default=True, help="Show the balance if leaving now")
@click.option("--watch", is_flag=True, help="Keep recalculating until interrupted")
@click.option("--interval", default=DEFAULT_REFRESH_INTERVAL, show_default=True, callback=_interval_option, help="Refresh interval for --watch")
@click.pass_context
def calc(
    ctx: click.Context,
    start: str | None,
    end: str | None,
    balance: float | None,
    force_break: bool,
    show_current: bool,
    watch: bool,
    interval: str,
) -> None:
    """Compute working time and balances from START to END.

    END may be "now"; with a start in the future it becomes the projected
    end of that day.
    """
    settings: Settings = ctx.obj["store"].get().sanitized()
    clock: Clock = ctx.obj["clock"]

    def recalculate() -> Group:
        inputs = _build_inputs(start, end, settings, clock, balance, force_break, show_current)
        return render_result(compute(inputs), settings, show_current)

    if not watch:
        console.print(recalculate())
        return

    stopped = threading.Event()
    ticker = Ticker()
    with Live(recalculate(), console=console, refresh_per_second=1) as live:
        ticker.start_refresh(lambda: live.update(recalculate()), interval)
        try:
            stopped.wait()
        except KeyboardInterrupt:
            pass
        finally:
            ticker.stop()


# ── countdown ──────────────────────────────────────────────────


def _countdown_state(
    target: str | None,
    negative: bool,
    from_start: str | None,
    settings: Settings,
    clock: Clock,
    force_break: bool,
) -> CountdownState:
    now = clock.now()
    if from_start is not None:
        start_time = parse_time(from_start)
        if start_time is None:
            raise click.BadParameter(f"Unparseable start time: {from_start}", param_hint="--from-start")
        result = compute(CalculationInputs(start_time=start_time, end_time=None, now=now,
                                           settings=settings, force_break=force_break))
        return resume(result.suggested_end_at, now, workday_length(settings, force_break))
    try:
        return target_from_param(target, now, settings, negative=negative, force_break=force_break)
    except (ValueError, OverflowError) as exc:
        raise click.BadParameter(str(exc), param_hint="TARGET") from exc


def run_tick(countdown: Countdown, clock: Clock, notifier: Notifier) -> DisplayPayload:
    """One countdown step, with the notifier told about a crossing."""
    payload = countdown.tick(clock.now())
    if payload.crossed_into_overtime:
        notifier.overtime_started()
    return payload


@cli.command()
@click.argument("target", required=False)
@click.option("--negative", is_flag=True, help="Read TARGET as overtime already accrued")
@click.option("--from-start", default=None, help="Count down to the suggested end for this start time")
@click.option("--force-break", is_flag=True, help="Include the break even below six target hours")
@click.option("--once", is_flag=True, help="Print a single tick and exit")
@click.pass_context
def countdown(
    ctx: click.Context,
    target: str | None,
    negative: bool,
    from_start: str | None,
    force_break: bool,
    once: bool,
) -> None:
    """Count down to TARGET (HH:MM or minutes), then count overtime up."""
    settings: Settings = ctx.obj["store"].get().sanitized()
    clock: Clock = ctx.obj["clock"]
    notifier: Notifier = ctx.obj.get("notifier") or ConsoleNotifier(settings, console)

    machine = Countdown(_countdown_state(target, negative, from_start, settings, clock, force_break))
    first = run_tick(machine, clock, notifier)
    if once:
        console.print(render_countdown(first, settings))
        return

    stopped = threading.Event()
    ticker = Ticker()
    with Live(render_countdown(first, settings), console=console, refresh_per_second=4) as live:
        ticker.start_countdown(lambda: live.update(render_countdown(run_tick(machine, clock, notifier), settings)))
        try:
            stopped.wait()
        except KeyboardInterrupt:
            pass
        finally:
            ticker.stop()


# ── config ─────────────────────────────────────────────────────


@cli.group()
def config() -> None:
    """Show or change stored settings."""


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show the current settings."""
    settings: Settings = ctx.obj["store"].get()
    table = Table(show_header=False, box=None)
    table.add_column("key", style="bold")
    table.add_column("value")
    for key, value in settings.to_json_dict().items():
        table.add_row(key, str(value))
    console.print(table)


def _target_hours_option(ctx, param, value):
    if value is None:
        return value
    if not math.isfinite(value) or value <= 0:
        raise click.BadParameter("must be greater than zero")
    if value > MAX_TARGET_HOURS:
        raise click.BadParameter(f"must be at most {MAX_TARGET_HOURS:g} hours")
    return value


def _break_minutes_option(ctx, param, value):
    if value is not None and not 0 <= value <= MAX_BREAK_MINUTES:
        raise click.BadParameter(f"must be between 0 and {MAX_BREAK_MINUTES} minutes")
    return value


@config.command("set")
@click.option("--target-hours", type=float, callback=_target_hours_option, help="Required working hours per day")
@click.option("--break-minutes", type=int, callback=_break_minutes_option, help="Break duration in minutes")
@click.option("--balance", "prior_balance_hours", type=float, callback=_balance_option, help="Prior overtime balance in decimal hours")
@click.option("--theme", type=click.Choice(THEMES), help="Display theme")
@click.option("--language", type=click.Choice(LANGUAGES), help="Display language")
@click.option("--audio/--no-audio", "audio_enabled", default=None, help="Ring the bell when overtime starts")
@click.option("--notifications/--no-notifications", "notifications_enabled", default=None, help="Desktop notification when overtime starts")
@click.pass_context
def config_set(ctx: click.Context, **options) -> None:
    """Update one or more settings."""
    changes = {
        name: value
        for name, value in options.items()
        if ctx.get_parameter_source(name) == ParameterSource.COMMANDLINE
    }
    if not changes:
        raise click.UsageError("Nothing to set. Pass at least one option.")
    ctx.obj["store"].set(**changes)
    ctx.invoke(config_show)


@config.command("reset")
@click.pass_context
def config_reset(ctx: click.Context) -> None:
    """Restore the default settings."""
    ctx.obj["store"].reset()
    ctx.invoke(config_show)


def main() -> None:  # pragma: no cover
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
