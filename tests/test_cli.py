"""CLI tests: click CliRunner with an injected clock, store and notifier."""

from datetime import datetime
from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner

from feierabend.cli import _value_text, cli, run_tick
from feierabend.clock import FixedClock
from feierabend.countdown import Countdown, arm
from feierabend.display import DisplayValue
from feierabend.settings import JsonSettingsStore, MemorySettingsStore, Settings
from feierabend.timeutil import Polarity


NOW = datetime(2026, 2, 11, 15, 0)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    monkeypatch.setenv("FEIERABEND_SETTINGS", str(tmp_path / "settings.json"))
    monkeypatch.delenv("FEIERABEND_VERBOSE", raising=False)


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, args, settings=None, now=NOW, **extra):
    obj = {
        "store": MemorySettingsStore(settings or Settings()),
        "clock": FixedClock(now),
        **extra,
    }
    return runner.invoke(cli, args, obj=obj)


# ---- calc ----

class TestCalc:
    def test_full_day(self, runner):
        result = invoke(runner, ["calc", "08:00", "17:30"])
        assert result.exit_code == 0, result.output
        assert "09:00" in result.output  # working hours
        assert "01:00" in result.output  # today's balance
        assert "16:30" in result.output  # suggested end

    def test_missing_start_shows_unavailable(self, runner):
        result = invoke(runner, ["calc"])
        assert result.exit_code == 0
        assert result.output.count("--:--") == 4

    def test_unparseable_start_is_not_an_error(self, runner):
        result = invoke(runner, ["calc", "8:6x", "16:00"])
        assert result.exit_code == 0
        assert "--:--" in result.output

    def test_end_now_uses_clock(self, runner):
        result = invoke(runner, ["calc", "08:00", "now"])
        assert result.exit_code == 0
        # 7h elapsed - 30 min break
        assert "06:30" in result.output
        assert "-01:30" in result.output

    def test_balance_option_overrides_settings(self, runner):
        result = invoke(runner, ["calc", "08:00", "16:30", "--balance", "-2.5"], settings=Settings(prior_balance_hours=4))
        assert "-02:30" in result.output

    def test_prior_balance_from_settings(self, runner):
        result = invoke(runner, ["calc", "08:00", "16:30"], settings=Settings(prior_balance_hours=1.25))
        assert "01:15" in result.output

    def test_current_balance_row(self, runner):
        result = invoke(runner, ["calc", "08:00", "--current"])
        assert "Balance if leaving now" in result.output
        assert "-01:30" in result.output

    def test_break_hint_for_short_day(self, runner):
        result = invoke(runner, ["calc", "08:00", "11:00"])
        assert "not required by law" in result.output

    @pytest.mark.parametrize("value", ["inf", "nan", "1e12"])
    def test_unusable_balance_rejected(self, runner, value):
        result = invoke(runner, ["calc", "08:00", "16:00", "--balance", value])
        assert result.exit_code == 2
        assert "--balance" in result.output

    def test_impossible_stored_target_still_renders(self, runner):
        result = invoke(runner, ["calc", "08:00", "16:00"], settings=Settings(target_hours=float("inf")))
        assert result.exit_code == 0, result.output
        assert "16:30" in result.output

    def test_invalid_interval_rejected(self, runner):
        result = invoke(runner, ["calc", "08:00", "--watch", "--interval", "soon"])
        assert result.exit_code != 0
        assert "Invalid interval" in result.output


# ---- countdown ----

class TestCountdown:
    def test_once_counts_down(self, runner):
        notifier = MagicMock()
        result = invoke(runner, ["countdown", "17:00", "--once"], notifier=notifier)
        assert result.exit_code == 0, result.output
        assert "02:00:00" in result.output
        assert "Time until end of work" in result.output
        notifier.overtime_started.assert_not_called()

    def test_from_start_uses_suggested_end(self, runner):
        result = invoke(runner, ["countdown", "--from-start", "08:00", "--once"], notifier=MagicMock())
        assert "01:30:00" in result.output

    def test_past_target_resumes_overtime_without_notification(self, runner):
        notifier = MagicMock()
        result = invoke(runner, ["countdown", "14:15", "--once"], notifier=notifier)
        assert "+00:45:00" in result.output
        assert "End of work!" in result.output
        notifier.overtime_started.assert_not_called()

    def test_invalid_target(self, runner):
        result = invoke(runner, ["countdown", "soon", "--once"], notifier=MagicMock())
        assert result.exit_code != 0
        assert "Invalid countdown target" in result.output

    def test_huge_minutes_rejected(self, runner):
        result = invoke(runner, ["countdown", "99999999999", "--once"], notifier=MagicMock())
        assert result.exit_code == 2
        assert "Invalid countdown target" in result.output

    def test_target_at_now_notifies(self, runner):
        notifier = MagicMock()
        result = invoke(runner, ["countdown", "15:00", "--once"], notifier=notifier)
        assert result.exit_code == 0, result.output
        assert "+00:00:00" in result.output
        notifier.overtime_started.assert_called_once()

    def test_invalid_from_start(self, runner):
        result = invoke(runner, ["countdown", "--from-start", "xx", "--once"], notifier=MagicMock())
        assert result.exit_code != 0


def test_run_tick_notifies_once():
    clock = FixedClock(NOW)
    notifier = MagicMock()
    machine = Countdown(arm(NOW))
    for _ in range(3):
        run_tick(machine, clock, notifier)
        clock.advance(seconds=1)
    notifier.overtime_started.assert_called_once()


# ---- config ----

class TestConfig:
    def test_show(self, runner):
        result = invoke(runner, ["config", "show"])
        assert result.exit_code == 0
        assert "targetHours" in result.output
        assert "breakDuration" in result.output

    def test_set_persists_to_file(self, runner, tmp_path):
        store = JsonSettingsStore(tmp_path / "settings.json")
        result = runner.invoke(cli, ["config", "set", "--target-hours", "7.7", "--break-minutes", "45", "--audio"],
                               obj={"store": store})
        assert result.exit_code == 0, result.output
        assert store.get() == Settings(target_hours=7.7, break_minutes=45, audio_enabled=True)

    def test_set_rejects_non_positive_target(self, runner):
        result = invoke(runner, ["config", "set", "--target-hours", "0"])
        assert result.exit_code != 0
        assert "greater than zero" in result.output

    @pytest.mark.parametrize("value", ["1e12", "24.5"])
    def test_set_rejects_oversized_target(self, runner, value):
        result = invoke(runner, ["config", "set", "--target-hours", value])
        assert result.exit_code != 0
        assert "at most 24 hours" in result.output

    @pytest.mark.parametrize("value", ["inf", "nan"])
    def test_set_rejects_non_finite_target(self, runner, value):
        result = invoke(runner, ["config", "set", "--target-hours", value])
        assert result.exit_code != 0
        assert "greater than zero" in result.output

    def test_set_rejects_oversized_break(self, runner):
        result = invoke(runner, ["config", "set", "--break-minutes", "100000"])
        assert result.exit_code != 0

    def test_set_rejects_non_finite_balance(self, runner):
        store = MemorySettingsStore()
        result = runner.invoke(cli, ["config", "set", "--balance", "-inf"], obj={"store": store})
        assert result.exit_code != 0
        assert store.get() == Settings()

    def test_set_rejects_negative_break(self, runner):
        result = invoke(runner, ["config", "set", "--break-minutes", "-5"])
        assert result.exit_code != 0

    def test_set_requires_an_option(self, runner):
        result = invoke(runner, ["config", "set"])
        assert result.exit_code != 0
        assert "Nothing to set" in result.output

    def test_reset(self, runner):
        store = MemorySettingsStore(Settings(target_hours=4))
        result = runner.invoke(cli, ["config", "reset"], obj={"store": store, "clock": FixedClock(NOW)})
        assert result.exit_code == 0
        assert store.get() == Settings()


# ---- theme ----

class TestTheme:
    @pytest.mark.parametrize(
        "theme, expected",
        [("system", "bold green"), ("dark", "bold bright_green"), ("light", "bold dark_green")],
    )
    def test_palette_follows_theme(self, theme, expected):
        text = _value_text(DisplayValue("Today's Balance", "01:00", Polarity.POSITIVE), theme)
        assert text.style == expected

    def test_neutral_value_readable_on_light_background(self):
        text = _value_text(DisplayValue("Working Hours", "08:00"), "light")
        assert text.style == "black"

    def test_unavailable_is_dim_for_every_theme(self):
        assert _value_text(DisplayValue("Working Hours", "--:--"), "dark").style == "dim"
