"""Tests for the overtime notification collaborator."""

import logging
from unittest.mock import MagicMock, patch

import pytest

from feierabend import notify
from feierabend.notify import ConsoleNotifier, build_notification_args
from feierabend.settings import Settings


@pytest.fixture
def console():
    return MagicMock()


def test_silent_by_default(console):
    run = MagicMock()
    ConsoleNotifier(Settings(), console=console, run=run).overtime_started()
    console.bell.assert_not_called()
    run.assert_not_called()


def test_audio_rings_bell(console):
    ConsoleNotifier(Settings(audio_enabled=True), console=console, run=MagicMock()).overtime_started()
    console.bell.assert_called_once()


def test_desktop_notification_uses_detected_tool(console):
    run = MagicMock()
    with patch.object(notify, "detect_notifier_command", return_value="notify-send"):
        ConsoleNotifier(Settings(notifications_enabled=True, language="de"), console=console, run=run).overtime_started()
    args = run.call_args[0][0]
    assert args[0] == "notify-send"
    assert "Feierabend!" in args


def test_missing_tool_is_logged(console, caplog):
    run = MagicMock()
    with patch.object(notify, "detect_notifier_command", return_value=None):
        with caplog.at_level(logging.WARNING, logger="feierabend.notify"):
            ConsoleNotifier(Settings(notifications_enabled=True), console=console, run=run).overtime_started()
    run.assert_not_called()
    assert "no notifier found" in caplog.text


def test_delivery_failure_is_logged_not_raised(console, caplog):
    run = MagicMock(side_effect=OSError("boom"))
    with patch.object(notify, "detect_notifier_command", return_value="notify-send"):
        with caplog.at_level(logging.WARNING, logger="feierabend.notify"):
            ConsoleNotifier(Settings(notifications_enabled=True), console=console, run=run).overtime_started()
    assert "Could not show notification" in caplog.text


def test_osascript_args_escape_quotes():
    args = build_notification_args("osascript", 'Say "hi"', "Body")
    assert args[:2] == ["osascript", "-e"]
    assert 'with title "Say \\"hi\\""' in args[2]


def test_unknown_tool_rejected():
    with pytest.raises(ValueError):
        build_notification_args("growl", "t", "b")


def test_detect_on_linux(monkeypatch):
    monkeypatch.setattr(notify.platform, "system", lambda: "Linux")
    monkeypatch.setattr(notify.shutil, "which", lambda name: "/usr/bin/notify-send" if name == "notify-send" else None)
    assert notify.detect_notifier_command() == "notify-send"


def test_detect_unsupported_platform(monkeypatch):
    monkeypatch.setattr(notify.platform, "system", lambda: "Windows")
    assert notify.detect_notifier_command() is None
