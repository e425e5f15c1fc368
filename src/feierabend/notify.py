"""Notification collaborators for the end of the workday."""

from __future__ import annotations

import logging
import platform
import shutil
import subprocess
from typing import Callable, Protocol, Sequence

from rich.console import Console

from .messages import lookup
from .settings import Settings

logger = logging.getLogger("feierabend.notify")

# Close desktop notifications after this long, like the browser version did.
NOTIFICATION_TIMEOUT_MS = 10_000


class Notifier(Protocol):
    def overtime_started(self) -> None: ...


def detect_notifier_command() -> str | None:
    """Return the desktop notification tool available on this host."""

    system = platform.system()
    if system == "Linux" and shutil.which("notify-send"):
        return "notify-send"
    if system == "Darwin" and shutil.which("osascript"):
        return "osascript"
    return None


def build_notification_args(tool: str, title: str, body: str) -> list[str]:
    if tool == "notify-send":
        return ["notify-send", "-t", str(NOTIFICATION_TIMEOUT_MS), title, body]
    if tool == "osascript":
        script = f'display notification "{_escape(body)}" with title "{_escape(title)}"'
        return ["osascript", "-e", script]
    raise ValueError(f"Unsupported notification tool: {tool}")


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


class ConsoleNotifier:
    """Rings the terminal bell and/or raises a desktop notification.

    Which of the two happens is read from settings at the moment the
    overtime starts. Delivery failures are logged and never propagate.
    """

    def __init__(
        self,
        settings: Settings,
        console: Console | None = None,
        run: Callable[[Sequence[str]], object] | None = None,
    ):
        self.settings = settings
        self.console = console or Console()
        self._run = run or _run_detached

    def overtime_started(self) -> None:
        logger.info("Overtime started")
        if self.settings.audio_enabled:
            self.console.bell()
        if self.settings.notifications_enabled:
            self._send_desktop_notification()

    def _send_desktop_notification(self) -> None:
        tool = detect_notifier_command()
        if tool is None:
            logger.warning("Desktop notifications enabled but no notifier found")
            return
        language = self.settings.language
        args = build_notification_args(
            tool, lookup("endOfWorkTitle", language), lookup("endOfWorkMessage", language)
        )
        try:
            self._run(args)
        except OSError as exc:
            logger.warning(f"Could not show notification: {exc}")


def _run_detached(args: Sequence[str]) -> subprocess.Popen[bytes]:
    return subprocess.Popen(list(args), stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
