#!/usr/bin/env python3
"""
Mellow: Mindful Break Reminder
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

Runs in your system tray and interrupts work for eye and posture breaks.

Techniques:
  - 20-20-20 Rule: every 20 min, look 20 feet away for 20 sec
  - Pomodoro Technique: 25 min work / 5 min break, 30 min every 4th
  - Custom: your own interval and break length

Usage:
    python -m mellow
    python -m mellow --technique pomodoro
    pythonw -m mellow           (Windows, no console)
"""
from __future__ import annotations

import argparse
import logging
import sys
import tkinter as tk
from tkinter import messagebox
from typing import Callable, Optional, Sequence

from .config import CONFIG_FILE, SettingsStore
from .dialogs import edit_custom_rule
from .errors import MellowError, TimerInitializationFailed
from .lock import LockMonitor
from .overlay import TkOverlayPresenter
from .scheduler import BreakScheduler
from .sound import SoundPlayer
from .techniques import TECHNIQUE_NAMES, durations, technique_from_name
from .tray import TrayIcon

logger = logging.getLogger(__name__)

PUMP_MS = 50  # event queue drain cadence


# ─── Tk Adapters ──────────────────────────────────────────────
class TkTicker:
    """Repeating tk timer; the callback runs on the tk thread."""

    def __init__(self, root: tk.Tk):
        self.root = root
        self.active = False
        self._after_id: Optional[str] = None
        self._interval_ms = 500
        self._callback: Optional[Callable[[], None]] = None

    def start(self, interval: float, callback: Callable[[], None]) -> None:
        self._interval_ms = max(1, int(interval * 1000))
        self._callback = callback
        try:
            self._after_id = self.root.after(0, self._fire)
        except (tk.TclError, RuntimeError) as e:
            raise TimerInitializationFailed(f"Failed to initialize timer: {e}") from e
        self.active = True

    def stop(self) -> None:
        self.active = False
        if self._after_id:
            try:
                self.root.after_cancel(self._after_id)
            except (tk.TclError, ValueError):
                pass
            self._after_id = None

    def _fire(self) -> None:
        if not self.active:
            return
        self._callback()
        self._after_id = self.root.after(self._interval_ms, self._fire)


class TkErrorSink:
    """Shows failures in a warning dialog."""

    def __init__(self, root: tk.Tk):
        self.root = root

    def report(self, error: MellowError) -> None:
        self.root.after(0, lambda: messagebox.showwarning("Error", str(error), parent=self.root))


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
class MellowApp:

    def __init__(self, technique: Optional[str] = None, config_path: str = CONFIG_FILE):
        self.root = tk.Tk()
        self.root.withdraw()

        self.settings = SettingsStore(path=config_path)
        self.overlay = TkOverlayPresenter(
            self.root, self._post,
            multi_monitor=lambda: self.settings.config.get("multi_monitor_overlay", True))
        self.scheduler = BreakScheduler(
            self.settings,
            overlay=self.overlay,
            sound=SoundPlayer(self.settings.custom_sound_path),
            errors=TkErrorSink(self.root),
            ticker=TkTicker(self.root),
        )
        self.tray = TrayIcon(
            self.scheduler, on_quit=lambda: self._post_quit(),
            settings=self.settings,
            call_soon=lambda fn: self.root.after(0, fn),
            on_custom_rule=self._edit_custom_rule)
        self.lock = LockMonitor(
            self.scheduler.post,
            lock_detection=lambda: self.settings.config.get("lock_detection", True),
            idle_threshold=self._idle_threshold,
        )
        self._technique = technique or self.settings.config.get("autostart_technique")

    def _post(self, event: str, *args) -> None:
        self.scheduler.post(event, *args)

    def _post_quit(self) -> None:
        # tray thread: hand over to tk
        self.root.after(0, self.quit)

    def _edit_custom_rule(self) -> None:
        if not edit_custom_rule(self.settings, parent=self.root):
            return
        # a running Custom session picks up the new rule right away
        technique = self.scheduler.technique
        if technique is not None and technique.name == "Custom":
            self._post("start", "Custom")

    def _idle_threshold(self) -> Optional[float]:
        if not self.settings.config.get("idle_detection"):
            return None
        return self.settings.config.get("idle_threshold")

    def _pump(self) -> None:
        try:
            self.scheduler.process_pending()
        finally:
            self.root.after(PUMP_MS, self._pump)

    def run(self) -> None:
        print_schedule(self.settings)
        self.tray.start()
        self.lock.start()
        if self._technique:
            self._post("start", self._technique)
        self._pump()
        self.root.bind_all("<Control-q>", lambda e: self.quit())
        self.root.mainloop()

    def quit(self) -> None:
        logger.info("Quitting")
        self.scheduler.stop()
        self.lock.stop()
        self.tray.stop()
        self.root.quit()


def print_schedule(settings: SettingsStore) -> None:
    try:
        print()
        print("  +-----------------------------------------------+")
        print("  |             Mellow -- Techniques              |")
        print("  +-----------------------------------------------+")
        for name in TECHNIQUE_NAMES:
            try:
                t = technique_from_name(name, settings.custom_interval(),
                                        settings.custom_break_duration())
            except MellowError:
                print(f"  |  {name:<20s} {'(not configured)':>24s} |")
                continue
            work, brk = durations(t)
            rule = f"{int(work) // 60} min / {int(brk)} s"
            print(f"  |  {name:<20s} {rule:>24s} |")
        print("  +-----------------------------------------------+")
        print()
    except (UnicodeEncodeError, OSError):
        pass  # consoles that can't print


def configure_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="  [%(levelname).1s] %(name)s: %(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="mellow", description="Mellow break reminder")
    parser.add_argument("--technique", "-t", metavar="NAME",
                        help="start a technique at launch (20-20-20, pomodoro, custom)")
    parser.add_argument("--config", default=CONFIG_FILE, help="settings file")
    parser.add_argument("--debug", action="store_true", help="verbose logging")
    args = parser.parse_args(argv)

    configure_logging(args.debug)
    try:
        MellowApp(technique=args.technique, config_path=args.config).run()
    except tk.TclError as e:
        logger.error("Cannot open display: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
