"""System tray icon and menu.

Session actions only post scheduler events. Settings toggles and the
Custom rule dialog are handed to the tk thread.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

import pystray

from .config import SettingsStore
from .content import tray_title
from .icon import create_icon, icon_fraction, icon_mode
from .scheduler import BreakScheduler, SessionState, Status
from .techniques import TECHNIQUE_NAMES

logger = logging.getLogger(__name__)


class TrayIcon:

    def __init__(self, scheduler: BreakScheduler, on_quit: Callable[[], None],
                 settings: Optional[SettingsStore] = None,
                 call_soon: Callable[[Callable[[], Any]], None] = lambda fn: fn(),
                 on_custom_rule: Optional[Callable[[], None]] = None):
        self.scheduler = scheduler
        self.settings = settings
        self._on_quit = on_quit
        # settings changes and dialogs run on the tk thread
        self._call_soon = call_soon
        self._on_custom_rule = on_custom_rule
        self._status = scheduler.status()
        self._drawn: Optional[tuple] = None
        self.icon: Optional[pystray.Icon] = None
        scheduler.subscribe(self.update)

    def start(self) -> None:
        threading.Thread(target=self._run, name="mellow-tray", daemon=True).start()

    def stop(self) -> None:
        if self.icon is not None:
            self.icon.stop()

    def update(self, status: Status) -> None:
        self._status = status
        if self.icon is None:
            return
        # redraw only when the ring moves by a visible step
        key = (icon_mode(status), round(icon_fraction(status) * 32))
        try:
            if key != self._drawn:
                self._drawn = key
                self.icon.icon = create_icon(icon_fraction(status), icon_mode(status))
            self.icon.title = tray_title(status)
        except Exception as e:
            logger.debug("Tray update failed: %s", e)

    def _technique_item(self, name: str) -> pystray.MenuItem:
        return pystray.MenuItem(
            name,
            lambda icon, item: self.scheduler.post("start", name),
            checked=lambda item: (self._status.technique is not None
                                  and self._status.technique.name == name),
            radio=True)

    def _setting_item(self, text: str, key: str) -> pystray.MenuItem:
        return pystray.MenuItem(
            text,
            lambda icon, item: self._call_soon(lambda: self.settings.toggle(key)),
            checked=lambda item: bool(self.settings.config.get(key)))

    def _settings_items(self) -> list:
        if self.settings is None:
            return []
        items = [self._setting_item("Show Overlay", "show_overlay"),
                 self._setting_item("Play Sound", "play_sound")]
        if self._on_custom_rule is not None:
            items.append(pystray.MenuItem(
                "Custom Rule...", lambda icon, item: self._call_soon(self._on_custom_rule)))
        return [pystray.Menu.SEPARATOR] + items

    def _menu(self) -> pystray.Menu:
        running = lambda item: self._status.state is not SessionState.IDLE
        working = lambda item: self._status.state in (
            SessionState.RUNNING, SessionState.COUNTDOWN_WARNING)
        return pystray.Menu(
            *[self._technique_item(name) for name in TECHNIQUE_NAMES],
            pystray.Menu.SEPARATOR,
            pystray.MenuItem(
                lambda item: "▶  Resume Timer" if self._status.state is SessionState.PAUSED
                else "⏸  Pause Timer",
                lambda icon, item: self.scheduler.post("toggle_pause"),
                enabled=running),
            pystray.MenuItem("■  Stop Timer",
                             lambda icon, item: self.scheduler.post("stop"),
                             enabled=running),
            pystray.MenuItem("Take Break Now",
                             lambda icon, item: self.scheduler.post("take_break_now"),
                             enabled=working),
            *self._settings_items(),
            pystray.Menu.SEPARATOR,
            pystray.MenuItem("Quit", self._quit),
        )

    def _run(self) -> None:
        img = create_icon(1.0, icon_mode(self._status))
        self.icon = pystray.Icon("mellow", img, tray_title(self._status), self._menu())
        self.icon.run()

    def _quit(self, icon: Optional[Any] = None, item: Optional[Any] = None) -> None:
        self.stop()
        self._on_quit()
