"""Settings dialogs opened from the tray menu. Must run on the tk thread."""
from __future__ import annotations

import logging
from tkinter import simpledialog
from typing import Any, Callable, Optional

from .config import SettingsStore

logger = logging.getLogger(__name__)

DEFAULT_CUSTOM_MINUTES = 45
DEFAULT_CUSTOM_BREAK = 60


def edit_custom_rule(settings: SettingsStore, parent: Optional[Any] = None,
                     ask: Callable[..., Optional[int]] = simpledialog.askinteger) -> bool:
    """Ask for the Custom interval (minutes) and break length (seconds).

    Returns True when both were entered and saved, False if either prompt
    was cancelled.
    """
    interval = settings.custom_interval()
    minutes = ask("Custom Rule", "Minutes between breaks:", parent=parent,
                  initialvalue=int(interval // 60) if interval else DEFAULT_CUSTOM_MINUTES,
                  minvalue=1, maxvalue=240)
    if minutes is None:
        return False
    brk = settings.custom_break_duration()
    seconds = ask("Custom Rule", "Break length in seconds:", parent=parent,
                  initialvalue=int(brk) if brk else DEFAULT_CUSTOM_BREAK,
                  minvalue=5, maxvalue=3600)
    if seconds is None:
        return False
    settings.set_custom_rule(minutes * 60, seconds)
    logger.info("Custom rule set: every %d min, %ds break", minutes, seconds)
    return True
