"""Pomodoro cycle counting."""
from __future__ import annotations

import logging
from typing import Optional

from .techniques import CYCLES_PER_LONG_BREAK, Technique, is_pomodoro

logger = logging.getLogger(__name__)


class CycleTracker:
    """Counts Pomodoro cycles: 1..4, then back to 1 after the long break.

    The count stays 0 for other techniques and after a reset. ``advance``
    takes the serial number of the break that just ended so a break that
    is reported twice (timer and overlay both finishing it) only counts once.
    """

    def __init__(self):
        self.count = 0
        self._technique: Optional[Technique] = None
        self._last_break: Optional[int] = None

    def start(self, technique: Technique) -> int:
        self._technique = technique
        self._last_break = None
        self.count = 1 if is_pomodoro(technique) else 0
        if self.count:
            logger.info("Starting Pomodoro - count: 1/%d", CYCLES_PER_LONG_BREAK)
        return self.count

    def advance(self, break_serial: int) -> int:
        if not is_pomodoro(self._technique):
            return self.count
        if break_serial == self._last_break:
            logger.debug("Break %d already counted", break_serial)
            return self.count
        self._last_break = break_serial
        if self.count >= CYCLES_PER_LONG_BREAK:
            self.count = 1
            logger.info("Long break over - new cycle at count: 1/%d",
                        CYCLES_PER_LONG_BREAK)
        else:
            self.count += 1
            logger.info("Pomodoro count: %d/%d", self.count, CYCLES_PER_LONG_BREAK)
        return self.count

    def reset(self) -> None:
        if self.count:
            logger.info("Resetting Pomodoro count from %d to 0", self.count)
        self.count = 0
        self._technique = None
        self._last_break = None

    @property
    def is_long_break(self) -> bool:
        return is_pomodoro(self._technique) and self.count >= CYCLES_PER_LONG_BREAK
