"""
Screen lock and idle detection.

A daemon thread polls the platform and posts ``screen_locked`` /
``screen_unlocked`` to the scheduler queue on every change. It never
touches the session itself; duplicate signals are no-ops on the
scheduler side.
"""
from __future__ import annotations

import logging
import os
import platform
import re
import subprocess
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)

IS_MAC = platform.system() == "Darwin"
IS_WIN = platform.system() == "Windows"

LOCK_CHECK_INTERVAL = 2  # seconds

# ─── Idle Detection ───────────────────────────────────────────
HID_IDLE = re.compile(r'"HIDIdleTime"\s*=\s*(\d+)')


def _win_idle() -> float:
    import ctypes

    class LastInputInfo(ctypes.Structure):
        _fields_ = [("cbSize", ctypes.c_uint), ("dwTime", ctypes.c_uint)]

    info = LastInputInfo(ctypes.sizeof(LastInputInfo), 0)
    if not ctypes.windll.user32.GetLastInputInfo(ctypes.byref(info)):
        return 0.0
    return (ctypes.windll.kernel32.GetTickCount() - info.dwTime) / 1000.0


def _mac_idle() -> float:
    out = subprocess.run(["ioreg", "-c", "IOHIDSystem", "-d", "4"],
                         capture_output=True, text=True, timeout=2).stdout
    match = HID_IDLE.search(out)
    return int(match.group(1)) / 1e9 if match else 0.0  # nanoseconds


def _linux_idle() -> float:
    out = subprocess.run(["xprintidle"], capture_output=True, text=True, timeout=2).stdout
    return int(out.strip()) / 1000.0  # milliseconds


def get_idle_seconds() -> float:
    """Seconds since last user input. 0 if detection is unavailable."""
    probe = _win_idle if IS_WIN else _mac_idle if IS_MAC else _linux_idle
    try:
        return probe()
    except (OSError, ValueError, AttributeError, subprocess.SubprocessError) as e:
        logger.debug("Idle detection unavailable: %s", e)
        return 0.0


# ─── Lock Detection ───────────────────────────────────────────
def _win_locked() -> bool:
    import ctypes
    user32 = ctypes.windll.user32
    # OpenInputDesktop fails while the secure desktop is up
    desk = user32.OpenInputDesktop(0, False, 0x0100)  # DESKTOP_SWITCHDESKTOP
    if not desk:
        return True
    user32.CloseDesktop(desk)
    return False


def _linux_locked() -> bool:
    session = os.environ.get("XDG_SESSION_ID")
    cmd = ["loginctl", "show-session", "-p", "LockedHint", "--value"]
    if session:
        cmd.insert(2, session)
    result = subprocess.run(cmd, capture_output=True, text=True, timeout=2)
    return result.stdout.strip() == "yes"


def is_screen_locked() -> Optional[bool]:
    """True/False where the platform can tell, None where it cannot."""
    try:
        if IS_WIN:
            return _win_locked()
        if IS_MAC:
            return None
        return _linux_locked()
    except (OSError, AttributeError, subprocess.SubprocessError):
        return None


class LockMonitor:
    """Polls lock state (and optionally idle time) and posts changes."""

    def __init__(self, post: Callable[[str], None],
                 lock_detection: Callable[[], bool] = lambda: True,
                 idle_threshold: Callable[[], Optional[float]] = lambda: None,
                 interval: float = LOCK_CHECK_INTERVAL,
                 lock_probe: Callable[[], Optional[bool]] = is_screen_locked,
                 idle_probe: Callable[[], float] = get_idle_seconds):
        self._post = post
        self._lock_detection = lock_detection
        self._idle_threshold = idle_threshold
        self._interval = interval
        self._lock_probe = lock_probe
        self._idle_probe = idle_probe
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.locked = False

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="mellow-lock", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            self.check()

    def check(self) -> bool:
        """Probe once; post an event if the lock state changed."""
        locked = False
        if self._lock_detection():
            locked = bool(self._lock_probe())
        threshold = self._idle_threshold()
        if not locked and threshold:
            locked = self._idle_probe() >= threshold
        if locked != self.locked:
            self.locked = locked
            logger.info("Screen %s", "locked" if locked else "unlocked")
            self._post("screen_locked" if locked else "screen_unlocked")
        return locked
