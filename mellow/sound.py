"""Break start sound. Best effort: every failure is logged and dropped."""
from __future__ import annotations

import logging
import os
import platform
import subprocess
from typing import Callable, Optional

logger = logging.getLogger(__name__)

IS_MAC = platform.system() == "Darwin"
IS_WIN = platform.system() == "Windows"

MAC_SOUND = "/System/Library/Sounds/Glass.aiff"
LINUX_SOUNDS = [
    ["paplay", "/usr/share/sounds/freedesktop/stereo/complete.oga"],
    ["paplay", "/usr/share/sounds/freedesktop/stereo/message.oga"],
    ["aplay", "-q", "/usr/share/sounds/sound-icons/prompt.wav"],
]
# players for a custom file; paplay/aplay last since they only take wav/ogg
LINUX_PLAYERS = [
    ["mpv", "--no-terminal", "--no-video"],
    ["ffplay", "-nodisp", "-autoexit", "-loglevel", "quiet"],
    ["paplay"],
    ["aplay", "-q"],
]


def _popen_first(commands: list[list[str]]) -> bool:
    """Start the first command whose program exists."""
    for cmd in commands:
        try:
            subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
            return True
        except FileNotFoundError:
            continue
    return False


def _play_windows(path: Optional[str]) -> None:
    import winsound
    if path and path.lower().endswith(".wav"):
        winsound.PlaySound(path, winsound.SND_FILENAME | winsound.SND_ASYNC)
    else:
        winsound.PlaySound("SystemExclamation", winsound.SND_ALIAS | winsound.SND_ASYNC)


class SoundPlayer:
    """Plays the break start sound, or the custom sound file when one is set."""

    def __init__(self, custom_path: Callable[[], Optional[str]] = lambda: None):
        self._custom_path = custom_path

    def play_break_start_sound(self) -> None:
        path = self._custom_path()
        if path and not os.path.exists(path):
            logger.debug("Custom sound %s not found, using default", path)
            path = None
        try:
            if IS_WIN:
                _play_windows(path)
            elif IS_MAC:
                _popen_first([["afplay", path or MAC_SOUND]])
            else:
                played = bool(path) and _popen_first([cmd + [path] for cmd in LINUX_PLAYERS])
                if not played and not _popen_first(LINUX_SOUNDS):
                    logger.debug("No audio player found")
        except Exception as e:
            logger.debug("Sound failed: %s", e)
