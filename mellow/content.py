"""Text shown to the user: break screen copy and remaining-time labels."""
from __future__ import annotations

from typing import NamedTuple

from .errors import InvalidTechnique
from .scheduler import SessionState, Status
from .techniques import CYCLES_PER_LONG_BREAK, Custom, Pomodoro, Technique, TwentyTwentyTwenty

APP_NAME = "Mellow"


class BreakContent(NamedTuple):
    emoji: str
    title: str
    description: str


POMODORO_CONTENT = {
    1: BreakContent("☕", "Break Time",
                    "Take 5 minutes to recharge.\nStretch, grab a drink, or just chill for a bit!"),
    2: BreakContent("🌿", "You've Earned It!", "Relax those eyes and take a deep breath."),
    3: BreakContent("🍵", "Pause & Refresh", "Grab a snack or enjoy a quick stroll!"),
}
LONG_BREAK_CONTENT = BreakContent(
    "🎉", "Long Break!", "Great work on completing 4 sessions!\nTake 30 minutes to recharge")
EYE_REST_CONTENT = BreakContent("👀", "Quick break!", "Look 20 feet away for 20 seconds")
CUSTOM_CONTENT = BreakContent("⏰", "Break time!", "Take a moment to unwind. You've earned it!")


def break_content(technique: Technique, cycle_count: int = 0) -> BreakContent:
    if isinstance(technique, TwentyTwentyTwenty):
        return EYE_REST_CONTENT
    if isinstance(technique, Pomodoro):
        if cycle_count >= CYCLES_PER_LONG_BREAK:
            return LONG_BREAK_CONTENT
        return POMODORO_CONTENT.get(cycle_count, POMODORO_CONTENT[1])
    if isinstance(technique, Custom):
        return CUSTOM_CONTENT
    raise InvalidTechnique(f"No break content for {technique!r}")


def format_remaining(seconds: float) -> str:
    """``m:ss`` for a minute or more, ``Ns`` below that."""
    total = max(0, int(seconds))
    minutes, secs = divmod(total, 60)
    if minutes == 0:
        return f"{secs}s"
    return f"{minutes}:{secs:02d}"


def tray_title(status: Status) -> str:
    """Tooltip text: remaining time, paused marker, Pomodoro count."""
    if status.state is SessionState.IDLE or status.remaining is None:
        return APP_NAME
    text = format_remaining(status.remaining)
    if status.state is SessionState.PAUSED:
        text = f"⏸ {text}"
    elif status.state is SessionState.ON_BREAK:
        text = f"Break {text}"
    if status.cycle_count:
        text += f"  🍅 {status.cycle_count}/{CYCLES_PER_LONG_BREAK}"
    return f"{APP_NAME} {text}"
