"""
Break techniques and the duration policy.

A technique is one of three immutable variants. The duration policy maps
(technique, cycle count) to the work interval and break length; it reads
nothing but its arguments.

  20-20-20     every 20 min, look 20 feet away for 20 sec
  Pomodoro     25 min work, 5 min break, 30 min break every 4th cycle
  Custom       user-configured interval and break length
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NamedTuple, Optional, Union

from .errors import CustomRuleNotConfigured, InvalidTechnique

# ─── Named Constants ─────────────────────────────────────────
EYE_REST_INTERVAL = 1200        # 20 minutes
EYE_REST_DURATION = 20
POMODORO_INTERVAL = 1500        # 25 minutes
SHORT_BREAK_DURATION = 300      # 5 minutes
LONG_BREAK_DURATION = 1800      # 30 minutes
CYCLES_PER_LONG_BREAK = 4


# ─── Techniques ───────────────────────────────────────────────
@dataclass(frozen=True)
class TwentyTwentyTwenty:
    name = "20-20-20 Rule"


@dataclass(frozen=True)
class Pomodoro:
    name = "Pomodoro Technique"


@dataclass(frozen=True)
class Custom:
    interval: float
    break_duration: float
    name = "Custom"

    def __post_init__(self):
        for value in (self.interval, self.break_duration):
            if not _positive(value):
                raise CustomRuleNotConfigured()


Technique = Union[TwentyTwentyTwenty, Pomodoro, Custom]

TECHNIQUE_NAMES = (TwentyTwentyTwenty.name, Pomodoro.name, Custom.name)

_ALIASES = {
    "20-20-20 rule": TwentyTwentyTwenty.name,
    "20-20-20": TwentyTwentyTwenty.name,
    "pomodoro technique": Pomodoro.name,
    "pomodoro": Pomodoro.name,
    "custom": Custom.name,
}


def _positive(value: Any) -> bool:
    return (isinstance(value, (int, float)) and not isinstance(value, bool)
            and value > 0)


def canonical_name(name: Optional[str]) -> Optional[str]:
    """Display name for a name or alias, None if it is not a technique."""
    return _ALIASES.get(str(name or "").strip().lower())


def technique_from_name(name: Optional[str], custom_interval: Any = None,
                        custom_break_duration: Any = None) -> Technique:
    """Resolve a display name (or alias) to a technique.

    Custom takes its interval and break length from the caller, normally the
    settings store, and fails unless both are positive.
    """
    key = canonical_name(name)
    if key is None:
        raise InvalidTechnique(f"Unknown technique: {name!r}" if name else None)
    if key == TwentyTwentyTwenty.name:
        return TwentyTwentyTwenty()
    if key == Pomodoro.name:
        return Pomodoro()
    return Custom(custom_interval, custom_break_duration)


def is_pomodoro(technique: Optional[Technique]) -> bool:
    return isinstance(technique, Pomodoro)


# ─── Duration Policy ──────────────────────────────────────────
class Durations(NamedTuple):
    work_seconds: float
    break_seconds: float


def durations(technique: Technique, cycle_count: int = 0) -> Durations:
    """Work interval and break length for a technique at a given cycle."""
    if isinstance(technique, TwentyTwentyTwenty):
        return Durations(EYE_REST_INTERVAL, EYE_REST_DURATION)
    if isinstance(technique, Pomodoro):
        if cycle_count >= CYCLES_PER_LONG_BREAK:
            return Durations(POMODORO_INTERVAL, LONG_BREAK_DURATION)
        return Durations(POMODORO_INTERVAL, SHORT_BREAK_DURATION)
    if isinstance(technique, Custom):
        return Durations(technique.interval, technique.break_duration)
    raise InvalidTechnique(f"Unknown technique: {technique!r}")


def work_seconds(technique: Technique) -> float:
    return durations(technique).work_seconds


def break_seconds(technique: Technique, cycle_count: int = 0) -> float:
    return durations(technique, cycle_count).break_seconds
