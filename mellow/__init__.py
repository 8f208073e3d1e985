"""Mellow: a break reminder built around one scheduling state machine."""
from .errors import (CustomRuleNotConfigured, InvalidTechnique, MellowError,
                     TimerInitializationFailed)
from .scheduler import BreakOutcome, BreakScheduler, SessionState, Status
from .techniques import Custom, Pomodoro, TwentyTwentyTwenty, durations

__version__ = "1.0.0"

__all__ = [
    "BreakOutcome", "BreakScheduler", "Custom", "CustomRuleNotConfigured",
    "InvalidTechnique", "MellowError", "Pomodoro", "SessionState", "Status",
    "TimerInitializationFailed", "TwentyTwentyTwenty", "durations",
]
