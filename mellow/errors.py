"""Error kinds surfaced to the user. None of them are fatal to the process."""
from __future__ import annotations


class MellowError(Exception):
    """Base for recoverable scheduler failures."""

    kind = "error"
    message = "Something went wrong"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class InvalidTechnique(MellowError):
    kind = "invalid_technique"
    message = "Invalid or empty technique selected"


class CustomRuleNotConfigured(MellowError):
    kind = "custom_rule_not_configured"
    message = "Custom rule interval not configured"


class TimerInitializationFailed(MellowError):
    kind = "timer_initialization_failed"
    message = "Failed to initialize timer"
