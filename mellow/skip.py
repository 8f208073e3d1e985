"""Skip confirmation for an active break.

Three escape presses skip the break. The Skip button opens a prompt
instead; "Continue Break" closes it and "Skip" confirms straight away.
At most one skip is signalled per break.
"""
from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

ESCAPES_TO_SKIP = 3


class SkipConfirmation:

    def __init__(self, threshold: int = ESCAPES_TO_SKIP):
        self.threshold = threshold
        self.escapes = 0
        self.prompt_open = False
        self.signalled = False

    def reset(self) -> None:
        """Called whenever a break starts or ends."""
        self.escapes = 0
        self.prompt_open = False
        self.signalled = False

    @property
    def escapes_left(self) -> int:
        return self.threshold - self.escapes

    def escape_pressed(self) -> bool:
        """Count an escape press; True when this press confirms the skip."""
        if self.signalled:
            return False
        self.escapes += 1
        if self.escapes >= self.threshold:
            self.escapes = 0
            return self._signal()
        logger.debug("Escape %d/%d", self.escapes, self.threshold)
        return False

    def open_prompt(self) -> bool:
        if self.signalled or self.prompt_open:
            return False
        self.prompt_open = True
        return True

    def continue_break(self) -> bool:
        # escape count is left as it was
        was_open, self.prompt_open = self.prompt_open, False
        return was_open

    def confirm(self) -> bool:
        """The prompt's Skip button; ignores the escape count."""
        if self.signalled:
            return False
        return self._signal()

    def _signal(self) -> bool:
        self.signalled = True
        self.prompt_open = False
        return True

    def hint(self) -> str:
        if 0 < self.escapes < self.threshold:
            n = self.escapes_left
            return f"Press esc {n} more time{'' if n == 1 else 's'} to skip"
        return f"Press esc {self.threshold} times to skip"
