"""
Break scheduler: the session state machine.

    Idle ──start──▶ Running ──≤10s left──▶ CountdownWarning ──0s──▶ OnBreak
                     ▲  │                     │                       │
                     │  └──pause/lock──▶ Paused ◀──pause/lock──┘       │
                     └────────────── break elapsed / skipped ─────────┘

Every input (user actions, lock notifications, timer ticks, overlay
callbacks) arrives as an event on one queue. ``process_pending`` is the
only consumer and the only code path that touches the session, so event
sources on other threads call ``post`` and nothing else.

Remaining time is always ``deadline - now``; ticks never decrement a
counter, so a missed or late tick corrects itself on the next one.
"""
from __future__ import annotations

import datetime
import logging
import math
import queue
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, NamedTuple, Optional, Protocol

from .cycles import CycleTracker
from .errors import MellowError, TimerInitializationFailed
from .skip import SkipConfirmation
from .techniques import (Custom, Pomodoro, Technique, TwentyTwentyTwenty,
                         durations, technique_from_name)

logger = logging.getLogger(__name__)

TICK_SECONDS = 0.5
WARNING_SECONDS = 10

_ZERO = datetime.timedelta(0)


class SessionState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COUNTDOWN_WARNING = "countdown_warning"
    ON_BREAK = "on_break"
    PAUSED = "paused"


class BreakOutcome(Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"


_TICKING = (SessionState.RUNNING, SessionState.COUNTDOWN_WARNING, SessionState.ON_BREAK)
_WORKING = (SessionState.RUNNING, SessionState.COUNTDOWN_WARNING)


# ─── Collaborators ────────────────────────────────────────────
class OverlayPresenter(Protocol):
    def show_countdown_warning(self, seconds_remaining: int) -> None: ...
    def show_break(self, technique: Technique, cycle_count: int, break_seconds: float,
                   break_serial: int = 0) -> None: ...
    def update_break(self, seconds_remaining: int, skip_hint: str) -> None: ...
    def show_skip_prompt(self) -> None: ...
    def hide_skip_prompt(self) -> None: ...
    def hide(self) -> None: ...


class SoundPlayer(Protocol):
    def play_break_start_sound(self) -> None: ...


class SettingsStore(Protocol):
    def custom_interval(self) -> Optional[float]: ...
    def custom_break_duration(self) -> Optional[float]: ...
    def is_overlay_enabled(self) -> bool: ...
    def is_sound_enabled(self) -> bool: ...


class ErrorSink(Protocol):
    def report(self, error: MellowError) -> None: ...


class TickSource(Protocol):
    active: bool

    def start(self, interval: float, callback: Callable[[], None]) -> None: ...
    def stop(self) -> None: ...


# ─── Session ──────────────────────────────────────────────────
@dataclass
class Session:
    technique: Optional[Technique] = None
    state: SessionState = SessionState.IDLE
    work_deadline: Optional[datetime.datetime] = None
    paused_remaining: Optional[datetime.timedelta] = None
    paused_by_system: bool = False
    break_deadline: Optional[datetime.datetime] = None
    break_seconds: float = 0
    break_serial: int = 0
    locked_during_break: bool = False
    cycles: CycleTracker = field(default_factory=CycleTracker)
    skip: SkipConfirmation = field(default_factory=SkipConfirmation)

    @property
    def cycle_count(self) -> int:
        return self.cycles.count


class Status(NamedTuple):
    """Read-only view of the session for menus, titles and icons."""
    state: SessionState
    technique: Optional[Technique]
    remaining: Optional[float]
    total: Optional[float]
    cycle_count: int
    paused_by_system: bool


EVENTS = frozenset({
    "start", "stop", "pause", "resume", "toggle_pause", "skip", "request_skip",
    "cancel_skip", "take_break_now", "screen_locked", "screen_unlocked",
    "escape_pressed", "warning_timed_out", "break_finished", "tick",
})


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
class BreakScheduler:

    def __init__(self, settings: SettingsStore,
                 overlay: Optional[OverlayPresenter] = None,
                 sound: Optional[SoundPlayer] = None,
                 errors: Optional[ErrorSink] = None,
                 ticker: Optional[TickSource] = None,
                 clock: Callable[[], datetime.datetime] = datetime.datetime.now):
        self.settings = settings
        self.session = Session()
        self._overlay = overlay
        self._sound = sound
        self._errors = errors
        self._ticker = ticker
        self._clock = clock
        self._events: queue.Queue = queue.Queue()
        self._listeners: list[Callable[[Status], None]] = []

    # ━━━ Properties ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def technique(self) -> Optional[Technique]:
        return self.session.technique

    @property
    def cycle_count(self) -> int:
        return self.session.cycle_count

    # ━━━ Event Queue ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def post(self, event: str, *args: Any) -> None:
        """Queue an event from any thread."""
        if event not in EVENTS:
            raise ValueError(f"Unknown event: {event}")
        self._events.put((event, args))

    def process_pending(self) -> int:
        """Drain the queue in order. Must only be called from one thread."""
        handled = 0
        while True:
            try:
                event, args = self._events.get_nowait()
            except queue.Empty:
                return handled
            try:
                getattr(self, event)(*args)
            except MellowError as e:
                logger.debug("%s failed: %s", event, e)
            handled += 1

    def subscribe(self, listener: Callable[[Status], None]) -> None:
        self._listeners.append(listener)

    def status(self, now: Optional[datetime.datetime] = None) -> Status:
        now = now or self._clock()
        s = self.session
        remaining = total = None
        if s.state in _WORKING and s.work_deadline is not None:
            remaining = max(0.0, (s.work_deadline - now).total_seconds())
            total = durations(s.technique).work_seconds
        elif s.state is SessionState.PAUSED and s.paused_remaining is not None:
            remaining = s.paused_remaining.total_seconds()
            total = durations(s.technique).work_seconds
        elif s.state is SessionState.ON_BREAK and s.break_deadline is not None:
            remaining = max(0.0, (s.break_deadline - now).total_seconds())
            total = s.break_seconds
        return Status(s.state, s.technique, remaining, total, s.cycle_count,
                      s.paused_by_system)

    # ━━━ Session Control ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def start(self, technique: Any) -> bool:
        """Start a technique by name or value; a running session is replaced."""
        if self.session.state is not SessionState.IDLE:
            self._reset()
        now = self._clock()
        try:
            resolved = self._resolve(technique)
            work = durations(resolved).work_seconds
            if work <= 0:
                raise TimerInitializationFailed()
        except MellowError as e:
            self._fail(e)
            raise
        s = self.session
        s.technique = resolved
        s.cycles.start(resolved)
        s.work_deadline = now + datetime.timedelta(seconds=work)
        s.state = SessionState.RUNNING
        self._arm()
        logger.info("Started %s: next break in %ds", resolved.name, work)
        self._notify(now)
        return True

    def stop(self) -> bool:
        if self.session.state is SessionState.IDLE:
            return False
        self._reset()
        logger.info("Timer stopped")
        self._notify()
        return True

    def pause(self) -> bool:
        return self._pause(system=False)

    def resume(self) -> bool:
        s = self.session
        if s.state is not SessionState.PAUSED or s.paused_remaining is None:
            logger.debug("resume ignored while %s", s.state.value)
            return False
        now = self._clock()
        s.work_deadline = now + s.paused_remaining
        s.paused_remaining = None
        s.paused_by_system = False
        s.state = SessionState.RUNNING
        self._arm()
        logger.info("Resumed")
        self._notify(now)
        return True

    def toggle_pause(self) -> bool:
        if self.session.state is SessionState.PAUSED:
            return self.resume()
        return self.pause()

    def screen_locked(self) -> bool:
        s = self.session
        if s.state is SessionState.ON_BREAK:
            # the break keeps counting; the next work interval starts paused
            if s.locked_during_break:
                return False
            s.locked_during_break = True
            logger.info("Screen locked during break")
            return True
        # a manual pause keeps its tag, so unlocking will not resume it
        return self._pause(system=True)

    def screen_unlocked(self) -> bool:
        s = self.session
        if s.state is SessionState.ON_BREAK and s.locked_during_break:
            s.locked_during_break = False
            logger.info("Screen unlocked during break")
            return True
        if s.state is not SessionState.PAUSED or not s.paused_by_system:
            logger.debug("unlock ignored while %s", s.state.value)
            return False
        return self.resume()

    def take_break_now(self) -> bool:
        if self.session.state not in _WORKING:
            return False
        self._begin_break(self._clock())
        return True

    # ━━━ Ticks ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def tick(self, now: Optional[datetime.datetime] = None) -> SessionState:
        now = now or self._clock()
        s = self.session
        if s.state is SessionState.RUNNING:
            remaining = (s.work_deadline - now).total_seconds()
            if remaining <= WARNING_SECONDS:
                self._begin_warning(remaining)
        elif s.state is SessionState.COUNTDOWN_WARNING:
            if now >= s.work_deadline:
                self._begin_break(now)
        elif s.state is SessionState.ON_BREAK:
            if now >= s.break_deadline:
                self._end_break(BreakOutcome.COMPLETED, now)
            elif self._overlay_enabled():
                left = (s.break_deadline - now).total_seconds()
                self._overlay.update_break(math.ceil(left), s.skip.hint())
        else:
            logger.debug("tick ignored while %s", s.state.value)
            return s.state
        self._notify(now)
        return s.state

    def warning_timed_out(self) -> bool:
        if self.session.state is not SessionState.COUNTDOWN_WARNING:
            return False
        self._begin_break(self._clock())
        return True

    # ━━━ Skipping ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def escape_pressed(self) -> bool:
        s = self.session
        if s.state is not SessionState.ON_BREAK:
            return False
        if s.skip.escape_pressed():
            self._end_break(BreakOutcome.SKIPPED, self._clock())
            return True
        if self._overlay_enabled():
            left = (s.break_deadline - self._clock()).total_seconds()
            self._overlay.update_break(max(0, math.ceil(left)), s.skip.hint())
        return False

    def request_skip(self) -> bool:
        s = self.session
        if s.state is not SessionState.ON_BREAK or not s.skip.open_prompt():
            return False
        if self._overlay_enabled():
            self._overlay.show_skip_prompt()
        return True

    def cancel_skip(self) -> bool:
        s = self.session
        if s.state is not SessionState.ON_BREAK or not s.skip.continue_break():
            return False
        if self._overlay_enabled():
            self._overlay.hide_skip_prompt()
        return True

    def skip(self) -> bool:
        s = self.session
        if s.state is not SessionState.ON_BREAK or not s.skip.confirm():
            return False
        self._end_break(BreakOutcome.SKIPPED, self._clock())
        return True

    def break_finished(self, outcome: Any, break_serial: Optional[int] = None) -> bool:
        """Overlay report: the break screen finished or was skipped.

        ``break_serial`` is the one passed to ``show_break``; a report for an
        earlier break is dropped.
        """
        try:
            outcome = BreakOutcome(getattr(outcome, "value", outcome))
        except ValueError:
            logger.warning("Unknown break outcome: %r", outcome)
            return False
        if self.session.state is not SessionState.ON_BREAK:
            logger.debug("Break report %s ignored while %s",
                         outcome.value, self.session.state.value)
            return False
        if break_serial is not None and break_serial != self.session.break_serial:
            logger.debug("Stale break report for break %s ignored", break_serial)
            return False
        if outcome is BreakOutcome.SKIPPED:
            return self.skip()
        self._end_break(BreakOutcome.COMPLETED, self._clock())
        return True

    # ━━━ Transitions ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def _pause(self, system: bool) -> bool:
        s = self.session
        if s.state not in _WORKING:
            logger.debug("%s ignored while %s",
                         "lock" if system else "pause", s.state.value)
            return False
        now = self._clock()
        if s.state is SessionState.COUNTDOWN_WARNING:
            self._hide_overlay()
        s.paused_remaining = max(_ZERO, s.work_deadline - now)
        s.work_deadline = None
        s.paused_by_system = system
        s.state = SessionState.PAUSED
        self._disarm()
        logger.info("Paused%s with %ds left", " (screen locked)" if system else "",
                    s.paused_remaining.total_seconds())
        self._notify(now)
        return True

    def _begin_warning(self, remaining: float) -> None:
        self.session.state = SessionState.COUNTDOWN_WARNING
        seconds = max(0, math.ceil(remaining))
        logger.info("Break in %ds", seconds)
        if self._overlay_enabled():
            self._overlay.show_countdown_warning(seconds)

    def _begin_break(self, now: datetime.datetime) -> None:
        s = self.session
        self._hide_overlay()
        s.work_deadline = None
        s.paused_remaining = None
        s.break_serial += 1
        s.locked_during_break = False
        s.skip.reset()
        s.break_seconds = durations(s.technique, s.cycle_count).break_seconds
        s.break_deadline = now + datetime.timedelta(seconds=s.break_seconds)
        s.state = SessionState.ON_BREAK
        self._arm()
        logger.info("Break started: %s, %ds", s.technique.name, s.break_seconds)
        if self._overlay_enabled():
            self._overlay.show_break(s.technique, s.cycle_count, s.break_seconds,
                                     s.break_serial)
        if self._sound is not None and self.settings.is_sound_enabled():
            try:
                self._sound.play_break_start_sound()
            except Exception as e:  # sound is optional
                logger.warning("Break sound failed: %s", e)
        self._notify(now)

    def _end_break(self, outcome: BreakOutcome, now: datetime.datetime) -> None:
        s = self.session
        self._hide_overlay()
        s.skip.reset()
        s.break_deadline = None
        s.cycles.advance(s.break_serial)
        work = durations(s.technique).work_seconds
        if s.locked_during_break:
            s.locked_during_break = False
            s.work_deadline = None
            s.paused_remaining = datetime.timedelta(seconds=work)
            s.paused_by_system = True
            s.state = SessionState.PAUSED
            self._disarm()
            logger.info("Break %s while locked, next interval paused", outcome.value)
        else:
            s.work_deadline = now + datetime.timedelta(seconds=work)
            s.state = SessionState.RUNNING
            self._arm()
            logger.info("Break %s, next in %ds", outcome.value, work)
        self._notify(now)

    def _reset(self) -> None:
        s = self.session
        if s.state in (SessionState.COUNTDOWN_WARNING, SessionState.ON_BREAK):
            self._hide_overlay()
        self._disarm()
        s.technique = None
        s.state = SessionState.IDLE
        s.work_deadline = None
        s.paused_remaining = None
        s.paused_by_system = False
        s.break_deadline = None
        s.break_seconds = 0
        s.locked_during_break = False
        s.cycles.reset()
        s.skip.reset()

    def _fail(self, error: MellowError) -> None:
        self._reset()
        logger.warning("%s", error)
        if self._errors is not None:
            self._errors.report(error)
        self._notify()

    # ━━━ Helpers ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    def _resolve(self, technique: Any) -> Technique:
        if isinstance(technique, (TwentyTwentyTwenty, Pomodoro, Custom)):
            return technique
        return technique_from_name(technique, self.settings.custom_interval(),
                                   self.settings.custom_break_duration())

    def _overlay_enabled(self) -> bool:
        return self._overlay is not None and self.settings.is_overlay_enabled()

    def _hide_overlay(self) -> None:
        if self._overlay is not None:
            self._overlay.hide()

    def _arm(self) -> None:
        if self._ticker is None or self._ticker.active:
            return
        try:
            self._ticker.start(TICK_SECONDS, self._on_tick)
        except TimerInitializationFailed as e:
            self._fail(e)
            raise
        except Exception as e:
            err = TimerInitializationFailed(f"Failed to initialize timer: {e}")
            self._fail(err)
            raise err from e

    def _disarm(self) -> None:
        if self._ticker is not None and self._ticker.active:
            self._ticker.stop()

    def _on_tick(self) -> None:
        self.post("tick")

    def _notify(self, now: Optional[datetime.datetime] = None) -> None:
        if not self._listeners:
            return
        snapshot = self.status(now)
        for listener in self._listeners:
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Status listener failed")
