from __future__ import annotations

import datetime
from collections.abc import Callable
from typing import Any, Optional

import pytest

from mellow.config import DEFAULT_CONFIG, SettingsStore
from mellow.scheduler import BreakScheduler

T0 = datetime.datetime(2024, 8, 25, 13, 0, 0)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime.datetime = T0):
        self.now = start

    def __call__(self) -> datetime.datetime:
        return self.now

    def at(self, seconds: float) -> datetime.datetime:
        """Move to T0 + seconds and return the new time."""
        self.now = T0 + datetime.timedelta(seconds=seconds)
        return self.now

    def advance(self, seconds: float) -> datetime.datetime:
        self.now += datetime.timedelta(seconds=seconds)
        return self.now


class FakeTicker:
    """Tick source that only fires when the test says so."""

    def __init__(self, fail: bool = False):
        self.active = False
        self.fail = fail
        self.starts = 0
        self.stops = 0
        self.interval: Optional[float] = None
        self.callback: Optional[Callable[[], None]] = None

    def start(self, interval: float, callback: Callable[[], None]) -> None:
        if self.fail:
            raise RuntimeError("no event loop")
        self.starts += 1
        self.active = True
        self.interval = interval
        self.callback = callback

    def stop(self) -> None:
        self.stops += 1
        self.active = False

    def fire(self) -> None:
        assert self.active and self.callback
        self.callback()


class RecordingOverlay:
    def __init__(self):
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.visible: Optional[str] = None

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def show_countdown_warning(self, seconds_remaining: int) -> None:
        assert self.visible is None, f"{self.visible} still visible"
        self.visible = "warning"
        self.calls.append(("show_countdown_warning", (seconds_remaining,)))

    def show_break(self, technique, cycle_count: int, break_seconds: float,
                   break_serial: int = 0) -> None:
        assert self.visible is None, f"{self.visible} still visible"
        self.visible = "break"
        self.calls.append(
            ("show_break", (technique, cycle_count, break_seconds, break_serial)))

    def update_break(self, seconds_remaining: int, skip_hint: str) -> None:
        self.calls.append(("update_break", (seconds_remaining, skip_hint)))

    def show_skip_prompt(self) -> None:
        self.calls.append(("show_skip_prompt", ()))

    def hide_skip_prompt(self) -> None:
        self.calls.append(("hide_skip_prompt", ()))

    def hide(self) -> None:
        self.visible = None
        self.calls.append(("hide", ()))


class FakeSound:
    def __init__(self, fail: bool = False):
        self.plays = 0
        self.fail = fail

    def play_break_start_sound(self) -> None:
        self.plays += 1
        if self.fail:
            raise OSError("no audio device")


class RecordingErrors:
    def __init__(self):
        self.reports: list = []

    def report(self, error) -> None:
        self.reports.append(error)

    def kinds(self) -> list[str]:
        return [e.kind for e in self.reports]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ticker() -> FakeTicker:
    return FakeTicker()


@pytest.fixture
def overlay() -> RecordingOverlay:
    return RecordingOverlay()


@pytest.fixture
def sound() -> FakeSound:
    return FakeSound()


@pytest.fixture
def errors() -> RecordingErrors:
    return RecordingErrors()


@pytest.fixture
def settings(tmp_path) -> SettingsStore:
    config = dict(DEFAULT_CONFIG)
    return SettingsStore(config, path=str(tmp_path / "mellow_config.json"))


@pytest.fixture
def scheduler(settings, overlay, sound, errors, ticker, clock) -> BreakScheduler:
    return BreakScheduler(settings, overlay=overlay, sound=sound, errors=errors,
                          ticker=ticker, clock=clock)
