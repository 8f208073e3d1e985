"""Tests for lock and idle polling."""

from __future__ import annotations

from mellow import lock
from mellow.lock import LockMonitor


class Probe:
    def __init__(self, value):
        self.value = value

    def __call__(self):
        return self.value


def test_posts_only_on_change() -> None:
    posted = []
    probe = Probe(False)
    monitor = LockMonitor(posted.append, lock_probe=probe, idle_probe=Probe(0.0))

    monitor.check()
    probe.value = True
    monitor.check()
    monitor.check()
    probe.value = False
    monitor.check()

    assert posted == ["screen_locked", "screen_unlocked"]


def test_unknown_lock_state_counts_as_unlocked() -> None:
    posted = []
    monitor = LockMonitor(posted.append, lock_probe=Probe(None))
    assert monitor.check() is False
    assert posted == []


def test_lock_detection_disabled() -> None:
    posted = []
    monitor = LockMonitor(posted.append, lock_detection=lambda: False,
                          lock_probe=Probe(True))
    assert monitor.check() is False
    assert posted == []


def test_idle_time_counts_as_lock() -> None:
    posted = []
    idle = Probe(10.0)
    monitor = LockMonitor(posted.append, idle_threshold=lambda: 300,
                          lock_probe=Probe(False), idle_probe=idle)
    monitor.check()
    idle.value = 301.0
    assert monitor.check() is True
    idle.value = 1.0
    monitor.check()
    assert posted == ["screen_locked", "screen_unlocked"]


def test_stop_ends_thread() -> None:
    monitor = LockMonitor(lambda event: None, interval=0.01,
                          lock_probe=Probe(False), idle_probe=Probe(0.0))
    monitor.start()
    monitor.stop()
    monitor._thread.join(timeout=1)
    assert not monitor._thread.is_alive()


def test_idle_seconds_zero_when_probe_missing(monkeypatch) -> None:
    def missing(*args, **kwargs):
        raise FileNotFoundError("xprintidle")

    monkeypatch.setattr(lock, "IS_WIN", False)
    monkeypatch.setattr(lock, "IS_MAC", False)
    monkeypatch.setattr(lock.subprocess, "run", missing)
    assert lock.get_idle_seconds() == 0.0


def test_mac_idle_reads_hid_idle_time(monkeypatch) -> None:
    class Done:
        stdout = '  |   "HIDIdleTime" = 42000000000\n'

    monkeypatch.setattr(lock, "IS_WIN", False)
    monkeypatch.setattr(lock, "IS_MAC", True)
    monkeypatch.setattr(lock.subprocess, "run", lambda *a, **k: Done())
    assert lock.get_idle_seconds() == 42.0
