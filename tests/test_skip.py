"""Tests for break skip confirmation."""

from __future__ import annotations

from mellow.skip import SkipConfirmation


def test_third_escape_confirms_and_resets_counter() -> None:
    skip = SkipConfirmation()
    assert skip.escape_pressed() is False
    assert skip.escape_pressed() is False
    assert skip.escape_pressed() is True
    assert skip.escapes == 0


def test_only_one_signal_per_break() -> None:
    skip = SkipConfirmation()
    for _ in range(3):
        skip.escape_pressed()
    assert [skip.escape_pressed() for _ in range(3)] == [False, False, False]
    assert skip.confirm() is False


def test_reset_clears_partial_escapes() -> None:
    skip = SkipConfirmation()
    skip.escape_pressed()
    skip.escape_pressed()
    skip.reset()
    assert skip.escapes == 0
    assert skip.escape_pressed() is False


def test_prompt_continue_keeps_escape_count() -> None:
    skip = SkipConfirmation()
    skip.escape_pressed()
    assert skip.open_prompt() is True
    assert skip.open_prompt() is False
    assert skip.continue_break() is True
    assert skip.escapes == 1
    assert skip.prompt_open is False


def test_confirm_ignores_escape_count() -> None:
    skip = SkipConfirmation()
    skip.open_prompt()
    assert skip.confirm() is True
    assert skip.prompt_open is False


def test_hint_counts_down() -> None:
    skip = SkipConfirmation()
    assert skip.hint() == "Press esc 3 times to skip"
    skip.escape_pressed()
    assert skip.hint() == "Press esc 2 more times to skip"
    skip.escape_pressed()
    assert skip.hint() == "Press esc 1 more time to skip"
