"""Tests for the settings file and SettingsStore."""

from __future__ import annotations

import json

import pytest

from mellow.config import (
    DEFAULT_CONFIG,
    DEFAULT_IDLE_THRESHOLD,
    SettingsStore,
    load_config,
    save_config,
    validate_config,
)
from mellow.errors import CustomRuleNotConfigured


def test_missing_file_gives_defaults(tmp_path) -> None:
    assert load_config(str(tmp_path / "nope.json")) == DEFAULT_CONFIG


def test_corrupt_file_gives_defaults(tmp_path) -> None:
    path = tmp_path / "mellow_config.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_config(str(path)) == DEFAULT_CONFIG


def test_user_values_override_defaults(tmp_path) -> None:
    path = tmp_path / "mellow_config.json"
    path.write_text(json.dumps({"play_sound": False, "custom_interval": 900}), encoding="utf-8")
    cfg = load_config(str(path))
    assert cfg["play_sound"] is False
    assert cfg["custom_interval"] == 900
    assert cfg["show_overlay"] is True


def test_validate_repairs_bad_values() -> None:
    cfg = validate_config({
        "show_overlay": "yes",
        "custom_interval": -10,
        "custom_break_duration": True,
        "idle_threshold": 5,
        "custom_sound_path": 42,
        "autostart_technique": "Nap",
    })
    assert cfg["show_overlay"] is True
    assert cfg["custom_interval"] is None
    assert cfg["custom_break_duration"] is None
    assert cfg["idle_threshold"] == DEFAULT_IDLE_THRESHOLD
    assert cfg["custom_sound_path"] == ""
    assert cfg["autostart_technique"] is None


def test_validate_keeps_known_autostart() -> None:
    cfg = validate_config(dict(DEFAULT_CONFIG, autostart_technique="Pomodoro Technique"))
    assert cfg["autostart_technique"] == "Pomodoro Technique"


def test_save_then_load(tmp_path) -> None:
    path = str(tmp_path / "mellow_config.json")
    save_config(dict(DEFAULT_CONFIG, idle_threshold=120), path)
    assert load_config(path)["idle_threshold"] == 120


def test_settings_store_views(settings) -> None:
    assert settings.custom_interval() is None
    assert settings.is_overlay_enabled() is True
    assert settings.is_sound_enabled() is True
    assert settings.custom_sound_path() is None

    settings.config.update(custom_sound_enabled=True, custom_sound_path="/tmp/ding.wav")
    assert settings.custom_sound_path() == "/tmp/ding.wav"


def test_set_custom_rule_persists(settings) -> None:
    settings.set_custom_rule(600, 30)
    assert (settings.custom_interval(), settings.custom_break_duration()) == (600, 30)
    assert load_config(settings.path)["custom_interval"] == 600


@pytest.mark.parametrize("interval, duration", [(0, 30), (600, None), (-1, -1)])
def test_set_custom_rule_rejects_non_positive(settings, interval, duration) -> None:
    with pytest.raises(CustomRuleNotConfigured):
        settings.set_custom_rule(interval, duration)
    assert settings.custom_interval() is None


def test_set_validates_and_saves(settings) -> None:
    settings.set("play_sound", "loud")
    assert settings.is_sound_enabled() is True
    settings.set("play_sound", False)
    assert load_config(settings.path)["play_sound"] is False


@pytest.mark.parametrize("value, expected", [
    ("pomodoro", "Pomodoro Technique"),
    (" 20-20-20 ", "20-20-20 Rule"),
    ("Custom", "Custom"),
    ("Nap", None),
    (7, None),
])
def test_autostart_accepts_aliases(value, expected) -> None:
    cfg = validate_config(dict(DEFAULT_CONFIG, autostart_technique=value))
    assert cfg["autostart_technique"] == expected


def test_toggle_flips_and_saves(settings) -> None:
    assert settings.toggle("show_overlay") is False
    assert settings.is_overlay_enabled() is False
    assert load_config(settings.path)["show_overlay"] is False
    assert settings.toggle("show_overlay") is True
