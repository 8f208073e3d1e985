"""Settings file and the read-only settings view handed to the scheduler."""
from __future__ import annotations

import json
import logging
import os
from typing import Any, Optional

from .errors import CustomRuleNotConfigured
from .techniques import canonical_name

logger = logging.getLogger(__name__)

# ─── Config ───────────────────────────────────────────────────
CONFIG_FILE = os.path.join(os.path.expanduser("~"), "mellow_config.json")

DEFAULT_IDLE_THRESHOLD = 300    # 5 minutes of inactivity counts as locked
MIN_IDLE_THRESHOLD = 30

DEFAULT_CONFIG: dict[str, Any] = {
    "show_overlay": True,             # Show the warning clock and break screen
    "play_sound": True,               # Play a sound when a break starts
    "custom_interval": None,          # Custom rule: seconds between breaks
    "custom_break_duration": None,    # Custom rule: break length in seconds
    "custom_sound_enabled": False,
    "custom_sound_path": "",
    "lock_detection": True,           # Pause while the screen is locked
    "idle_detection": False,          # Treat long inactivity as a lock
    "idle_threshold": DEFAULT_IDLE_THRESHOLD,
    "multi_monitor_overlay": True,    # Dim secondary monitors during a break
    "autostart_technique": None,      # Technique started at launch
}


def _positive_number(value: Any) -> bool:
    return (isinstance(value, (int, float)) and not isinstance(value, bool)
            and value > 0)


def load_config(path: str = CONFIG_FILE) -> dict[str, Any]:
    """Load config from file, falling back to defaults for missing/invalid values."""
    cfg = json.loads(json.dumps(DEFAULT_CONFIG))
    if os.path.exists(path):
        try:
            with open(path, encoding="utf-8") as f:
                user_cfg = json.load(f)
            if isinstance(user_cfg, dict):
                cfg.update(user_cfg)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Config load error: %s. Using defaults.", e)
    return validate_config(cfg)


def validate_config(cfg: dict[str, Any]) -> dict[str, Any]:
    for key in ("show_overlay", "play_sound", "custom_sound_enabled",
                "lock_detection", "idle_detection", "multi_monitor_overlay"):
        if not isinstance(cfg.get(key), bool):
            cfg[key] = DEFAULT_CONFIG[key]

    # Custom rule is either fully positive or not configured at all
    for key in ("custom_interval", "custom_break_duration"):
        if not _positive_number(cfg.get(key)):
            cfg[key] = None

    if not _positive_number(cfg.get("idle_threshold")) or cfg["idle_threshold"] < MIN_IDLE_THRESHOLD:
        cfg["idle_threshold"] = DEFAULT_IDLE_THRESHOLD
    if not isinstance(cfg.get("custom_sound_path"), str):
        cfg["custom_sound_path"] = ""
    # aliases such as "pomodoro" are stored under the display name
    cfg["autostart_technique"] = canonical_name(cfg.get("autostart_technique"))
    return cfg


def save_config(cfg: dict[str, Any], path: str = CONFIG_FILE) -> None:
    """Save config to file."""
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(cfg, f, indent=2)
    except OSError as e:
        logger.warning("Config save error: %s", e)


class SettingsStore:
    """Settings as the scheduler sees them. Values are read on every call."""

    def __init__(self, config: Optional[dict[str, Any]] = None, path: str = CONFIG_FILE):
        self.path = path
        self.config = config if config is not None else load_config(path)

    def custom_interval(self) -> Optional[float]:
        return self.config.get("custom_interval")

    def custom_break_duration(self) -> Optional[float]:
        return self.config.get("custom_break_duration")

    def is_overlay_enabled(self) -> bool:
        return bool(self.config.get("show_overlay", True))

    def is_sound_enabled(self) -> bool:
        return bool(self.config.get("play_sound", True))

    def custom_sound_path(self) -> Optional[str]:
        if not self.config.get("custom_sound_enabled"):
            return None
        return self.config.get("custom_sound_path") or None

    def set_custom_rule(self, interval: float, break_duration: float) -> None:
        if not (_positive_number(interval) and _positive_number(break_duration)):
            raise CustomRuleNotConfigured()
        self.config["custom_interval"] = interval
        self.config["custom_break_duration"] = break_duration
        self.save()

    def toggle(self, key: str) -> bool:
        self.set(key, not self.config.get(key, DEFAULT_CONFIG.get(key)))
        return self.config[key]

    def set(self, key: str, value: Any) -> None:
        self.config[key] = value
        self.config = validate_config(self.config)
        self.save()

    def save(self) -> None:
        save_config(self.config, self.path)
