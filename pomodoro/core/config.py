from __future__ import annotations

"""Значения по умолчанию и пути к файлам приложения."""

import os
from pathlib import Path


DEFAULT_FOCUS_SEC = 25 * 60
DEFAULT_SHORT_RECOVERY_SEC = 5 * 60
DEFAULT_LONG_RECOVERY_SEC = 15 * 60

TICK_INTERVAL_MS = 1000
AUTO_START_DELAY_MS = 1000
CUE_DURATION_MS = 3000
LONG_RECOVERY_EVERY = 4

BACKGROUND_KEY = "pomodoro-background"
PRESET_BACKGROUNDS = [
    "backgrounds/default.jpeg",
    "backgrounds/preset_1.gif",
    "backgrounds/preset_2.webp",
    "backgrounds/preset_3.jpg",
    "backgrounds/preset_4.jpg",
    "backgrounds/preset_5.jpg",
]

# keyed by Phase.value
CUE_SOUNDS = {
    "focus": "sounds/timer-terminer.mp3",
    "short_recovery": "sounds/rainbow-countdown.mp3",
    "long_recovery": "sounds/microwave-timer.mp3",
}


def default_db_path() -> Path:
    """Путь к SQLite-файлу: `POMODORO_DB` или `pomodoro.db` в текущей директории."""
    override = os.environ.get("POMODORO_DB")
    if override:
        return Path(override).expanduser()
    return Path.cwd() / "pomodoro.db"


def log_level() -> str:
    return os.environ.get("POMODORO_LOG_LEVEL", "INFO").upper()
