"""User preferences with JSON persistence.

Timer durations are not here; they belong to the timer engine and are
persisted through its store.  This file holds how Sprout behaves around
the timer.

Preferences are stored at:
    ~/Library/Application Support/Sprout/settings.json

Usage::

    settings = load_settings()
    settings.sound_enabled = False
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path


logger = logging.getLogger(__name__)

# Same app-support directory as db.py
APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "Sprout"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"
LOG_DIR = APP_SUPPORT_DIR / "logs"


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── alerts ────────────────────────────────────────────────────────
    sound_enabled: bool = True
    notifications_enabled: bool = True
    do_not_disturb: bool = False

    # ── diagnostics ───────────────────────────────────────────────────
    log_level: str = "INFO"
    log_to_console: bool = False


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from disk, falling back to defaults."""
    path = path or SETTINGS_PATH
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            return Settings(**filtered)
    except (OSError, ValueError, TypeError, AttributeError):
        logger.warning("Unreadable settings at %s; using defaults", path, exc_info=True)
    return Settings()


def save_settings(settings: Settings, path: Path | None = None) -> None:
    """Write settings to disk as JSON."""
    path = path or SETTINGS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
