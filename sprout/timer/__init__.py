"""Timer package."""

from .clock import Clock, SystemClock, TICK_INTERVAL_MS
from .engine import TimerEngine, SETTINGS_KEY, SESSION_KEY, SPROUTS_KEY
from .state import (
    TimerMode,
    TimerSettings,
    Session,
    IDLE_SESSION,
    recompute_remaining,
    format_clock,
)

__all__ = [
    "Clock",
    "SystemClock",
    "TICK_INTERVAL_MS",
    "TimerEngine",
    "SETTINGS_KEY",
    "SESSION_KEY",
    "SPROUTS_KEY",
    "TimerMode",
    "TimerSettings",
    "Session",
    "IDLE_SESSION",
    "recompute_remaining",
    "format_clock",
]
