"""Timer data model for Sprout.

Three pieces of state are persisted independently:

TimerSettings   configured focus / break lengths (minutes, clamped)
Session         the current run state (mode, remaining, timestamps)
sprout count    plain integer, owned by the engine

Remaining time is never tracked by counting ticks.  It is always derived
from the wall clock with :func:`recompute_remaining`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, asdict, replace
from enum import Enum


logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class TimerMode(Enum):
    IDLE = "idle"
    FOCUS = "focus"
    BREAK = "break"


# ── constants ─────────────────────────────────────────────────────────────

FOCUS_MIN, FOCUS_MAX = 5, 60   # minutes
BREAK_MIN, BREAK_MAX = 5, 30
INCREMENT = 5

DEFAULT_FOCUS_MINUTES = 20
DEFAULT_BREAK_MINUTES = 5


# ── helpers ───────────────────────────────────────────────────────────────


def snap_minutes(value, lower: int, upper: int, step: int = INCREMENT) -> int:
    """Round *value* to the nearest *step* and clamp it into [lower, upper].

    Halves round up (12.5 → 15), unlike Python's banker's ``round``.
    Raises ``TypeError`` / ``ValueError`` for non-numeric input.
    """
    number = float(value)
    if math.isnan(number):
        raise ValueError("duration is NaN")
    if math.isinf(number):
        return upper if number > 0 else lower
    snapped = int(math.floor(number / step + 0.5)) * step
    return max(lower, min(upper, snapped))


def recompute_remaining(now_ms: int, start_ms: int, expected_seconds: int) -> int:
    """Seconds left in a run-segment, from absolute wall-clock time.

    ``max(0, expected - floor((now - start) / 1000))``.  A clock that
    jumped backwards never yields more than *expected_seconds*.
    """
    elapsed = max(0, (now_ms - start_ms) // 1000)
    return max(0, expected_seconds - elapsed)


def format_clock(seconds: int) -> str:
    """``MM:SS`` with zero padding, e.g. ``format_clock(65) == "01:05"``."""
    m, s = divmod(max(0, int(seconds)), 60)
    return f"{m:02d}:{s:02d}"


# ── settings ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TimerSettings:
    """Focus and break lengths in minutes.  Always within bounds."""

    focus_minutes: int = DEFAULT_FOCUS_MINUTES
    break_minutes: int = DEFAULT_BREAK_MINUTES

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "focus_minutes",
            snap_minutes(self.focus_minutes, FOCUS_MIN, FOCUS_MAX),
        )
        object.__setattr__(
            self, "break_minutes",
            snap_minutes(self.break_minutes, BREAK_MIN, BREAK_MAX),
        )

    def seconds_for(self, mode: TimerMode) -> int:
        if mode == TimerMode.FOCUS:
            return self.focus_minutes * 60
        if mode == TimerMode.BREAK:
            return self.break_minutes * 60
        return 0

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data) -> TimerSettings:
        """Build from a stored record, falling back to defaults per field."""
        if not isinstance(data, dict):
            return cls()
        values = {}
        for name, default in (
            ("focus_minutes", DEFAULT_FOCUS_MINUTES),
            ("break_minutes", DEFAULT_BREAK_MINUTES),
        ):
            raw = data.get(name, default)
            try:
                finite = math.isfinite(float(raw))
            except (TypeError, ValueError):
                finite = False
            if not finite:
                logger.warning("Ignoring stored %s=%r", name, raw)
                raw = default
            values[name] = raw
        return cls(**values)


# ── session ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Session:
    """Snapshot of the current run.

    ``start_timestamp`` and ``segment_seconds`` describe the current
    run-segment (epoch ms when it began, and the seconds it was meant to
    last).  Both are set only while running.
    """

    mode: TimerMode = TimerMode.IDLE
    time_remaining: int = 0
    is_running: bool = False
    is_paused: bool = False
    start_timestamp: int | None = None
    segment_seconds: int | None = None

    @property
    def is_idle(self) -> bool:
        return self.mode == TimerMode.IDLE

    def with_remaining(self, seconds: int) -> Session:
        return replace(self, time_remaining=max(0, int(seconds)))

    def to_dict(self) -> dict:
        data = asdict(self)
        data["mode"] = self.mode.value
        return data

    @classmethod
    def from_dict(cls, data) -> Session:
        """Rebuild from a stored record, repairing broken invariants.

        Unknown modes become idle, a running record without a timestamp
        becomes paused, and negative remaining time becomes 0.
        """
        if not isinstance(data, dict):
            return IDLE_SESSION
        try:
            mode = TimerMode(data.get("mode", "idle"))
        except ValueError:
            logger.warning("Unknown stored mode %r; resetting to idle", data.get("mode"))
            return IDLE_SESSION
        if mode == TimerMode.IDLE:
            return IDLE_SESSION

        remaining = _as_int(data.get("time_remaining"), 0)
        start = _as_int(data.get("start_timestamp"), None)
        segment = _as_int(data.get("segment_seconds"), None)
        running = bool(data.get("is_running"))

        if running and start is not None:
            return cls(
                mode=mode,
                time_remaining=max(0, remaining),
                is_running=True,
                start_timestamp=start,
                segment_seconds=segment if segment is not None and segment >= 0 else None,
            )
        if running:
            logger.warning("Stored %s session was running without a timestamp", mode.value)
        return cls(mode=mode, time_remaining=max(0, remaining), is_paused=True)


IDLE_SESSION = Session()


def _as_int(value, default):
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default
