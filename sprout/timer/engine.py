"""Session timer engine for Sprout.

States
------
IDLE            Nothing running.  ``time_remaining`` is 0.
FOCUS/BREAK     Counting down (``is_running``) or frozen (``is_paused``).

Transitions
-----------
IDLE → FOCUS running                    (start)
IDLE → BREAK running                    (start_break)
paused → same mode running              (start, i.e. resume)
running → same mode paused              (pause)
running → IDLE + session_completed      (remaining reaches 0)
Any → IDLE                              (reset, never completes)

Drift correction
----------------
The 1-second tick does not decrement anything.  Every tick, and every
call to :meth:`TimerEngine.recover`, recomputes remaining time from the
wall clock and the start of the current run-segment.  Throttled timers,
backgrounding and device sleep therefore cost no accuracy, and a
restarted process picks up exactly where the persisted session says.
"""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject, pyqtSignal

from ..database.store import KeyValueStore
from .clock import Clock, Ticker, TICK_INTERVAL_MS
from .state import (
    BREAK_MAX,
    BREAK_MIN,
    FOCUS_MAX,
    FOCUS_MIN,
    IDLE_SESSION,
    Session,
    TimerMode,
    TimerSettings,
    recompute_remaining,
    snap_minutes,
)


logger = logging.getLogger(__name__)


# ── store keys ────────────────────────────────────────────────────────────

SETTINGS_KEY = "sprout-timer-settings"
SESSION_KEY = "sprout-timer-session"
SPROUTS_KEY = "sprout-timer-sprouts"


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Focus/break countdown with persisted, drift-corrected state.

    The engine is constructed with its collaborators injected: a
    key/value *store* and a *clock*.  It loads whatever was persisted but
    does not reconcile it; call :meth:`recover` once listeners are
    connected (and again whenever the host regains observation).

    Signals
    -------
    tick(remaining_seconds: int)
        Emitted on every reconciliation while running.
    state_changed(session: Session)
        Emitted on every transition.
    session_completed(mode: TimerMode)
        Emitted exactly once per interval that elapses naturally.
        Never emitted for :meth:`reset`.
    sprouts_changed(count: int)
    settings_changed(settings: TimerSettings)
    """

    tick = pyqtSignal(int)
    state_changed = pyqtSignal(object)
    session_completed = pyqtSignal(object)
    sprouts_changed = pyqtSignal(int)
    settings_changed = pyqtSignal(object)

    def __init__(
        self,
        store: KeyValueStore,
        clock: Clock,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._store = store
        self._clock = clock

        # ── persisted state ───────────────────────────────────────────
        self._settings = TimerSettings.from_dict(self._load(SETTINGS_KEY))
        self._session = Session.from_dict(self._load(SESSION_KEY))
        self._sprouts = _load_count(self._load(SPROUTS_KEY, 0))

        # ── current run-segment (in memory only) ─────────────────────
        # None until start/resume, or until recovery rebuilds it from
        # the persisted session after a restart.
        self._segment_start: int | None = None
        self._segment_seconds: int | None = None

        self._ticker: Ticker | None = None

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def session(self) -> Session:
        return self._session

    @property
    def settings(self) -> TimerSettings:
        return self._settings

    @property
    def sprouts(self) -> int:
        """Completed focus intervals, ever."""
        return self._sprouts

    @property
    def mode(self) -> TimerMode:
        return self._session.mode

    @property
    def remaining(self) -> int:
        """Seconds left, as of the last reconciliation."""
        return self._session.time_remaining

    @property
    def is_running(self) -> bool:
        return self._session.is_running

    @property
    def is_paused(self) -> bool:
        return self._session.is_paused

    @property
    def is_ticking(self) -> bool:
        return self._ticker is not None

    @property
    def total_duration(self) -> int:
        """Full length of the current mode's interval (0 when idle)."""
        return self._settings.seconds_for(self._session.mode)

    @property
    def percent_complete(self) -> float:
        """0.0 → 1.0 progress through the current interval."""
        total = self.total_duration
        if total <= 0:
            return 0.0
        elapsed = total - self._session.time_remaining
        return max(0.0, min(1.0, elapsed / total))

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Start a focus interval from IDLE, or resume a paused one.

        No-op while already running.
        """
        session = self._session
        if session.is_running:
            return
        if session.is_idle:
            self._begin(TimerMode.FOCUS, self._settings.seconds_for(TimerMode.FOCUS))
        elif session.is_paused:
            self._begin(session.mode, session.time_remaining)

    def start_break(self) -> None:
        """Start a break interval.  Only valid from IDLE."""
        if not self._session.is_idle:
            return
        self._begin(TimerMode.BREAK, self._settings.seconds_for(TimerMode.BREAK))

    def pause(self) -> None:
        """Freeze the countdown.  No-op unless running."""
        if not self._session.is_running:
            return
        # Bring remaining up to date first; the interval may already be over.
        if self._reconcile():
            return
        session = self._session
        self._stop_segment()
        self._set_session(Session(
            mode=session.mode,
            time_remaining=session.time_remaining,
            is_paused=True,
        ))

    def reset(self) -> None:
        """Abandon the current interval and return to IDLE (no completion)."""
        self._stop_segment()
        if self._session == IDLE_SESSION:
            return
        self._set_session(IDLE_SESSION)

    def update_settings(
        self,
        focus_minutes: int | None = None,
        break_minutes: int | None = None,
    ) -> bool:
        """Change durations, clamped to bounds and snapped to 5 minutes.

        Refused (returns False, nothing changes) while an interval is
        running or paused.  Non-numeric values leave that field as is.
        """
        if not self._session.is_idle:
            logger.debug("Settings change refused: %s in progress", self._session.mode.value)
            return False

        focus = self._settings.focus_minutes
        brk = self._settings.break_minutes
        if focus_minutes is not None:
            focus = _snap_or_keep(focus_minutes, focus, FOCUS_MIN, FOCUS_MAX, "focus")
        if break_minutes is not None:
            brk = _snap_or_keep(break_minutes, brk, BREAK_MIN, BREAK_MAX, "break")

        updated = TimerSettings(focus_minutes=focus, break_minutes=brk)
        if updated != self._settings:
            self._settings = updated
            self._save(SETTINGS_KEY, updated.to_dict())
            self.settings_changed.emit(updated)
        return True

    def add_sprout(self) -> int:
        """Count one more completed focus interval.  Returns the new total."""
        self._sprouts += 1
        self._save(SPROUTS_KEY, self._sprouts)
        self.sprouts_changed.emit(self._sprouts)
        return self._sprouts

    def recover(self) -> None:
        """Reconcile against the wall clock after a gap in observation.

        Call on startup and whenever the host resumes (window activated,
        device woken).  If the interval elapsed in the meantime the
        completion transition happens here, synchronously.  Otherwise the
        tick is (re-)armed.  Safe to call any number of times.
        """
        if not self._session.is_running:
            return
        if self._reconcile():
            return
        self._arm_tick()

    def shutdown(self) -> None:
        """Release the tick.  Persisted state is left as last written."""
        self._disarm_tick()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — timer mechanics
    # ══════════════════════════════════════════════════════════════════

    def _begin(self, mode: TimerMode, seconds: int) -> None:
        now = self._clock.now_ms()
        self._segment_start = now
        self._segment_seconds = seconds
        self._set_session(Session(
            mode=mode,
            time_remaining=seconds,
            is_running=True,
            start_timestamp=now,
            segment_seconds=seconds,
        ))
        if seconds <= 0:
            self._complete()
            return
        self._arm_tick()
        self.tick.emit(seconds)

    def _on_tick(self) -> None:
        if not self._session.is_running:
            self._disarm_tick()
            return
        self._reconcile()

    def _reconcile(self) -> bool:
        """Recompute remaining time; complete if it ran out.

        Returns True when this call performed the completion.
        """
        session = self._session
        if not session.is_running:
            return False
        self._restore_segment()

        remaining = recompute_remaining(
            self._clock.now_ms(), self._segment_start, self._segment_seconds,
        )
        if remaining <= 0:
            self._complete()
            return True
        if remaining != session.time_remaining:
            self._session = session.with_remaining(remaining)
        self.tick.emit(remaining)
        return False

    def _restore_segment(self) -> None:
        """Rebuild the in-memory segment from the persisted session.

        Only needed after a restart.  Older records carry no
        ``segment_seconds``; the full interval for the mode is used then.
        """
        if self._segment_start is not None:
            return
        session = self._session
        self._segment_start = session.start_timestamp
        if session.segment_seconds is not None:
            self._segment_seconds = session.segment_seconds
        else:
            self._segment_seconds = self._settings.seconds_for(session.mode)
        logger.debug(
            "Restored %s segment: started %s, %ss long",
            session.mode.value, self._segment_start, self._segment_seconds,
        )

    def _complete(self) -> None:
        session = self._session
        if not session.is_running:
            return
        finished = session.mode

        # Leave the running state before anyone hears about it, so a
        # re-entrant tick or recovery sees IDLE and does nothing.
        self._stop_segment()
        self._set_session(IDLE_SESSION)

        logger.info("%s interval complete", finished.value)
        self.session_completed.emit(finished)

    def _stop_segment(self) -> None:
        self._disarm_tick()
        self._segment_start = None
        self._segment_seconds = None

    def _arm_tick(self) -> None:
        if self._ticker is None:
            self._ticker = self._clock.start_ticker(TICK_INTERVAL_MS, self._on_tick)

    def _disarm_tick(self) -> None:
        if self._ticker is not None:
            self._ticker.stop()
            self._ticker = None

    def _set_session(self, session: Session) -> None:
        self._session = session
        self._save(SESSION_KEY, session.to_dict())
        logger.debug(
            "Session → %s (running=%s, paused=%s, remaining=%s)",
            session.mode.value, session.is_running, session.is_paused,
            session.time_remaining,
        )
        self.state_changed.emit(session)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — persistence
    # ══════════════════════════════════════════════════════════════════

    def _load(self, key: str, default=None):
        try:
            return self._store.get(key, default)
        except Exception:
            logger.exception("Could not read %s; using defaults", key)
            return default

    def _save(self, key: str, value) -> None:
        try:
            self._store.set(key, value)
        except Exception:
            logger.exception("Could not persist %s", key)


def _snap_or_keep(value, current: int, lower: int, upper: int, label: str) -> int:
    try:
        return snap_minutes(value, lower, upper)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric %s duration %r", label, value)
        return current


def _load_count(value) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError, OverflowError):
        logger.warning("Ignoring stored sprout count %r", value)
        return 0
