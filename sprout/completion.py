"""What happens when an interval finishes.

The engine only says "focus ended" or "break ended".  This handler turns
that into a sprout, a sound and a notification.  All three are best
effort: a broken speaker or a blocked notification is logged and
forgotten, never pushed back into the timer.
"""

from __future__ import annotations

import logging
from typing import Callable

from .settings import Settings
from .timer.engine import TimerEngine
from .timer.state import TimerMode


logger = logging.getLogger(__name__)

MESSAGES: dict[TimerMode, tuple[str, str]] = {
    TimerMode.FOCUS: (
        "Focus Session Complete!",
        "Great work! You earned a sprout \N{SEEDLING}. Take a break?",
    ),
    TimerMode.BREAK: (
        "Break Complete!",
        "Feeling refreshed? Start another focus session!",
    ),
}


class CompletionHandler:
    """Subscribes to ``engine.session_completed``.

    *alert* plays the completion sound; *notify(title, body)* shows a
    system notification.  Either may be None.
    """

    def __init__(
        self,
        engine: TimerEngine,
        *,
        alert: Callable[[], None] | None = None,
        notify: Callable[[str, str], None] | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._engine = engine
        self._alert = alert
        self._notify = notify
        self.settings = settings or Settings()
        engine.session_completed.connect(self.handle)

    def handle(self, mode: TimerMode) -> None:
        if mode not in MESSAGES:
            return
        if mode == TimerMode.FOCUS:
            self._attempt("add sprout", self._engine.add_sprout)
        if self._sound_allowed():
            self._attempt("play completion sound", self._alert)
        if self._notifications_allowed():
            title, body = MESSAGES[mode]
            self._attempt("show notification", self._notify, title, body)

    def _sound_allowed(self) -> bool:
        return self.settings.sound_enabled and not self.settings.do_not_disturb

    def _notifications_allowed(self) -> bool:
        return self.settings.notifications_enabled and not self.settings.do_not_disturb

    @staticmethod
    def _attempt(what: str, fn, *args) -> None:
        if fn is None:
            return
        try:
            fn(*args)
        except Exception:
            logger.exception("Failed to %s", what)
