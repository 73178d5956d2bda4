"""Wall clock and periodic tick scheduling.

The engine only ever asks two things of time: "what instant is it?" and
"call me back every N ms until I say stop".  Both live behind
:class:`Clock` so tests can swap in a fake clock with manual ticks.
"""

from __future__ import annotations

import time
from typing import Callable, Protocol

from PyQt6.QtCore import QObject, QTimer


TICK_INTERVAL_MS = 1000


class Ticker(Protocol):
    def stop(self) -> None: ...


class Clock(Protocol):
    def now_ms(self) -> int: ...

    def start_ticker(self, interval_ms: int, callback: Callable[[], None]) -> Ticker: ...


class QtTicker:
    """A running ``QTimer``.  ``stop()`` is safe to call repeatedly."""

    def __init__(self, timer: QTimer) -> None:
        self._timer: QTimer | None = timer

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def stop(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._timer.deleteLater()
        self._timer = None


class SystemClock:
    """Real wall clock; ticks are driven by the Qt event loop."""

    def __init__(self, parent: QObject | None = None) -> None:
        self._parent = parent

    def now_ms(self) -> int:
        return int(time.time() * 1000)

    def start_ticker(self, interval_ms: int, callback: Callable[[], None]) -> QtTicker:
        timer = QTimer(self._parent)
        timer.setInterval(interval_ms)
        timer.timeout.connect(callback)
        timer.start()
        return QtTicker(timer)
