"""Shared test helpers for Sprout."""

from __future__ import annotations


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeTicker:
    def __init__(self, interval_ms, callback):
        self.interval_ms = interval_ms
        self.callback = callback
        self.active = True

    def stop(self):
        self.active = False


class FakeClock:
    """Manual wall clock.

    ``advance`` moves time one second at a time, firing every live ticker
    after each step (a healthy event loop).  ``jump`` moves time without
    firing anything (throttled tab, suspended laptop).
    """

    START_MS = 1_700_000_000_000

    def __init__(self, start_ms: int = START_MS):
        self.now = start_ms
        self.tickers: list[FakeTicker] = []

    def now_ms(self) -> int:
        return self.now

    def start_ticker(self, interval_ms, callback) -> FakeTicker:
        ticker = FakeTicker(interval_ms, callback)
        self.tickers.append(ticker)
        return ticker

    @property
    def active_tickers(self) -> list[FakeTicker]:
        return [t for t in self.tickers if t.active]

    def tick(self) -> None:
        """Fire every live ticker once without moving time."""
        for ticker in list(self.tickers):
            if ticker.active:
                ticker.callback()

    def advance(self, seconds: int) -> None:
        for _ in range(int(seconds)):
            self.now += 1000
            self.tick()

    def jump(self, seconds: float) -> None:
        self.now += int(seconds * 1000)


class FailingStore:
    """A store whose reads and/or writes blow up."""

    def __init__(self, *, fail_get: bool = False, fail_set: bool = True):
        self.fail_get = fail_get
        self.fail_set = fail_set
        self.data: dict = {}

    def get(self, key, default=None):
        if self.fail_get:
            raise OSError("store unavailable")
        return self.data.get(key, default)

    def set(self, key, value):
        if self.fail_set:
            raise OSError("disk full")
        self.data[key] = value


def minutes(n: int) -> int:
    return n * 60
