"""Tests for the real wall clock and its QTimer-backed ticker."""

import time

from sprout.database.store import MemoryStore
from sprout.timer.clock import QtTicker, SystemClock, TICK_INTERVAL_MS
from sprout.timer.engine import TimerEngine


def _process_until(qapp, predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        qapp.processEvents()
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


class TestSystemClock:

    def test_now_ms_is_integer_epoch_millis(self):
        before = int(time.time() * 1000)
        now = SystemClock().now_ms()
        after = int(time.time() * 1000)
        assert isinstance(now, int)
        assert before <= now <= after

    def test_ticker_fires_callback(self, qapp):
        fired = []
        ticker = SystemClock().start_ticker(10, lambda: fired.append(1))
        try:
            assert isinstance(ticker, QtTicker)
            assert ticker.active
            assert _process_until(qapp, lambda: len(fired) >= 2)
        finally:
            ticker.stop()

    def test_stop_is_idempotent(self, qapp):
        fired = []
        ticker = SystemClock().start_ticker(10, lambda: fired.append(1))
        ticker.stop()
        ticker.stop()
        assert not ticker.active

        count = len(fired)
        _process_until(qapp, lambda: False, timeout=0.1)
        assert len(fired) == count


class TestEngineOnSystemClock:

    def test_engine_ticks_once_per_second(self, qapp):
        clock = SystemClock()
        engine = TimerEngine(MemoryStore(), clock)
        engine.start()
        try:
            assert engine.is_ticking
            assert engine._ticker.active
            assert engine._ticker._timer.interval() == TICK_INTERVAL_MS
        finally:
            engine.shutdown()
        assert not engine.is_ticking

    def test_reset_releases_real_ticker(self, qapp):
        engine = TimerEngine(MemoryStore(), SystemClock())
        engine.start()
        ticker = engine._ticker
        engine.reset()
        assert not ticker.active
        assert not engine.is_ticking
