"""Shared pytest fixtures for Sprout tests."""

import os
import sys

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from PyQt6.QtWidgets import QApplication

from sprout.database.db import configure_engine, init_db
from sprout.database.store import MemoryStore
from sprout.timer.engine import TimerEngine

from helpers import FakeClock


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def engine(qapp, store, clock):
    """Fresh TimerEngine on an empty in-memory store and a fake clock."""
    return TimerEngine(store, clock)


@pytest.fixture
def make_engine(qapp, clock):
    """Build engines sharing the fake clock, e.g. to simulate a restart."""
    def _make(store):
        return TimerEngine(store, clock)
    return _make
