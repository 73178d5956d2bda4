"""Database package."""

from .db import get_session, init_db, configure_engine
from .models import KeyValue
from .store import KeyValueStore, MemoryStore, DatabaseStore

__all__ = [
    "get_session",
    "init_db",
    "configure_engine",
    "KeyValue",
    "KeyValueStore",
    "MemoryStore",
    "DatabaseStore",
]
