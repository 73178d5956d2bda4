"""Key/value stores the timer engine persists through.

The engine only needs ``get(key, default)`` and ``set(key, value)``;
values are plain JSON-compatible data (dicts, ints).  Last write wins.
"""

from __future__ import annotations

import json
from typing import Any, Protocol

from .db import get_session
from .models import KeyValue


class KeyValueStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


class MemoryStore:
    """Dict-backed store.  Values are JSON round-tripped so callers can't
    share mutable state with it, same as the database store."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        raw = self._data.get(key)
        if raw is None:
            return default
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class DatabaseStore:
    """SQLite-backed store using the ``key_values`` table.

    Call :func:`~sprout.database.db.init_db` before first use.
    """

    def get(self, key: str, default: Any = None) -> Any:
        with get_session() as db:
            row = db.get(KeyValue, key)
            if row is None:
                return default
            return json.loads(row.value)

    def set(self, key: str, value: Any) -> None:
        encoded = json.dumps(value)
        with get_session() as db:
            row = db.get(KeyValue, key)
            if row is None:
                db.add(KeyValue(key=key, value=encoded))
            else:
                row.value = encoded
