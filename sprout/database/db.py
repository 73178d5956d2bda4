"""SQLite backing for Sprout's key/value store.

One small database holds the three timer records (settings, session,
sprout count) in the ``key_values`` table.  The engine is created on
first use; tests swap it out with :func:`configure_engine`.
"""

import logging
from pathlib import Path
from contextlib import contextmanager

from sqlalchemy import create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session as OrmSession
from sqlalchemy.pool import StaticPool

from .models import Base, KeyValue

logger = logging.getLogger(__name__)

DATA_DIR = Path.home() / "Library" / "Application Support" / "Sprout"
DB_PATH = DATA_DIR / "sprout.db"

_engine: Engine | None = None
_SessionFactory: sessionmaker | None = None


def default_url() -> str:
    return f"sqlite:///{DB_PATH}"


def _build_engine(url: str) -> Engine:
    kwargs = {"connect_args": {"check_same_thread": False}, "echo": False}
    # An in-memory database lives only as long as its connection, so every
    # session must share the same one.
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def _current_engine() -> Engine:
    global _engine
    if _engine is None:
        DATA_DIR.mkdir(parents=True, exist_ok=True)
        _engine = _build_engine(default_url())
    return _engine


def configure_engine(url: str) -> None:
    """Point the store at *url* instead of the on-disk database."""
    global _engine, _SessionFactory
    if _engine is not None:
        _engine.dispose()
    _engine = _build_engine(url)
    _SessionFactory = None


def init_db() -> None:
    """Create the ``key_values`` table if it does not exist yet."""
    engine = _current_engine()
    Base.metadata.create_all(engine)
    with get_session() as db:
        stored = db.scalar(select(func.count()).select_from(KeyValue))
    logger.debug("Key/value store at %s holds %d record(s)", engine.url, stored)


@contextmanager
def get_session():
    """Yield an ORM session; commit on success, roll back on error."""
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=_current_engine(), expire_on_commit=False)
    session: OrmSession = _SessionFactory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
