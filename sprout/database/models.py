"""SQLAlchemy ORM models for Sprout."""

from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class KeyValue(Base):
    """One persisted value (settings, session, sprout count), JSON-encoded."""

    __tablename__ = "key_values"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    def __repr__(self) -> str:
        return f"<KeyValue key={self.key} updated_at={self.updated_at}>"
