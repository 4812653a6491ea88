from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC now; SQLite DateTime columns carry no zone."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class DurableRecord(Base):
    """Durable keyed storage (tier 2).

    One row per key; platform configs are stored whole as a JSON record
    under ``linear_config`` / ``asana_config``.
    """

    __tablename__ = "durable_records"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:  # pragma: no cover - repr utility
        return f"DurableRecord(key={self.key})"


class LegacyCookie(Base):
    """Legacy per-field cookie storage (tier 3).

    One row per credential field plus the ``platform`` marker. Rows past
    ``expires_at`` read as absent.
    """

    __tablename__ = "legacy_cookies"

    name = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    expires_at = Column(DateTime, nullable=True)  # None = session cookie, never expires here
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:  # pragma: no cover - repr utility
        return f"LegacyCookie(name={self.name}, expires_at={self.expires_at})"
