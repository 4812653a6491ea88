"""Thin repository helpers for the durable and cookie tiers.

These functions provide a small abstraction over SQLAlchemy sessions so the
credential store never builds queries itself.
"""
from datetime import datetime
from typing import Dict, Iterable, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from .models import DurableRecord, LegacyCookie, utcnow


def get_record(session: Session, key: str) -> Optional[str]:
    record = session.get(DurableRecord, key)
    return record.value if record is not None else None


def put_record(session: Session, key: str, value: str) -> DurableRecord:
    """Insert or update a durable record."""
    record = session.get(DurableRecord, key)
    if record is None:
        record = DurableRecord(key=key, value=value)
        session.add(record)
    else:
        record.value = value
        record.updated_at = utcnow()
    session.commit()
    return record


def delete_record(session: Session, key: str) -> bool:
    record = session.get(DurableRecord, key)
    if record is None:
        return False
    session.delete(record)
    session.commit()
    return True


def get_cookie(
    session: Session, name: str, now: Optional[datetime] = None
) -> Optional[str]:
    """Return a cookie value, treating expired cookies as absent."""
    cookie = session.get(LegacyCookie, name)
    if cookie is None:
        return None
    now = now or utcnow()
    if cookie.expires_at is not None and cookie.expires_at <= now:
        return None
    return cookie.value


def get_cookies(
    session: Session, names: Iterable[str], now: Optional[datetime] = None
) -> Dict[str, str]:
    """Return the live cookies among ``names`` as a name -> value mapping."""
    now = now or utcnow()
    rows = session.execute(
        select(LegacyCookie).where(LegacyCookie.name.in_(list(names)))
    ).scalars()
    return {
        row.name: row.value
        for row in rows
        if row.expires_at is None or row.expires_at > now
    }


def set_cookie(
    session: Session, name: str, value: str, expires_at: Optional[datetime] = None
) -> LegacyCookie:
    cookie = session.get(LegacyCookie, name)
    if cookie is None:
        cookie = LegacyCookie(name=name, value=value, expires_at=expires_at)
        session.add(cookie)
    else:
        cookie.value = value
        cookie.expires_at = expires_at
        cookie.updated_at = utcnow()
    session.commit()
    return cookie


def delete_cookies(session: Session, names: Iterable[str]) -> int:
    """Delete the named cookies; returns how many rows were removed."""
    result = session.execute(
        delete(LegacyCookie).where(LegacyCookie.name.in_(list(names)))
    )
    session.commit()
    return result.rowcount or 0
