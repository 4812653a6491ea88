"""Database models and session management."""
from .engine import SessionLocal, init_db, DB_PATH
from .models import Base, DurableRecord, LegacyCookie
from .repository import (
    get_record,
    put_record,
    delete_record,
    get_cookie,
    get_cookies,
    set_cookie,
    delete_cookies,
)

__all__ = [
    "SessionLocal",
    "init_db",
    "DB_PATH",
    "Base",
    "DurableRecord",
    "LegacyCookie",
    "get_record",
    "put_record",
    "delete_record",
    "get_cookie",
    "get_cookies",
    "set_cookie",
    "delete_cookies",
]
