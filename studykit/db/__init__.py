"""Database package: declarative base and engine lifecycle."""

from studykit.db.base import Base, close_db, init_db, make_session_factory

__all__ = [
    "Base",
    "close_db",
    "init_db",
    "make_session_factory",
]
