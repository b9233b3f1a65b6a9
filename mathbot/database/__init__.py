"""Database module for MathBot."""

from mathbot.database.connection import async_session, close_db, engine, init_db
from mathbot.database.models import Base, KeyValueEntry
from mathbot.database.repositories import KeyValueRepository
from mathbot.database.storage import SqlKeyValueStorage

__all__ = [
    "Base",
    "KeyValueEntry",
    "engine",
    "async_session",
    "init_db",
    "close_db",
    "KeyValueRepository",
    "SqlKeyValueStorage",
]
