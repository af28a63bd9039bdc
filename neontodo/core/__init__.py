"""Core application components."""

from .config import Settings, settings
from .database import dispose_engine, drop_db, get_db, get_engine, get_sessionmaker, init_db

__all__ = [
    "settings",
    "Settings",
    "get_engine",
    "get_sessionmaker",
    "dispose_engine",
    "get_db",
    "init_db",
    "drop_db",
]
