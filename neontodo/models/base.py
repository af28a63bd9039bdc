"""Base classes and column helpers for SQLAlchemy models."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Integer
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with milliseconds, e.g. 2026-10-19T12:00:00.000Z."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_id() -> str:
    """Fresh opaque identifier (uuid4 string)."""
    return str(uuid.uuid4())


class IntBoolean(TypeDecorator):
    """Boolean stored as INTEGER 0/1 (the column type of the persisted schema)."""

    impl = Integer
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return 1 if value else 0

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return bool(value)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass
