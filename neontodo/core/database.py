"""Database connection and session management.

One process-wide async engine is created lazily on first use and shared by every
operation (single writer). ``dispose_engine()`` closes it for clean shutdown and
between tests.

Sessions are handed out one at a time per engine: the next session opens only
after the previous one is closed. An in-memory store lives on a single shared
connection, so overlapping sessions would otherwise share one transaction.
"""

import asyncio
import weakref
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool

from .config import settings
from .logging import get_logger

logger = get_logger(__name__)

# Seconds a file-backed SQLite connection waits for a lock held elsewhere
SQLITE_BUSY_TIMEOUT = 30

_engine: AsyncEngine | None = None
_sessionmaker: "SessionFactory | None" = None

# One lock per engine, shared by every SessionFactory built for it
_session_locks: "weakref.WeakKeyDictionary[object, asyncio.Lock]" = weakref.WeakKeyDictionary()


def _configure_sqlite_connection(dbapi_connection, connection_record) -> None:
    """Enforce foreign keys and let SQLAlchemy own BEGIN/COMMIT (pysqlite quirk)."""
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _begin_sqlite_transaction(conn) -> None:
    conn.exec_driver_sql("BEGIN")


def is_memory_database(url: str) -> bool:
    """sqlite+aiosqlite:///:memory: (or no file at all)."""
    database = make_url(url).database
    return not database or database == ":memory:"


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    SQLite in-memory: StaticPool (one shared connection, otherwise the data is lost).
    SQLite file: the default pool, with a busy timeout instead of failing on a lock.
    Both get the connection hooks. Anything else: NullPool.
    """
    if url.startswith("sqlite"):
        if is_memory_database(url):
            engine = create_async_engine(
                url,
                echo=echo,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        else:
            engine = create_async_engine(
                url, echo=echo, connect_args={"timeout": SQLITE_BUSY_TIMEOUT}
            )
        event.listen(engine.sync_engine, "connect", _configure_sqlite_connection)
        event.listen(engine.sync_engine, "begin", _begin_sqlite_transaction)
    else:
        engine = create_async_engine(url, echo=echo, poolclass=NullPool)
    return engine


class SessionFactory:
    """
    Фабрика сессий с последовательной выдачей.

    Вызов возвращает async context manager, как у async_sessionmaker:

        async with factory() as session:
            ...

    Пока одна сессия открыта, следующая ждёт её закрытия (lock общий для
    всех фабрик одного engine). Сессия, открытая дольше запроса, блокирует
    остальные: держите их короткими.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._maker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        self._lock = _session_locks.setdefault(engine.sync_engine, asyncio.Lock())

    @asynccontextmanager
    async def __call__(self) -> AsyncIterator[AsyncSession]:
        async with self._lock:
            async with self._maker() as session:
                yield session


def build_sessionmaker(engine: AsyncEngine) -> SessionFactory:
    """Session factory used by the app and by tests."""
    return SessionFactory(engine)


def get_engine() -> AsyncEngine:
    """Return the process-wide engine, creating it on first call."""
    global _engine
    if _engine is None:
        _engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
        logger.info("Database engine created", extra={"url": settings.DATABASE_URL})
    return _engine


def get_sessionmaker() -> SessionFactory:
    """Return the process-wide session factory bound to ``get_engine()``."""
    global _sessionmaker
    if _sessionmaker is None:
        _sessionmaker = build_sessionmaker(get_engine())
    return _sessionmaker


async def dispose_engine() -> None:
    """Close the shared engine; the next ``get_engine()`` call starts fresh."""
    global _engine, _sessionmaker
    if _engine is not None:
        await _engine.dispose()
        logger.info("Database engine disposed")
    _engine = None
    _sessionmaker = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting database session.

    Usage in FastAPI:
        @app.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with get_sessionmaker()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Create all tables and seed the inbox project on an empty store."""
    from ..models import Base
    from ..services import ProjectService

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with build_sessionmaker(engine)() as session:
        await ProjectService(session).seed_default_project()


async def drop_db(engine: AsyncEngine | None = None) -> None:
    """Drop all tables (use with caution!)."""
    from ..models import Base

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
