"""
Pytest fixtures для тестов.

Предоставляет:
- test_engine: изолированная SQLite in-memory БД для каждого теста
- test_db: async session поверх неё
- test_client: HTTP клиент для тестирования API endpoints
- factory-фикстуры для проектов, задач и тегов
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from neontodo.api.dependencies import get_db
from neontodo.core.database import build_engine, build_sessionmaker, drop_db
from neontodo.main import app
from neontodo.models import Base
from neontodo.services import ProjectService, TagService, TaskService

# Test database URL (SQLite in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """
    Создаёт async engine для тестовой БД (SQLite in-memory).

    build_engine даёт StaticPool (одно соединение, иначе in-memory данные теряются)
    и PRAGMA foreign_keys=ON, как в рабочем приложении.
    Таблицы пересоздаются для каждого теста.
    """
    engine = build_engine(TEST_DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await drop_db(engine)

    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(test_engine):
    """
    Предоставляет async session для работы с тестовой БД.

    Сервисы сами делают commit, поэтому каждый тест получает
    чистую БД через пересоздание таблиц, а не через rollback.

    Сессия держит lock фабрики на всё время теста: в одном тесте
    не используйте test_db вместе с test_client.
    """
    async with build_sessionmaker(test_engine)() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def test_client(test_engine):
    """
    Предоставляет HTTP клиент для тестирования API endpoints.

    Использует тестовую БД вместо рабочей. Lifespan приложения
    (init_db на файловой БД) при ASGITransport не запускается.
    """
    session_factory = build_sessionmaker(test_engine)

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ============================================================================
# FACTORIES
# ============================================================================


@pytest.fixture
def project_service(test_db) -> ProjectService:
    return ProjectService(test_db)


@pytest.fixture
def task_service(test_db) -> TaskService:
    return TaskService(test_db)


@pytest.fixture
def tag_service(test_db) -> TagService:
    return TagService(test_db)


@pytest_asyncio.fixture
async def make_task(task_service, tag_service):
    """
    Фабрика задач: создаёт задачу и применяет поля/теги.

    Пример:
        task = await make_task("Report", project_id=p.id, due_at="2026-10-20", tags=["work"])
    """

    async def _make(title: str, project_id: str | None = None, tags=(), completed=False, **patch):
        task = await task_service.create_task(title=title, project_id=project_id)
        if patch:
            task = await task_service.update_task(task.id, **patch)
        if completed:
            task = await task_service.toggle_task_completed(task.id, True)
        for tag_name in tags:
            tag = await tag_service.ensure_tag(tag_name)
            await tag_service.attach_tag_to_task(task.id, tag.id)
        return task

    return _make
