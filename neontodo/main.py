"""
Главный файл FastAPI приложения.

Точка входа в приложение NeonTodo: локальный менеджер задач.

Запуск:
    uvicorn neontodo.main:app --reload

API документация:
    http://localhost:8000/docs       - Swagger UI
    http://localhost:8000/redoc      - ReDoc

Версионирование:
    API доступно по путям /api/v1/...
"""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .api import backup_router, projects_router, tags_router, tasks_router
from .api.errors import register_error_handlers
from .api.middleware import RequestLoggingMiddleware
from .core.config import settings
from .core.database import dispose_engine, get_sessionmaker, init_db
from .core.logging import get_logger, setup_logging

# LOG_LEVEL: DEBUG/INFO/WARNING/ERROR - что логировать
# LOG_FORMAT: json (production) / simple (development)
setup_logging(
    log_level=settings.LOG_LEVEL,
    log_format=settings.LOG_FORMAT,
    sql_echo=settings.DATABASE_ECHO,
)

logger = get_logger(__name__)

APP_VERSION = "1.0.0"
APP_START_TIME: float = 0.0  # Will be set on startup


# ============================================================================
# LIFESPAN EVENT HANDLER
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: создание схемы и проекта "Входящие" на пустом хранилище.
    Shutdown: закрытие соединения с БД.
    """
    global APP_START_TIME
    APP_START_TIME = time.time()

    await init_db()
    logger.info(
        "Application started",
        extra={
            "app_name": settings.APP_NAME,
            "version": APP_VERSION,
            "debug": settings.DEBUG,
            "log_level": settings.LOG_LEVEL,
        },
    )

    yield

    uptime = int(time.time() - APP_START_TIME)
    await dispose_engine()
    logger.info("Application stopped", extra={"uptime_seconds": uptime})


# ============================================================================
# CREATE APPLICATION
# ============================================================================

app = FastAPI(
    lifespan=lifespan,
    title=settings.APP_NAME,
    description="""
    Локальный менеджер задач.

    ## Возможности

    * **Проекты** - ручной порядок, неудаляемый проект "Входящие"
    * **Задачи** - приоритет, дедлайн, заметки, отметка о выполнении
    * **Представления** - Today / Upcoming / Completed / All, поиск, фильтр по тегам
    * **Теги** - связь M:M с задачами
    * **Резервные копии** - экспорт и импорт всего хранилища в JSON

    ## 3-Layer Architecture

    ```
    API Layer (FastAPI) → Service Layer (Business Logic) → Repository Layer (Database)
    ```
    """,
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Каждый запрос логируется с методом, путём, статусом и временем
app.add_middleware(RequestLoggingMiddleware)


# ============================================================================
# API VERSIONING
# ============================================================================

api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(projects_router)
api_v1_router.include_router(tasks_router)
api_v1_router.include_router(tags_router)
api_v1_router.include_router(backup_router)

app.include_router(api_v1_router)

register_error_handlers(app)


# ============================================================================
# HEALTH CHECK
# ============================================================================


@app.get(
    "/health", tags=["health"], summary="Health check", description="Проверка работоспособности API"
)
async def health_check():
    """
    Проверяет подключение к базе данных.

    Пример ответа (200 OK):
    ```json
    {
        "status": "ok",
        "checks": {"database": "connected", "version": "1.0.0", "uptime_seconds": 3600},
        "timestamp": "2026-10-19T12:00:00+00:00"
    }
    ```
    При недоступной БД - 503 и "database": "disconnected".
    """
    uptime_seconds = int(time.time() - APP_START_TIME) if APP_START_TIME > 0 else 0

    db_status = "disconnected"
    try:
        async with get_sessionmaker()() as session:
            await session.execute(text("SELECT 1"))
            db_status = "connected"
    except SQLAlchemyError:
        logger.exception("Health check: database unavailable")

    overall_status = "ok" if db_status == "connected" else "error"
    return JSONResponse(
        status_code=200 if overall_status == "ok" else 503,
        content={
            "status": overall_status,
            "checks": {
                "database": db_status,
                "version": APP_VERSION,
                "uptime_seconds": uptime_seconds,
            },
            "timestamp": datetime.now(UTC).isoformat(),
        },
    )
