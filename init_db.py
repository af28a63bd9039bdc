"""
Скрипт для инициализации базы данных.

Создаёт все таблицы напрямую через SQLAlchemy и проект "Входящие"
на пустом хранилище. Путь к БД берётся из DATABASE_URL (config/.env).
"""

import asyncio

from neontodo.core.config import settings
from neontodo.core.database import dispose_engine, init_db
from neontodo.core.logging import get_logger, setup_logging

logger = get_logger("neontodo.init_db")


async def main():
    """Создать все таблицы."""
    setup_logging(log_level=settings.LOG_LEVEL, log_format="simple")
    logger.info("Creating tables", extra={"url": settings.DATABASE_URL})
    try:
        await init_db()
    finally:
        await dispose_engine()
    logger.info("Tables created")


if __name__ == "__main__":
    asyncio.run(main())
