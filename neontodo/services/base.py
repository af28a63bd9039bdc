"""Shared helpers for services: transaction boundary and input validation."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ValidationError
from ..core.logging import get_logger

logger = get_logger(__name__)


def require_text(value: str | None, message: str) -> str:
    """Trim the value; reject ``None`` and blank strings with a ValidationError."""
    if value is None or not str(value).strip():
        raise ValidationError(message)
    return str(value).strip()


class BaseService:
    """
    Базовый сервис: хранит сессию и задаёт границы транзакций.

    Каждая мутация - одна транзакция: commit при успехе,
    rollback и повторный raise при любой ошибке.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def transaction(self, operation: str) -> AsyncIterator[None]:
        """
        Выполнить блок атомарно.

        Пример:
            async with self.transaction("reorder_tasks"):
                ...  # все изменения применятся целиком или не применятся вовсе
        """
        try:
            yield
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.warning("Transaction rolled back", extra={"operation": operation})
            raise
