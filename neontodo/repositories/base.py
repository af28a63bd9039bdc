"""Base repository with common CRUD operations."""

from typing import Any, Generic, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import Base

# TypeVar для Generic класса - позволяет работать с любой моделью
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Базовый репозиторий с CRUD операциями.

    Репозиторий никогда не делает commit: границы транзакций
    определяет сервисный слой.

    Пример использования:
        project_repo = BaseRepository[Project](Project, db_session)
        project = await project_repo.get_by_id("3f2c...")
    """

    def __init__(self, model: type[ModelType], db: AsyncSession):
        """
        Инициализация репозитория.

        Args:
            model: Класс модели SQLAlchemy (например, Project, Task)
            db: Асинхронная сессия базы данных
        """
        self.model = model
        self.db = db

    async def create(self, obj: ModelType) -> ModelType:
        """
        Создать новую запись в БД.

        Args:
            obj: Экземпляр модели для сохранения

        Returns:
            Созданный объект (id и timestamps уже заполнены)
        """
        self.db.add(obj)
        await self.db.flush()  # flush() отправляет в БД, но не commit
        await self.db.refresh(obj)
        return obj

    async def get_by_id(self, id: str) -> ModelType | None:
        """
        Получить объект по ID.

        SQL эквивалент:
            SELECT * FROM table WHERE id = :id LIMIT 1;
        """
        result = await self.db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def update(self, id: str, **kwargs: Any) -> ModelType | None:
        """
        Обновить запись по ID.

        Args:
            id: Первичный ключ записи
            **kwargs: Поля для обновления (name="Новое имя", color="#FF0000")

        Returns:
            Обновлённый объект или None, если не найден

        SQL эквивалент:
            UPDATE table SET field1=value1, field2=value2 WHERE id=:id;
        """
        obj = await self.get_by_id(id)
        if not obj:
            return None

        # Обновляем только переданные поля
        for key, value in kwargs.items():
            if hasattr(obj, key):
                setattr(obj, key, value)

        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def delete(self, id: str) -> bool:
        """
        Удалить запись по ID.

        Returns:
            True если удалено, False если не найдено
        """
        result = await self.db.execute(delete(self.model).where(self.model.id == id))
        return result.rowcount > 0  # rowcount - количество затронутых строк

    async def exists(self, id: str) -> bool:
        """Проверить существование записи."""
        result = await self.db.execute(select(self.model.id).where(self.model.id == id))
        return result.scalar_one_or_none() is not None

    async def count(self) -> int:
        """
        Подсчитать количество записей.

        SQL эквивалент:
            SELECT COUNT(*) FROM table;
        """
        result = await self.db.execute(select(func.count()).select_from(self.model))
        return result.scalar_one()
