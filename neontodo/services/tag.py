"""Tag service with business logic."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError
from ..core.logging import get_logger
from ..models import Tag
from ..repositories import TagRepository, TaskRepository
from .base import BaseService, require_text

logger = get_logger(__name__)


class TagService(BaseService):
    """
    Сервис для работы с тегами.

    Теги создаются при первом использовании (по имени) и не удаляются
    автоматически, даже если ни одна задача их больше не использует.
    Имена чувствительны к регистру: "Work" и "work" - разные теги.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(db)
        self.tag_repo = TagRepository(db)
        self.task_repo = TaskRepository(db)

    async def list_tags(self) -> list[Tag]:
        """Все теги по алфавиту."""
        return await self.tag_repo.get_ordered()

    async def get_task_tags(self, task_id: str) -> list[Tag]:
        """Теги задачи по алфавиту."""
        return await self.task_repo.get_tags(task_id)

    async def ensure_tag(self, name: str) -> Tag:
        """
        Получить тег по точному имени или создать его.

        Args:
            name: Название тега (обрезается по краям)

        Returns:
            Существующий или новый тег

        Raises:
            ValidationError: Если название пустое

        Если между поиском и вставкой тот же тег успел создать кто-то
        другой, вставка упадёт на UNIQUE(name): откатываемся и
        перечитываем уже существующую запись.
        """
        clean_name = require_text(name, "Tag name required")

        existing = await self.tag_repo.get_by_name(clean_name)
        if existing:
            return existing

        try:
            async with self.transaction("ensure_tag"):
                tag = await self.tag_repo.create(Tag(name=clean_name))
        except IntegrityError:
            tag = await self.tag_repo.get_by_name(clean_name)
            if tag is None:
                raise
            return tag

        logger.info("Tag created", extra={"tag_id": tag.id, "tag_name": tag.name})
        return tag

    async def attach_tag_to_task(self, task_id: str, tag_id: str) -> bool:
        """
        Привязать тег к задаче.

        Returns:
            True если связь создана, False если уже была (не ошибка)

        Raises:
            NotFoundError: Если задача или тег не найдены
        """
        await self._require_task_and_tag(task_id, tag_id)
        async with self.transaction("attach_tag_to_task"):
            return await self.task_repo.add_tag(task_id, tag_id)

    async def detach_tag_from_task(self, task_id: str, tag_id: str) -> bool:
        """
        Отвязать тег от задачи.

        Returns:
            True если связь удалена, False если её не было (не ошибка)
        """
        async with self.transaction("detach_tag_from_task"):
            return await self.task_repo.remove_tag(task_id, tag_id)

    # Вспомогательные методы (private)

    async def _require_task_and_tag(self, task_id: str, tag_id: str) -> None:
        if not await self.task_repo.exists(task_id):
            raise NotFoundError("Task", task_id)
        if not await self.tag_repo.exists(tag_id):
            raise NotFoundError("Tag", tag_id)
