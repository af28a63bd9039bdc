"""Project repository with specific queries."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import INBOX_ICON, Project
from .base import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    """
    Репозиторий для работы с проектами.

    Наследуется от BaseRepository, получая все CRUD операции,
    и добавляет специфичные методы для проектов.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Project, db)

    async def get_ordered(self) -> list[Project]:
        """
        Получить все проекты в ручном порядке.

        SQL эквивалент:
            SELECT * FROM projects ORDER BY sort_order ASC, created_at ASC;
        """
        result = await self.db.execute(
            select(Project).order_by(Project.sort_order.asc(), Project.created_at.asc())
        )
        return list(result.scalars().all())

    async def get_inbox(self) -> Project | None:
        """
        Найти проект "Входящие".

        Сначала по маркеру icon='inbox' (самый ранний по порядку),
        затем по имени без учёта регистра.
        """
        result = await self.db.execute(
            select(Project)
            .where(Project.icon == INBOX_ICON)
            .order_by(Project.sort_order.asc(), Project.created_at.asc())
            .limit(1)
        )
        inbox = result.scalar_one_or_none()
        if inbox:
            return inbox

        result = await self.db.execute(
            select(Project).where(func.lower(Project.name) == "inbox").limit(1)
        )
        return result.scalar_one_or_none()

    async def get_names(self) -> list[str]:
        """Имена всех проектов (для подбора уникального имени)."""
        result = await self.db.execute(select(Project.name))
        return list(result.scalars().all())

    async def next_sort_order(self) -> int:
        """
        Следующий sort_order: max + 1, или 0 если проектов нет.

        SQL эквивалент:
            SELECT COALESCE(MAX(sort_order), -1) + 1 FROM projects;
        """
        result = await self.db.execute(select(func.coalesce(func.max(Project.sort_order), -1) + 1))
        return int(result.scalar_one())
