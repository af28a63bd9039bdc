"""Tag repository with specific queries."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Tag
from .base import BaseRepository


class TagRepository(BaseRepository[Tag]):
    """Репозиторий для работы с тегами."""

    def __init__(self, db: AsyncSession):
        super().__init__(Tag, db)

    async def get_by_name(self, name: str) -> Tag | None:
        """
        Получить тег по точному имени (с учётом регистра).

        SQL эквивалент:
            SELECT * FROM tags WHERE name = :name;
        """
        result = await self.db.execute(select(Tag).where(Tag.name == name))
        return result.scalar_one_or_none()

    async def get_ordered(self) -> list[Tag]:
        """Все теги, отсортированные по имени."""
        result = await self.db.execute(select(Tag).order_by(Tag.name.asc()))
        return list(result.scalars().all())
