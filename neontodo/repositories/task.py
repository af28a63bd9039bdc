"""Task repository with specific queries."""

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Tag, Task, task_tags
from .base import BaseRepository
from .task_query import TaskFilter, build_task_query


def same_project(project_id: str | None):
    """``project_id = :id`` with NULL matching NULL."""
    if project_id is None:
        return Task.project_id.is_(None)
    return Task.project_id == project_id


class TaskRepository(BaseRepository[Task]):
    """
    Репозиторий для работы с задачами.

    Включает методы для:
    - Выборки по представлениям (Today/Upcoming/Completed/All, проект)
    - Ручного порядка внутри проекта
    - Работы с тегами (task_tags)
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Task, db)

    async def list_filtered(self, task_filter: TaskFilter) -> list[Task]:
        """
        Получить задачи по описанию представления.

        Args:
            task_filter: Представление, проект, поиск, теги и "сегодня"

        Returns:
            Упорядоченный список задач (пустой, если ничего не найдено)
        """
        result = await self.db.execute(build_task_query(task_filter))
        return list(result.scalars().all())

    async def next_sort_order(self, project_id: str | None) -> int:
        """
        Следующий sort_order внутри проекта: max + 1, или 0.

        SQL эквивалент:
            SELECT COALESCE(MAX(sort_order), -1) + 1 FROM tasks WHERE project_id IS :project_id;
        """
        result = await self.db.execute(
            select(func.coalesce(func.max(Task.sort_order), -1) + 1).where(
                same_project(project_id)
            )
        )
        return int(result.scalar_one())

    async def move_to_project(self, from_project_id: str, to_project_id: str, updated_at: str) -> int:
        """
        Переназначить все задачи одного проекта на другой.

        Returns:
            Количество перенесённых задач
        """
        result = await self.db.execute(
            update(Task)
            .where(Task.project_id == from_project_id)
            .values(project_id=to_project_id, updated_at=updated_at)
        )
        return result.rowcount

    async def set_sort_order(
        self, task_id: str, project_id: str | None, sort_order: int, updated_at: str
    ) -> bool:
        """
        Записать sort_order задачи, только если она принадлежит проекту.

        Returns:
            True если строка обновлена
        """
        result = await self.db.execute(
            update(Task)
            .where(Task.id == task_id, same_project(project_id))
            .values(sort_order=sort_order, updated_at=updated_at)
        )
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    async def get_tags(self, task_id: str) -> list[Tag]:
        """
        Теги задачи по имени.

        SQL эквивалент:
            SELECT tags.* FROM tags
            JOIN task_tags ON task_tags.tag_id = tags.id
            WHERE task_tags.task_id = :task_id
            ORDER BY tags.name;
        """
        result = await self.db.execute(
            select(Tag)
            .join(task_tags, task_tags.c.tag_id == Tag.id)
            .where(task_tags.c.task_id == task_id)
            .order_by(Tag.name.asc())
        )
        return list(result.scalars().all())

    async def has_tag(self, task_id: str, tag_id: str) -> bool:
        result = await self.db.execute(
            select(task_tags.c.task_id).where(
                task_tags.c.task_id == task_id, task_tags.c.tag_id == tag_id
            )
        )
        return result.first() is not None

    async def add_tag(self, task_id: str, tag_id: str) -> bool:
        """
        Добавить связь задача-тег (идемпотентно).

        Returns:
            True если связь создана, False если уже была
        """
        if await self.has_tag(task_id, tag_id):
            return False
        await self.db.execute(insert(task_tags).values(task_id=task_id, tag_id=tag_id))
        return True

    async def remove_tag(self, task_id: str, tag_id: str) -> bool:
        """
        Удалить связь задача-тег (идемпотентно).

        Returns:
            True если связь была удалена
        """
        result = await self.db.execute(
            delete(task_tags).where(task_tags.c.task_id == task_id, task_tags.c.tag_id == tag_id)
        )
        return result.rowcount > 0
