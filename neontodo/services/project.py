"""Project service with business logic."""

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import NotFoundError, ProtectedResourceError, ValidationError
from ..core.logging import get_logger
from ..models import INBOX_ICON, Project, utc_now_iso
from ..repositories import ProjectRepository, TaskRepository
from .base import BaseService, require_text

logger = get_logger(__name__)


def disambiguate_name(base_name: str, existing_names: list[str]) -> str:
    """
    Подобрать свободное имя проекта (без учёта регистра).

    Примеры:
        "Work", ["work"]              -> "Work (2)"
        "Work", ["Work", "Work (2)"]  -> "Work (3)"
    """
    taken = {name.lower() for name in existing_names}
    if base_name.lower() not in taken:
        return base_name

    n = 2
    while f"{base_name} ({n})".lower() in taken:
        n += 1
    return f"{base_name} ({n})"


class ProjectService(BaseService):
    """
    Сервис для работы с проектами.

    Содержит бизнес-логику:
    - Уникальные имена при создании (суффикс " (N)")
    - Проект "Входящие" (Inbox): создаётся лениво, удалить нельзя
    - Удаление проекта переносит его задачи во "Входящие"
    """

    def __init__(self, db: AsyncSession):
        super().__init__(db)
        self.project_repo = ProjectRepository(db)
        self.task_repo = TaskRepository(db)

    async def list_projects(self) -> list[Project]:
        """Все проекты в порядке (sort_order, created_at)."""
        return await self.project_repo.get_ordered()

    async def get_project(self, project_id: str) -> Project:
        """
        Получить проект по ID.

        Raises:
            NotFoundError: Если проект не найден
        """
        project = await self.project_repo.get_by_id(project_id)
        if not project:
            raise NotFoundError("Project", project_id)
        return project

    async def create_project(
        self, name: str, color: str | None = None, icon: str | None = None
    ) -> Project:
        """
        Создать новый проект.

        Args:
            name: Название (обрезается по краям)
            color: Цвет для отображения (опционально)
            icon: Иконка (опционально)

        Returns:
            Созданный проект

        Raises:
            ValidationError: Если название пустое или "Входящие" уже есть,
                а передан icon="inbox"

        Бизнес-правила:
        1. Название обязательно и не пустое
        2. Дубликат по имени (без учёта регистра) не ошибка:
           к имени добавляется " (2)", " (3)", ...
        3. sort_order = max + 1 (или 0, если проектов нет)
        4. Маркер icon="inbox" допустим только у одного проекта
        """
        base_name = require_text(name, "Project name required")

        async with self.transaction("create_project"):
            if icon == INBOX_ICON and await self.project_repo.get_inbox() is not None:
                raise ValidationError("Inbox project already exists")
            unique_name = disambiguate_name(base_name, await self.project_repo.get_names())
            project = Project(
                name=unique_name,
                color=color,
                icon=icon,
                sort_order=await self.project_repo.next_sort_order(),
                created_at=utc_now_iso(),
            )
            project = await self.project_repo.create(project)

        logger.info("Project created", extra={"project_id": project.id, "project_name": project.name})
        return project

    async def rename_project(self, project_id: str, name: str) -> Project:
        """
        Переименовать проект.

        Уникальность имени здесь НЕ проверяется (в отличие от create_project),
        два проекта могут получить одинаковое имя.

        Raises:
            ValidationError: Если название пустое
            NotFoundError: Если проект не найден
        """
        new_name = require_text(name, "Project name required")

        async with self.transaction("rename_project"):
            project = await self.project_repo.update(project_id, name=new_name)
            if not project:
                raise NotFoundError("Project", project_id)

        return project

    async def ensure_inbox(self) -> Project:
        """Получить проект "Входящие", создав его при отсутствии."""
        async with self.transaction("ensure_inbox"):
            inbox = await self._resolve_inbox()
        return inbox

    async def seed_default_project(self) -> Project | None:
        """
        Создать "Входящие" при первом запуске (когда проектов нет совсем).

        Returns:
            Созданный проект или None, если проекты уже есть
        """
        if await self.project_repo.count() > 0:
            return None
        return await self.ensure_inbox()

    async def delete_project_move_to_inbox(self, project_id: str) -> bool:
        """
        Удалить проект, перенеся его задачи во "Входящие".

        Args:
            project_id: ID проекта

        Returns:
            True если удалён, False если проекта не было

        Raises:
            ProtectedResourceError: Попытка удалить "Входящие"

        Атомарно (одна транзакция):
        1. Найти или создать "Входящие"
        2. UPDATE tasks SET project_id = :inbox, updated_at = :now WHERE project_id = :id
        3. DELETE FROM projects WHERE id = :id
        При ошибке на любом шаге ничего не меняется.
        """
        project = await self.project_repo.get_by_id(project_id)
        if not project:
            return False
        if project.is_inbox:
            raise ProtectedResourceError("Inbox cannot be deleted")

        async with self.transaction("delete_project_move_to_inbox"):
            inbox = await self._resolve_inbox()
            moved = await self.task_repo.move_to_project(project_id, inbox.id, utc_now_iso())
            await self.project_repo.delete(project_id)

        logger.info(
            "Project deleted",
            extra={"project_id": project_id, "inbox_id": inbox.id, "moved_tasks": moved},
        )
        return True

    # Вспомогательные методы (private)

    async def _resolve_inbox(self) -> Project:
        """Найти "Входящие" или создать (без commit, внутри текущей транзакции)."""
        inbox = await self.project_repo.get_inbox()
        if inbox:
            return inbox

        inbox = Project(
            name=settings.INBOX_NAME,
            color=settings.INBOX_COLOR,
            icon=INBOX_ICON,
            sort_order=0,
            created_at=utc_now_iso(),
        )
        inbox = await self.project_repo.create(inbox)
        logger.info("Inbox project created", extra={"project_id": inbox.id})
        return inbox
