"""Task service with business logic."""

from collections.abc import Iterable
from datetime import date, datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError, ValidationError
from ..core.logging import get_logger
from ..models import PRIORITY_MAX, PRIORITY_MIN, Task, utc_now_iso
from ..repositories import ProjectRepository, SmartView, TaskFilter, TaskRepository
from .base import BaseService, require_text
from .project import ProjectService

logger = get_logger(__name__)

# Поля, которые можно менять через update_task
PATCHABLE_FIELDS = frozenset({"title", "notes", "priority", "due_at", "project_id"})


def normalize_due_date(value: date | str | None) -> str | None:
    """
    Привести дедлайн к строке YYYY-MM-DD.

    Принимает date, datetime (берётся только дата), строку ISO или None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            return date.fromisoformat(value.strip()).isoformat()
        except ValueError:
            raise ValidationError(f"Invalid due date: {value!r}. Use YYYY-MM-DD") from None
    raise ValidationError(f"Invalid due date: {value!r}")


def validate_priority(value: Any) -> int:
    """Priority is an integer 0..3."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Priority must be an integer, got {value!r}")
    if not PRIORITY_MIN <= value <= PRIORITY_MAX:
        raise ValidationError(f"Priority must be between {PRIORITY_MIN} and {PRIORITY_MAX}")
    return value


def parse_view(view: SmartView | str) -> SmartView:
    try:
        return SmartView(view)
    except ValueError:
        allowed = ", ".join(v.value for v in SmartView)
        raise ValidationError(f"Unknown view {view!r}. Use one of: {allowed}") from None


class TaskService(BaseService):
    """
    Сервис для работы с задачами.

    - Выборка задач по представлениям (Today / Upcoming / Completed / All, проект)
    - Создание, частичное обновление, отметка о выполнении, удаление
    - Ручная сортировка (drag-reorder) внутри проекта
    """

    def __init__(self, db: AsyncSession):
        super().__init__(db)
        self.task_repo = TaskRepository(db)
        self.project_repo = ProjectRepository(db)

    async def list_tasks(
        self,
        view: SmartView | str = SmartView.ALL,
        project_id: str | None = None,
        search: str | None = None,
        tag_ids: Iterable[str] | None = None,
        today: date | None = None,
    ) -> list[Task]:
        """
        Получить задачи для представления.

        Args:
            view: today / upcoming / completed / all
            project_id: Если указан - все задачи проекта (view игнорируется)
            search: Подстрока в title или notes (без учёта регистра)
            tag_ids: Задача должна иметь ВСЕ перечисленные теги
            today: Текущая дата (вычисляется один раз; по умолчанию date.today())

        Returns:
            Упорядоченный список (пустой, если ничего не найдено)
        """
        task_filter = TaskFilter(
            today=today or date.today(),
            view=parse_view(view),
            project_id=project_id or None,
            search=search,
            tag_ids=tuple(tag_ids or ()),
        )
        return await self.task_repo.list_filtered(task_filter)

    async def get_task(self, task_id: str) -> Task:
        """
        Получить задачу по ID.

        Raises:
            NotFoundError: Если задача не найдена
        """
        task = await self.task_repo.get_by_id(task_id)
        if not task:
            raise NotFoundError("Task", task_id)
        return task

    async def create_task(self, title: str, project_id: str | None = None) -> Task:
        """
        Создать задачу в конце списка проекта.

        Args:
            title: Название (обрезается по краям)
            project_id: Проект; если не указан - задача попадает во "Входящие"

        Returns:
            Созданная задача (completed=False, priority=0, notes="", due_at=None)

        Raises:
            ValidationError: Если название пустое
            NotFoundError: Если проект не найден
        """
        clean_title = require_text(title, "Task title required")

        if project_id is None:
            project_id = (await ProjectService(self.db).ensure_inbox()).id
        elif not await self.project_repo.exists(project_id):
            raise NotFoundError("Project", project_id)

        async with self.transaction("create_task"):
            now = utc_now_iso()
            task = Task(
                project_id=project_id,
                title=clean_title,
                notes="",
                completed=False,
                priority=PRIORITY_MIN,
                due_at=None,
                sort_order=await self.task_repo.next_sort_order(project_id),
                created_at=now,
                updated_at=now,
            )
            task = await self.task_repo.create(task)

        logger.info("Task created", extra={"task_id": task.id, "project_id": project_id})
        return task

    async def update_task(self, task_id: str, **patch: Any) -> Task:
        """
        Частично обновить задачу.

        Args:
            task_id: ID задачи
            **patch: Любое подмножество {title, notes, priority, due_at, project_id}.
                     Записываются только переданные поля; None в due_at/project_id
                     очищает значение.

        Returns:
            Обновлённая задача (updated_at обновляется всегда, даже при пустом patch)

        Raises:
            ValidationError: Неизвестное поле, пустое название, неверный приоритет/дата
            NotFoundError: Задача или новый проект не найдены
        """
        unknown = set(patch) - PATCHABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown task fields: {', '.join(sorted(unknown))}")

        updates: dict[str, Any] = {}
        if "title" in patch:
            updates["title"] = require_text(patch["title"], "Task title required")
        if "notes" in patch:
            updates["notes"] = patch["notes"] or ""
        if "priority" in patch:
            updates["priority"] = validate_priority(patch["priority"])
        if "due_at" in patch:
            updates["due_at"] = normalize_due_date(patch["due_at"])
        if "project_id" in patch:
            new_project_id = patch["project_id"]
            if new_project_id is not None and not await self.project_repo.exists(new_project_id):
                raise NotFoundError("Project", new_project_id)
            updates["project_id"] = new_project_id

        updates["updated_at"] = utc_now_iso()

        async with self.transaction("update_task"):
            task = await self.task_repo.update(task_id, **updates)
            if not task:
                raise NotFoundError("Task", task_id)

        return task

    async def toggle_task_completed(self, task_id: str, completed: bool) -> Task:
        """
        Отметить задачу выполненной / невыполненной.

        sort_order не меняется: при повторном открытии задача
        возвращается на прежнее место.
        """
        async with self.transaction("toggle_task_completed"):
            task = await self.task_repo.update(
                task_id, completed=bool(completed), updated_at=utc_now_iso()
            )
            if not task:
                raise NotFoundError("Task", task_id)

        return task

    async def delete_task(self, task_id: str) -> bool:
        """
        Удалить задачу. Связи с тегами удаляются каскадно (ON DELETE CASCADE).

        Returns:
            True если удалена, False если задачи не было
        """
        async with self.transaction("delete_task"):
            deleted = await self.task_repo.delete(task_id)

        if deleted:
            logger.info("Task deleted", extra={"task_id": task_id})
        return deleted

    async def reorder_tasks(self, project_id: str | None, ordered_ids: list[str]) -> int:
        """
        Переписать ручной порядок задач проекта.

        Args:
            project_id: Проект (None - задачи без проекта)
            ordered_ids: Полный или частичный порядок; sort_order = индекс в списке

        Returns:
            Количество обновлённых задач. Задачи из другого проекта
            молча пропускаются.

        Одна транзакция: все позиции применяются целиком или никак.
        """
        updated = 0
        async with self.transaction("reorder_tasks"):
            updated_at = utc_now_iso()
            for index, task_id in enumerate(ordered_ids):
                if await self.task_repo.set_sort_order(task_id, project_id, index, updated_at):
                    updated += 1

        logger.info(
            "Tasks reordered",
            extra={"project_id": project_id, "requested": len(ordered_ids), "updated": updated},
        )
        return updated
