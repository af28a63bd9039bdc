"""
API endpoints для работы с задачами.

- Выборка по представлениям (Today / Upcoming / Completed / All, проект, поиск, теги)
- Создание, частичное обновление, отметка о выполнении, удаление
- Ручной порядок (drag-reorder)
- Теги задачи
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status

from ..core.exceptions import NotFoundError
from ..repositories import SmartView
from ..services import TagService, TaskService
from .dependencies import get_tag_service, get_task_service
from .schemas import (
    ChangedResponse,
    ErrorResponse,
    ReorderResultResponse,
    TagResponse,
    TaskCompletedUpdate,
    TaskCreate,
    TaskReorder,
    TaskResponse,
    TaskUpdate,
)

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get(
    "",
    response_model=list[TaskResponse],
    summary="Получить задачи представления",
    description="""
    **Представления (view):**
    - today: невыполненные с дедлайном сегодня
    - upcoming: невыполненные с дедлайном после сегодня или без дедлайна
    - completed: выполненные
    - all: все

    project_id переопределяет view: все задачи проекта в ручном порядке.
    Все фильтры комбинируются через AND; tag_ids - задача должна иметь все теги.
    """,
)
async def list_tasks(
    view: SmartView = Query(SmartView.ALL, description="today, upcoming, completed, all"),
    project_id: str | None = Query(None, description="Все задачи проекта"),
    search: str | None = Query(None, description="Подстрока в названии или заметках"),
    tag_ids: list[str] = Query(default=[], description="ID тегов (AND)"),
    today: date | None = Query(None, description="Текущая дата клиента (YYYY-MM-DD)"),
    service: TaskService = Depends(get_task_service),
) -> list[TaskResponse]:
    """
    Примеры запросов:
    ```
    GET /tasks?view=today
    GET /tasks?view=upcoming&search=report
    GET /tasks?project_id=3f2c...&tag_ids=a&tag_ids=b
    ```
    """
    tasks = await service.list_tasks(
        view=view, project_id=project_id, search=search, tag_ids=tag_ids, today=today
    )
    return [TaskResponse.model_validate(t) for t in tasks]


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Создать задачу",
    responses={
        400: {"model": ErrorResponse, "description": "Пустое название"},
        404: {"model": ErrorResponse, "description": "Проект не найден"},
    },
)
async def create_task(
    data: TaskCreate, service: TaskService = Depends(get_task_service)
) -> TaskResponse:
    task = await service.create_task(title=data.title, project_id=data.project_id)
    return TaskResponse.model_validate(task)


@router.post("/reorder", response_model=ReorderResultResponse, summary="Изменить порядок задач")
async def reorder_tasks(
    data: TaskReorder, service: TaskService = Depends(get_task_service)
) -> ReorderResultResponse:
    """sort_order = индекс в ordered_ids; задачи другого проекта пропускаются."""
    updated = await service.reorder_tasks(data.project_id, data.ordered_ids)
    return ReorderResultResponse(updated=updated)


@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Получить задачу по ID",
    responses={404: {"model": ErrorResponse, "description": "Задача не найдена"}},
)
async def get_task(task_id: str, service: TaskService = Depends(get_task_service)) -> TaskResponse:
    return TaskResponse.model_validate(await service.get_task(task_id))


@router.patch(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Частично обновить задачу",
    responses={404: {"model": ErrorResponse, "description": "Задача не найдена"}},
)
async def update_task(
    task_id: str, data: TaskUpdate, service: TaskService = Depends(get_task_service)
) -> TaskResponse:
    # Только явно переданные поля
    task = await service.update_task(task_id, **data.model_dump(exclude_unset=True))
    return TaskResponse.model_validate(task)


@router.put("/{task_id}/completed", response_model=TaskResponse, summary="Отметить выполнение")
async def set_task_completed(
    task_id: str,
    data: TaskCompletedUpdate,
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    task = await service.toggle_task_completed(task_id, data.completed)
    return TaskResponse.model_validate(task)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Удалить задачу",
    responses={404: {"model": ErrorResponse, "description": "Задача не найдена"}},
)
async def delete_task(task_id: str, service: TaskService = Depends(get_task_service)) -> Response:
    if not await service.delete_task(task_id):
        raise NotFoundError("Task", task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# TASK TAGS
# ============================================================================


@router.get("/{task_id}/tags", response_model=list[TagResponse], summary="Теги задачи")
async def get_task_tags(
    task_id: str, service: TagService = Depends(get_tag_service)
) -> list[TagResponse]:
    return [TagResponse.model_validate(t) for t in await service.get_task_tags(task_id)]


@router.put(
    "/{task_id}/tags/{tag_id}", response_model=ChangedResponse, summary="Привязать тег к задаче"
)
async def attach_tag(
    task_id: str, tag_id: str, service: TagService = Depends(get_tag_service)
) -> ChangedResponse:
    """Идемпотентно: повторная привязка возвращает changed=false."""
    return ChangedResponse(changed=await service.attach_tag_to_task(task_id, tag_id))


@router.delete(
    "/{task_id}/tags/{tag_id}", response_model=ChangedResponse, summary="Отвязать тег от задачи"
)
async def detach_tag(
    task_id: str, tag_id: str, service: TagService = Depends(get_tag_service)
) -> ChangedResponse:
    """Идемпотентно: отвязка отсутствующего тега возвращает changed=false."""
    return ChangedResponse(changed=await service.detach_tag_from_task(task_id, tag_id))
