"""API endpoints для работы с проектами."""

from fastapi import APIRouter, Depends, Response, status

from ..core.exceptions import NotFoundError
from ..services import ProjectService
from .dependencies import get_project_service
from .schemas import ErrorResponse, ProjectCreate, ProjectRename, ProjectResponse

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=list[ProjectResponse], summary="Список проектов")
async def list_projects(
    service: ProjectService = Depends(get_project_service),
) -> list[ProjectResponse]:
    """Все проекты в ручном порядке (sort_order, created_at)."""
    projects = await service.list_projects()
    return [ProjectResponse.model_validate(p) for p in projects]


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Создать проект",
    description="""
    Создать проект. Дубликат имени (без учёта регистра) не ошибка:
    к имени добавляется " (2)", " (3)", ...
    """,
    responses={400: {"model": ErrorResponse, "description": "Пустое название"}},
)
async def create_project(
    data: ProjectCreate, service: ProjectService = Depends(get_project_service)
) -> ProjectResponse:
    project = await service.create_project(name=data.name, color=data.color, icon=data.icon)
    return ProjectResponse.model_validate(project)


@router.get("/inbox", response_model=ProjectResponse, summary="Проект 'Входящие'")
async def get_inbox(service: ProjectService = Depends(get_project_service)) -> ProjectResponse:
    """Возвращает "Входящие", создавая проект при первом обращении."""
    return ProjectResponse.model_validate(await service.ensure_inbox())


@router.get(
    "/{project_id}",
    response_model=ProjectResponse,
    summary="Получить проект по ID",
    responses={404: {"model": ErrorResponse, "description": "Проект не найден"}},
)
async def get_project(
    project_id: str, service: ProjectService = Depends(get_project_service)
) -> ProjectResponse:
    return ProjectResponse.model_validate(await service.get_project(project_id))


@router.patch(
    "/{project_id}",
    response_model=ProjectResponse,
    summary="Переименовать проект",
    description="Уникальность имени при переименовании не проверяется.",
    responses={404: {"model": ErrorResponse, "description": "Проект не найден"}},
)
async def rename_project(
    project_id: str,
    data: ProjectRename,
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    project = await service.rename_project(project_id, data.name)
    return ProjectResponse.model_validate(project)


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Удалить проект (задачи переносятся во 'Входящие')",
    responses={
        404: {"model": ErrorResponse, "description": "Проект не найден"},
        409: {"model": ErrorResponse, "description": "'Входящие' удалить нельзя"},
    },
)
async def delete_project(
    project_id: str, service: ProjectService = Depends(get_project_service)
) -> Response:
    if not await service.delete_project_move_to_inbox(project_id):
        raise NotFoundError("Project", project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
