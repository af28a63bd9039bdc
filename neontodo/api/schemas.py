"""
Pydantic схемы для API.

DTOs (Data Transfer Objects) - объекты для передачи данных через HTTP.
Поля в snake_case, как и колонки хранилища.
"""

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..repositories import SmartView

# ============================================================================
# PROJECT SCHEMAS
# ============================================================================


class ProjectCreate(BaseModel):
    """
    Схема для создания проекта (POST /projects).

    Пример запроса:
    {
        "name": "Work",
        "color": "#ff00aa",
        "icon": "briefcase"
    }
    """

    name: str = Field(..., min_length=1, description="Название проекта")
    color: str | None = Field(None, description="Цвет для отображения")
    icon: str | None = Field(None, description="Иконка ('inbox' зарезервирована)")


class ProjectRename(BaseModel):
    """Схема для переименования проекта (PATCH /projects/{id})."""

    name: str = Field(..., min_length=1)


class ProjectResponse(BaseModel):
    """Проект в ответе API."""

    id: str
    name: str
    color: str | None
    icon: str | None
    sort_order: int
    created_at: str

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# TASK SCHEMAS
# ============================================================================


class TaskCreate(BaseModel):
    """
    Схема для создания задачи (POST /tasks).

    Без project_id задача попадает во "Входящие".
    """

    title: str = Field(..., min_length=1, description="Название задачи")
    project_id: str | None = Field(None, description="ID проекта")


class TaskUpdate(BaseModel):
    """
    Схема для частичного обновления задачи (PATCH /tasks/{id}).

    Записываются только переданные поля (exclude_unset);
    явный null в due_at / project_id очищает значение.
    """

    title: str | None = Field(None, min_length=1)
    notes: str | None = None
    priority: int | None = Field(None, ge=0, le=3)
    due_at: date | None = None
    project_id: str | None = None


class TaskCompletedUpdate(BaseModel):
    """Схема для PUT /tasks/{id}/completed."""

    completed: bool


class TaskReorder(BaseModel):
    """
    Схема для POST /tasks/reorder.

    Пример:
    {
        "project_id": "3f2c...",
        "ordered_ids": ["c", "a", "b"]
    }
    """

    project_id: str | None = None
    ordered_ids: list[str] = Field(default_factory=list)


class TaskResponse(BaseModel):
    """Задача в ответе API."""

    id: str
    project_id: str | None
    title: str
    notes: str
    completed: bool
    priority: int
    due_at: str | None
    sort_order: int
    created_at: str
    updated_at: str

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# TAG SCHEMAS
# ============================================================================


class TagCreate(BaseModel):
    """Схема для POST /tags (идемпотентно: существующий тег возвращается как есть)."""

    name: str = Field(..., min_length=1, description="Название тега (с учётом регистра)")


class TagResponse(BaseModel):
    """Тег в ответе API."""

    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class ChangedResponse(BaseModel):
    """Результат идемпотентной операции: изменилось ли что-то."""

    changed: bool


# ============================================================================
# BACKUP SCHEMAS
# ============================================================================


class ImportResultResponse(BaseModel):
    """Результат импорта резервной копии."""

    projects: int
    tasks: int
    tags: int
    task_tags: int
    skipped: int

    model_config = ConfigDict(from_attributes=True)


class ReorderResultResponse(BaseModel):
    updated: int


BackupDocument = dict[str, Any]


# ============================================================================
# COMMON SCHEMAS
# ============================================================================


class ErrorDetail(BaseModel):
    """
    Детали ошибки для конкретного поля.

    Пример:
    {
        "field": "name",
        "message": "String should have at least 1 character"
    }
    """

    field: str = Field(..., description="Название поля с ошибкой")
    message: str = Field(..., description="Описание ошибки")


class ErrorBody(BaseModel):
    """
    Тело ошибки с кодом и деталями.

    Коды:
    - VALIDATION_ERROR: ошибка валидации
    - NOT_FOUND: ресурс не найден
    - PROTECTED: "Входящие" нельзя удалить
    - BACKUP_FORMAT: неподдерживаемая резервная копия
    - STORAGE_ERROR: ошибка базы данных (транзакция откачена)
    """

    code: str = Field(..., description="Код ошибки")
    message: str = Field(..., description="Человекочитаемое сообщение")
    details: list[ErrorDetail] | None = Field(default=None)


class ErrorResponse(BaseModel):
    """
    Единый формат ответа для всех ошибок API.

    Пример:
    {
        "error": {
            "code": "PROTECTED",
            "message": "Inbox cannot be deleted",
            "details": null
        }
    }
    """

    error: ErrorBody
