"""
API endpoints для резервного копирования.

Импорт перезаписывает записи с совпадающими id без возможности отмены:
подтверждение у пользователя запрашивает клиент ДО вызова POST /backup/import.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends

from ..services import BackupService
from .dependencies import get_backup_service
from .schemas import BackupDocument, ErrorResponse, ImportResultResponse

router = APIRouter(prefix="/backup", tags=["backup"])


@router.get("/export", summary="Экспорт всего хранилища")
async def export_backup(service: BackupService = Depends(get_backup_service)) -> BackupDocument:
    """
    Пример ответа:
    ```json
    {"version": 1, "exportedAt": "2026-10-19T12:00:00.000Z",
     "projects": [...], "tasks": [...], "tags": [...], "task_tags": [...]}
    ```
    """
    return await service.export_bundle()


@router.post(
    "/import",
    response_model=ImportResultResponse,
    summary="Импорт (слияние по id)",
    responses={400: {"model": ErrorResponse, "description": "Неподдерживаемый формат"}},
)
async def import_backup(
    document: dict[str, Any] = Body(..., description="Документ из GET /backup/export"),
    service: BackupService = Depends(get_backup_service),
) -> ImportResultResponse:
    result = await service.import_bundle(document)
    return ImportResultResponse.model_validate(result)
