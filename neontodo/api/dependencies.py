"""
Dependencies для FastAPI endpoints.

Каждый запрос получает одну сессию БД; сервисы создаются поверх неё:

    async def create_project(
        service: ProjectService = Depends(get_project_service)
    ):
        ...
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..services import BackupService, ProjectService, TagService, TaskService

__all__ = [
    "get_db",
    "get_project_service",
    "get_task_service",
    "get_tag_service",
    "get_backup_service",
]


async def get_project_service(db: AsyncSession = Depends(get_db)) -> ProjectService:
    """Dependency для ProjectService."""
    return ProjectService(db)


async def get_task_service(db: AsyncSession = Depends(get_db)) -> TaskService:
    """Dependency для TaskService."""
    return TaskService(db)


async def get_tag_service(db: AsyncSession = Depends(get_db)) -> TagService:
    """Dependency для TagService."""
    return TagService(db)


async def get_backup_service(db: AsyncSession = Depends(get_db)) -> BackupService:
    """Dependency для BackupService."""
    return BackupService(db)
