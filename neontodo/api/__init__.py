"""API layer - FastAPI endpoints."""

from .backup import router as backup_router
from .projects import router as projects_router
from .tags import router as tags_router
from .tasks import router as tasks_router

__all__ = [
    "projects_router",
    "tasks_router",
    "tags_router",
    "backup_router",
]
