"""Repository layer for data access."""

from .base import BaseRepository
from .project import ProjectRepository
from .tag import TagRepository
from .task import TaskRepository
from .task_query import SmartView, TaskFilter, build_task_query

__all__ = [
    "BaseRepository",
    "ProjectRepository",
    "TaskRepository",
    "TagRepository",
    "SmartView",
    "TaskFilter",
    "build_task_query",
]
