"""SQLAlchemy models for NeonTodo."""

from .base import Base, IntBoolean, new_id, utc_now_iso
from .project import INBOX_ICON, Project
from .tag import Tag
from .task import PRIORITY_MAX, PRIORITY_MIN, Task
from .task_tag import task_tags

__all__ = [
    "Base",
    "IntBoolean",
    "new_id",
    "utc_now_iso",
    "Project",
    "INBOX_ICON",
    "Tag",
    "Task",
    "PRIORITY_MIN",
    "PRIORITY_MAX",
    "task_tags",
]
