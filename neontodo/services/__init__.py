"""Service layer with business logic."""

from .backup import BACKUP_VERSION, BackupService, ImportResult, parse_bundle, validate_bundle
from .base import BaseService
from .project import ProjectService
from .tag import TagService
from .task import TaskService

__all__ = [
    "BaseService",
    "ProjectService",
    "TaskService",
    "TagService",
    "BackupService",
    "ImportResult",
    "BACKUP_VERSION",
    "parse_bundle",
    "validate_bundle",
]
