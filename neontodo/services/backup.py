"""Backup service: JSON export of the whole store and merge-by-identity import."""

import inspect
import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import BackupFormatError, OperationCancelled
from ..core.logging import get_logger
from ..models import Project, Tag, Task, task_tags, utc_now_iso
from ..repositories import ProjectRepository, TagRepository, TaskRepository
from .base import BaseService

logger = get_logger(__name__)

BACKUP_VERSION = 1
SECTIONS = ("projects", "tasks", "tags", "task_tags")

# Callbacks supplied by the UI (file picker, confirmation dialog), sync or async
PathChooser = Callable[..., Any]
Confirmation = Callable[[], Any]


@dataclass
class ImportResult:
    """Counts of rows applied per table and rows skipped for missing identity."""

    projects: int = 0
    tasks: int = 0
    tags: int = 0
    task_tags: int = 0
    skipped: int = 0


def default_backup_filename(today: date | None = None) -> str:
    """neontodo-backup-YYYY-MM-DD.json"""
    return f"neontodo-backup-{(today or date.today()).isoformat()}.json"


def validate_bundle(document: Any) -> dict[str, Any]:
    """
    Check the envelope of a backup document.

    Raises:
        BackupFormatError: not an object, version is not the supported one,
            or a section is present but not a list
    """
    if not isinstance(document, Mapping):
        raise BackupFormatError("Unsupported backup format")

    version = document.get("version")
    # bool is an int subclass: True must not pass as version 1
    if type(version) is not int or version != BACKUP_VERSION:
        raise BackupFormatError("Unsupported backup format")

    for section in SECTIONS:
        rows = document.get(section)
        if rows is not None and not isinstance(rows, list):
            raise BackupFormatError(f"Backup section '{section}' must be a list")

    return dict(document)


def parse_bundle(text: str) -> dict[str, Any]:
    """Decode a JSON backup and validate it."""
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise BackupFormatError(f"Backup is not valid JSON: {e.msg}") from e
    return validate_bundle(document)


# Rows are exported with the storage column names (snake_case)


def project_row(project: Project) -> dict[str, Any]:
    return {
        "id": project.id,
        "name": project.name,
        "color": project.color,
        "icon": project.icon,
        "sort_order": project.sort_order,
        "created_at": project.created_at,
    }


def task_row(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "project_id": task.project_id,
        "title": task.title,
        "notes": task.notes,
        "completed": 1 if task.completed else 0,
        "priority": task.priority,
        "due_at": task.due_at,
        "sort_order": task.sort_order,
        "created_at": task.created_at,
        "updated_at": task.updated_at,
    }


def tag_row(tag: Tag) -> dict[str, Any]:
    return {"id": tag.id, "name": tag.name}


async def _resolve(value):
    """Await the callback result if it is awaitable."""
    if inspect.isawaitable(value):
        return await value
    return value


class BackupService(BaseService):
    """
    Service for backup export/import.

    Import is a merge by primary identity: incoming rows overwrite rows with the
    same id, other rows are left alone. The whole import is one transaction.
    Asking the user for confirmation before importing is the caller's job.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(db)
        self.project_repo = ProjectRepository(db)
        self.task_repo = TaskRepository(db)
        self.tag_repo = TagRepository(db)

    async def export_bundle(self) -> dict[str, Any]:
        """Snapshot the whole store as a version-1 backup document.

        Projects by (sort_order, created_at), tasks by created_at,
        tags by name, associations unordered.
        """
        projects = await self.project_repo.get_ordered()
        tasks = await self.db.execute(select(Task).order_by(Task.created_at.asc()))
        tags = await self.tag_repo.get_ordered()
        links = await self.db.execute(select(task_tags.c.task_id, task_tags.c.tag_id))

        return {
            "version": BACKUP_VERSION,
            "exportedAt": utc_now_iso(),
            "projects": [project_row(p) for p in projects],
            "tasks": [task_row(t) for t in tasks.scalars().all()],
            "tags": [tag_row(t) for t in tags],
            "task_tags": [{"task_id": r.task_id, "tag_id": r.tag_id} for r in links],
        }

    async def import_bundle(self, document: Mapping[str, Any]) -> ImportResult:
        """Merge a backup document into the store.

        Args:
            document: Parsed backup (see ``export_bundle``)

        Returns:
            ImportResult with per-table counts

        Raises:
            BackupFormatError: Wrong envelope or a row with unusable values
            SQLAlchemyError: Storage failure (e.g. a task pointing at an unknown
                project). The transaction is rolled back; the store is unchanged.
        """
        bundle = validate_bundle(document)
        result = ImportResult()

        async with self.transaction("import_bundle"):
            for row in bundle.get("projects") or []:
                if await self._upsert_project(row):
                    result.projects += 1
                else:
                    result.skipped += 1

            for row in bundle.get("tasks") or []:
                if await self._upsert_task(row):
                    result.tasks += 1
                else:
                    result.skipped += 1

            for row in bundle.get("tags") or []:
                if await self._upsert_tag(row):
                    result.tags += 1
                else:
                    result.skipped += 1

            for row in bundle.get("task_tags") or []:
                if not _has(row, "task_id", "tag_id"):
                    result.skipped += 1
                    continue
                await self.task_repo.add_tag(row["task_id"], row["tag_id"])
                result.task_tags += 1

        logger.info(
            "Backup imported",
            extra={
                "projects": result.projects,
                "tasks": result.tasks,
                "tags": result.tags,
                "task_tags": result.task_tags,
                "skipped": result.skipped,
            },
        )
        return result

    async def export_to_file(self, choose_path: PathChooser) -> Path | None:
        """Export to a JSON file picked by the user.

        Args:
            choose_path: Called with the suggested path; returns the target path
                or None when the user cancels.

        Returns:
            Path written, or None if cancelled
        """
        suggested = Path(settings.BACKUP_DIR) / default_backup_filename()
        try:
            picked = await _resolve(choose_path(suggested))
        except OperationCancelled:
            picked = None
        if not picked:
            logger.info("Export cancelled")
            return None

        path = Path(picked)
        bundle = await self.export_bundle()
        path.write_text(json.dumps(bundle, indent=2, ensure_ascii=False), encoding="utf-8")

        logger.info("Backup exported", extra={"path": str(path), "tasks": len(bundle["tasks"])})
        return path

    async def import_from_file(
        self, choose_path: PathChooser, confirm_merge: Confirmation
    ) -> Path | None:
        """Import a JSON backup picked by the user, after confirmation.

        Args:
            choose_path: Returns the file to import, or None when cancelled
            confirm_merge: Asks the user to accept that matching ids are overwritten

        Returns:
            Path imported, or None if the user cancelled at either step
        """
        try:
            picked = await _resolve(choose_path())
            if not picked:
                raise OperationCancelled("no file selected")
            if not await _resolve(confirm_merge()):
                raise OperationCancelled("merge not confirmed")
        except OperationCancelled as e:
            logger.info("Import cancelled", extra={"reason": str(e)})
            return None

        path = Path(picked)
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise BackupFormatError(f"Backup is not valid UTF-8: {e.reason}") from e
        bundle = parse_bundle(text)
        await self.import_bundle(bundle)
        return path

    # Upserts: load by primary key, overwrite replaceable columns or insert

    async def _upsert_project(self, row: Any) -> bool:
        if not _has(row, "id", "name"):
            return False
        try:
            values = {
                "name": str(row["name"]),
                "color": row.get("color"),
                "icon": row.get("icon"),
                "sort_order": int(row.get("sort_order") or 0),
                "created_at": row.get("created_at") or utc_now_iso(),
            }
        except (TypeError, ValueError) as e:
            raise BackupFormatError(f"Invalid project row {row['id']!r}: {e}") from e
        await self._upsert(Project, row["id"], values)
        return True

    async def _upsert_task(self, row: Any) -> bool:
        if not _has(row, "id", "title"):
            return False
        try:
            values = {
                "project_id": row.get("project_id"),
                "title": str(row["title"]),
                "notes": row.get("notes") or "",
                "completed": bool(int(row.get("completed") or 0)),
                "priority": int(row.get("priority") or 0),
                "due_at": row.get("due_at"),
                "sort_order": int(row.get("sort_order") or 0),
                "created_at": row.get("created_at") or utc_now_iso(),
                "updated_at": row.get("updated_at") or utc_now_iso(),
            }
        except (TypeError, ValueError) as e:
            raise BackupFormatError(f"Invalid task row {row['id']!r}: {e}") from e
        await self._upsert(Task, row["id"], values)
        return True

    async def _upsert_tag(self, row: Any) -> bool:
        if not _has(row, "id", "name"):
            return False
        name = str(row["name"])
        # Same unique name under another id: the incoming row takes its place
        holder = await self.tag_repo.get_by_name(name)
        if holder is not None and holder.id != row["id"]:
            await self.tag_repo.delete(holder.id)
        await self._upsert(Tag, row["id"], {"name": name})
        return True

    async def _upsert(self, model, identity: str, values: dict[str, Any]) -> None:
        obj = await self.db.get(model, identity)
        if obj is None:
            self.db.add(model(id=identity, **values))
        else:
            for key, value in values.items():
                setattr(obj, key, value)
        # Flush row by row: later rows may reference this one
        await self.db.flush()


def _has(row: Any, *keys: str) -> bool:
    """Row is a mapping with every key present and truthy."""
    return isinstance(row, Mapping) and all(row.get(key) for key in keys)
