"""
Query builder for task listings.

A view descriptor (smart view, optional project scope, free-text search,
tag-id set) is turned into a list of typed filter clauses with bound
parameters and then into one SELECT. User input never reaches the SQL text.
"""

import enum
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import Select, and_, case, distinct, func, or_, select

from ..models import Task, task_tags

LIKE_ESCAPE = "\\"


class SmartView(str, enum.Enum):
    """Predefined, non-project-scoped task filters."""

    TODAY = "today"
    UPCOMING = "upcoming"
    COMPLETED = "completed"
    ALL = "all"


@dataclass(frozen=True)
class TaskFilter:
    """
    View descriptor supplied by the UI.

    ``today`` is computed once by the caller; project scope overrides the view.
    """

    today: date
    view: SmartView = SmartView.ALL
    project_id: str | None = None
    search: str | None = None
    tag_ids: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_project_scoped(self) -> bool:
        return bool(self.project_id)


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so the search text is matched literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def unique_tag_ids(tag_ids) -> tuple[str, ...]:
    """Drop empty and repeated ids, keep first-seen order."""
    seen: dict[str, None] = {}
    for tag_id in tag_ids or ():
        if tag_id:
            seen.setdefault(tag_id, None)
    return tuple(seen)


def view_conditions(view: SmartView, today: date) -> list:
    """Completion and due-date clauses of a smart view."""
    today_iso = today.isoformat()

    if view == SmartView.COMPLETED:
        return [Task.completed == True]  # noqa: E712
    if view == SmartView.TODAY:
        return [Task.completed == False, Task.due_at == today_iso]  # noqa: E712
    if view == SmartView.UPCOMING:
        # Undated tasks are part of "upcoming" (they sort after dated ones)
        return [
            Task.completed == False,  # noqa: E712
            or_(Task.due_at.is_(None), Task.due_at > today_iso),
        ]
    return []


def search_condition(search: str | None):
    """Case-insensitive substring match on title OR notes; blank search is no filter."""
    if not search or not search.strip():
        return None
    pattern = f"%{escape_like(search.strip())}%"
    return or_(
        Task.title.ilike(pattern, escape=LIKE_ESCAPE),
        Task.notes.ilike(pattern, escape=LIKE_ESCAPE),
    )


def tags_condition(tag_ids: tuple[str, ...]):
    """
    AND semantics: the task must carry every requested tag.

    SQL эквивалент:
        t.id IN (SELECT task_id FROM task_tags
                 WHERE tag_id IN (:ids)
                 GROUP BY task_id
                 HAVING COUNT(DISTINCT tag_id) = :n)
    """
    if not tag_ids:
        return None
    matching = (
        select(task_tags.c.task_id)
        .where(task_tags.c.tag_id.in_(tag_ids))
        .group_by(task_tags.c.task_id)
        .having(func.count(distinct(task_tags.c.tag_id)) == len(tag_ids))
    )
    return Task.id.in_(matching)


def build_conditions(task_filter: TaskFilter) -> list:
    """All filter clauses of a descriptor, combined later with AND."""
    conditions = []

    if task_filter.is_project_scoped:
        # Whole project regardless of completion; the caller splits open/done
        conditions.append(Task.project_id == task_filter.project_id)
    else:
        conditions.extend(view_conditions(task_filter.view, task_filter.today))

    search = search_condition(task_filter.search)
    if search is not None:
        conditions.append(search)

    tags = tags_condition(unique_tag_ids(task_filter.tag_ids))
    if tags is not None:
        conditions.append(tags)

    return conditions


def ordering(task_filter: TaskFilter) -> list:
    """Manual order inside a project; by due date (undated last) in smart views."""
    if task_filter.is_project_scoped:
        return [Task.sort_order.asc(), Task.created_at.asc()]
    return [
        case((Task.due_at.is_(None), 1), else_=0),
        Task.due_at.asc(),
        Task.sort_order.asc(),
        Task.created_at.asc(),
    ]


def build_task_query(task_filter: TaskFilter) -> Select:
    """Compose the final SELECT for a view descriptor."""
    query = select(Task)
    conditions = build_conditions(task_filter)
    if conditions:
        query = query.where(and_(*conditions))
    return query.order_by(*ordering(task_filter))
