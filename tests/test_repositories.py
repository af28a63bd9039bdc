"""
Тесты для Repository Layer.

Проверяем:
- CRUD операции BaseRepository
- Ручной порядок (next_sort_order, set_sort_order)
- Поиск проекта "Входящие"
- Связи задача-тег и каскадное удаление
- Ограничения схемы (FK, UNIQUE, хранение completed как 0/1)
"""

import pytest
from sqlalchemy import func, select, text
from sqlalchemy.exc import IntegrityError

from neontodo.models import Project, Tag, Task, task_tags
from neontodo.repositories import ProjectRepository, TagRepository, TaskRepository


async def add_project(
    db, name: str, sort_order: int = 0, icon: str | None = None, created_at: str | None = None
) -> Project:
    project = Project(name=name, sort_order=sort_order, icon=icon)
    if created_at:
        project.created_at = created_at
    project = await ProjectRepository(db).create(project)
    await db.commit()
    return project


async def add_task(db, title: str, project_id: str | None, sort_order: int = 0) -> Task:
    task = await TaskRepository(db).create(
        Task(title=title, project_id=project_id, sort_order=sort_order)
    )
    await db.commit()
    return task


async def link_count(db) -> int:
    result = await db.execute(select(func.count()).select_from(task_tags))
    return result.scalar_one()


# ============================================================================
# PROJECT REPOSITORY TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_project_create_defaults(test_db):
    """Test: создание проекта заполняет id, created_at и sort_order."""
    project = await add_project(test_db, "Work")

    assert project.id
    assert project.name == "Work"
    assert project.color is None
    assert project.sort_order == 0
    assert project.created_at.endswith("Z")


@pytest.mark.asyncio
async def test_project_crud(test_db):
    """Test: get_by_id / update / delete / exists / count."""
    repo = ProjectRepository(test_db)
    project = await add_project(test_db, "Old")

    found = await repo.get_by_id(project.id)
    assert found is not None and found.id == project.id

    updated = await repo.update(project.id, name="New", color="#ff00aa")
    await test_db.commit()
    assert updated.name == "New"
    assert updated.color == "#ff00aa"

    assert await repo.update("missing", name="x") is None
    assert await repo.exists(project.id)
    assert await repo.count() == 1

    assert await repo.delete(project.id) is True
    await test_db.commit()
    assert await repo.delete(project.id) is False
    assert await repo.count() == 0


@pytest.mark.asyncio
async def test_project_get_ordered(test_db):
    """Test: порядок (sort_order asc, created_at asc)."""
    c = await add_project(test_db, "C", sort_order=1, created_at="2026-01-02T00:00:00.000Z")
    b = await add_project(test_db, "B", sort_order=1, created_at="2026-01-01T00:00:00.000Z")
    a = await add_project(test_db, "A", sort_order=0, created_at="2026-01-03T00:00:00.000Z")

    projects = await ProjectRepository(test_db).get_ordered()

    assert [p.id for p in projects] == [a.id, b.id, c.id]


@pytest.mark.asyncio
async def test_project_next_sort_order(test_db):
    """Test: next_sort_order = 0 на пустой таблице, затем max + 1."""
    repo = ProjectRepository(test_db)
    assert await repo.next_sort_order() == 0

    await add_project(test_db, "A", sort_order=4)
    await add_project(test_db, "B", sort_order=2)

    assert await repo.next_sort_order() == 5


@pytest.mark.asyncio
async def test_project_get_inbox_by_icon(test_db):
    """Test: "Входящие" находятся по маркеру icon, даже с другим именем."""
    await add_project(test_db, "Work")
    inbox = await add_project(test_db, "Входящие", icon="inbox")

    found = await ProjectRepository(test_db).get_inbox()

    assert found is not None
    assert found.id == inbox.id
    assert found.is_inbox


@pytest.mark.asyncio
async def test_project_get_inbox_by_name(test_db):
    """Test: без маркера "Входящие" находятся по имени без учёта регистра."""
    inbox = await add_project(test_db, "INBOX")

    found = await ProjectRepository(test_db).get_inbox()

    assert found is not None and found.id == inbox.id


@pytest.mark.asyncio
async def test_project_get_inbox_missing(test_db):
    """Test: проекта "Входящие" нет."""
    await add_project(test_db, "Work")

    assert await ProjectRepository(test_db).get_inbox() is None


# ============================================================================
# TASK REPOSITORY TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_task_create_defaults(test_db):
    """Test: значения по умолчанию у новой задачи."""
    project = await add_project(test_db, "Work")
    task = await add_task(test_db, "Write report", project.id)

    assert task.id
    assert task.notes == ""
    assert task.completed is False
    assert task.priority == 0
    assert task.due_at is None
    assert task.updated_at


@pytest.mark.asyncio
async def test_task_completed_stored_as_integer(test_db):
    """Test: completed хранится в колонке INTEGER как 0/1."""
    task = await add_task(test_db, "Done", None)
    await TaskRepository(test_db).update(task.id, completed=True)
    await test_db.commit()

    result = await test_db.execute(
        text("SELECT completed FROM tasks WHERE id = :id"), {"id": task.id}
    )
    assert result.scalar_one() == 1


@pytest.mark.asyncio
async def test_task_next_sort_order_per_project(test_db):
    """Test: next_sort_order считается внутри проекта (NULL - отдельная область)."""
    repo = TaskRepository(test_db)
    a = await add_project(test_db, "A")
    b = await add_project(test_db, "B")

    await add_task(test_db, "a1", a.id, sort_order=0)
    await add_task(test_db, "a2", a.id, sort_order=7)
    await add_task(test_db, "loose", None, sort_order=3)

    assert await repo.next_sort_order(a.id) == 8
    assert await repo.next_sort_order(b.id) == 0
    assert await repo.next_sort_order(None) == 4


@pytest.mark.asyncio
async def test_task_move_to_project(test_db):
    """Test: move_to_project переносит все задачи и возвращает их количество."""
    repo = TaskRepository(test_db)
    src = await add_project(test_db, "Src")
    dst = await add_project(test_db, "Dst")
    other = await add_project(test_db, "Other")
    await add_task(test_db, "t1", src.id)
    await add_task(test_db, "t2", src.id)
    untouched = await add_task(test_db, "t3", other.id)

    moved = await repo.move_to_project(src.id, dst.id, "2030-01-01T00:00:00.000Z")
    await test_db.commit()

    assert moved == 2
    result = await test_db.execute(select(Task.title).where(Task.project_id == dst.id))
    assert sorted(result.scalars().all()) == ["t1", "t2"]
    result = await test_db.execute(select(Task.project_id).where(Task.id == untouched.id))
    assert result.scalar_one() == other.id


@pytest.mark.asyncio
async def test_task_set_sort_order_guarded_by_project(test_db):
    """Test: set_sort_order не трогает задачу из другого проекта."""
    repo = TaskRepository(test_db)
    a = await add_project(test_db, "A")
    b = await add_project(test_db, "B")
    task = await add_task(test_db, "t", a.id, sort_order=5)

    assert await repo.set_sort_order(task.id, b.id, 0, "2030-01-01T00:00:00.000Z") is False
    assert await repo.set_sort_order(task.id, None, 0, "2030-01-01T00:00:00.000Z") is False
    assert await repo.set_sort_order(task.id, a.id, 1, "2030-01-01T00:00:00.000Z") is True
    await test_db.commit()

    result = await test_db.execute(select(Task.sort_order).where(Task.id == task.id))
    assert result.scalar_one() == 1


@pytest.mark.asyncio
async def test_task_set_sort_order_null_project(test_db):
    """Test: project_id=None совпадает только с задачами без проекта."""
    repo = TaskRepository(test_db)
    loose = await add_task(test_db, "loose", None, sort_order=9)

    assert await repo.set_sort_order(loose.id, None, 0, "2030-01-01T00:00:00.000Z") is True


@pytest.mark.asyncio
async def test_task_unknown_project_violates_foreign_key(test_db):
    """Test: PRAGMA foreign_keys включён - ссылка на несуществующий проект запрещена."""
    with pytest.raises(IntegrityError):
        await TaskRepository(test_db).create(Task(title="Orphan", project_id="no-such-project"))
    await test_db.rollback()


@pytest.mark.asyncio
async def test_deleting_project_row_nulls_task_project(test_db):
    """Test: ON DELETE SET NULL - прямое удаление проекта не удаляет задачи."""
    project = await add_project(test_db, "Doomed")
    task = await add_task(test_db, "Survivor", project.id)

    await ProjectRepository(test_db).delete(project.id)
    await test_db.commit()

    result = await test_db.execute(select(Task.project_id).where(Task.id == task.id))
    assert result.scalar_one() is None


# ============================================================================
# TAG / TASK-TAG TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_tag_get_by_name_case_sensitive(test_db):
    """Test: get_by_name ищет точное совпадение с учётом регистра."""
    repo = TagRepository(test_db)
    tag = await repo.create(Tag(name="Work"))
    await test_db.commit()

    assert (await repo.get_by_name("Work")).id == tag.id
    assert await repo.get_by_name("work") is None


@pytest.mark.asyncio
async def test_tag_name_unique(test_db):
    """Test: UNIQUE(name) на уровне схемы."""
    repo = TagRepository(test_db)
    await repo.create(Tag(name="dup"))
    await test_db.commit()

    with pytest.raises(IntegrityError):
        await repo.create(Tag(name="dup"))
    await test_db.rollback()


@pytest.mark.asyncio
async def test_task_tags_add_remove_idempotent(test_db):
    """Test: add_tag / remove_tag идемпотентны."""
    repo = TaskRepository(test_db)
    task = await add_task(test_db, "t", None)
    tag = await TagRepository(test_db).create(Tag(name="work"))
    await test_db.commit()

    assert await repo.add_tag(task.id, tag.id) is True
    assert await repo.add_tag(task.id, tag.id) is False
    await test_db.commit()
    assert await link_count(test_db) == 1
    assert [t.name for t in await repo.get_tags(task.id)] == ["work"]

    assert await repo.remove_tag(task.id, tag.id) is True
    assert await repo.remove_tag(task.id, tag.id) is False
    await test_db.commit()
    assert await link_count(test_db) == 0


@pytest.mark.asyncio
async def test_get_tags_ordered_by_name(test_db):
    """Test: теги задачи по алфавиту."""
    repo = TaskRepository(test_db)
    tag_repo = TagRepository(test_db)
    task = await add_task(test_db, "t", None)
    for name in ("zeta", "alpha", "mid"):
        tag = await tag_repo.create(Tag(name=name))
        await repo.add_tag(task.id, tag.id)
    await test_db.commit()

    assert [t.name for t in await repo.get_tags(task.id)] == ["alpha", "mid", "zeta"]


@pytest.mark.asyncio
async def test_deleting_task_cascades_links(test_db):
    """Test: удаление задачи удаляет её связи с тегами."""
    repo = TaskRepository(test_db)
    task = await add_task(test_db, "t", None)
    tag = await TagRepository(test_db).create(Tag(name="work"))
    await repo.add_tag(task.id, tag.id)
    await test_db.commit()

    await repo.delete(task.id)
    await test_db.commit()

    assert await link_count(test_db) == 0
    assert await TagRepository(test_db).exists(tag.id)


@pytest.mark.asyncio
async def test_deleting_tag_cascades_links(test_db):
    """Test: удаление тега удаляет его связи, задача остаётся."""
    repo = TaskRepository(test_db)
    task = await add_task(test_db, "t", None)
    tag = await TagRepository(test_db).create(Tag(name="work"))
    await repo.add_tag(task.id, tag.id)
    await test_db.commit()

    await TagRepository(test_db).delete(tag.id)
    await test_db.commit()

    assert await link_count(test_db) == 0
    assert await repo.exists(task.id)
