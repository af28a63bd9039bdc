"""Task model."""

from sqlalchemy import ForeignKey, Index, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, IntBoolean, new_id, utc_now_iso

PRIORITY_MIN = 0
PRIORITY_MAX = 3


class Task(Base):
    """Task model. ``due_at`` is a calendar date string (YYYY-MM-DD), no time part."""

    __tablename__ = "tasks"
    __table_args__ = (
        Index("idx_tasks_project_sort", "project_id", "sort_order"),
        Index("idx_tasks_completed_due", "completed", "due_at"),
        Index("idx_tasks_due", "due_at"),
    )

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)

    # NULL means "unassigned"; deleting a project never deletes its tasks
    project_id: Mapped[str | None] = mapped_column(
        Text, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default=text("''"))
    completed: Mapped[bool] = mapped_column(
        IntBoolean, nullable=False, default=False, server_default=text("0")
    )
    priority: Mapped[int] = mapped_column(
        Integer, nullable=False, default=PRIORITY_MIN, server_default=text("0")
    )
    due_at: Mapped[str | None] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    created_at: Mapped[str] = mapped_column(Text, nullable=False, default=utc_now_iso)
    updated_at: Mapped[str] = mapped_column(Text, nullable=False, default=utc_now_iso)

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title='{self.title}', completed={self.completed})>"
