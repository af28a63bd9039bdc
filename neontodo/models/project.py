"""Project model."""

from sqlalchemy import Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, new_id, utc_now_iso

# Icon marker of the single undeletable default project
INBOX_ICON = "inbox"


class Project(Base):
    """Project model for organizing tasks."""

    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    color: Mapped[str | None] = mapped_column(Text, nullable=True)  # display hint, e.g. #29f0ff
    icon: Mapped[str | None] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    created_at: Mapped[str] = mapped_column(Text, nullable=False, default=utc_now_iso)

    @property
    def is_inbox(self) -> bool:
        """Inbox is recognised by its icon marker or by its name."""
        return self.icon == INBOX_ICON or (self.name or "").lower() == "inbox"

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name='{self.name}')>"
