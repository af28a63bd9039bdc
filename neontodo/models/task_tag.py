"""Task-Tag junction table."""

from sqlalchemy import Column, ForeignKey, Table, Text

from .base import Base

# Many-to-many junction table for tasks and tags.
# Deleting either side removes the link (ON DELETE CASCADE).
task_tags = Table(
    "task_tags",
    Base.metadata,
    Column("task_id", Text, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Text, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)
