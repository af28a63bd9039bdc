"""Tag model."""

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, new_id


class Tag(Base):
    """Tag model. Names are unique and case-sensitive ("Work" != "work")."""

    __tablename__ = "tags"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name='{self.name}')>"
