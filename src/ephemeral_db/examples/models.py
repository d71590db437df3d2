from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, Index, Integer, String, false
from sqlalchemy.orm import Mapped, mapped_column

from ..base import Base, TimestampMixin


class Todo(TimestampMixin, Base):
    """Sample consumer model backed by the packaged migrations.

    - integer serial primary key
    - created_at/updated_at via TimestampMixin
    """

    __tablename__ = "todos"
    __table_args__ = (Index("ix_todos_title", "title"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    completed: Mapped[Optional[bool]] = mapped_column(Boolean, server_default=false())
