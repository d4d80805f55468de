"""
Interior Tracker - Project Model
"""
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from interior_tracker.database import Base


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    # Python-side timestamp keeps microseconds, so newest-first ordering is stable on SQLite
    return datetime.now(timezone.utc)


class Project(Base):
    """
    An interior-design project.

    Floors are a fixed count; "Floor 1".."Floor N" are derived, not stored.
    """
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    floors: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Owner (users.id of the local provider, auth.uid() on the hosted one)
    user_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        index=True
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name='{self.name}', floors={self.floors})>"
