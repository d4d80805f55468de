"""
Interior Tracker - Image Model
"""
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from interior_tracker.database import Base
from interior_tracker.models.project import new_id, utcnow


class Image(Base):
    """A room photo; url points at the uploaded blob."""
    __tablename__ = "images"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    project_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("projects.id"),
        nullable=False,
        index=True
    )
    url: Mapped[str] = mapped_column(String(1024), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        index=True
    )

    def __repr__(self) -> str:
        return f"<Image(id={self.id}, project_id={self.project_id})>"
