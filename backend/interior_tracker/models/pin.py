"""
Interior Tracker - Pin Model
"""
from datetime import datetime
from typing import Dict

from sqlalchemy import JSON, DateTime, Float, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from interior_tracker.database import Base
from interior_tracker.models.project import new_id, utcnow


class Pin(Base):
    """
    A point annotation on an image.

    x/y are fractions (0-1) of the rendered image width/height.
    """
    __tablename__ = "pins"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    image_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("images.id"),
        nullable=False,
        index=True
    )
    x: Mapped[float] = mapped_column(Float, nullable=False)
    y: Mapped[float] = mapped_column(Float, nullable=False)

    # "metadata" is reserved on declarative classes, so the attribute is renamed
    pin_metadata: Mapped[Dict[str, str]] = mapped_column("metadata", JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        index=True
    )

    def __repr__(self) -> str:
        return f"<Pin(id={self.id}, x={self.x:.3f}, y={self.y:.3f})>"
